"""
Composite Deterioration Risk Score

Weighted additive score over age, heart rate, systolic BP, temperature,
comorbidity count and medication count.

    factor            contribution
    age               0.30 ≥80 | 0.20 ≥65 | 0.10 ≥50
    heart rate        0.20 >120 or <50 | 0.10 >100 or <60
    systolic BP       0.25 >180 or <90 | 0.15 >160 or <100
    temperature (°F)  0.20 >101.5 or <96 | 0.10 >100.4
    comorbidities     0.05 each
    medications       0.02 each

The total is capped at 1.0. Every term is ≥ 0, so no lower clamp is needed.
A vital that was not supplied contributes nothing.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from bedside_cds.utils import get_logger
from .base import RiskLevel
from .snapshot import HEART_RATE, SYSTOLIC_BP, TEMPERATURE, PatientSnapshot

logger = get_logger(__name__)

# ── Thresholds ────────────────────────────────────────────────────────────────
AGE_VERY_ELDERLY = 80
AGE_ELDERLY      = 65
AGE_MIDDLE       = 50

HR_SEVERE_HIGH   = 120
HR_SEVERE_LOW    = 50
HR_MILD_HIGH     = 100
HR_MILD_LOW      = 60

SBP_SEVERE_HIGH  = 180
SBP_SEVERE_LOW   = 90
SBP_MILD_HIGH    = 160
SBP_MILD_LOW     = 100

TEMP_F_SEVERE_HIGH = 101.5
TEMP_F_SEVERE_LOW  = 96.0
TEMP_F_MILD_HIGH   = 100.4

WEIGHT_PER_COMORBIDITY = 0.05
WEIGHT_PER_MEDICATION  = 0.02

MAX_SCORE = 1.0

# Risk tiers: (exclusive lower bound, level, review interval)
_RISK_TIERS = (
    (0.8, RiskLevel.CRITICAL, timedelta(hours=1)),
    (0.6, RiskLevel.HIGH,     timedelta(hours=2)),
    (0.4, RiskLevel.MODERATE, timedelta(hours=4)),
)
_DEFAULT_TIER = (RiskLevel.LOW, timedelta(hours=8))

# Rounding applied to the summed score so tier boundaries are exact
_SCORE_PRECISION = 4


@dataclass(frozen=True)
class RiskScoreResult:
    risk_score: float
    risk_level: RiskLevel
    next_review_in: timedelta

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "next_review_in_hours": self.next_review_in.total_seconds() / 3600,
        }


def classify_risk(score: float) -> RiskLevel:
    for bound, level, _ in _RISK_TIERS:
        if score > bound:
            return level
    return _DEFAULT_TIER[0]


def next_review_interval(score: float) -> timedelta:
    for bound, _, interval in _RISK_TIERS:
        if score > bound:
            return interval
    return _DEFAULT_TIER[1]


# ── Contributions ─────────────────────────────────────────────────────────────

def age_contribution(age: int) -> float:
    if age >= AGE_VERY_ELDERLY:
        return 0.3
    if age >= AGE_ELDERLY:
        return 0.2
    if age >= AGE_MIDDLE:
        return 0.1
    return 0.0


def heart_rate_contribution(hr: Optional[float]) -> float:
    if hr is None:
        return 0.0
    if hr > HR_SEVERE_HIGH or hr < HR_SEVERE_LOW:
        return 0.2
    if hr > HR_MILD_HIGH or hr < HR_MILD_LOW:
        return 0.1
    return 0.0


def systolic_bp_contribution(sbp: Optional[float]) -> float:
    if sbp is None:
        return 0.0
    if sbp > SBP_SEVERE_HIGH or sbp < SBP_SEVERE_LOW:
        return 0.25
    if sbp > SBP_MILD_HIGH or sbp < SBP_MILD_LOW:
        return 0.15
    return 0.0


def temperature_contribution(temp_f: Optional[float]) -> float:
    # No mild-hypothermia band: only the severe low bound scores
    if temp_f is None:
        return 0.0
    if temp_f > TEMP_F_SEVERE_HIGH or temp_f < TEMP_F_SEVERE_LOW:
        return 0.2
    if temp_f > TEMP_F_MILD_HIGH:
        return 0.1
    return 0.0


class RiskScoringEngine:
    """
    Composite deterioration risk for a PatientSnapshot.

    Stateless; one instance can serve concurrent requests.
    """

    def contributions(self, snapshot: PatientSnapshot) -> Dict[str, float]:
        """Per-factor breakdown of the (uncapped) score."""
        return {
            "age": age_contribution(snapshot.age),
            "heart_rate": heart_rate_contribution(snapshot.vital(HEART_RATE)),
            "systolic_bp": systolic_bp_contribution(snapshot.vital(SYSTOLIC_BP)),
            "temperature": temperature_contribution(snapshot.vital(TEMPERATURE)),
            "comorbidities": len(snapshot.comorbidities) * WEIGHT_PER_COMORBIDITY,
            "medications": len(snapshot.medications) * WEIGHT_PER_MEDICATION,
        }

    def score(self, snapshot: PatientSnapshot) -> RiskScoreResult:
        raw = sum(self.contributions(snapshot).values())
        risk_score = round(min(raw, MAX_SCORE), _SCORE_PRECISION)

        result = RiskScoreResult(
            risk_score=risk_score,
            risk_level=classify_risk(risk_score),
            next_review_in=next_review_interval(risk_score),
        )
        logger.debug(
            f"RiskScoringEngine: score={risk_score:.2f} level={result.risk_level.value}"
        )
        return result
