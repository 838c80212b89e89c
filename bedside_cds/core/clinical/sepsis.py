"""
Sepsis Early Warning

Combines the qSOFA bedside screen, the SIRS criteria and serum lactate into a
four-tier sepsis risk.

qSOFA (0–3), +1 each:
    respiratory rate ≥ 22 /min
    Glasgow Coma Scale < 15          (missing GCS is read as 15)
    systolic BP ≤ 100 mmHg

SIRS (0–4), +1 each:
    temperature > 38.0 °C or < 36.0 °C
    heart rate > 90 bpm
    respiratory rate > 20 /min
    WBC > 12 000 or < 4 000 /µL, or bands > 10 %

Tiers:
    HIGH      qSOFA ≥ 2 and lactate > 2.0 mmol/L
    MODERATE  qSOFA ≥ 2 or SIRS ≥ 2
    LOW       SIRS ≥ 1
    MINIMAL   otherwise
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from bedside_cds.utils import get_logger
from .base import SepsisRisk, Urgency
from .snapshot import (
    BANDS,
    HEART_RATE,
    RESPIRATORY_RATE,
    SYSTOLIC_BP,
    TEMPERATURE,
    WHITE_BLOOD_CELLS,
    PatientSnapshot,
)

logger = get_logger(__name__)

# ── Thresholds ────────────────────────────────────────────────────────────────
QSOFA_RR_MIN        = 22
QSOFA_GCS_NORMAL    = 15
QSOFA_SBP_MAX       = 100

SIRS_TEMP_C_HIGH    = 38.0
SIRS_TEMP_C_LOW     = 36.0
SIRS_HR_HIGH        = 90
SIRS_RR_HIGH        = 20
SIRS_WBC_HIGH       = 12000
SIRS_WBC_LOW        = 4000
SIRS_BANDS_PCT_HIGH = 10

LACTATE_HIGH        = 2.0

RECOMMENDATIONS: Dict[SepsisRisk, Tuple[str, ...]] = {
    SepsisRisk.HIGH: (
        "Immediate physician notification",
        "Blood cultures before antibiotics",
        "Broad-spectrum antibiotics within 1 hour",
        "Fluid resuscitation 30ml/kg",
        "Lactate measurement",
        "Consider ICU transfer",
    ),
    SepsisRisk.MODERATE: (
        "Physician notification within 30 minutes",
        "Blood cultures",
        "Consider antibiotics",
        "Monitor closely",
        "Repeat lactate in 2-4 hours",
    ),
    SepsisRisk.LOW: (
        "Continue monitoring",
        "Reassess in 4 hours",
        "Consider infection workup",
    ),
    SepsisRisk.MINIMAL: (
        "Routine monitoring",
        "Reassess if condition changes",
    ),
}


@dataclass(frozen=True)
class SepsisResult:
    q_sofa_score: int
    sirs_score: int
    lactate: float
    sepsis_risk: SepsisRisk
    urgency: Urgency
    recommendations: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "q_sofa_score": self.q_sofa_score,
            "sirs_score": self.sirs_score,
            "lactate": self.lactate,
            "sepsis_risk": self.sepsis_risk.value,
            "urgency": self.urgency.value,
            "recommendations": list(self.recommendations),
        }


def q_sofa_score(snapshot: PatientSnapshot) -> int:
    rr = snapshot.vital(RESPIRATORY_RATE)
    sbp = snapshot.vital(SYSTOLIC_BP)

    score = 0
    if rr is not None and rr >= QSOFA_RR_MIN:
        score += 1
    if snapshot.glasgow_coma_scale < QSOFA_GCS_NORMAL:
        score += 1
    if sbp is not None and sbp <= QSOFA_SBP_MAX:
        score += 1
    return score


def sirs_score(snapshot: PatientSnapshot) -> int:
    temp = snapshot.vital(TEMPERATURE)
    hr = snapshot.vital(HEART_RATE)
    rr = snapshot.vital(RESPIRATORY_RATE)
    wbc = snapshot.lab(WHITE_BLOOD_CELLS)
    bands = snapshot.lab(BANDS)

    score = 0
    if temp is not None and (temp > SIRS_TEMP_C_HIGH or temp < SIRS_TEMP_C_LOW):
        score += 1
    if hr is not None and hr > SIRS_HR_HIGH:
        score += 1
    if rr is not None and rr > SIRS_RR_HIGH:
        score += 1
    leukocyte_abnormal = wbc is not None and (wbc > SIRS_WBC_HIGH or wbc < SIRS_WBC_LOW)
    bandemia = bands is not None and bands > SIRS_BANDS_PCT_HIGH
    if leukocyte_abnormal or bandemia:
        score += 1
    return score


def classify_sepsis_risk(q_sofa: int, sirs: int, lactate: float) -> SepsisRisk:
    if q_sofa >= 2 and lactate > LACTATE_HIGH:
        return SepsisRisk.HIGH
    if q_sofa >= 2 or sirs >= 2:
        return SepsisRisk.MODERATE
    if sirs >= 1:
        return SepsisRisk.LOW
    return SepsisRisk.MINIMAL


class SepsisEarlyWarningCalculator:
    """qSOFA + SIRS + lactate sepsis screen. Stateless."""

    def assess(self, snapshot: PatientSnapshot) -> SepsisResult:
        q_sofa = q_sofa_score(snapshot)
        sirs = sirs_score(snapshot)
        lactate = snapshot.lactate
        risk = classify_sepsis_risk(q_sofa, sirs, lactate)

        if risk == SepsisRisk.HIGH:
            logger.warning(
                f"Sepsis screen HIGH: qSOFA={q_sofa}, SIRS={sirs}, lactate={lactate}"
            )

        return SepsisResult(
            q_sofa_score=q_sofa,
            sirs_score=sirs,
            lactate=lactate,
            sepsis_risk=risk,
            urgency=Urgency.IMMEDIATE if risk == SepsisRisk.HIGH else Urgency.ROUTINE,
            recommendations=RECOMMENDATIONS[risk],
        )
