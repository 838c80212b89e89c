"""
Fall Risk Assessment — Morse Fall Scale

    history of falling            25
    secondary diagnosis           15
    ambulatory aid                none 0 | crutches_cane_walker 15 | furniture 30
    IV therapy / heparin lock     20
    gait                          normal 0 | weak 10 | impaired 20
    mental status                 oriented 0 | forgets_limitations 15

Unrecognized categorical values score 0. Maximum total is 125.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Tuple

from .base import FallRiskLevel, interval_label

HISTORY_OF_FALLS_POINTS    = 25
SECONDARY_DIAGNOSIS_POINTS = 15
IV_THERAPY_POINTS          = 20

AMBULATORY_AID_POINTS = {
    "none": 0,
    "crutches_cane_walker": 15,
    "furniture": 30,
}
GAIT_POINTS = {
    "normal": 0,
    "weak": 10,
    "impaired": 20,
}
MENTAL_STATUS_POINTS = {
    "oriented": 0,
    "forgets_limitations": 15,
}

HIGH_RISK_MIN     = 45
MODERATE_RISK_MIN = 25

INTERVENTIONS: Dict[FallRiskLevel, Tuple[str, ...]] = {
    FallRiskLevel.HIGH: (
        "Bed alarm activated",
        "Fall risk bracelet",
        "Frequent rounding every 1 hour",
        "Assist with all mobility",
        "Keep call light within reach",
        "Non-slip socks",
        "Consider bed rest",
    ),
    FallRiskLevel.MODERATE: (
        "Fall risk bracelet",
        "Frequent rounding every 2 hours",
        "Assist with ambulation",
        "Keep call light within reach",
        "Non-slip socks",
    ),
    FallRiskLevel.LOW: (
        "Standard fall precautions",
        "Keep call light within reach",
        "Clear pathways",
    ),
}

REASSESS_INTERVALS: Dict[FallRiskLevel, timedelta] = {
    FallRiskLevel.HIGH: timedelta(hours=8),
    FallRiskLevel.MODERATE: timedelta(hours=12),
    FallRiskLevel.LOW: timedelta(hours=24),
}


@dataclass(frozen=True)
class FallRiskResult:
    morse_score: int
    risk_level: FallRiskLevel
    interventions: Tuple[str, ...]
    reassess_interval: timedelta

    @property
    def reassessment_label(self) -> str:
        return interval_label(self.reassess_interval)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "morse_score": self.morse_score,
            "risk_level": self.risk_level.value,
            "interventions": list(self.interventions),
            "reassessment_interval": self.reassessment_label,
        }


def classify_fall_risk(morse_score: int) -> FallRiskLevel:
    if morse_score >= HIGH_RISK_MIN:
        return FallRiskLevel.HIGH
    if morse_score >= MODERATE_RISK_MIN:
        return FallRiskLevel.MODERATE
    return FallRiskLevel.LOW


def morse_score(
    history_of_falls: bool,
    secondary_diagnosis: bool,
    ambulatory_aid: str,
    iv_therapy: bool,
    gait: str,
    mental_status: str,
) -> int:
    score = 0
    score += HISTORY_OF_FALLS_POINTS if history_of_falls else 0
    score += SECONDARY_DIAGNOSIS_POINTS if secondary_diagnosis else 0
    score += AMBULATORY_AID_POINTS.get(ambulatory_aid, 0)
    score += IV_THERAPY_POINTS if iv_therapy else 0
    score += GAIT_POINTS.get(gait, 0)
    score += MENTAL_STATUS_POINTS.get(mental_status, 0)
    return score


class FallRiskAssessor:
    """Morse Fall Scale assessment. Stateless."""

    def assess(
        self,
        history_of_falls: bool = False,
        secondary_diagnosis: bool = False,
        ambulatory_aid: str = "none",
        iv_therapy: bool = False,
        gait: str = "normal",
        mental_status: str = "oriented",
    ) -> FallRiskResult:
        score = morse_score(
            history_of_falls, secondary_diagnosis, ambulatory_aid,
            iv_therapy, gait, mental_status,
        )
        level = classify_fall_risk(score)
        return FallRiskResult(
            morse_score=score,
            risk_level=level,
            interventions=INTERVENTIONS[level],
            reassess_interval=REASSESS_INTERVALS[level],
        )
