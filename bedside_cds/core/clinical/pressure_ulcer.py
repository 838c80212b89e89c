"""
Pressure Ulcer Risk Assessment — Braden Scale

Sum of six caller-scored sub-scales; lower totals mean higher risk.

    sensory perception   1–4
    moisture             1–4
    activity             1–4
    mobility             1–4
    nutrition            1–4
    friction & shear     1–3

Sub-scale ranges are enforced at the request boundary
(models.requests.BradenScaleRequest), not here.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Tuple

from .base import PressureUlcerRisk, interval_label

# Upper bound (inclusive) of each tier, most severe first
_RISK_BANDS = (
    (9,  PressureUlcerRisk.VERY_HIGH),
    (12, PressureUlcerRisk.HIGH),
    (14, PressureUlcerRisk.MODERATE),
    (18, PressureUlcerRisk.MILD),
)

INTERVENTIONS: Dict[PressureUlcerRisk, Tuple[str, ...]] = {
    PressureUlcerRisk.VERY_HIGH: (
        "Turn every 1-2 hours",
        "Pressure-relieving mattress",
        "Heel protectors",
        "Skin assessment every shift",
        "Nutritional consultation",
        "Moisture barrier cream",
        "Minimize head of bed elevation",
    ),
    PressureUlcerRisk.HIGH: (
        "Turn every 2 hours",
        "Pressure-relieving surface",
        "Heel protectors",
        "Skin assessment daily",
        "Nutritional support",
    ),
    PressureUlcerRisk.MODERATE: (
        "Turn every 2-3 hours",
        "Foam mattress",
        "Skin assessment daily",
        "Adequate nutrition",
    ),
    PressureUlcerRisk.MILD: (
        "Turn every 4 hours",
        "Standard mattress",
        "Skin assessment every 2 days",
    ),
    PressureUlcerRisk.LOW: (
        "Standard precautions",
        "Skin assessment weekly",
    ),
}

REASSESS_INTERVALS: Dict[PressureUlcerRisk, timedelta] = {
    PressureUlcerRisk.VERY_HIGH: timedelta(hours=8),
    PressureUlcerRisk.HIGH: timedelta(hours=8),
    PressureUlcerRisk.MODERATE: timedelta(hours=24),
    PressureUlcerRisk.MILD: timedelta(hours=48),
    PressureUlcerRisk.LOW: timedelta(weeks=1),
}


@dataclass(frozen=True)
class PressureUlcerResult:
    braden_score: int
    risk_level: PressureUlcerRisk
    interventions: Tuple[str, ...]
    reassess_interval: timedelta

    @property
    def reassessment_label(self) -> str:
        return interval_label(self.reassess_interval)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "braden_score": self.braden_score,
            "risk_level": self.risk_level.value,
            "interventions": list(self.interventions),
            "reassessment_interval": self.reassessment_label,
        }


def classify_pressure_ulcer_risk(braden_score: int) -> PressureUlcerRisk:
    for upper, level in _RISK_BANDS:
        if braden_score <= upper:
            return level
    return PressureUlcerRisk.LOW


class PressureUlcerRiskAssessor:
    """Braden Scale assessment. Stateless."""

    def assess(
        self,
        sensory_perception: int,
        moisture: int,
        activity: int,
        mobility: int,
        nutrition: int,
        friction_shear: int,
    ) -> PressureUlcerResult:
        score = sensory_perception + moisture + activity + mobility + nutrition + friction_shear
        level = classify_pressure_ulcer_risk(score)
        return PressureUlcerResult(
            braden_score=score,
            risk_level=level,
            interventions=INTERVENTIONS[level],
            reassess_interval=REASSESS_INTERVALS[level],
        )
