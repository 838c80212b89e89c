"""
Clinical Decision Engine

Composite bedside analysis of one PatientSnapshot: deterioration risk,
threshold alerts, tiered recommendations, drug interactions, lab alerts and a
data-confidence estimate.

Usage:
    from bedside_cds.core.clinical import ClinicalDecisionEngine, VitalsLabExtractor

    snapshot = VitalsLabExtractor().extract(age=72, vitals={...}, labs={...})
    analysis = ClinicalDecisionEngine().analyze(snapshot)
    for alert in analysis.alerts_to_publish:
        ...   # hand to services.alert_publisher

The engine performs no I/O. CRITICAL alerts are returned as a value
(`alerts_to_publish`); dispatching them is the caller's job.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bedside_cds.utils import get_logger
from .alerts import AlertGenerator
from .base import (
    AlertSeverity,
    ClinicalAlert,
    DrugInteraction,
    InteractionSeverity,
    LabAlert,
    utc_now,
)
from .risk_scoring import RiskScoreResult, RiskScoringEngine
from .snapshot import CREATININE, DataCompleteness, PatientSnapshot

logger = get_logger(__name__)

# ── Recommendations by risk score ─────────────────────────────────────────────
_RECOMMENDATION_TIERS = (
    (0.8, (
        "Consider ICU transfer",
        "Increase monitoring to every 15 minutes",
        "Immediate physician consultation",
    )),
    (0.6, (
        "Increase monitoring frequency",
        "Physician notification within 30 minutes",
        "Consider additional diagnostic tests",
    )),
    (0.4, (
        "Continue current monitoring",
        "Reassess in 2 hours",
    )),
)
CRITICAL_CARE_RECOMMENDATION = "Implement critical care protocols"

# ── Drug interactions (matched case-insensitively on medication names) ───────
_KNOWN_INTERACTIONS = (
    DrugInteraction(
        drug1="Warfarin",
        drug2="Aspirin",
        severity=InteractionSeverity.MAJOR,
        description="Increased bleeding risk",
        recommendation="Monitor INR closely, consider alternative",
    ),
)

# ── Lab reference ranges ──────────────────────────────────────────────────────
CREATININE_ELEVATED = 2.0     # mg/dL
CREATININE_CRITICAL = 4.0
CREATININE_NORMAL_RANGE = "0.6-1.2 mg/dL"

# ── Confidence ────────────────────────────────────────────────────────────────
BASE_CONFIDENCE          = 0.8
VITALS_CONFIDENCE_BONUS  = 0.1
LABS_CONFIDENCE_BONUS    = 0.1
HISTORY_CONFIDENCE_BONUS = 0.05


@dataclass(frozen=True)
class ClinicalAnalysis:
    """Everything the engine derives from one snapshot."""
    analysis_id: str
    risk: RiskScoreResult
    alerts: Tuple[ClinicalAlert, ...]
    recommendations: Tuple[str, ...]
    drug_interactions: Tuple[DrugInteraction, ...]
    lab_alerts: Tuple[LabAlert, ...]
    confidence: float
    completeness: DataCompleteness
    analyzed_at: datetime = field(default_factory=utc_now)

    @property
    def next_review_at(self) -> datetime:
        return self.analyzed_at + self.risk.next_review_in

    @property
    def alerts_to_publish(self) -> Tuple[ClinicalAlert, ...]:
        """CRITICAL alerts destined for the external alert bus."""
        return tuple(a for a in self.alerts if a.is_critical)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis_id": self.analysis_id,
            "risk_score": self.risk.risk_score,
            "risk_level": self.risk.risk_level.value,
            "alerts": [a.to_dict() for a in self.alerts],
            "recommendations": list(self.recommendations),
            "drug_interactions": [d.to_dict() for d in self.drug_interactions],
            "lab_alerts": [l.to_dict() for l in self.lab_alerts],
            "confidence": round(self.confidence, 2),
            "data_completeness": self.completeness.to_dict(),
            "timestamp": self.analyzed_at.isoformat(),
            "next_review_time": self.next_review_at.isoformat(),
        }


def recommendations_for(risk_score: float, alerts: Sequence[ClinicalAlert]) -> Tuple[str, ...]:
    recommendations: List[str] = []
    for bound, tier in _RECOMMENDATION_TIERS:
        if risk_score > bound:
            recommendations.extend(tier)
            break
    if any(a.severity == AlertSeverity.CRITICAL for a in alerts):
        recommendations.append(CRITICAL_CARE_RECOMMENDATION)
    return tuple(recommendations)


def check_drug_interactions(medications: Sequence[str]) -> Tuple[DrugInteraction, ...]:
    names = {m.strip().lower() for m in medications}
    return tuple(
        interaction for interaction in _KNOWN_INTERACTIONS
        if interaction.drug1.lower() in names and interaction.drug2.lower() in names
    )


def analyze_lab_results(snapshot: PatientSnapshot) -> Tuple[LabAlert, ...]:
    alerts: List[LabAlert] = []

    creatinine = snapshot.lab(CREATININE)
    if creatinine is not None and creatinine > CREATININE_ELEVATED:
        alerts.append(LabAlert(
            test=CREATININE,
            value=creatinine,
            normal_range=CREATININE_NORMAL_RANGE,
            severity=AlertSeverity.CRITICAL if creatinine > CREATININE_CRITICAL else AlertSeverity.HIGH,
            interpretation="Elevated creatinine suggests kidney dysfunction",
        ))

    return tuple(alerts)


def estimate_confidence(snapshot: PatientSnapshot) -> float:
    """
    Rough confidence in the analysis from which inputs were supplied.
    Capped at 1.0.
    """
    confidence = BASE_CONFIDENCE
    if snapshot.vitals:
        confidence += VITALS_CONFIDENCE_BONUS
    if snapshot.labs:
        confidence += LABS_CONFIDENCE_BONUS
    if snapshot.comorbidities:
        confidence += HISTORY_CONFIDENCE_BONUS
    return round(min(confidence, 1.0), 4)


class ClinicalDecisionEngine:
    """
    Composite analysis over a PatientSnapshot.

    Stateless; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        risk_engine: Optional[RiskScoringEngine] = None,
        alert_generator: Optional[AlertGenerator] = None,
    ):
        self.risk_engine = risk_engine or RiskScoringEngine()
        self.alert_generator = alert_generator or AlertGenerator(self.risk_engine)

    def analyze(self, snapshot: PatientSnapshot) -> ClinicalAnalysis:
        risk = self.risk_engine.score(snapshot)
        alerts = self.alert_generator.generate(snapshot, risk.risk_score)

        analysis = ClinicalAnalysis(
            analysis_id=str(uuid.uuid4()),
            risk=risk,
            alerts=alerts,
            recommendations=recommendations_for(risk.risk_score, alerts),
            drug_interactions=check_drug_interactions(snapshot.medications),
            lab_alerts=analyze_lab_results(snapshot),
            confidence=estimate_confidence(snapshot),
            completeness=snapshot.completeness,
        )

        if not snapshot.completeness.is_complete:
            logger.info(
                f"ClinicalDecisionEngine: incomplete snapshot, "
                f"missing={list(snapshot.completeness.missing)} "
                f"invalid={list(snapshot.completeness.invalid)}; risk may be understated",
                extra={"analysis_id": analysis.analysis_id},
            )
        logger.info(
            f"ClinicalDecisionEngine: risk={risk.risk_score:.2f} ({risk.risk_level.value}), "
            f"{len(alerts)} alert(s), {len(analysis.alerts_to_publish)} to publish",
            extra={"analysis_id": analysis.analysis_id},
        )
        return analysis

    @staticmethod
    def summarise(analysis: ClinicalAnalysis) -> Dict[str, Any]:
        """
        Compact summary dict suitable for JSON API responses.

        Example output:
        {
            "risk_level": "HIGH",
            "critical_count": 2,
            "alert_types": ["CRITICAL_VITALS", "CRITICAL_LAB"],
            "interaction_count": 1,
            "requires_review_within_hours": 2.0
        }
        """
        # Deduplicated alert types (preserves rule order)
        seen = set()
        alert_types = []
        for alert in analysis.alerts:
            if alert.type not in seen:
                seen.add(alert.type)
                alert_types.append(alert.type.value)

        return {
            "risk_level": analysis.risk.risk_level.value,
            "critical_count": len(analysis.alerts_to_publish),
            "alert_types": alert_types,
            "interaction_count": len(analysis.drug_interactions),
            "requires_review_within_hours": analysis.risk.next_review_in.total_seconds() / 3600,
        }
