"""
Clinical Alert Rules

Threshold checks over a PatientSnapshot. Each rule is a pure function
(snapshot, risk_score) → Optional[ClinicalAlert]; the generator collects the
alerts of every rule that fires. All current rules raise CRITICAL alerts.

    HIGH_RISK_PATIENT  composite risk score > 0.7
    CRITICAL_VITALS    heart rate > 150 or < 40 bpm
    CRITICAL_VITALS    systolic BP > 200 or < 80 mmHg
    CRITICAL_LAB       potassium > 6.0 or < 2.5 mEq/L
    CRITICAL_LAB       glucose > 400 or < 50 mg/dL

A vital or lab that was not supplied never fires a rule.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from bedside_cds.utils import get_logger
from .base import AlertSeverity, AlertType, ClinicalAlert
from .risk_scoring import RiskScoringEngine
from .snapshot import GLUCOSE, HEART_RATE, POTASSIUM, SYSTOLIC_BP, PatientSnapshot

logger = get_logger(__name__)

# ── Thresholds ────────────────────────────────────────────────────────────────
RISK_SCORE_CRITICAL = 0.7

HR_CRITICAL_HIGH    = 150
HR_CRITICAL_LOW     = 40
SBP_CRITICAL_HIGH   = 200
SBP_CRITICAL_LOW    = 80

POTASSIUM_HIGH      = 6.0
POTASSIUM_LOW       = 2.5
GLUCOSE_HIGH        = 400
GLUCOSE_LOW         = 50

_NOTIFY = "Immediate physician notification"


def _outside(value: Optional[float], low: float, high: float) -> bool:
    return value is not None and (value > high or value < low)


# ── Rules ─────────────────────────────────────────────────────────────────────

def rule_high_risk_patient(snapshot: PatientSnapshot, risk_score: float) -> Optional[ClinicalAlert]:
    if risk_score <= RISK_SCORE_CRITICAL:
        return None
    return ClinicalAlert.create(
        AlertType.HIGH_RISK_PATIENT,
        AlertSeverity.CRITICAL,
        f"Patient has high clinical risk score: {risk_score:.2f}",
        ("Increase monitoring frequency", "Consider physician consultation"),
    )


def rule_critical_heart_rate(snapshot: PatientSnapshot, risk_score: float) -> Optional[ClinicalAlert]:
    hr = snapshot.vital(HEART_RATE)
    if not _outside(hr, HR_CRITICAL_LOW, HR_CRITICAL_HIGH):
        return None
    return ClinicalAlert.create(
        AlertType.CRITICAL_VITALS,
        AlertSeverity.CRITICAL,
        f"Critical heart rate: {hr:g} bpm",
        (_NOTIFY, "Continuous cardiac monitoring"),
    )


def rule_critical_blood_pressure(snapshot: PatientSnapshot, risk_score: float) -> Optional[ClinicalAlert]:
    sbp = snapshot.vital(SYSTOLIC_BP)
    if not _outside(sbp, SBP_CRITICAL_LOW, SBP_CRITICAL_HIGH):
        return None
    return ClinicalAlert.create(
        AlertType.CRITICAL_VITALS,
        AlertSeverity.CRITICAL,
        f"Critical blood pressure: {sbp:g} mmHg",
        (_NOTIFY, "Consider antihypertensive therapy"),
    )


def rule_critical_potassium(snapshot: PatientSnapshot, risk_score: float) -> Optional[ClinicalAlert]:
    k = snapshot.lab(POTASSIUM)
    if not _outside(k, POTASSIUM_LOW, POTASSIUM_HIGH):
        return None
    return ClinicalAlert.create(
        AlertType.CRITICAL_LAB,
        AlertSeverity.CRITICAL,
        f"Critical potassium level: {k:g} mEq/L",
        (_NOTIFY, "ECG monitoring", "Consider treatment"),
    )


def rule_critical_glucose(snapshot: PatientSnapshot, risk_score: float) -> Optional[ClinicalAlert]:
    glucose = snapshot.lab(GLUCOSE)
    if not _outside(glucose, GLUCOSE_LOW, GLUCOSE_HIGH):
        return None
    return ClinicalAlert.create(
        AlertType.CRITICAL_LAB,
        AlertSeverity.CRITICAL,
        f"Critical glucose level: {glucose:g} mg/dL",
        (_NOTIFY, "Blood sugar management"),
    )


AlertRule = Callable[[PatientSnapshot, float], Optional[ClinicalAlert]]

# Evaluation order is the order alerts appear in the result
_ALERT_RULES: Tuple[AlertRule, ...] = (
    rule_high_risk_patient,
    rule_critical_heart_rate,
    rule_critical_blood_pressure,
    rule_critical_potassium,
    rule_critical_glucose,
)


class AlertGenerator:
    """
    Runs every alert rule against a snapshot.

    Stateless apart from the scoring engine used when no risk score is given.
    """

    def __init__(self, risk_engine: Optional[RiskScoringEngine] = None):
        self._risk_engine = risk_engine or RiskScoringEngine()

    def generate(
        self,
        snapshot: PatientSnapshot,
        risk_score: Optional[float] = None,
    ) -> Tuple[ClinicalAlert, ...]:
        """
        Args:
            snapshot:   Patient state to evaluate.
            risk_score: Composite score already computed for this snapshot;
                        recomputed with RiskScoringEngine when omitted.

        Returns:
            Alerts in rule order. Empty for an unremarkable snapshot.
        """
        if risk_score is None:
            risk_score = self._risk_engine.score(snapshot).risk_score

        alerts: List[ClinicalAlert] = []
        for rule in _ALERT_RULES:
            alert = rule(snapshot, risk_score)
            if alert is not None:
                alerts.append(alert)

        if alerts:
            logger.info(
                f"AlertGenerator: {len(alerts)} alert(s): "
                + ", ".join(f"{a.type.value}/{a.severity.value}" for a in alerts)
            )
        return tuple(alerts)
