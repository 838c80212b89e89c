"""
Clinical Decision Layer

Turns one patient snapshot into risk scores, alerts and dosing adjustments.

Usage:
    from bedside_cds.core.clinical import ClinicalDecisionEngine, VitalsLabExtractor

    snapshot = VitalsLabExtractor().extract(age=72, vitals={"heartRate": 160})
    analysis = ClinicalDecisionEngine().analyze(snapshot)
    analysis.alerts_to_publish      # CRITICAL alerts for the alert bus
"""
from .base import (
    AlertSeverity,
    AlertType,
    ClinicalAlert,
    DrugInteraction,
    FallRiskLevel,
    InteractionSeverity,
    LabAlert,
    PressureUlcerRisk,
    RiskLevel,
    SepsisRisk,
    Urgency,
)
from .snapshot import DataCompleteness, PatientSnapshot, VitalsLabExtractor
from .risk_scoring import RiskScoreResult, RiskScoringEngine
from .sepsis import SepsisEarlyWarningCalculator, SepsisResult
from .fall_risk import FallRiskAssessor, FallRiskResult
from .pressure_ulcer import PressureUlcerResult, PressureUlcerRiskAssessor
from .dosing import (
    DosingAdjustment,
    MedicationDosingAdjuster,
    MedicationDosingResult,
    MedicationOrder,
)
from .alerts import AlertGenerator
from .engine import ClinicalAnalysis, ClinicalDecisionEngine

__all__ = [
    "AlertGenerator",
    "AlertSeverity",
    "AlertType",
    "ClinicalAlert",
    "ClinicalAnalysis",
    "ClinicalDecisionEngine",
    "DataCompleteness",
    "DosingAdjustment",
    "DrugInteraction",
    "FallRiskAssessor",
    "FallRiskLevel",
    "FallRiskResult",
    "InteractionSeverity",
    "LabAlert",
    "MedicationDosingAdjuster",
    "MedicationDosingResult",
    "MedicationOrder",
    "PatientSnapshot",
    "PressureUlcerResult",
    "PressureUlcerRisk",
    "PressureUlcerRiskAssessor",
    "RiskLevel",
    "RiskScoreResult",
    "RiskScoringEngine",
    "SepsisEarlyWarningCalculator",
    "SepsisResult",
    "SepsisRisk",
    "Urgency",
    "VitalsLabExtractor",
]
