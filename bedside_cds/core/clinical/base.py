"""
Clinical Decision Layer — Base Types

Defines the enums and data contracts shared by every calculator and by the
alert publisher. Results are frozen: each call builds a fresh result graph.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Sequence, Tuple


class RiskLevel(str, Enum):
    """General deterioration risk tier derived from the composite risk score."""
    LOW      = "LOW"
    MODERATE = "MODERATE"
    HIGH     = "HIGH"
    CRITICAL = "CRITICAL"


class SepsisRisk(str, Enum):
    MINIMAL  = "MINIMAL"
    LOW      = "LOW"
    MODERATE = "MODERATE"
    HIGH     = "HIGH"


class Urgency(str, Enum):
    """How quickly a sepsis result must be acted upon."""
    IMMEDIATE = "IMMEDIATE"
    ROUTINE   = "ROUTINE"


class FallRiskLevel(str, Enum):
    LOW      = "LOW"
    MODERATE = "MODERATE"
    HIGH     = "HIGH"


class PressureUlcerRisk(str, Enum):
    LOW       = "LOW"
    MILD      = "MILD"
    MODERATE  = "MODERATE"
    HIGH      = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class AlertType(str, Enum):
    HIGH_RISK_PATIENT = "HIGH_RISK_PATIENT"
    CRITICAL_VITALS   = "CRITICAL_VITALS"
    CRITICAL_LAB      = "CRITICAL_LAB"


class AlertSeverity(str, Enum):
    """
    Severity of a clinical alert.

    Only CRITICAL alerts leave the process (see services.alert_publisher).
    """
    INFO     = "INFO"
    WARNING  = "WARNING"
    HIGH     = "HIGH"
    CRITICAL = "CRITICAL"


class InteractionSeverity(str, Enum):
    MINOR           = "MINOR"
    MODERATE        = "MODERATE"
    MAJOR           = "MAJOR"
    CONTRAINDICATED = "CONTRAINDICATED"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def interval_label(interval: timedelta) -> str:
    """
    Human-readable reassessment interval, e.g. "Every 8 hours" or "Weekly".
    """
    if interval == timedelta(weeks=1):
        return "Weekly"
    hours = int(interval.total_seconds() // 3600)
    if hours == 1:
        return "Every 1 hour"
    return f"Every {hours} hours"


@dataclass(frozen=True)
class ClinicalAlert:
    """
    One abnormal finding raised against a patient snapshot.

    Alerts carry a fresh id and a generation timestamp; two calls with the
    same snapshot produce two distinct alerts.
    """
    id: str
    type: AlertType
    severity: AlertSeverity
    message: str
    recommendations: Tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=utc_now)

    @classmethod
    def create(
        cls,
        alert_type: AlertType,
        severity: AlertSeverity,
        message: str,
        recommendations: Sequence[str] = (),
    ) -> "ClinicalAlert":
        return cls(
            id=str(uuid.uuid4()),
            type=alert_type,
            severity=severity,
            message=message,
            recommendations=tuple(recommendations),
            timestamp=utc_now(),
        )

    @property
    def is_critical(self) -> bool:
        return self.severity == AlertSeverity.CRITICAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "recommendations": list(self.recommendations),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class DrugInteraction:
    """A known interaction between two drugs on the medication list."""
    drug1: str
    drug2: str
    severity: InteractionSeverity
    description: str
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "drug1": self.drug1,
            "drug2": self.drug2,
            "severity": self.severity.value,
            "description": self.description,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class LabAlert:
    """An out-of-range lab value with its reference range and interpretation."""
    test: str
    value: float
    normal_range: str
    severity: AlertSeverity
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test": self.test,
            "value": self.value,
            "normal_range": self.normal_range,
            "severity": self.severity.value,
            "interpretation": self.interpretation,
        }
