"""
Request models for the clinical decision support boundary.
"""
from .requests import (
    BradenScaleRequest,
    FallRiskRequest,
    MedicationDosingRequest,
    MedicationOrderRequest,
    PatientSnapshotRequest,
    SepsisAnalysisRequest,
)

__all__ = [
    "BradenScaleRequest",
    "FallRiskRequest",
    "MedicationDosingRequest",
    "MedicationOrderRequest",
    "PatientSnapshotRequest",
    "SepsisAnalysisRequest",
]
