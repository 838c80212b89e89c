"""
Services - async hosting of the calculators and alert publishing.
"""
from .alert_publisher import (
    AlertBusTransport,
    AlertDispatch,
    AlertPublisher,
    HttpAlertBusTransport,
    NullAlertBusTransport,
    PublishOutcome,
    PublishStatus,
)
from .clinical_service import AnalysisResponse, ClinicalDecisionService

__all__ = [
    "AlertBusTransport",
    "AlertDispatch",
    "AlertPublisher",
    "AnalysisResponse",
    "ClinicalDecisionService",
    "HttpAlertBusTransport",
    "NullAlertBusTransport",
    "PublishOutcome",
    "PublishStatus",
]
