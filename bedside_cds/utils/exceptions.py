"""
Custom Exception Hierarchy

Provides specific exception types for the clinical decision support core
with structured error information.
"""
from typing import Optional, Dict, Any


class ClinicalSupportError(Exception):
    """Base exception for all clinical decision support errors."""
    
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class SnapshotError(ClinicalSupportError):
    """Structurally unusable patient snapshot input (not a mapping, bad age)."""
    
    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="SNAPSHOT_ERROR",
            details={"field": field, **(details or {})}
        )
        self.field = field


class DosingInputError(ClinicalSupportError):
    """Inputs for which creatinine clearance cannot be computed."""
    
    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="DOSING_INPUT_ERROR",
            details=details
        )


class AlertPublishError(ClinicalSupportError):
    """Errors while handing an alert to the message bus."""
    
    def __init__(
        self,
        message: str,
        topic: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="ALERT_PUBLISH_ERROR",
            details={"topic": topic, **(details or {})}
        )
        self.topic = topic
