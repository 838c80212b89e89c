"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    ClinicalSupportError,
    SnapshotError,
    DosingInputError,
    AlertPublishError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "ClinicalSupportError",
    "SnapshotError",
    "DosingInputError",
    "AlertPublishError",
]
