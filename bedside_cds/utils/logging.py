"""
Structured Logging Configuration

One console format for every calculator and service. Set CDS_LOG_FORMAT=json
for one JSON object per line (log shippers), otherwise a coloured text line
is written when stdout is a terminal.

Context passed through `extra=` (e.g. analysis_id, topic) is appended to the
line in both formats.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}


class StructuredFormatter(logging.Formatter):
    """Text formatter: [timestamp] LEVEL [logger] message key=value ..."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        line = f"[{timestamp}] {record.levelname:8} [{record.name}] {record.getMessage()}"

        extras = _extra_fields(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))

        if self.use_color:
            line = f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    fmt: Optional[str] = None,
) -> None:
    """
    Configure package-wide logging on the root logger.

    Args:
        level:    DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to
                  CDS_LOG_LEVEL, then INFO.
        log_file: Optional file that receives the same records.
        fmt:      "text" or "json". Defaults to CDS_LOG_FORMAT, then "text".
    """
    level = (level or os.getenv("CDS_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("CDS_LOG_FORMAT", "text")).lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # Only our own handlers are replaced; pytest and host apps attach theirs
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, (StructuredFormatter, JsonFormatter)):
            root_logger.removeHandler(handler)

    if fmt == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = StructuredFormatter(use_color=sys.stdout.isatty())

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter() if fmt == "json" else StructuredFormatter(use_color=False))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Module logger; call as get_logger(__name__)."""
    return logging.getLogger(name)


setup_logging()
