"""
Bedside Clinical Decision Support — Configuration
==================================================
Centralised settings for the alert bus and logging.
Loads overrides from the project-level .env file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

# ── Alert bus ───────────────────────────────────────────────────────────
DEFAULT_ALERT_TOPIC = "clinical-alerts"
DEFAULT_PUBLISH_TIMEOUT = 5.0          # seconds, per publish attempt

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class AlertBusSettings:
    """
    Connection settings for the outbound clinical-alert bus.

    Attributes:
        bus_url:  Base URL of the bus REST endpoint. None disables network
                  publishing (alerts are logged and dropped).
        topic:    Topic CRITICAL alerts are published to.
        timeout:  Per-attempt timeout in seconds.
        enabled:  Master switch; False skips publishing entirely.
    """
    bus_url: Optional[str] = None
    topic: str = DEFAULT_ALERT_TOPIC
    timeout: float = DEFAULT_PUBLISH_TIMEOUT
    enabled: bool = True

    @classmethod
    def from_env(cls) -> "AlertBusSettings":
        bus_url = os.getenv("CDS_ALERT_BUS_URL", "").strip() or None
        return cls(
            bus_url=bus_url.rstrip("/") if bus_url else None,
            topic=os.getenv("CDS_ALERT_TOPIC", DEFAULT_ALERT_TOPIC).strip() or DEFAULT_ALERT_TOPIC,
            timeout=_env_float("CDS_ALERT_PUBLISH_TIMEOUT", DEFAULT_PUBLISH_TIMEOUT),
            enabled=_env_flag("CDS_ALERT_PUBLISH_ENABLED", True),
        )
