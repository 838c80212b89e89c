"""
Unit Tests for Configuration, Logging and Exceptions
"""
import json
import logging

from bedside_cds.config import DEFAULT_ALERT_TOPIC, DEFAULT_PUBLISH_TIMEOUT, AlertBusSettings
from bedside_cds.utils import ClinicalSupportError, DosingInputError, SnapshotError, get_logger
from bedside_cds.utils.logging import JsonFormatter, StructuredFormatter


class TestAlertBusSettings:
    """Tests for AlertBusSettings.from_env()."""

    def test_defaults(self, monkeypatch):
        for name in ("CDS_ALERT_BUS_URL", "CDS_ALERT_TOPIC",
                     "CDS_ALERT_PUBLISH_TIMEOUT", "CDS_ALERT_PUBLISH_ENABLED"):
            monkeypatch.delenv(name, raising=False)

        settings = AlertBusSettings.from_env()

        assert settings.bus_url is None
        assert settings.topic == DEFAULT_ALERT_TOPIC == "clinical-alerts"
        assert settings.timeout == DEFAULT_PUBLISH_TIMEOUT
        assert settings.enabled is True

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("CDS_ALERT_BUS_URL", "http://kafka-rest:8082/")
        monkeypatch.setenv("CDS_ALERT_TOPIC", "icu-alerts")
        monkeypatch.setenv("CDS_ALERT_PUBLISH_TIMEOUT", "1.5")
        monkeypatch.setenv("CDS_ALERT_PUBLISH_ENABLED", "false")

        settings = AlertBusSettings.from_env()

        assert settings.bus_url == "http://kafka-rest:8082"
        assert settings.topic == "icu-alerts"
        assert settings.timeout == 1.5
        assert settings.enabled is False

    def test_bad_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("CDS_ALERT_PUBLISH_TIMEOUT", "soon")
        assert AlertBusSettings.from_env().timeout == DEFAULT_PUBLISH_TIMEOUT


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_to_dict(self):
        error = SnapshotError("age must be a non-negative integer", field="age")

        assert isinstance(error, ClinicalSupportError)
        assert error.to_dict() == {
            "error": "SNAPSHOT_ERROR",
            "message": "age must be a non-negative integer",
            "details": {"field": "age"},
        }

    def test_dosing_details(self):
        error = DosingInputError("zero creatinine", details={"serum_creatinine": 0.0})
        assert error.to_dict()["details"] == {"serum_creatinine": 0.0}


class TestLogging:
    """Tests for structured logging."""

    def test_get_logger(self):
        logger = get_logger("bedside_cds.test")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "bedside_cds.test"

    def test_formatter_without_color(self):
        formatter = StructuredFormatter(use_color=False)
        record = logging.LogRecord("bedside_cds.x", logging.WARNING, __file__, 1, "hello %s", ("ward",), None)
        output = formatter.format(record)

        assert "WARNING" in output
        assert "[bedside_cds.x]" in output
        assert output.endswith("hello ward")

    def test_formatter_appends_extra_fields(self):
        formatter = StructuredFormatter(use_color=False)
        record = logging.LogRecord("bedside_cds.x", logging.INFO, __file__, 1, "published", (), None)
        record.topic = "clinical-alerts"
        output = formatter.format(record)

        assert output.endswith("published topic=clinical-alerts")

    def test_json_formatter(self):
        record = logging.LogRecord("bedside_cds.x", logging.ERROR, __file__, 1, "bus down", (), None)
        record.alert_id = "a-1"
        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "ERROR"
        assert payload["logger"] == "bedside_cds.x"
        assert payload["message"] == "bus down"
        assert payload["alert_id"] == "a-1"
