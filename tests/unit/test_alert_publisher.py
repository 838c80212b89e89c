"""
Unit Tests for the Clinical Alert Publisher

Uses httpx.MockTransport in place of the alert bus.
"""
import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from bedside_cds.config import AlertBusSettings
from bedside_cds.core.clinical import AlertSeverity, AlertType, ClinicalAlert
from bedside_cds.services import (
    AlertBusTransport,
    AlertPublisher,
    HttpAlertBusTransport,
    NullAlertBusTransport,
    PublishStatus,
)
from bedside_cds.utils import AlertPublishError


def _critical_alert() -> ClinicalAlert:
    return ClinicalAlert.create(
        AlertType.CRITICAL_VITALS,
        AlertSeverity.CRITICAL,
        "Critical heart rate: 160 bpm",
        ["Immediate physician notification"],
    )


def _warning_alert() -> ClinicalAlert:
    return ClinicalAlert.create(AlertType.CRITICAL_LAB, AlertSeverity.WARNING, "Glucose trending up")


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
class TestHttpAlertBusTransport:
    """Tests for the Kafka REST transport."""

    async def test_posts_record_to_topic(self):
        """Test the alert is posted as a single keyed record."""
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"offsets": [{"partition": 0, "offset": 1}]})

        alert = _critical_alert()
        async with _mock_client(handler) as client:
            transport = HttpAlertBusTransport("http://bus.local/", client=client)
            await transport.send("clinical-alerts", alert.id, alert.to_dict())

        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert request.url == "http://bus.local/topics/clinical-alerts"
        assert request.headers["content-type"] == "application/vnd.kafka.json.v2+json"

        body = json.loads(request.content)
        assert body["records"][0]["key"] == alert.id
        assert body["records"][0]["value"]["type"] == "CRITICAL_VITALS"
        assert body["records"][0]["value"]["severity"] == "CRITICAL"

    async def test_http_error_status_raises(self):
        async with _mock_client(lambda request: httpx.Response(503, text="unavailable")) as client:
            transport = HttpAlertBusTransport("http://bus.local", client=client)
            with pytest.raises(AlertPublishError) as exc_info:
                await transport.send("clinical-alerts", "id-1", {})

        assert exc_info.value.code == "ALERT_PUBLISH_ERROR"
        assert exc_info.value.details["status_code"] == 503
        assert exc_info.value.topic == "clinical-alerts"

    async def test_connection_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _mock_client(handler) as client:
            transport = HttpAlertBusTransport("http://bus.local", client=client)
            with pytest.raises(AlertPublishError):
                await transport.send("clinical-alerts", "id-1", {})

    async def test_borrowed_client_not_closed(self):
        client = _mock_client(lambda request: httpx.Response(200))
        transport = HttpAlertBusTransport("http://bus.local", client=client)
        await transport.aclose()

        assert not client.is_closed
        await client.aclose()


@pytest.mark.asyncio
class TestAlertPublisher:
    """Tests for AlertPublisher."""

    async def test_publish_critical(self):
        transport = AsyncMock(spec=AlertBusTransport)
        publisher = AlertPublisher(transport=transport)
        alert = _critical_alert()

        outcome = await publisher.publish(alert)

        assert outcome.status == PublishStatus.DELIVERED
        transport.send.assert_awaited_once_with("clinical-alerts", alert.id, alert.to_dict())

    async def test_non_critical_skipped(self):
        transport = AsyncMock(spec=AlertBusTransport)
        publisher = AlertPublisher(transport=transport)

        outcome = await publisher.publish(_warning_alert())

        assert outcome.status == PublishStatus.SKIPPED
        transport.send.assert_not_awaited()

    async def test_disabled_skips(self):
        transport = AsyncMock(spec=AlertBusTransport)
        publisher = AlertPublisher(transport=transport, enabled=False)

        outcome = await publisher.publish(_critical_alert())

        assert outcome.status == PublishStatus.SKIPPED
        transport.send.assert_not_awaited()

    async def test_failure_reported_not_raised(self):
        """Test a bus failure yields a FAILED outcome and no exception."""
        async with _mock_client(lambda request: httpx.Response(500)) as client:
            publisher = AlertPublisher(transport=HttpAlertBusTransport("http://bus.local", client=client))
            outcome = await publisher.publish(_critical_alert())

        assert outcome.status == PublishStatus.FAILED
        assert "HTTP 500" in outcome.detail

    async def test_unexpected_transport_error_reported(self):
        transport = AsyncMock(spec=AlertBusTransport)
        transport.send.side_effect = RuntimeError("serializer exploded")
        publisher = AlertPublisher(transport=transport)

        outcome = await publisher.publish(_critical_alert())

        assert outcome.status == PublishStatus.FAILED
        assert outcome.detail == "serializer exploded"

    async def test_no_retry(self):
        transport = AsyncMock(spec=AlertBusTransport)
        transport.send.side_effect = AlertPublishError("bus down", topic="clinical-alerts")
        publisher = AlertPublisher(transport=transport)

        await publisher.publish(_critical_alert())

        assert transport.send.await_count == 1

    async def test_null_transport_delivers(self):
        publisher = AlertPublisher(transport=NullAlertBusTransport())
        outcome = await publisher.publish(_critical_alert())
        assert outcome.status == PublishStatus.DELIVERED


@pytest.mark.asyncio
class TestAlertDispatch:
    """Tests for background dispatch."""

    async def test_dispatch_returns_before_publish_completes(self):
        release = asyncio.Event()

        async def slow_send(topic, key, payload):
            await release.wait()

        transport = AsyncMock(spec=AlertBusTransport)
        transport.send.side_effect = slow_send
        publisher = AlertPublisher(transport=transport)

        dispatch = publisher.dispatch([_critical_alert()])

        assert dispatch.scheduled == 1
        assert not dispatch.done
        assert publisher.pending == 1

        release.set()
        outcomes = await dispatch.wait()

        assert [o.status for o in outcomes] == [PublishStatus.DELIVERED]
        assert dispatch.done
        assert dispatch.warnings == []

    async def test_dispatch_skips_non_critical(self):
        transport = AsyncMock(spec=AlertBusTransport)
        publisher = AlertPublisher(transport=transport)

        dispatch = publisher.dispatch([_warning_alert(), _critical_alert()])
        outcomes = await dispatch.wait()

        assert dispatch.scheduled == 1
        assert sorted(o.status.value for o in outcomes) == ["DELIVERED", "SKIPPED"]
        assert transport.send.await_count == 1

    async def test_dispatch_failure_becomes_warning(self):
        transport = AsyncMock(spec=AlertBusTransport)
        transport.send.side_effect = AlertPublishError("bus down", topic="clinical-alerts")
        publisher = AlertPublisher(transport=transport)
        alert = _critical_alert()

        dispatch = publisher.dispatch([alert])
        outcomes = await dispatch.wait()

        assert outcomes[0].status == PublishStatus.FAILED
        assert dispatch.warnings == [f"Alert {alert.id} not published: bus down"]

    async def test_dispatch_empty(self):
        publisher = AlertPublisher(transport=AsyncMock(spec=AlertBusTransport))
        dispatch = publisher.dispatch([])

        assert dispatch.done
        assert await dispatch.wait() == []

    async def test_drain_waits_for_pending(self):
        transport = AsyncMock(spec=AlertBusTransport)
        publisher = AlertPublisher(transport=transport)

        publisher.dispatch([_critical_alert(), _critical_alert()])
        await publisher.drain()

        assert transport.send.await_count == 2
        assert publisher.pending == 0

    async def test_aclose_closes_transport(self):
        transport = AsyncMock(spec=AlertBusTransport)
        publisher = AlertPublisher(transport=transport)

        await publisher.aclose()

        transport.aclose.assert_awaited_once()


class TestFromSettings:
    """Tests for AlertPublisher.from_settings()."""

    def test_no_bus_url_uses_null_transport(self):
        publisher = AlertPublisher.from_settings(AlertBusSettings())

        assert isinstance(publisher.transport, NullAlertBusTransport)
        assert publisher.topic == "clinical-alerts"

    def test_bus_url_uses_http_transport(self):
        settings = AlertBusSettings(bus_url="http://bus.local", topic="icu-alerts", timeout=2.0)
        client = httpx.AsyncClient()
        publisher = AlertPublisher.from_settings(settings, client=client)

        assert isinstance(publisher.transport, HttpAlertBusTransport)
        assert publisher.transport.bus_url == "http://bus.local"
        assert publisher.transport.timeout == 2.0
        assert publisher.topic == "icu-alerts"

    def test_disabled_setting(self):
        publisher = AlertPublisher.from_settings(AlertBusSettings(enabled=False))
        assert publisher.enabled is False
