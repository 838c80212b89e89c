"""
Clinical Alert Publisher

Forwards CRITICAL clinical alerts to the external alert bus.

This service provides:
- One publish per CRITICAL alert on the configured topic (default
  "clinical-alerts"); non-CRITICAL alerts are skipped
- Fire-and-forget dispatch as asyncio tasks so scoring never waits on the bus
- Failure isolation: a failed publish is logged and reported on the
  AlertDispatch, never raised to the caller

There is no retry. An alert that fails to publish is reported once and dropped.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set

import httpx

from bedside_cds.config import DEFAULT_ALERT_TOPIC, DEFAULT_PUBLISH_TIMEOUT, AlertBusSettings
from bedside_cds.core.clinical import ClinicalAlert
from bedside_cds.utils import AlertPublishError, get_logger

logger = get_logger(__name__)

KAFKA_REST_CONTENT_TYPE = "application/vnd.kafka.json.v2+json"


class AlertBusTransport(ABC):
    """Append-only publish primitive: (topic, key, payload)."""

    @abstractmethod
    async def send(self, topic: str, key: str, payload: Dict[str, Any]) -> None:
        """
        Deliver one record.

        Raises:
            AlertPublishError: the bus did not accept the record.
        """

    async def aclose(self) -> None:
        """Release any connections held by the transport."""


class HttpAlertBusTransport(AlertBusTransport):
    """
    Publishes through a Kafka REST proxy: POST {bus_url}/topics/{topic}.

    The httpx.AsyncClient is shared by concurrent publishes. A client passed
    in by the caller is not closed by aclose().
    """

    def __init__(
        self,
        bus_url: str,
        timeout: float = DEFAULT_PUBLISH_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.bus_url = bus_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def send(self, topic: str, key: str, payload: Dict[str, Any]) -> None:
        try:
            response = await self._client.post(
                f"{self.bus_url}/topics/{topic}",
                json={"records": [{"key": key, "value": payload}]},
                headers={"Content-Type": KAFKA_REST_CONTENT_TYPE},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise AlertPublishError(
                f"Alert bus unreachable: {e.__class__.__name__}: {e}", topic=topic
            ) from e

        if not response.is_success:
            raise AlertPublishError(
                f"Alert bus rejected record with HTTP {response.status_code}",
                topic=topic,
                details={"status_code": response.status_code, "body": response.text[:200]},
            )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class NullAlertBusTransport(AlertBusTransport):
    """Used when no bus is configured: logs the alert and drops it."""

    async def send(self, topic: str, key: str, payload: Dict[str, Any]) -> None:
        logger.info(
            f"No alert bus configured; dropping {payload.get('type')} alert {key} for topic '{topic}'"
        )


class PublishStatus(str, Enum):
    DELIVERED = "DELIVERED"
    FAILED    = "FAILED"
    SKIPPED   = "SKIPPED"


@dataclass(frozen=True)
class PublishOutcome:
    alert_id: str
    status: PublishStatus
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_id": self.alert_id,
            "status": self.status.value,
            "detail": self.detail,
        }


class AlertDispatch:
    """
    Handle on the publishes scheduled for one analysis.

    Returned immediately; the publishes run in the background. `wait()`
    gathers their outcomes and never raises for a publish failure.
    """

    def __init__(
        self,
        tasks: Sequence["asyncio.Task[PublishOutcome]"] = (),
        skipped: Sequence[PublishOutcome] = (),
    ):
        self._tasks = list(tasks)
        self._skipped = list(skipped)

    @property
    def scheduled(self) -> int:
        return len(self._tasks)

    @property
    def done(self) -> bool:
        return all(task.done() for task in self._tasks)

    @property
    def warnings(self) -> List[str]:
        """Failure messages of the publishes that have finished so far."""
        return [
            f"Alert {outcome.alert_id} not published: {outcome.detail}"
            for outcome in self._finished()
            if outcome.status == PublishStatus.FAILED
        ]

    async def wait(self) -> List[PublishOutcome]:
        outcomes = await asyncio.gather(*self._tasks) if self._tasks else []
        return self._skipped + list(outcomes)

    def _finished(self) -> List[PublishOutcome]:
        return [task.result() for task in self._tasks if task.done() and not task.cancelled()]


class AlertPublisher:
    """
    Publishes CRITICAL clinical alerts to the alert bus.

    Features:
    - Non-blocking dispatch as background tasks
    - Strong references to in-flight tasks until they finish
    - drain() for graceful shutdown
    """

    def __init__(
        self,
        transport: Optional[AlertBusTransport] = None,
        topic: str = DEFAULT_ALERT_TOPIC,
        enabled: bool = True,
    ):
        self.transport = transport or NullAlertBusTransport()
        self.topic = topic
        self.enabled = enabled
        self._pending: Set["asyncio.Task[PublishOutcome]"] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[AlertBusSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "AlertPublisher":
        settings = settings or AlertBusSettings.from_env()
        if settings.bus_url:
            transport: AlertBusTransport = HttpAlertBusTransport(
                settings.bus_url, timeout=settings.timeout, client=client
            )
        else:
            transport = NullAlertBusTransport()
        return cls(transport=transport, topic=settings.topic, enabled=settings.enabled)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def publish(self, alert: ClinicalAlert) -> PublishOutcome:
        """
        Publish a single alert now.

        Args:
            alert: The alert to publish. Non-CRITICAL alerts are skipped.

        Returns:
            The outcome. Failures are logged and returned, never raised.
        """
        if not alert.is_critical:
            return PublishOutcome(alert.id, PublishStatus.SKIPPED, "not CRITICAL")
        if not self.enabled:
            return PublishOutcome(alert.id, PublishStatus.SKIPPED, "publishing disabled")

        try:
            await self.transport.send(self.topic, alert.id, alert.to_dict())
        except AlertPublishError as e:
            logger.error(
                f"Failed to publish alert {alert.id}: {e.message}",
                extra={"topic": self.topic, "alert_id": alert.id},
            )
            return PublishOutcome(alert.id, PublishStatus.FAILED, e.message)
        except Exception as e:
            logger.error(
                f"Unexpected error publishing alert {alert.id}: {e}",
                exc_info=True,
                extra={"topic": self.topic, "alert_id": alert.id},
            )
            return PublishOutcome(alert.id, PublishStatus.FAILED, str(e) or e.__class__.__name__)

        logger.info(f"Published {alert.type.value} alert {alert.id} to '{self.topic}'")
        return PublishOutcome(alert.id, PublishStatus.DELIVERED)

    def dispatch(self, alerts: Sequence[ClinicalAlert]) -> AlertDispatch:
        """
        Schedule one background publish per CRITICAL alert and return at once.

        Must be called from a running event loop.
        """
        tasks = []
        skipped = []
        for alert in alerts:
            if not alert.is_critical or not self.enabled:
                reason = "not CRITICAL" if not alert.is_critical else "publishing disabled"
                skipped.append(PublishOutcome(alert.id, PublishStatus.SKIPPED, reason))
                continue
            task = asyncio.create_task(self.publish(alert))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            tasks.append(task)

        if tasks:
            logger.debug(f"Dispatched {len(tasks)} alert publish task(s) to '{self.topic}'")
        return AlertDispatch(tasks, skipped)

    async def drain(self) -> None:
        """Wait for every in-flight publish to finish."""
        if self._pending:
            logger.info(f"Draining {len(self._pending)} pending alert publish task(s)")
            await asyncio.gather(*list(self._pending))

    async def aclose(self) -> None:
        await self.drain()
        await self.transport.aclose()
