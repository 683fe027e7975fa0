"""
Tests for the message enricher and publisher.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from device_upstream.core.domain.devices import Device
from device_upstream.core.domain.messages import MessageType, OutboundMessage
from device_upstream.core.domain.requests import PropertyReport
from device_upstream.core.exceptions import TransportError
from device_upstream.core.services.publisher import MessagePublisher, build_message
from device_upstream.infrastructure.brokers.memory import InMemoryBroker


@pytest.fixture
def device() -> Device:
    return Device(4, 9, "sensor", "d4", "key-4")


class TestBuildMessage:
    """Test cases for build_message."""

    def test_copies_request_fields(self) -> None:
        reported = datetime(2024, 3, 1, tzinfo=timezone.utc)
        request = PropertyReport("sensor", "d4", request_id="r-1", report_time=reported,
                                 process_id="proc-2", properties={"t": 1})

        message = build_message(request, MessageType.PROPERTY, "report", request.properties)

        assert message.request_id == "r-1"
        assert message.report_time == reported
        assert message.headers == {"process_id": "proc-2"}
        assert message.data == {"t": 1}

    def test_no_process_header_without_process_id(self) -> None:
        message = build_message(PropertyReport("sensor", "d4"), MessageType.PROPERTY, "report")

        assert message.headers == {}


class TestMessagePublisher:
    """Test cases for MessagePublisher."""

    def test_enrich_fills_defaults(self, device: Device) -> None:
        publisher = MessagePublisher(AsyncMock())
        before = datetime.now(timezone.utc)

        enriched = publisher.enrich(OutboundMessage(MessageType.STATE, "online"), device)

        assert enriched.device_key == "key-4"
        assert enriched.tenant_id == 9
        assert enriched.request_id and len(enriched.request_id) == 32
        assert "-" not in enriched.request_id
        assert enriched.report_time is not None and enriched.report_time >= before
        assert enriched.report_time.tzinfo is not None

    def test_enrich_keeps_supplied_values(self, device: Device) -> None:
        publisher = MessagePublisher(AsyncMock())
        reported = datetime(2023, 1, 1, tzinfo=timezone.utc)
        message = OutboundMessage(MessageType.STATE, "online", request_id="given", report_time=reported)

        enriched = publisher.enrich(message, device)

        assert enriched.request_id == "given"
        assert enriched.report_time == reported

    @pytest.mark.asyncio
    async def test_publish_delivers_to_broker(self, broker: InMemoryBroker, device: Device) -> None:
        publisher = MessagePublisher(broker)

        assert await publisher.publish(OutboundMessage(MessageType.EVENT, "alarm"), device)

        assert [m.topic for m in broker.history] == ["event.alarm"]
        assert (await publisher.get_metrics())['messages_published'] == 1

    @pytest.mark.asyncio
    async def test_publish_failure_is_swallowed(self, device: Device) -> None:
        """Broker errors are logged and reported through the return value only."""
        broker = AsyncMock()
        broker.publish.side_effect = TransportError("broker unreachable")
        publisher = MessagePublisher(broker)

        result = await publisher.publish(OutboundMessage(MessageType.STATE, "offline"), device)

        assert result is False
        metrics = await publisher.get_metrics()
        assert metrics['messages_failed'] == 1
        assert metrics['messages_published'] == 0
