"""
Message enricher and publisher.

Completes an outbound message with the resolved device's identity, defaults
the request id and report time, and hands it to the broker. Broker failures
are logged and swallowed: delivery is best-effort from the pipeline's side.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict

from ..domain.devices import Device
from ..domain.messages import MessageType, OutboundMessage
from ..domain.requests import UpstreamRequest
from ..interfaces.messaging import IBrokerPublisher

logger = logging.getLogger(__name__)


def generate_request_id() -> str:
    return uuid.uuid4().hex


def build_message(request: UpstreamRequest, message_type: MessageType, identifier: str,
                  data: Any = None) -> OutboundMessage:
    """Start an outbound message from the request it answers."""
    return OutboundMessage(
        type=message_type,
        identifier=identifier,
        data=data,
        request_id=request.request_id,
        report_time=request.report_time,
        headers={'process_id': request.process_id} if request.process_id else {}
    )


class MessagePublisher:
    """Enriches outbound messages and publishes them without propagating failures."""

    def __init__(self, broker: IBrokerPublisher) -> None:
        self._broker = broker
        self._metrics = {
            'messages_published': 0,
            'messages_failed': 0
        }

    def enrich(self, message: OutboundMessage, device: Device) -> OutboundMessage:
        """Return a copy of message with identity, request id and report time filled in."""
        enriched = message.with_identity(device.device_key, device.tenant_id)
        if not enriched.request_id:
            enriched = replace(enriched, request_id=generate_request_id())
        if enriched.report_time is None:
            enriched = replace(enriched, report_time=datetime.now(timezone.utc))
        return enriched

    async def publish(self, message: OutboundMessage, device: Device) -> bool:
        """
        Enrich and publish a message.

        Returns:
            True if the broker accepted the message
        """
        enriched = self.enrich(message, device)
        try:
            await self._broker.publish(enriched)
        except Exception as e:
            self._metrics['messages_failed'] += 1
            logger.exception(f"Failed to publish message {enriched.topic} "
                             f"(request {enriched.request_id}, device {enriched.device_key}): {e}")
            return False

        self._metrics['messages_published'] += 1
        logger.info(f"Published message {enriched.topic} "
                    f"(request {enriched.request_id}, device {enriched.device_key})")
        return True

    async def get_metrics(self) -> Dict[str, Any]:
        return self._metrics.copy()
