"""
Property and event reporters.

Every report is forwarded as its own message; deduplication is left to
downstream consumers.
"""

import logging
from typing import Optional

from ..domain.devices import Device
from ..domain.messages import MessageIdentifier, MessageType
from ..domain.requests import EventReport, PropertyReport, UpstreamRequest
from ..interfaces.directory import IDeviceDirectory
from .publisher import MessagePublisher, build_message
from .side_effects import SideEffectRecorder

logger = logging.getLogger(__name__)


class _Reporter:

    def __init__(self, directory: IDeviceDirectory, recorder: SideEffectRecorder,
                 publisher: MessagePublisher) -> None:
        self._directory = directory
        self._recorder = recorder
        self._publisher = publisher

    async def _resolve(self, request: UpstreamRequest, operation: str) -> Optional[Device]:
        device = await self._directory.find_by_key(request.product_key, request.device_name)
        if device is None:
            logger.error(f"{operation} dropped: device {request.product_key}/{request.device_name} not found")
            return None
        self._recorder.record(device, request)
        return device


class PropertyReporter(_Reporter):

    async def report_property(self, request: PropertyReport) -> None:
        logger.info(f"Property report from {request.product_key}/{request.device_name}: "
                    f"{sorted(request.properties)}")
        device = await self._resolve(request, "Property report")
        if device is None:
            return

        message = build_message(request, MessageType.PROPERTY,
                                MessageIdentifier.PROPERTY_REPORT.value, request.properties)
        await self._publisher.publish(message, device)


class EventReporter(_Reporter):

    async def report_event(self, request: EventReport) -> None:
        logger.info(f"Event '{request.identifier}' from {request.product_key}/{request.device_name}")
        device = await self._resolve(request, "Event report")
        if device is None:
            return

        message = build_message(request, MessageType.EVENT, request.identifier, request.params)
        await self._publisher.publish(message, device)
