"""
Upstream dispatcher.

Turns a generic (device, type, identifier, payload) submission, as sent by
simulators and test tooling, into the typed request real connectors submit
directly, and routes it to the matching handler.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from ..domain.devices import Device
from ..domain.messages import MessageType
from ..domain.requests import EventReport, PropertyReport, StateUpdate
from ..exceptions import DeviceNotFoundError, InvalidArgumentError
from ..interfaces.directory import IDeviceDirectory
from .publisher import generate_request_id
from .reporters import EventReporter, PropertyReporter
from .state_sync import StateSynchronizer

logger = logging.getLogger(__name__)


class UpstreamDispatcher:
    """Classifies generic upstream submissions by declared type."""

    def __init__(self, directory: IDeviceDirectory, state_synchronizer: StateSynchronizer,
                 property_reporter: PropertyReporter, event_reporter: EventReporter) -> None:
        self._directory = directory
        self._state_synchronizer = state_synchronizer
        self._property_reporter = property_reporter
        self._event_reporter = event_reporter

    async def dispatch(self, device_id: int, message_type: Union[MessageType, str],
                       identifier: Optional[str], data: Any) -> None:
        """
        Dispatch a generic submission.

        Raises:
            DeviceNotFoundError: If device_id does not resolve
            InvalidArgumentError: If message_type is not PROPERTY, EVENT or STATE,
                or the payload does not fit it
        """
        device = await self._directory.get(device_id)
        if device is None:
            raise DeviceNotFoundError(f"Device {device_id} does not exist")

        try:
            kind = MessageType.parse(message_type)
        except InvalidArgumentError:
            raise InvalidArgumentError(f"Unknown upstream type: {message_type!r}") from None

        logger.info(f"Dispatching {kind.value} submission for device {device.device_key}")
        common = self._common_fields(device)

        if kind == MessageType.PROPERTY:
            await self._property_reporter.report_property(
                PropertyReport(properties=self._as_mapping(data, kind), **common))
        elif kind == MessageType.EVENT:
            if not identifier:
                raise InvalidArgumentError("Event submissions require an identifier")
            await self._event_reporter.report_event(
                EventReport(identifier=identifier, params=self._as_mapping(data, kind), **common))
        elif kind == MessageType.STATE:
            await self._state_synchronizer.update_state(StateUpdate(state=data, **common))
        else:
            raise InvalidArgumentError(f"Upstream type {kind.value!r} cannot be dispatched")

    @staticmethod
    def _common_fields(device: Device) -> Dict[str, Any]:
        return {
            'product_key': device.product_key,
            'device_name': device.device_name,
            'request_id': generate_request_id(),
            'report_time': datetime.now(timezone.utc),
        }

    @staticmethod
    def _as_mapping(data: Any, kind: MessageType) -> Dict[str, Any]:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise InvalidArgumentError(f"{kind.value} payload must be a mapping, got {type(data).__name__}")
        return data
