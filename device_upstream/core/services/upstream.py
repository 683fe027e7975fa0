"""
Device upstream service.

Single entry point for connectors: wires the dispatcher, state synchronizer,
reporters and registrar around one directory, side-effect recorder and
publisher.
"""

import logging
from typing import Any, Dict, Optional, Union

from ..domain.messages import MessageType
from ..domain.requests import EventReport, PropertyReport, Register, RegisterSub, StateUpdate
from ..interfaces.directory import IDeviceDirectory
from ..interfaces.upstream import IDeviceUpstreamService
from .dispatcher import UpstreamDispatcher
from .publisher import MessagePublisher
from .registrar import DeviceRegistrar
from .reporters import EventReporter, PropertyReporter
from .side_effects import SideEffectRecorder
from .state_sync import StateSynchronizer

logger = logging.getLogger(__name__)


class DeviceUpstreamService(IDeviceUpstreamService):
    """Facade over the upstream dispatch-and-publish pipeline."""

    def __init__(self, directory: IDeviceDirectory, recorder: SideEffectRecorder,
                 publisher: MessagePublisher, abort_on_sub_device_error: bool = False,
                 serialize_state_updates: bool = False) -> None:
        self._recorder = recorder
        self._publisher = publisher

        self.state_synchronizer = StateSynchronizer(
            directory, recorder, publisher, serialize_per_device=serialize_state_updates)
        self.property_reporter = PropertyReporter(directory, recorder, publisher)
        self.event_reporter = EventReporter(directory, recorder, publisher)
        self.registrar = DeviceRegistrar(
            directory, recorder, publisher, abort_on_sub_device_error=abort_on_sub_device_error)
        self.dispatcher = UpstreamDispatcher(
            directory, self.state_synchronizer, self.property_reporter, self.event_reporter)

    async def dispatch_generic(self, device_id: int, message_type: Union[MessageType, str],
                               identifier: Optional[str], data: Any) -> None:
        await self.dispatcher.dispatch(device_id, message_type, identifier, data)

    async def update_state(self, request: StateUpdate) -> None:
        await self.state_synchronizer.update_state(request)

    async def report_property(self, request: PropertyReport) -> None:
        await self.property_reporter.report_property(request)

    async def report_event(self, request: EventReport) -> None:
        await self.event_reporter.report_event(request)

    async def register(self, request: Register) -> None:
        await self.registrar.register(request)

    async def register_sub(self, request: RegisterSub) -> None:
        await self.registrar.register_sub(request)

    async def get_metrics(self) -> Dict[str, Any]:
        return {
            'publisher': await self._publisher.get_metrics(),
            'side_effects': await self._recorder.get_metrics(),
        }
