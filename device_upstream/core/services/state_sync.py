"""
State synchronizer.

Applies ONLINE/OFFLINE transitions reported by connectors. A report that
matches the device's current state is a no-op: no storage write and no STATE
message, so repeated heartbeats never re-announce a transition.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ..domain.devices import Device, DeviceState, TenantContext
from ..domain.messages import MessageIdentifier, MessageType
from ..domain.requests import StateUpdate
from ..exceptions import InvalidArgumentError
from ..interfaces.directory import IDeviceDirectory
from .publisher import MessagePublisher, build_message
from .side_effects import SideEffectRecorder

logger = logging.getLogger(__name__)

SETTABLE_STATES = (DeviceState.ONLINE, DeviceState.OFFLINE)


def validate_state(value: object) -> DeviceState:
    """
    Parse a requested state, accepting only ONLINE and OFFLINE.

    Raises:
        InvalidArgumentError: For any other value
    """
    state = DeviceState.parse(value)
    if state not in SETTABLE_STATES:
        raise InvalidArgumentError(f"Device state {state.name} cannot be reported upstream")
    return state


class StateSynchronizer:
    """Idempotent device state transitions."""

    def __init__(self, directory: IDeviceDirectory, recorder: SideEffectRecorder,
                 publisher: MessagePublisher, serialize_per_device: bool = False) -> None:
        self._directory = directory
        self._recorder = recorder
        self._publisher = publisher
        self._serialize_per_device = serialize_per_device
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def update_state(self, request: StateUpdate) -> None:
        state = validate_state(request.state)

        logger.info(f"Updating state of device {request.product_key}/{request.device_name} to {state.name}")
        device = await self._directory.find_by_key(request.product_key, request.device_name)
        if device is None:
            logger.error(f"State update dropped: device {request.product_key}/{request.device_name} not found")
            return

        self._recorder.record(device, request)

        async with self._device_lock(device):
            if self._serialize_per_device:
                # Re-read under the lock so the comparison sees the latest committed state
                device = await self._reload(device)
            await self._apply(device, state, request)

    async def _apply(self, device: Device, state: DeviceState, request: StateUpdate) -> None:
        if device.state == state:
            logger.debug(f"Device {device.device_key} already {state.name}, nothing to do")
            return

        await self._directory.set_state(TenantContext.of(device), device.id, state)

        identifier = (MessageIdentifier.STATE_ONLINE if state == DeviceState.ONLINE
                      else MessageIdentifier.STATE_OFFLINE)
        message = build_message(request, MessageType.STATE, identifier.value)
        await self._publisher.publish(message, device)

    async def _reload(self, device: Device) -> Device:
        current: Optional[Device] = await self._directory.get(device.id)
        return current if current is not None else device

    @asynccontextmanager
    async def _device_lock(self, device: Device) -> AsyncIterator[None]:
        if not self._serialize_per_device:
            yield
            return

        lock = self._locks.get(device.id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[device.id] = lock
        async with lock:
            yield
