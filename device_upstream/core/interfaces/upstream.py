"""
Inbound entry points exposed to upstream connectors and simulators.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from ..domain.messages import MessageType
from ..domain.requests import EventReport, PropertyReport, Register, RegisterSub, StateUpdate


class IDeviceUpstreamService(ABC):
    """Interface for the device upstream pipeline."""

    @abstractmethod
    async def dispatch_generic(self, device_id: int, message_type: Union[MessageType, str],
                               identifier: Optional[str], data: Any) -> None:
        """
        Route a generic upstream submission to the matching typed handler.

        Raises:
            DeviceNotFoundError: If the device does not exist
            InvalidArgumentError: If the message type cannot be dispatched
        """
        pass

    @abstractmethod
    async def update_state(self, request: StateUpdate) -> None:
        """
        Apply an ONLINE/OFFLINE transition.

        Raises:
            InvalidArgumentError: If the requested state is not ONLINE or OFFLINE
        """
        pass

    @abstractmethod
    async def report_property(self, request: PropertyReport) -> None:
        pass

    @abstractmethod
    async def report_event(self, request: EventReport) -> None:
        pass

    @abstractmethod
    async def register(self, request: Register) -> None:
        pass

    @abstractmethod
    async def register_sub(self, request: RegisterSub) -> None:
        pass
