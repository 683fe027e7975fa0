"""
Core module containing the upstream pipeline, its domain models and the
interfaces of its external collaborators.

Nothing in this package depends on a concrete broker, store or framework.
"""

from .exceptions import UpstreamError, DeviceNotFoundError, InvalidArgumentError, TransportError
from .domain.devices import Device, DeviceState, DeviceType, TenantContext
from .domain.messages import MessageType, OutboundMessage
from .interfaces.upstream import IDeviceUpstreamService

__all__ = [
    "UpstreamError",
    "DeviceNotFoundError",
    "InvalidArgumentError",
    "TransportError",
    "Device",
    "DeviceState",
    "DeviceType",
    "TenantContext",
    "MessageType",
    "OutboundMessage",
    "IDeviceUpstreamService",
]
