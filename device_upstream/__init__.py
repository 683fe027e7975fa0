"""
Device Upstream - IoT upstream dispatch-and-publish pipeline.

This package ingests property reports, events, state transitions and
registrations from device connectors, resolves them against the device
directory and republishes canonical messages onto a downstream broker.
"""

__version__ = "0.1.0"

# Public API exports
from .core.exceptions import UpstreamError, DeviceNotFoundError, InvalidArgumentError, TransportError
from .core.domain.requests import (
    PropertyReport, EventReport, StateUpdate, Register, RegisterSub, SubDeviceRef
)
from .core.domain.messages import MessageType, OutboundMessage
from .core.interfaces.upstream import IDeviceUpstreamService
from .core.services.upstream import DeviceUpstreamService
from .application.container import Container, IContainer

__all__ = [
    "UpstreamError",
    "DeviceNotFoundError",
    "InvalidArgumentError",
    "TransportError",
    "PropertyReport",
    "EventReport",
    "StateUpdate",
    "Register",
    "RegisterSub",
    "SubDeviceRef",
    "MessageType",
    "OutboundMessage",
    "IDeviceUpstreamService",
    "DeviceUpstreamService",
    "Container",
    "IContainer",
]
