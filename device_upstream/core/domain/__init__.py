"""
Domain models for devices, upstream requests and outbound messages.
"""

from .devices import Device, DeviceState, DeviceType, Product, TenantContext, derive_device_key
from .requests import (
    UpstreamRequest, PropertyReport, EventReport, StateUpdate,
    Register, RegisterSub, SubDeviceRef
)
from .messages import MessageIdentifier, MessageType, OutboundMessage

__all__ = [
    "Device",
    "DeviceState",
    "DeviceType",
    "Product",
    "TenantContext",
    "derive_device_key",
    "UpstreamRequest",
    "PropertyReport",
    "EventReport",
    "StateUpdate",
    "Register",
    "RegisterSub",
    "SubDeviceRef",
    "MessageIdentifier",
    "MessageType",
    "OutboundMessage",
]
