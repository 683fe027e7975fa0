"""
Upstream request models.

Upstream requests are the typed signals connectors submit on behalf of a
device: property reports, events, state transitions and registrations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SubDeviceRef:
    """Business identity of a sub-device listed in a RegisterSub request."""
    product_key: str
    device_name: str

    def to_dict(self) -> Dict[str, str]:
        return {'product_key': self.product_key, 'device_name': self.device_name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SubDeviceRef':
        return cls(product_key=data['product_key'], device_name=data['device_name'])


@dataclass
class UpstreamRequest:
    """
    Fields common to every upstream request.

    request_id and report_time may be omitted by the sender; the publisher
    fills them in before a message leaves the pipeline.
    """

    product_key: str
    """Product the device belongs to."""

    device_name: str
    """Device name, unique within the product."""

    request_id: Optional[str] = None
    """Client supplied request identifier."""

    report_time: Optional[datetime] = None
    """Client supplied report time."""

    process_id: Optional[str] = None
    """Connector/plugin instance process that received the signal."""


@dataclass
class PropertyReport(UpstreamRequest):
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EventReport(UpstreamRequest):
    identifier: str = ""
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StateUpdate(UpstreamRequest):
    # DeviceState, integer code or state name; validated by the state synchronizer
    state: Any = None


@dataclass
class Register(UpstreamRequest):
    pass


@dataclass
class RegisterSub(UpstreamRequest):
    sub_devices: List[SubDeviceRef] = field(default_factory=list)
