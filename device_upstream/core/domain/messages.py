"""
Outbound message domain models.

This module defines the canonical envelope published to the downstream
message bus once an upstream request has been resolved to a device.
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import InvalidArgumentError


class MessageType(Enum):
    """Types of outbound device messages."""
    PROPERTY = "property"
    EVENT = "event"
    STATE = "state"
    REGISTER = "register"

    @classmethod
    def parse(cls, value: Any) -> 'MessageType':
        """
        Parse a message type from an enum member, value or name.

        Raises:
            InvalidArgumentError: If the value is not a known message type
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value.lower() == member.value:
                    return member
        raise InvalidArgumentError(f"Unknown message type: {value!r}")


class MessageIdentifier(Enum):
    """Fixed message identifiers (events carry caller supplied identifiers)."""
    STATE_ONLINE = "online"
    STATE_OFFLINE = "offline"
    PROPERTY_REPORT = "report"
    REGISTER_REGISTER = "register"
    REGISTER_REGISTER_SUB = "register_sub"


@dataclass
class OutboundMessage:
    """
    Canonical device message handed to the broker.

    device_key and tenant_id are filled from the resolved device by the
    publisher, which also defaults request_id and report_time.
    """

    type: MessageType
    """Message type."""

    identifier: str
    """Semantic sub-type within the message type."""

    data: Any = None
    """Opaque payload: property map, event params, sub-device list or None."""

    device_key: Optional[str] = None
    """Routing key of the device the message is about."""

    tenant_id: Optional[int] = None
    """Tenant that owns the device."""

    request_id: Optional[str] = None
    """Upstream request identifier."""

    report_time: Optional[datetime] = None
    """Time the device reported the signal."""

    headers: Dict[str, Any] = field(default_factory=dict)
    """Transport metadata (e.g. originating process id)."""

    @property
    def topic(self) -> str:
        """Qualified identifier, e.g. ``state.online`` or ``register.register_sub``."""
        return f"{self.type.value}.{self.identifier}"

    def with_identity(self, device_key: str, tenant_id: int) -> 'OutboundMessage':
        return replace(self, device_key=device_key, tenant_id=tenant_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'device_key': self.device_key,
            'tenant_id': self.tenant_id,
            'request_id': self.request_id,
            'report_time': self.report_time.isoformat() if self.report_time else None,
            'type': self.type.value,
            'identifier': self.identifier,
            'data': self.data,
            'headers': self.headers,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OutboundMessage':
        report_time = data.get('report_time')
        return cls(
            type=MessageType.parse(data['type']),
            identifier=data['identifier'],
            data=data.get('data'),
            device_key=data.get('device_key'),
            tenant_id=data.get('tenant_id'),
            request_id=data.get('request_id'),
            report_time=datetime.fromisoformat(report_time) if report_time else None,
            headers=data.get('headers', {})
        )
