"""
Device domain models.

This module defines the device identity, type and state models shared by the
upstream pipeline and the device directory, plus the explicit tenant scope
value that every tenant-partitioned storage call receives.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidArgumentError

DEVICE_KEY_NAMESPACE = uuid.UUID("6f1c7b1e-3d2a-4c59-9f0e-2b8a4d7c5e10")


class DeviceType(Enum):
    """Product device types."""
    STANDALONE = "standalone"
    GATEWAY = "gateway"
    SUB_DEVICE = "sub_device"


class DeviceState(Enum):
    """Device connection states."""
    INACTIVE = 0  # Registered but never activated
    ONLINE = 1
    OFFLINE = 2

    @classmethod
    def parse(cls, value: Any) -> 'DeviceState':
        """
        Parse a state from an enum member, integer code or name.

        Raises:
            InvalidArgumentError: If the value does not name a known state
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidArgumentError(f"Invalid device state: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidArgumentError(f"Invalid device state: {value!r}")
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.parse(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                raise InvalidArgumentError(f"Invalid device state: {value!r}")
        raise InvalidArgumentError(f"Invalid device state: {value!r}")


def derive_device_key(product_key: str, device_name: str) -> str:
    """Derive the stable routing key for a (product_key, device_name) pair."""
    return uuid.uuid5(DEVICE_KEY_NAMESPACE, f"{product_key}/{device_name}").hex


@dataclass(frozen=True)
class TenantContext:
    """Tenant scope passed to every call that touches tenant-partitioned storage."""
    tenant_id: int

    @classmethod
    def of(cls, device: 'Device') -> 'TenantContext':
        return cls(tenant_id=device.tenant_id)


@dataclass(frozen=True)
class Product:
    """Product catalog entry used when creating devices."""
    product_key: str
    tenant_id: int
    device_type: DeviceType = DeviceType.STANDALONE


@dataclass
class Device:
    """
    A device known to the platform.

    Identity is (tenant_id, product_key, device_name); device_key is the
    derived routing key used on outbound messages.
    """

    id: int
    tenant_id: int
    product_key: str
    device_name: str
    device_key: str
    device_type: DeviceType = DeviceType.STANDALONE
    gateway_id: Optional[int] = None
    state: DeviceState = DeviceState.INACTIVE

    @property
    def is_gateway(self) -> bool:
        return self.device_type == DeviceType.GATEWAY

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'product_key': self.product_key,
            'device_name': self.device_name,
            'device_key': self.device_key,
            'device_type': self.device_type.value,
            'gateway_id': self.gateway_id,
            'state': self.state.name,
        }
