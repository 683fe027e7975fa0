"""
Device directory interface.

The device directory owns persistent device rows. The upstream pipeline only
reads devices by business key or id and performs three narrow mutations,
each scoped by an explicit TenantContext.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.devices import Device, DeviceState, TenantContext


class IDeviceDirectory(ABC):
    """Interface for device storage used by the upstream pipeline."""

    @abstractmethod
    async def get(self, device_id: int) -> Optional[Device]:
        """
        Get a device by internal id.

        Returns:
            The device, or None if it does not exist
        """
        pass

    @abstractmethod
    async def find_by_key(self, product_key: str, device_name: str,
                          tenant: Optional[TenantContext] = None) -> Optional[Device]:
        """
        Find a device by its business key.

        Args:
            product_key: Product key
            device_name: Device name
            tenant: Restrict the lookup to one tenant; None searches all tenants,
                which is what upstream connectors need since they do not know
                the tenant before resolution

        Returns:
            The device, or None if it does not exist
        """
        pass

    @abstractmethod
    async def create(self, product_key: str, device_name: str,
                     gateway_id: Optional[int] = None,
                     tenant: Optional[TenantContext] = None) -> Device:
        """
        Create a device, deriving tenant and device type from its product.

        Args:
            tenant: Only create the device if its product belongs to this tenant

        Raises:
            DeviceNotFoundError: If the product is unknown, or outside tenant
        """
        pass

    @abstractmethod
    async def set_state(self, tenant: TenantContext, device_id: int, state: DeviceState) -> None:
        """Persist a new device state within the tenant scope."""
        pass

    @abstractmethod
    async def set_gateway(self, tenant: TenantContext, device_id: int, gateway_id: int) -> None:
        """Link a device to its owning gateway within the tenant scope."""
        pass
