"""
In-memory device directory.

Reference directory backed by dictionaries, used for development, the
simulator and tests. Devices are handed out as copies so callers never mutate
stored rows.
"""

import asyncio
import itertools
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from ...core.domain.devices import (
    Device, DeviceState, DeviceType, Product, TenantContext, derive_device_key
)
from ...core.exceptions import DeviceNotFoundError, InvalidArgumentError
from ...core.interfaces.directory import IDeviceDirectory

logger = logging.getLogger(__name__)


class InMemoryDeviceDirectory(IDeviceDirectory):
    """Dictionary backed device directory with a product catalog."""

    def __init__(self, products: Optional[Iterable[Product]] = None) -> None:
        self._products: Dict[str, Product] = {}
        self._devices: Dict[int, Device] = {}
        self._by_key: Dict[Tuple[str, str], int] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

        for product in products or []:
            self.add_product(product)

    def add_product(self, product: Product) -> None:
        self._products[product.product_key] = product
        logger.debug(f"Added product {product.product_key} for tenant {product.tenant_id}")

    async def add_device(self, product_key: str, device_name: str,
                         state: DeviceState = DeviceState.INACTIVE,
                         gateway_id: Optional[int] = None) -> Device:
        """Create a device directly with an initial state (seeding and tests)."""
        device = await self.create(product_key, device_name, gateway_id)
        if state != device.state:
            await self.set_state(TenantContext.of(device), device.id, state)
        return replace(self._devices[device.id])

    async def get(self, device_id: int) -> Optional[Device]:
        device = self._devices.get(device_id)
        return replace(device) if device else None

    async def find_by_key(self, product_key: str, device_name: str,
                          tenant: Optional[TenantContext] = None) -> Optional[Device]:
        device_id = self._by_key.get((product_key, device_name))
        if device_id is None:
            return None
        device = self._devices[device_id]
        if tenant is not None and device.tenant_id != tenant.tenant_id:
            return None
        return replace(device)

    async def create(self, product_key: str, device_name: str,
                     gateway_id: Optional[int] = None,
                     tenant: Optional[TenantContext] = None) -> Device:
        product = self._products.get(product_key)
        if product is None:
            raise DeviceNotFoundError(f"Product {product_key} does not exist",
                                      product_key=product_key, device_name=device_name)
        if tenant is not None and product.tenant_id != tenant.tenant_id:
            raise DeviceNotFoundError(f"Product {product_key} does not exist in tenant {tenant.tenant_id}",
                                      product_key=product_key, device_name=device_name)

        async with self._lock:
            if (product_key, device_name) in self._by_key:
                raise InvalidArgumentError(f"Device {product_key}/{device_name} already exists")

            device = Device(
                id=next(self._ids),
                tenant_id=product.tenant_id,
                product_key=product_key,
                device_name=device_name,
                device_key=derive_device_key(product_key, device_name),
                device_type=product.device_type,
                gateway_id=gateway_id
            )
            self._devices[device.id] = device
            self._by_key[(product_key, device_name)] = device.id

        return replace(device)

    async def set_state(self, tenant: TenantContext, device_id: int, state: DeviceState) -> None:
        self._scoped(tenant, device_id).state = state

    async def set_gateway(self, tenant: TenantContext, device_id: int, gateway_id: int) -> None:
        self._scoped(tenant, device_id).gateway_id = gateway_id

    def list_devices(self, tenant: Optional[TenantContext] = None) -> List[Device]:
        return [
            replace(device) for device in self._devices.values()
            if tenant is None or device.tenant_id == tenant.tenant_id
        ]

    def _scoped(self, tenant: TenantContext, device_id: int) -> Device:
        device = self._devices.get(device_id)
        if device is None or device.tenant_id != tenant.tenant_id:
            raise DeviceNotFoundError(f"Device {device_id} does not exist in tenant {tenant.tenant_id}")
        return device
