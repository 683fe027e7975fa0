"""
Caching decorator for device directories.

Point lookups by business key are served from a TTL cache; every write
through this decorator evicts the affected device so the state comparison
in the state synchronizer does not see stale rows from this process.
"""

import logging
from dataclasses import replace
from typing import Dict, Optional

from cachetools import TTLCache

from ...core.domain.devices import Device, DeviceState, TenantContext
from ...core.interfaces.directory import IDeviceDirectory

logger = logging.getLogger(__name__)


class CachedDeviceDirectory(IDeviceDirectory):
    """Adds a TTL point-lookup cache in front of another directory."""

    def __init__(self, inner: IDeviceDirectory, maxsize: int = 10000, ttl: float = 60.0) -> None:
        self._inner = inner
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._stats = {'hits': 0, 'misses': 0}

    @property
    def stats(self) -> Dict[str, int]:
        return {**self._stats, 'size': len(self._cache)}

    async def get(self, device_id: int) -> Optional[Device]:
        return await self._inner.get(device_id)

    async def find_by_key(self, product_key: str, device_name: str,
                          tenant: Optional[TenantContext] = None) -> Optional[Device]:
        key = (product_key, device_name)
        device = self._cache.get(key)
        if device is None:
            self._stats['misses'] += 1
            # Absent devices are not cached so a later registration is visible at once
            device = await self._inner.find_by_key(product_key, device_name)
            if device is None:
                return None
            self._cache[key] = device
        else:
            self._stats['hits'] += 1

        if tenant is not None and device.tenant_id != tenant.tenant_id:
            return None
        return replace(device)

    async def create(self, product_key: str, device_name: str,
                     gateway_id: Optional[int] = None,
                     tenant: Optional[TenantContext] = None) -> Device:
        device = await self._inner.create(product_key, device_name, gateway_id, tenant)
        self._cache.pop((product_key, device_name), None)
        return device

    async def set_state(self, tenant: TenantContext, device_id: int, state: DeviceState) -> None:
        await self._inner.set_state(tenant, device_id, state)
        await self._evict(device_id)

    async def set_gateway(self, tenant: TenantContext, device_id: int, gateway_id: int) -> None:
        await self._inner.set_gateway(tenant, device_id, gateway_id)
        await self._evict(device_id)

    def invalidate(self) -> None:
        self._cache.clear()

    async def _evict(self, device_id: int) -> None:
        # Rows are keyed by business key; resolve it from the authoritative store
        device = await self._inner.get(device_id)
        if device is not None and self._cache.pop((device.product_key, device.device_name), None):
            logger.debug(f"Evicted cached device {device_id}")
