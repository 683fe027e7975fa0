"""
Side-effect sink interfaces.

Both sinks are fed asynchronously by the side-effect recorder; calls must be
idempotent and order-insensitive.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class IPluginMappingSink(ABC):
    """Records which plugin instance process last served a device."""

    @abstractmethod
    async def record_plugin_mapping(self, device_key: str, process_id: str) -> None:
        pass


class IReportTimeSink(ABC):
    """Records the last time a device reported anything upstream."""

    @abstractmethod
    async def record_last_report_time(self, device_key: str, timestamp: datetime) -> None:
        pass
