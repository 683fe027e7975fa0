"""
In-memory side-effect sinks.
"""

from datetime import datetime
from typing import Dict, Optional

from ...core.interfaces.sinks import IPluginMappingSink, IReportTimeSink


class InMemoryPluginMappingStore(IPluginMappingSink):
    """Device key -> plugin instance process id."""

    def __init__(self) -> None:
        self._mappings: Dict[str, str] = {}

    async def record_plugin_mapping(self, device_key: str, process_id: str) -> None:
        self._mappings[device_key] = process_id

    def get_process_id(self, device_key: str) -> Optional[str]:
        return self._mappings.get(device_key)


class InMemoryReportTimeStore(IReportTimeSink):
    """Device key -> last report time. Older timestamps never overwrite newer ones."""

    def __init__(self) -> None:
        self._report_times: Dict[str, datetime] = {}

    async def record_last_report_time(self, device_key: str, timestamp: datetime) -> None:
        current = self._report_times.get(device_key)
        if current is None or timestamp > current:
            self._report_times[device_key] = timestamp

    def get_last_report_time(self, device_key: str) -> Optional[datetime]:
        return self._report_times.get(device_key)
