"""
Tests for the side-effect recorder.

This module tests that device bookkeeping runs on the worker pool, that a
full queue drops jobs instead of blocking and that sink failures stay
isolated from each other and from the caller.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from device_upstream.core.domain.devices import Device
from device_upstream.core.domain.requests import PropertyReport
from device_upstream.core.services.side_effects import SideEffectRecorder
from device_upstream.infrastructure.recorder.memory import (
    InMemoryPluginMappingStore, InMemoryReportTimeStore
)


def make_device(device_key: str = "key-1") -> Device:
    return Device(1, 1, "sensor", "d1", device_key)


class TestSideEffectRecorder:
    """Test cases for SideEffectRecorder."""

    @pytest.mark.asyncio
    async def test_records_mapping_and_report_time(self, recorder: SideEffectRecorder,
                                                   plugin_store: InMemoryPluginMappingStore,
                                                   report_store: InMemoryReportTimeStore) -> None:
        """Both sinks are written once the job is drained."""
        recorder.record(make_device(), PropertyReport("sensor", "d1", process_id="proc-9"))
        await recorder.drain()

        assert plugin_store.get_process_id("key-1") == "proc-9"
        assert report_store.get_last_report_time("key-1") is not None
        metrics = await recorder.get_metrics()
        assert metrics['jobs_submitted'] == 1
        assert metrics['jobs_completed'] == 1

    @pytest.mark.asyncio
    async def test_skips_mapping_without_process_id(self, recorder: SideEffectRecorder,
                                                    plugin_store: InMemoryPluginMappingStore,
                                                    report_store: InMemoryReportTimeStore) -> None:
        recorder.record(make_device(), PropertyReport("sensor", "d1"))
        await recorder.drain()

        assert plugin_store.get_process_id("key-1") is None
        assert report_store.get_last_report_time("key-1") is not None

    @pytest.mark.asyncio
    async def test_full_queue_drops_job(self) -> None:
        """Recording never blocks; overflow is counted and dropped."""
        recorder = SideEffectRecorder(InMemoryPluginMappingStore(), InMemoryReportTimeStore(),
                                      max_workers=1, queue_size=1)

        recorder.record(make_device("a"), PropertyReport("sensor", "a"))
        recorder.record(make_device("b"), PropertyReport("sensor", "b"))

        metrics = await recorder.get_metrics()
        assert metrics['jobs_submitted'] == 1
        assert metrics['jobs_dropped'] == 1
        assert metrics['queue_size'] == 1

    @pytest.mark.asyncio
    async def test_sink_failure_is_isolated(self, report_store: InMemoryReportTimeStore) -> None:
        """A failing plugin mapping sink does not prevent the report time write."""
        failing = AsyncMock()
        failing.record_plugin_mapping.side_effect = RuntimeError("db down")
        recorder = SideEffectRecorder(failing, report_store, max_workers=1)
        await recorder.start()
        try:
            recorder.record(make_device(), PropertyReport("sensor", "d1", process_id="proc-1"))
            await recorder.drain()
        finally:
            await recorder.stop()

        failing.record_plugin_mapping.assert_awaited_once_with("key-1", "proc-1")
        assert report_store.get_last_report_time("key-1") is not None
        metrics = await recorder.get_metrics()
        assert metrics['sink_failures'] == 1
        assert metrics['jobs_completed'] == 1

    @pytest.mark.asyncio
    async def test_lifecycle_and_health(self) -> None:
        recorder = SideEffectRecorder(InMemoryPluginMappingStore(), InMemoryReportTimeStore(),
                                      max_workers=3)
        assert not recorder.is_running

        await recorder.start()
        health = await recorder.check_health()
        assert health['healthy'] is True
        assert health['details']['workers_count'] == 3

        await recorder.stop()
        health = await recorder.check_health()
        assert health['healthy'] is False
        assert health['status'] == "stopped"

    @pytest.mark.asyncio
    async def test_drain_when_stopped_returns(self) -> None:
        recorder = SideEffectRecorder(InMemoryPluginMappingStore(), InMemoryReportTimeStore())
        recorder.record(make_device(), PropertyReport("sensor", "d1"))

        await recorder.drain()


class TestReportTimeStore:
    """Test cases for the in-memory report time sink."""

    @pytest.mark.asyncio
    async def test_older_timestamp_does_not_overwrite(self) -> None:
        store = InMemoryReportTimeStore()
        newer = datetime(2024, 1, 2, tzinfo=timezone.utc)
        older = datetime(2024, 1, 1, tzinfo=timezone.utc)

        await store.record_last_report_time("k", newer)
        await store.record_last_report_time("k", older)

        assert store.get_last_report_time("k") == newer
