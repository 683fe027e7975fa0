"""
Shared fixtures for the upstream pipeline tests.
"""

from typing import AsyncGenerator

import pytest

from device_upstream.core.domain.devices import DeviceType, Product
from device_upstream.core.services.publisher import MessagePublisher
from device_upstream.core.services.side_effects import SideEffectRecorder
from device_upstream.core.services.upstream import DeviceUpstreamService
from device_upstream.infrastructure.brokers.memory import InMemoryBroker
from device_upstream.infrastructure.directory.memory import InMemoryDeviceDirectory
from device_upstream.infrastructure.recorder.memory import (
    InMemoryPluginMappingStore, InMemoryReportTimeStore
)

TENANT_ID = 1
OTHER_TENANT_ID = 2


@pytest.fixture
def directory() -> InMemoryDeviceDirectory:
    """Directory with a sensor product, a gateway product and a foreign-tenant product."""
    return InMemoryDeviceDirectory([
        Product("sensor", TENANT_ID),
        Product("gateway", TENANT_ID, DeviceType.GATEWAY),
        Product("meter", OTHER_TENANT_ID),
    ])


@pytest.fixture
def plugin_store() -> InMemoryPluginMappingStore:
    return InMemoryPluginMappingStore()


@pytest.fixture
def report_store() -> InMemoryReportTimeStore:
    return InMemoryReportTimeStore()


@pytest.fixture
async def broker() -> AsyncGenerator[InMemoryBroker, None]:
    broker = InMemoryBroker(history_size=100)
    await broker.start()
    yield broker
    await broker.stop()


@pytest.fixture
async def recorder(plugin_store: InMemoryPluginMappingStore,
                   report_store: InMemoryReportTimeStore) -> AsyncGenerator[SideEffectRecorder, None]:
    recorder = SideEffectRecorder(plugin_store, report_store, max_workers=2, queue_size=100)
    await recorder.start()
    yield recorder
    await recorder.stop()


@pytest.fixture
def publisher(broker: InMemoryBroker) -> MessagePublisher:
    return MessagePublisher(broker)


@pytest.fixture
def service(directory: InMemoryDeviceDirectory, recorder: SideEffectRecorder,
            publisher: MessagePublisher) -> DeviceUpstreamService:
    return DeviceUpstreamService(directory, recorder, publisher)
