"""
Tests for application startup and service configuration.
"""

from unittest.mock import patch

import pytest

from device_upstream.application.container import Container
from device_upstream.application.startup import ApplicationStartup
from device_upstream.core.domain.devices import DeviceState
from device_upstream.core.domain.requests import StateUpdate
from device_upstream.core.interfaces.directory import IDeviceDirectory
from device_upstream.core.interfaces.messaging import IBrokerPublisher
from device_upstream.core.interfaces.upstream import IDeviceUpstreamService
from device_upstream.core.services.side_effects import SideEffectRecorder
from device_upstream.core.services.upstream import DeviceUpstreamService
from device_upstream.infrastructure.brokers.memory import InMemoryBroker
from device_upstream.infrastructure.brokers.mqtt import MqttBroker
from device_upstream.infrastructure.config.models import (
    ApplicationConfig, BrokerConfig, DeviceSeedConfig, DirectoryConfig,
    ProductConfig, RegistrationConfig
)
from device_upstream.infrastructure.directory.cached import CachedDeviceDirectory
from device_upstream.infrastructure.directory.memory import InMemoryDeviceDirectory


def make_config(**overrides: object) -> ApplicationConfig:
    values: dict = {
        "products": [ProductConfig("sensor", 1), ProductConfig("gateway", 1, "gateway")],
        "devices": [DeviceSeedConfig("gateway", "gw1", "ONLINE")],
    }
    values.update(overrides)
    return ApplicationConfig(**values)


class TestApplicationStartup:
    """Test cases for ApplicationStartup."""

    def setup_method(self) -> None:
        self.container = Container()
        self.startup = ApplicationStartup(self.container)

    @pytest.mark.asyncio
    async def test_configure_default_services(self) -> None:
        await self.startup.configure_services(make_config())

        assert isinstance(self.container.resolve(IDeviceDirectory), CachedDeviceDirectory)
        assert isinstance(self.container.resolve(IBrokerPublisher), InMemoryBroker)
        assert isinstance(self.container.resolve(IDeviceUpstreamService), DeviceUpstreamService)

    @pytest.mark.asyncio
    async def test_configure_uncached_mqtt(self) -> None:
        config = make_config(directory=DirectoryConfig(cache_enabled=False),
                             broker=BrokerConfig(kind="mqtt"))

        await self.startup.configure_services(config)

        assert isinstance(self.container.resolve(IDeviceDirectory), InMemoryDeviceDirectory)
        assert isinstance(self.container.resolve(IBrokerPublisher), MqttBroker)

    @pytest.mark.asyncio
    async def test_registration_policy_is_wired(self) -> None:
        await self.startup.configure_services(
            make_config(registration=RegistrationConfig(abort_on_sub_device_error=True)))

        service = self.container.resolve(IDeviceUpstreamService)
        assert service.registrar._abort_on_sub_device_error is True

    @pytest.mark.asyncio
    async def test_start_seeds_devices_and_serves_requests(self) -> None:
        await self.startup.configure_services(make_config(
            devices=[DeviceSeedConfig("sensor", "d1")]))
        await self.startup.start_application()
        try:
            service = self.container.resolve(IDeviceUpstreamService)
            await service.update_state(StateUpdate("sensor", "d1", state="ONLINE"))

            broker = self.container.resolve(IBrokerPublisher)
            assert [m.topic for m in broker.history] == ["state.online"]
            assert self.container.resolve(SideEffectRecorder).is_running
        finally:
            await self.startup.stop_application()

        assert not self.container.resolve(SideEffectRecorder).is_running

    @pytest.mark.asyncio
    async def test_seeded_state_and_idempotent_seeding(self) -> None:
        await self.startup.configure_services(make_config())
        await self.startup.start_application()
        await self.startup.stop_application()
        await self.startup.start_application()
        try:
            store = self.container.resolve(InMemoryDeviceDirectory)
            devices = store.list_devices()
            assert len(devices) == 1
            assert devices[0].state == DeviceState.ONLINE
        finally:
            await self.startup.stop_application()

    @pytest.mark.asyncio
    async def test_start_failure_stops_started_components(self) -> None:
        await self.startup.configure_services(make_config())
        broker = self.container.resolve(IBrokerPublisher)

        with patch.object(SideEffectRecorder, "start", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                await self.startup.start_application()

        health = await broker.check_health()
        assert health['healthy'] is False
