"""
Application startup and configuration logic.

Registers the pipeline and its collaborators with the DI container according
to the configuration, starts managed components in dependency order and
stops them in reverse.
"""

import logging
from typing import List

from .container import IContainer
from ..core.domain.devices import DeviceState, DeviceType, Product
from ..core.interfaces.directory import IDeviceDirectory
from ..core.interfaces.lifecycle import IComponent
from ..core.interfaces.messaging import IBrokerPublisher
from ..core.interfaces.sinks import IPluginMappingSink, IReportTimeSink
from ..core.interfaces.upstream import IDeviceUpstreamService
from ..core.services.publisher import MessagePublisher
from ..core.services.side_effects import SideEffectRecorder
from ..core.services.upstream import DeviceUpstreamService
from ..infrastructure.brokers.memory import InMemoryBroker
from ..infrastructure.brokers.mqtt import MqttBroker
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.directory.cached import CachedDeviceDirectory
from ..infrastructure.directory.memory import InMemoryDeviceDirectory
from ..infrastructure.recorder.memory import InMemoryPluginMappingStore, InMemoryReportTimeStore

logger = logging.getLogger(__name__)


class ApplicationStartup:
    """
    Manages application startup and service configuration.

    Components are started in the order broker, side-effect recorder so
    nothing can publish before the broker accepts messages.
    """

    def __init__(self, container: IContainer) -> None:
        self._container = container
        self._started_components: List[IComponent] = []

    async def configure_services(self, config: ApplicationConfig) -> None:
        """
        Register all application services.

        Args:
            config: Application configuration
        """
        logger.info("Configuring application services...")
        container = self._container
        container.register_instance(ApplicationConfig, config)

        store = InMemoryDeviceDirectory(
            Product(p.product_key, p.tenant_id, DeviceType(p.device_type)) for p in config.products
        )
        container.register_instance(InMemoryDeviceDirectory, store)
        if config.directory.cache_enabled:
            directory: IDeviceDirectory = CachedDeviceDirectory(
                store, maxsize=config.directory.cache_size, ttl=config.directory.cache_ttl)
        else:
            directory = store
        container.register_instance(IDeviceDirectory, directory)  # type: ignore[type-abstract]

        container.register_instance(IPluginMappingSink, InMemoryPluginMappingStore())  # type: ignore[type-abstract]
        container.register_instance(IReportTimeSink, InMemoryReportTimeStore())  # type: ignore[type-abstract]

        if config.broker.kind == "mqtt":
            broker: IBrokerPublisher = MqttBroker(config.broker.mqtt)
        else:
            broker = InMemoryBroker(history_size=config.broker.history_size)
        container.register_instance(IBrokerPublisher, broker)  # type: ignore[type-abstract]

        container.register_factory(SideEffectRecorder, lambda c: SideEffectRecorder(
            c.resolve(IPluginMappingSink),  # type: ignore[type-abstract]
            c.resolve(IReportTimeSink),  # type: ignore[type-abstract]
            max_workers=config.side_effects.workers,
            queue_size=config.side_effects.queue_size
        ))
        container.register(MessagePublisher, MessagePublisher)
        container.register_factory(IDeviceUpstreamService, lambda c: DeviceUpstreamService(  # type: ignore[type-abstract]
            c.resolve(IDeviceDirectory),  # type: ignore[type-abstract]
            c.resolve(SideEffectRecorder),
            c.resolve(MessagePublisher),
            abort_on_sub_device_error=config.registration.abort_on_sub_device_error,
            serialize_state_updates=config.state.serialize_per_device
        ))

        logger.info(f"Service configuration completed (broker: {config.broker.kind})")

    async def start_application(self) -> None:
        """Start managed components, then seed configured devices."""
        logger.info("Starting application components...")

        for component in self._components():
            try:
                await component.start()
                self._started_components.append(component)
                logger.info(f"Started component: {component.name}")
            except Exception as e:
                logger.error(f"Failed to start component {component.name}: {e}")
                await self.stop_application()
                raise

        await self._seed_devices()
        logger.info("Application startup completed successfully")

    async def stop_application(self) -> None:
        """Stop all started components in reverse order."""
        for component in reversed(self._started_components):
            try:
                await component.stop()
                logger.info(f"Stopped component: {component.name}")
            except Exception as e:
                logger.error(f"Error stopping component {component.name}: {e}")

        self._started_components.clear()

    def _components(self) -> List[IComponent]:
        components = []
        broker = self._container.resolve(IBrokerPublisher)  # type: ignore[type-abstract]
        if isinstance(broker, IComponent):
            components.append(broker)
        components.append(self._container.resolve(SideEffectRecorder))
        return components

    async def _seed_devices(self) -> None:
        config = self._container.resolve(ApplicationConfig)
        store = self._container.resolve(InMemoryDeviceDirectory)

        for seed in config.devices:
            if await store.find_by_key(seed.product_key, seed.device_name) is not None:
                continue
            device = await store.add_device(seed.product_key, seed.device_name,
                                            state=DeviceState.parse(seed.state))
            logger.info(f"Seeded device {seed.product_key}/{seed.device_name} (id {device.id})")
