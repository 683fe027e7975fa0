"""
Tests for the dependency injection container.
"""

import pytest

from device_upstream.application.container import (
    CircularDependencyException, Container, ServiceLifetime,
    ServiceNotRegisteredException, ServiceResolutionException
)
from device_upstream.core.interfaces.messaging import IBrokerPublisher
from device_upstream.core.services.publisher import MessagePublisher
from device_upstream.infrastructure.brokers.memory import InMemoryBroker


class Clock:
    pass


class Scheduler:
    def __init__(self, clock: Clock, interval: float = 1.0) -> None:
        self.clock = clock
        self.interval = interval


class Unannotated:
    def __init__(self, thing) -> None:  # type: ignore[no-untyped-def]
        self.thing = thing


class TestContainer:
    """Test cases for Container."""

    def setup_method(self) -> None:
        self.container = Container()

    def test_register_instance(self) -> None:
        broker = InMemoryBroker()
        self.container.register_instance(IBrokerPublisher, broker)  # type: ignore[type-abstract]

        assert self.container.resolve(IBrokerPublisher) is broker  # type: ignore[type-abstract]
        assert self.container.is_registered(IBrokerPublisher)  # type: ignore[type-abstract]

    def test_constructor_dependencies_resolved_by_type(self) -> None:
        broker = InMemoryBroker()
        self.container.register_instance(IBrokerPublisher, broker)  # type: ignore[type-abstract]
        self.container.register(MessagePublisher, MessagePublisher)

        publisher = self.container.resolve(MessagePublisher)

        assert isinstance(publisher, MessagePublisher)
        assert publisher is self.container.resolve(MessagePublisher)

    def test_defaulted_parameter_uses_default_when_unregistered(self) -> None:
        self.container.register(Clock, Clock)
        self.container.register(Scheduler, Scheduler)

        scheduler = self.container.resolve(Scheduler)

        assert isinstance(scheduler.clock, Clock)
        assert scheduler.interval == 1.0

    def test_transient_lifetime(self) -> None:
        self.container.register(Clock, Clock, ServiceLifetime.TRANSIENT)

        assert self.container.resolve(Clock) is not self.container.resolve(Clock)

    def test_factory_receives_container(self) -> None:
        self.container.register(Clock, Clock)
        self.container.register_factory(Scheduler, lambda c: Scheduler(c.resolve(Clock), interval=5.0))

        scheduler = self.container.resolve(Scheduler)

        assert scheduler.interval == 5.0
        assert scheduler.clock is self.container.resolve(Clock)

    def test_unregistered_service(self) -> None:
        with pytest.raises(ServiceNotRegisteredException):
            self.container.resolve(Clock)
        assert self.container.try_resolve(Clock) is None

    def test_unannotated_parameter(self) -> None:
        self.container.register(Unannotated, Unannotated)

        with pytest.raises(ServiceResolutionException):
            self.container.resolve(Unannotated)

    def test_circular_dependency(self) -> None:
        self.container.register_factory(Clock, lambda c: c.resolve(Scheduler))
        self.container.register_factory(Scheduler, lambda c: c.resolve(Clock))

        with pytest.raises(CircularDependencyException):
            self.container.resolve(Clock)

    def test_register_rejects_non_class(self) -> None:
        with pytest.raises(TypeError):
            self.container.register(Clock, Clock())  # type: ignore[arg-type]

    def test_get_registrations_is_a_copy(self) -> None:
        self.container.register(Clock, Clock)

        registrations = self.container.get_registrations()
        registrations.clear()

        assert self.container.is_registered(Clock)
