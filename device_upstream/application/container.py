"""
Dependency injection container for wiring the pipeline and its collaborators.

Services are registered against an interface type as a class (constructor
dependencies resolved from type hints), a factory taking the container, or a
ready instance, with singleton or transient lifetime.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, get_type_hints

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ServiceLifetime(Enum):
    """How long a resolved instance lives."""
    SINGLETON = auto()  # one instance per container
    TRANSIENT = auto()  # fresh instance per resolve


class ServiceNotRegisteredException(Exception):
    """No registration exists for the requested type."""


class ServiceResolutionException(Exception):
    """A factory or constructor failed while building a service."""


class CircularDependencyException(Exception):
    """A service depends on itself, directly or transitively."""


class ServiceRegistration:
    """How to build a service and, for singletons, the built instance."""

    def __init__(self, service_type: Type[Any], factory: Callable[['IContainer'], Any],
                 lifetime: ServiceLifetime, instance: Any = None) -> None:
        self.service_type = service_type
        self.factory = factory
        self.lifetime = lifetime
        self.instance = instance


class IContainer(ABC):
    """Service registry the application wires itself through."""

    @abstractmethod
    def register(self, service_type: Type[T], implementation: Type[T],
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        """Register an implementation class; constructor dependencies are resolved by type."""
        pass

    @abstractmethod
    def register_factory(self, service_type: Type[T], factory: Callable[['IContainer'], T],
                         lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        """Register a factory called with the container."""
        pass

    @abstractmethod
    def register_instance(self, service_type: Type[T], instance: T) -> None:
        """Register an already built instance."""
        pass

    @abstractmethod
    def resolve(self, service_type: Type[T]) -> T:
        """
        Resolve a service instance.

        Raises:
            ServiceNotRegisteredException: If nothing is registered for service_type
            ServiceResolutionException: If service cannot be created
            CircularDependencyException: If the service depends on itself
        """
        pass

    @abstractmethod
    def try_resolve(self, service_type: Type[T]) -> Optional[T]:
        pass

    @abstractmethod
    def is_registered(self, service_type: Type[Any]) -> bool:
        pass

    @abstractmethod
    def get_registrations(self) -> Dict[Type[Any], ServiceRegistration]:
        pass


class Container(IContainer):
    """Lightweight dependency injection container."""

    def __init__(self) -> None:
        self._services: Dict[Type[Any], ServiceRegistration] = {}
        self._resolution_stack: List[Type[Any]] = []

    def register(self, service_type: Type[T], implementation: Type[T],
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        if not inspect.isclass(implementation):
            raise TypeError(f"{implementation!r} is not a class; use register_factory or register_instance")

        def factory(container: IContainer) -> T:
            return self._construct(implementation)

        self._add(ServiceRegistration(service_type, factory, lifetime))

    def register_factory(self, service_type: Type[T], factory: Callable[[IContainer], T],
                         lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        self._add(ServiceRegistration(service_type, factory, lifetime))

    def register_instance(self, service_type: Type[T], instance: T) -> None:
        self._add(ServiceRegistration(service_type, lambda c: instance,
                                      ServiceLifetime.SINGLETON, instance=instance))

    def resolve(self, service_type: Type[T]) -> T:
        if service_type in self._resolution_stack:
            cycle = " -> ".join([t.__name__ for t in self._resolution_stack] + [service_type.__name__])
            raise CircularDependencyException(f"Circular dependency detected: {cycle}")

        registration = self._services.get(service_type)
        if registration is None:
            raise ServiceNotRegisteredException(f"Service {service_type.__name__} is not registered")

        if registration.lifetime == ServiceLifetime.SINGLETON and registration.instance is not None:
            return registration.instance  # type: ignore[no-any-return]

        self._resolution_stack.append(service_type)
        try:
            instance = registration.factory(self)
        except (CircularDependencyException, ServiceNotRegisteredException):
            raise
        except Exception as e:
            raise ServiceResolutionException(f"Failed to resolve {service_type.__name__}: {e}") from e
        finally:
            self._resolution_stack.pop()

        if registration.lifetime == ServiceLifetime.SINGLETON:
            registration.instance = instance
        return instance  # type: ignore[no-any-return]

    def try_resolve(self, service_type: Type[T]) -> Optional[T]:
        try:
            return self.resolve(service_type)
        except (ServiceNotRegisteredException, ServiceResolutionException, CircularDependencyException):
            return None

    def is_registered(self, service_type: Type[Any]) -> bool:
        return service_type in self._services

    def get_registrations(self) -> Dict[Type[Any], ServiceRegistration]:
        return self._services.copy()

    def _add(self, registration: ServiceRegistration) -> None:
        self._services[registration.service_type] = registration
        logger.debug(f"Registered {registration.service_type.__name__} "
                     f"with {registration.lifetime.name} lifetime")

    def _construct(self, implementation: Type[T]) -> T:
        """Instantiate a class, resolving annotated constructor parameters."""
        signature = inspect.signature(implementation.__init__)
        type_hints = get_type_hints(implementation.__init__)

        kwargs: Dict[str, Any] = {}
        for param_name, param in signature.parameters.items():
            if param_name == 'self' or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            param_type = type_hints.get(param_name)
            if param.default is not inspect.Parameter.empty:
                # Optional dependency: use it if registered, else the default
                if param_type is not None and self.is_registered(param_type):
                    kwargs[param_name] = self.resolve(param_type)
                continue

            if param_type is None:
                raise ServiceResolutionException(
                    f"Cannot resolve unannotated parameter '{param_name}' of {implementation.__name__}")
            kwargs[param_name] = self.resolve(param_type)

        return implementation(**kwargs)
