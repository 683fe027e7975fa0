"""
Request-scoped access to the container and configuration stored on app.state.
"""

from typing import Any, Callable, Type, TypeVar

from fastapi import Depends, HTTPException, Request, status

from ...application.container import IContainer
from ...core.interfaces.upstream import IDeviceUpstreamService
from ...infrastructure.config.models import ApplicationConfig

T = TypeVar('T')


def _app_state(request: Request, attribute: str) -> Any:
    value = getattr(request.app.state, attribute, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Application {attribute} not initialized"
        )
    return value


def get_container(request: Request) -> IContainer:
    return _app_state(request, "container")  # type: ignore[no-any-return]


def get_config(request: Request) -> ApplicationConfig:
    return _app_state(request, "config")  # type: ignore[no-any-return]


def get_component(service_type: Type[T]) -> Callable[..., T]:
    """
    Build a dependency that resolves service_type from the container.

    Resolution failures become 503 responses.
    """
    def resolve_component(container: IContainer = Depends(get_container)) -> T:
        try:
            return container.resolve(service_type)
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"{service_type.__name__} unavailable: {e}"
            ) from e

    return resolve_component


get_upstream_service = get_component(IDeviceUpstreamService)  # type: ignore[type-abstract]
