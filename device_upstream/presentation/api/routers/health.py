"""
Health check API endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....application.container import IContainer
from ....core.interfaces.lifecycle import IComponent
from ....core.interfaces.upstream import IDeviceUpstreamService
from ....infrastructure.config.models import ApplicationConfig
from ..dependencies import get_config, get_container

router = APIRouter()


@router.get("/")
async def health_check(config: ApplicationConfig = Depends(get_config)) -> Dict[str, Any]:
    """Basic liveness check."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        }
    }


@router.get("/detailed")
async def detailed_health_check(container: IContainer = Depends(get_container)) -> Dict[str, Any]:
    """Health of every managed component plus pipeline metrics."""
    components_health: Dict[str, Any] = {}
    overall_healthy = True

    for registration in container.get_registrations().values():
        instance = registration.instance
        if not isinstance(instance, IComponent):
            continue

        try:
            health_info = await instance.check_health()
        except Exception as e:
            health_info = {"healthy": False, "status": "error", "details": {"error": str(e)}}

        components_health[instance.name] = health_info
        if not health_info.get("healthy", False):
            overall_healthy = False

    metrics: Dict[str, Any] = {}
    service = container.try_resolve(IDeviceUpstreamService)  # type: ignore[type-abstract]
    if service is not None and hasattr(service, "get_metrics"):
        metrics = await service.get_metrics()

    return {
        "status": "healthy" if overall_healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": components_health,
        "metrics": metrics
    }
