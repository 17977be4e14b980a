"""FastAPI dependencies that hand out services from ``app.state.services``."""

from __future__ import annotations

from typing import Any, Callable, Optional, Type, TypeVar

from fastapi import HTTPException, Request

from config.configuration_manager import ConfigurationManager
from services.configuration_service import ConfigurationService
from services.environment_service import EnvironmentService

T = TypeVar("T")


def _container(request: Request) -> Any:
    services = getattr(request.app.state, "services", None)
    if services is None or not hasattr(services, "get_service"):
        return None
    return services


async def _lookup(services: Any, *keys: Any) -> Any:
    """First registered service among ``keys`` (types or aliases)."""
    for key in keys:
        try:
            found = await services.get_service(key)
        except ValueError:
            continue
        if found is not None:
            return found
    return None


async def resolve_typed_service(
    request: Request,
    service_type: Type[T],
    fallback_factory: Optional[Callable[[], T]] = None,
) -> Optional[T]:
    """Container instance of ``service_type``, else whatever the fallback builds."""
    services = _container(request)
    if services is not None:
        found = await _lookup(services, service_type)
        if found is not None:
            return found
    return fallback_factory() if fallback_factory is not None else None


async def get_config_manager_dep(request: Request) -> ConfigurationManager:
    return await resolve_typed_service(request, ConfigurationManager, ConfigurationManager)


async def get_environment_service_dep(request: Request) -> EnvironmentService:
    cfg = await get_config_manager_dep(request)
    return await resolve_typed_service(
        request, EnvironmentService, lambda: EnvironmentService(cfg)
    )


async def get_configuration_service_dep(request: Request) -> ConfigurationService:
    # The store owns the write section, so it is never built outside the container.
    services = _container(request)
    if services is None:
        raise HTTPException(status_code=503, detail="Service container unavailable")
    found = await _lookup(services, ConfigurationService, "configuration_service")
    if found is None:
        raise HTTPException(status_code=503, detail="Configuration service not registered")
    return found
