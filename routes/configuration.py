import logging
from typing import Any, Dict, List, Optional  # noqa: E402

from fastapi import APIRouter, Body, Depends  # noqa: E402

from services.configuration_service import ConfigurationService  # noqa: E402
from services.contracts.configuration_models import ConfigurationUpdate  # noqa: E402
from services.dependencies import get_configuration_service_dep  # noqa: E402

router = APIRouter()
logger = logging.getLogger(__name__)

# Every route answers 200 with the result envelope; domain failures travel
# inside the body as {"isSuccess": false, "error": ...}.


@router.get("")
async def get_configurations(
    service: ConfigurationService = Depends(get_configuration_service_dep),
) -> Dict[str, Any]:
    """Get every visible configuration value as a tree"""
    result = await service.get_all()
    return result.to_response()


@router.put("/bulk")
async def bulk_update_configurations(
    updates: Optional[List[ConfigurationUpdate]] = Body(default=None),
    service: ConfigurationService = Depends(get_configuration_service_dep),
) -> Dict[str, Any]:
    """Update several configuration values at once"""
    result = await service.bulk_update(updates)
    logger.debug("Bulk update request handled (success=%s)", result.is_success)
    return result.to_response()


@router.get("/{path:path}")
async def get_configuration_by_path(
    path: str,
    service: ConfigurationService = Depends(get_configuration_service_dep),
) -> Dict[str, Any]:
    """Get the configuration value at a path such as Logging:LogLevel:Default"""
    result = await service.get_by_path(path)
    return result.to_response()


@router.put("/{path:path}")
async def update_configuration(
    path: str,
    value: Optional[str] = Body(default=None),
    service: ConfigurationService = Depends(get_configuration_service_dep),
) -> Dict[str, Any]:
    """Update the configuration value at a path"""
    result = await service.update(path, value)
    return result.to_response()
