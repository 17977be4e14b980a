import logging
import time  # noqa: E402
from typing import Any, Dict  # noqa: E402

from fastapi import APIRouter, Depends, Request  # noqa: E402

from services.dependencies import get_environment_service_dep  # noqa: E402
from services.environment_service import EnvironmentService  # noqa: E402

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(
    request: Request,
    environment: EnvironmentService = Depends(get_environment_service_dep),
) -> Dict[str, Any]:
    """Canonical lightweight health endpoint."""
    settings_path = environment.resolve_settings_file_path()
    settings_present = settings_path.is_file()
    container_ready = getattr(request.app.state, "services", None) is not None
    status = "healthy" if container_ready and settings_present else "degraded"
    boot_time = float(getattr(request.app.state, "boot_time", time.time()))
    return {
        "status": status,
        "message": "Dynamic Settings API is running",
        "environment": {
            "name": environment.environment,
            "allowed": environment.is_allowed_environment(),
        },
        "settings": {"path": str(settings_path), "present": settings_present},
        "services": {"ready": container_ready},
        "uptime_seconds": round(max(0.0, time.time() - boot_time), 2),
    }
