"""
Dynamic Settings - FastAPI Application Entry Point
==================================================

Exposes the hierarchical application settings document for reading and
writing during development and test, with path policies deciding what may
be viewed or changed.
"""

import argparse
import logging
import os  # noqa: E402
import sys  # noqa: E402
import time
import traceback
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional  # noqa: E402

from fastapi import Depends, FastAPI, Header, HTTPException  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from starlette.requests import Request  # noqa: E402
from starlette.responses import Response  # noqa: E402

# Add current directory to Python path for absolute imports
sys.path.insert(0, os.path.dirname(__file__))

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_KEY_ENV = os.getenv("API_KEY", "")


def verify_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    """Optional API key auth; enabled when env var API_KEY is set."""
    if not API_KEY_ENV:
        return
    if not x_api_key or x_api_key != API_KEY_ENV:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


protected_dependencies = [Depends(verify_api_key)]


@asynccontextmanager
async def lifespan(_: FastAPI):
    await _startup_services()
    try:
        yield
    finally:
        await _shutdown_services()


app = FastAPI(title="Dynamic Settings API", version="1.0.0", lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.services = None
app.state.settings_file = None
app.state.metrics = {"requests_total": 0, "per_path": {}, "per_status": {}}
app.state.router_load_report = []
app.state.startup_steps = []
app.state.boot_time = time.time()


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def _startup_step(name: str) -> Iterator[dict]:
    """Record one startup phase in ``app.state.startup_steps``; errors are re-raised."""
    step = {"name": name, "status": "Running", "started_at": _iso_now(), "error": None}
    app.state.startup_steps.append(step)
    started = time.perf_counter()
    try:
        yield step
    except Exception as e:
        step.update(status="Failed", error=str(e), traceback=traceback.format_exc(limit=10))
        raise
    else:
        step["status"] = "Complete"
    finally:
        step["elapsed_ms"] = round((time.perf_counter() - started) * 1000, 2)
        logger.info("Startup step %s: %s (%sms)", name, step["status"], step["elapsed_ms"])


def _record_router(name: str, prefix: str, ok: bool, error: Optional[str] = None) -> None:
    app.state.router_load_report.append({"name": name, "prefix": prefix, "ok": ok, "error": error})


# Include routers from routes/ directory
from app.bootstrap.routers import include_default_routers  # noqa: E402

include_default_routers(
    app,
    protected_dependencies=protected_dependencies,
    logger=logger,
    record_router=_record_router,
)


async def _startup_services():
    """Build the service container and register the configuration store."""
    from config.configuration_manager import create_configuration_manager  # noqa: E402
    from core.container import bootstrap  # noqa: E402
    from core.container.service_container_impl import ProductionServiceContainer  # noqa: E402

    app.state.startup_steps = []
    with _startup_step("config_load"):
        cfg = create_configuration_manager()

    try:
        with _startup_step("dependency_injection"):
            services = ProductionServiceContainer()
            await bootstrap.configure(services, app, config=cfg)
    except Exception as e:
        raise RuntimeError(f"Service container bootstrap failed: {e}") from e
    app.state.services = services

    failed_routers = [r["name"] for r in app.state.router_load_report if not r["ok"]]
    if failed_routers:
        raise RuntimeError(f"Required routers failed to load: {failed_routers}")
    logger.info("Dynamic Settings ready (settings file: %s)", app.state.settings_file)


async def _shutdown_services():
    """Cleanup services on shutdown."""
    services, app.state.services = app.state.services, None
    if services is None:
        return
    try:
        await services.shutdown()
    except Exception as e:
        logger.warning(f"Service container shutdown failed: {e}")


@app.middleware("http")
async def _metrics_middleware(request: Request, call_next):
    response: Response = await call_next(request)
    metrics = app.state.metrics
    metrics["requests_total"] += 1
    per_path = metrics["per_path"]
    per_path[request.url.path] = per_path.get(request.url.path, 0) + 1
    status = str(response.status_code)
    metrics["per_status"][status] = metrics["per_status"].get(status, 0) + 1
    return response


@app.get("/")
async def root():
    return {"message": "Welcome to the Dynamic Settings API"}


@app.get("/api/startup/report")
async def startup_report():
    return {
        "success": True,
        "report": {
            "generated_at": _iso_now(),
            "settings_file": app.state.settings_file,
            "routers": list(app.state.router_load_report),
            "startup_steps": list(app.state.startup_steps),
            "metrics": app.state.metrics,
        },
    }


def main(argv: Optional[list] = None) -> None:
    from config.configuration_manager import create_configuration_manager  # noqa: E402

    cfg = create_configuration_manager()
    parser = argparse.ArgumentParser(description="Dynamic Settings API launcher")
    parser.add_argument("--host", default=cfg.get_str("server.host"), help="Bind address (default from HOST)")
    parser.add_argument("--port", type=int, default=cfg.get_int("server.port"), help="Bind port (default from PORT)")
    parser.add_argument("--env", default=None, help="Override the hosting environment name (ENV)")
    args = parser.parse_args(argv)
    if args.env:
        os.environ["ENV"] = args.env

    import uvicorn  # noqa: E402

    logger.info("Starting Dynamic Settings API on %s:%s (env=%s)", args.host, args.port, os.getenv("ENV", cfg.get_str("env")))
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
