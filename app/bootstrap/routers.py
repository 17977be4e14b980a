from __future__ import annotations

import importlib
from typing import Any, Callable, NamedTuple, Sequence


class RouterSpec(NamedTuple):
    name: str
    module: str
    prefix: str
    protected: bool
    attribute: str = "router"


# Mounted in order; the configuration router owns /api/configuration/*.
ROUTER_SPECS: tuple[RouterSpec, ...] = (
    RouterSpec("configuration", "routes.configuration", "/api/configuration", protected=True),
    RouterSpec("health", "routes.health", "/api", protected=False),
)


def include_default_routers(
    app: Any,
    protected_dependencies: Sequence[Any],
    logger: Any,
    record_router: Callable[[str, str, bool, str | None], None],
    specs: Sequence[RouterSpec] = ROUTER_SPECS,
) -> None:
    """Mount every router in ``specs``; an import failure is recorded, not raised."""
    for spec in specs:
        try:
            router = getattr(importlib.import_module(spec.module), spec.attribute)
        except Exception as e:
            logger.warning("Could not load %s router from %s: %s", spec.name, spec.module, e)
            record_router(spec.name, spec.prefix, False, str(e))
            continue

        dependencies = list(protected_dependencies) if spec.protected else []
        app.include_router(router, prefix=spec.prefix, dependencies=dependencies)
        logger.info("Mounted %s router at %s", spec.name, spec.prefix)
        record_router(spec.name, spec.prefix, True, None)
