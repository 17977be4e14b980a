"""Async dependency-injection container for the configuration service.

Services are keyed by type; string aliases point at a type key so routes
can ask for ``"configuration_service"`` without importing the class.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar, Union

logger = logging.getLogger(__name__)

Key = Union[Type[Any], str]
T = TypeVar("T")


@dataclass
class _Registration:
    factory: Optional[Callable[..., Any]] = None
    singleton: bool = True
    dependencies: List[Key] = field(default_factory=list)
    instance: Any = None
    built: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class ProductionServiceContainer:
    """Registry of instances and factories, resolved lazily and in dependency order."""

    def __init__(self) -> None:
        self._registrations: Dict[Type[Any], _Registration] = {}
        self._aliases: Dict[str, Type[Any]] = {}
        logger.info("ProductionServiceContainer initialized")

    @staticmethod
    def _label(key: Key) -> str:
        return getattr(key, "__name__", str(key))

    def _registration(self, key: Key) -> Optional[_Registration]:
        target = self._aliases.get(key) if isinstance(key, str) else key
        if target is None:
            return None
        return self._registrations.get(target)

    def register_alias(self, alias: str, target: Type[Any]) -> None:
        self._aliases[alias] = target

    def _add(self, interface: Type[Any], registration: _Registration, aliases: Optional[Iterable[str]]) -> None:
        self._registrations[interface] = registration
        for alias in aliases or ():
            self.register_alias(alias, interface)

    async def register_service(
        self,
        interface: Type[T],
        implementation: Callable[..., Any],
        singleton: bool = False,
        dependencies: Optional[Iterable[Key]] = None,
        aliases: Optional[Iterable[str]] = None,
    ) -> None:
        """Register a factory for ``interface``.

        ``dependencies`` are resolved from the container and passed to the
        factory positionally, in order. The factory may be async.
        """
        registration = _Registration(
            factory=implementation,
            singleton=singleton,
            dependencies=list(dependencies or ()),
        )
        self._add(interface, registration, aliases)
        logger.debug("Registered factory for %s (singleton=%s)", self._label(interface), singleton)

    async def register_instance(
        self,
        interface: Type[T],
        instance: T,
        aliases: Optional[Iterable[str]] = None,
    ) -> None:
        self._add(interface, _Registration(instance=instance, built=True), aliases)
        logger.debug("Registered instance of %s", self._label(interface))

    async def get_service(self, interface: Key) -> Any:
        """Resolve by type or alias; raises ``ValueError`` when unknown."""
        registration = self._registration(interface)
        if registration is None:
            raise ValueError(f"Service not registered: {self._label(interface)}")
        if registration.built:
            return registration.instance
        if not registration.singleton:
            return await self._build(registration)

        async with registration.lock:
            if not registration.built:
                registration.instance = await self._build(registration)
                registration.built = True
        return registration.instance

    async def _build(self, registration: _Registration) -> Any:
        arguments = [await self.get_service(dep) for dep in registration.dependencies]
        created = registration.factory(*arguments)
        if inspect.isawaitable(created):
            created = await created
        return created

    async def has_service(self, interface: Key) -> bool:
        return self._registration(interface) is not None

    async def shutdown(self) -> None:
        """Close built services (``shutdown()`` or ``close()``, sync or async) and forget them."""
        for interface, registration in list(self._registrations.items()):
            if not registration.built:
                continue
            closer = getattr(registration.instance, "shutdown", None) or getattr(
                registration.instance, "close", None
            )
            if closer is None:
                continue
            try:
                outcome = closer()
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error("Error shutting down %s: %s", self._label(interface), e)

        self._registrations.clear()
        self._aliases.clear()
        logger.info("ProductionServiceContainer shutdown complete")
