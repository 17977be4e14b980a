from __future__ import annotations

import pytest

from core.container.service_container_impl import ProductionServiceContainer


class _Clock:
    pass


class _Consumer:
    def __init__(self, clock: _Clock) -> None:
        self.clock = clock


class _Closable:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_instances_resolve_by_type_and_alias() -> None:
    services = ProductionServiceContainer()
    clock = _Clock()
    await services.register_instance(_Clock, clock, aliases=["clock"])

    assert await services.get_service(_Clock) is clock
    assert await services.get_service("clock") is clock
    assert await services.has_service("clock")


@pytest.mark.asyncio
async def test_singleton_factory_receives_dependencies_once() -> None:
    services = ProductionServiceContainer()
    await services.register_instance(_Clock, _Clock())
    await services.register_service(_Consumer, _Consumer, singleton=True, dependencies=[_Clock])

    first = await services.get_service(_Consumer)
    second = await services.get_service(_Consumer)

    assert first is second
    assert first.clock is await services.get_service(_Clock)


@pytest.mark.asyncio
async def test_transient_factory_builds_each_time() -> None:
    services = ProductionServiceContainer()
    await services.register_service(_Clock, _Clock)

    assert await services.get_service(_Clock) is not await services.get_service(_Clock)


@pytest.mark.asyncio
async def test_unknown_service_raises_value_error() -> None:
    services = ProductionServiceContainer()
    with pytest.raises(ValueError):
        await services.get_service(_Clock)
    with pytest.raises(ValueError):
        await services.get_service("missing")
    assert not await services.has_service("missing")


@pytest.mark.asyncio
async def test_shutdown_closes_and_clears_instances() -> None:
    services = ProductionServiceContainer()
    closable = _Closable()
    await services.register_instance(_Closable, closable)

    await services.shutdown()

    assert closable.closed
    with pytest.raises(ValueError):
        await services.get_service(_Closable)
