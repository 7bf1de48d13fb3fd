"""Shared fixtures for travel_nav tests."""

from __future__ import annotations

import io
from typing import Any, Callable

import pytest

from tests.helpers import Clock, CostClock, FakeRouteFinder, FakeSearch, FakeVisuals, FakeWorld, FixedRandom
from travel_nav.debug_logger import NavDebugLogger
from travel_nav.options import NavigatorConfig
from travel_nav.services.navigator import Navigator
from travel_nav.state import MemoryStateStore

REGION = "W1N1"


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def world() -> FakeWorld:
    return FakeWorld(observed={REGION})


@pytest.fixture
def search() -> FakeSearch:
    return FakeSearch()


@pytest.fixture
def route_finder() -> FakeRouteFinder:
    return FakeRouteFinder(route=[])


@pytest.fixture
def store() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def visuals() -> FakeVisuals:
    return FakeVisuals()


@pytest.fixture
def log_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(log_output: io.StringIO) -> NavDebugLogger:
    return NavDebugLogger(level=1, output=log_output)


@pytest.fixture
def make_navigator(
    world: FakeWorld,
    search: FakeSearch,
    route_finder: FakeRouteFinder,
    store: MemoryStateStore,
    clock: Clock,
    visuals: FakeVisuals,
    logger: NavDebugLogger,
) -> Callable[..., Navigator]:
    """Build a Navigator over the shared fakes; keyword arguments override pieces."""

    def _make(**overrides: Any) -> Navigator:
        config = overrides.pop("config", None) or NavigatorConfig(debug=1)
        return Navigator(
            overrides.pop("world", world),
            overrides.pop("search", search),
            overrides.pop("route_finder", route_finder),
            overrides.pop("store", store),
            tick_source=clock,
            rng=overrides.pop("rng", FixedRandom(0.0)),
            cost_clock=overrides.pop("cost_clock", CostClock()),
            visuals=visuals,
            logger=logger,
            config=config,
        )

    return _make
