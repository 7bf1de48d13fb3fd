"""In-memory stand-ins for the collaborators travel_nav talks to."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from travel_nav.interfaces import SearchGoal, SearchResult
from travel_nav.services.path_codec import position_at_direction
from travel_nav.types import (
    DIRECTION_DELTAS,
    ConstructionSite,
    ControllerInfo,
    Direction,
    Position,
    StatusCode,
    Structure,
    TerrainCosts,
)

_REGION = re.compile(r"^([WE])([0-9]+)([NS])([0-9]+)$")


def world_coord(region: str) -> tuple[int, int]:
    """Region name to a signed lattice coordinate (W0 is just west of E0)."""
    match = _REGION.match(region)
    assert match is not None, region
    x = int(match.group(2))
    y = int(match.group(4))
    return (-x - 1 if match.group(1) == "W" else x, -y - 1 if match.group(3) == "N" else y)


class Clock:
    """Tick source the tests advance by hand."""

    def __init__(self, tick: int = 1) -> None:
        self.tick = tick

    def __call__(self) -> int:
        return self.tick

    def advance(self, ticks: int = 1) -> None:
        self.tick += ticks


class CostClock:
    """Cost clock that charges a fixed amount per search."""

    def __init__(self, per_call: float = 0.0) -> None:
        self.now = 0.0
        self.per_call = per_call

    def __call__(self) -> float:
        self.now += self.per_call
        return self.now


class FixedRandom:
    """Random source returning a fixed value (or a queue of values)."""

    def __init__(self, *values: float) -> None:
        self._values = list(values) or [0.0]
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        if len(self._values) > 1:
            return self._values.pop(0)
        return self._values[0]


@dataclass
class FakeWorld:
    structures: dict[str, list[Structure]] = field(default_factory=dict)
    sites: dict[str, list[ConstructionSite]] = field(default_factory=dict)
    agents: dict[str, list[Position]] = field(default_factory=dict)
    observed: set[str] = field(default_factory=set)
    avoided: set[str] = field(default_factory=set)
    controllers: dict[str, ControllerInfo] = field(default_factory=dict)
    structure_queries: int = 0

    def linear_distance(self, region_a: str, region_b: str) -> int:
        ax, ay = world_coord(region_a)
        bx, by = world_coord(region_b)
        return max(abs(ax - bx), abs(ay - by))

    def is_observed(self, region: str) -> bool:
        return region in self.observed

    def find_structures(self, region: str) -> list[Structure]:
        self.structure_queries += 1
        return list(self.structures.get(region, []))

    def find_construction_sites(self, region: str) -> list[ConstructionSite]:
        return list(self.sites.get(region, []))

    def find_agents(self, region: str) -> list[Position]:
        return list(self.agents.get(region, []))

    def is_avoided(self, region: str) -> bool:
        return region in self.avoided

    def set_avoided(self, region: str, avoid: bool) -> None:
        if avoid:
            self.avoided.add(region)
        else:
            self.avoided.discard(region)

    def controller(self, region: str) -> Optional[ControllerInfo]:
        return self.controllers.get(region)


@dataclass
class FakeAgent:
    name: str
    pos: Position
    spawning: bool = False
    fatigue: int = 0
    age: int = 100
    move_result: StatusCode = StatusCode.OK
    moves: list[Direction] = field(default_factory=list)

    def move(self, direction: Direction) -> StatusCode:
        self.moves.append(Direction(direction))
        return self.move_result

    def apply_move(self) -> None:
        """Carry out the most recent move, as the world would between ticks."""
        dx, dy = DIRECTION_DELTAS[self.moves[-1]]
        self.pos = Position(self.pos.x + dx, self.pos.y + dy, self.pos.region)


def straight_line(origin: Position, goal: SearchGoal) -> SearchResult:
    """Greedy same-region path; incomplete when the goal is in another region."""
    if goal.pos.region != origin.region:
        return SearchResult(path=[], ops=1, cost=0, incomplete=True)
    path: list[Position] = []
    pos = origin
    while pos.range_to(goal.pos) > goal.range:
        nxt = position_at_direction(pos, pos.direction_to(goal.pos))
        assert nxt is not None
        path.append(nxt)
        pos = nxt
    return SearchResult(path=path, ops=len(path), cost=len(path), incomplete=False)


@dataclass
class SearchCall:
    origin: Position
    goal: SearchGoal
    cost_callback: Callable[[str], Any]
    max_ops: int
    max_regions: Optional[int]
    terrain: TerrainCosts
    origin_matrix: Any = None


class FakeSearch:
    """Search oracle stand-in; queries the origin region's costs like a real search would."""

    def __init__(self, *results: SearchResult) -> None:
        self._results = list(results)
        self.calls: list[SearchCall] = []

    def search(
        self,
        origin: Position,
        goal: SearchGoal,
        *,
        cost_callback: Callable[[str], Any],
        max_ops: int,
        max_regions: Optional[int],
        terrain: TerrainCosts,
    ) -> SearchResult:
        call = SearchCall(origin, goal, cost_callback, max_ops, max_regions, terrain)
        call.origin_matrix = cost_callback(origin.region)
        self.calls.append(call)
        if self._results:
            return self._results.pop(0)
        return straight_line(origin, goal)


class FakeRouteFinder:
    """Route finder returning a canned region list and recording the callbacks it got."""

    def __init__(self, route: Optional[list[str]] = None) -> None:
        self.route = route
        self.calls: list[tuple[str, str, Callable[[str], float]]] = []

    def find_route(self, origin: str, destination: str, route_callback: Callable[[str], float]) -> Optional[list[str]]:
        self.calls.append((origin, destination, route_callback))
        return None if self.route is None else list(self.route)


@dataclass
class FakeVisuals:
    circles: list[tuple[Position, str, float]] = field(default_factory=list)
    lines: list[tuple[Position, Position, str]] = field(default_factory=list)

    def circle(self, pos: Position, color: str, opacity: float = 0.5) -> None:
        self.circles.append((pos, color, opacity))

    def line(self, start: Position, end: Position, color: str) -> None:
        self.lines.append((start, end, color))

    def colors(self) -> list[str]:
        return [color for _, color, _ in self.circles]
