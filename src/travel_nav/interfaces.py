"""
Interfaces for the collaborators travel_nav consumes but does not implement.

The grid search, region adjacency search, world enumeration, per-agent storage
and rendering all live outside this package; these protocols are the seams.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, Union

from .types import ConstructionSite, ControllerInfo, Direction, Position, StatusCode, Structure, TerrainCosts

if TYPE_CHECKING:
    from .services.cost_matrix import CostMatrix

# A region callback returns a matrix to search with, or False to keep out of the region
RegionCost = Union["CostMatrix", bool]
CostCallback = Callable[[str], RegionCost]
RouteCallback = Callable[[str], float]


@dataclass(frozen=True)
class SearchGoal:
    """Target handed to the search oracle: reach any tile within range of pos."""

    pos: Position
    range: int = 1


@dataclass
class SearchResult:
    """What the search oracle found within its operation budget."""

    path: list[Position] = field(default_factory=list)
    ops: int = 0
    cost: int = 0
    incomplete: bool = False


class SearchOracle(Protocol):
    """Weighted multi-region grid search."""

    def search(
        self,
        origin: Position,
        goal: SearchGoal,
        *,
        cost_callback: CostCallback,
        max_ops: int,
        max_regions: Optional[int],
        terrain: TerrainCosts,
    ) -> SearchResult: ...


class RouteFinder(Protocol):
    """Region adjacency search.

    Returns the regions visited after origin, in order, or None when no route
    exists under the given costs.
    """

    def find_route(self, origin: str, destination: str, route_callback: RouteCallback) -> Optional[list[str]]: ...


class WorldQuery(Protocol):
    """Read access to the world (plus the advisory avoid flag)."""

    def linear_distance(self, region_a: str, region_b: str) -> int: ...

    def is_observed(self, region: str) -> bool: ...

    def find_structures(self, region: str) -> list[Structure]: ...

    def find_construction_sites(self, region: str) -> list[ConstructionSite]: ...

    def find_agents(self, region: str) -> list[Position]: ...

    def is_avoided(self, region: str) -> bool: ...

    def set_avoided(self, region: str, avoid: bool) -> None: ...

    def controller(self, region: str) -> Optional[ControllerInfo]: ...


class StateStore(Protocol):
    """Per-agent persistent record storage."""

    def get(self, agent_id: str) -> Optional[dict[str, Any]]: ...

    def set(self, agent_id: str, record: dict[str, Any]) -> None: ...


class VisualSink(Protocol):
    """Optional debug drawing. Has no effect on navigation."""

    def circle(self, pos: Position, color: str, opacity: float = 0.5) -> None: ...

    def line(self, start: Position, end: Position, color: str) -> None: ...


class AgentHandle(Protocol):
    """The controllable agent being navigated."""

    name: str
    pos: Position
    spawning: bool
    fatigue: int
    age: int  # Ticks since spawn

    def move(self, direction: Direction) -> StatusCode: ...
