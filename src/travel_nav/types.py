"""
Types and constants for travel_nav.

Directions, status codes, world positions and the structure records that the
world query surface hands back.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Protocol, Union

# Every region is a GRID_SIZE x GRID_SIZE tile area
GRID_SIZE = 50
GRID_MAX = GRID_SIZE - 1

# Cost matrix values
DEFAULT_COST = 0  # Defer to terrain cost
IMPASSABLE = 0xFF


class StatusCode(IntEnum):
    """Result of a navigation call."""

    OK = 0
    NO_PATH = -2
    BUSY = -4
    INVALID_ARGS = -10
    TIRED = -11


class Direction(IntEnum):
    """8-way compass direction, encoded in paths as a single digit."""

    NONE = 0
    NORTH = 1
    NORTH_EAST = 2
    EAST = 3
    SOUTH_EAST = 4
    SOUTH = 5
    SOUTH_WEST = 6
    WEST = 7
    NORTH_WEST = 8


# (dx, dy) per direction; y grows southward
DIRECTION_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.NORTH_EAST: (1, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH_EAST: (1, 1),
    Direction.SOUTH: (0, 1),
    Direction.SOUTH_WEST: (-1, 1),
    Direction.WEST: (-1, 0),
    Direction.NORTH_WEST: (-1, -1),
}

_DELTA_TO_DIRECTION: dict[tuple[int, int], Direction] = {delta: d for d, delta in DIRECTION_DELTAS.items()}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


@dataclass(frozen=True)
class Position:
    """A tile inside a named region."""

    x: int
    y: int
    region: str

    @property
    def coord(self) -> tuple[int, int]:
        return (self.x, self.y)

    def is_exit(self) -> bool:
        """Check if this tile lies on the region boundary."""
        return is_exit(self.coord)

    def same_coord(self, other: Union[Position, tuple[int, int]]) -> bool:
        other_coord = other.coord if isinstance(other, Position) else other
        return self.coord == tuple(other_coord)

    def range_to(self, other: Position) -> float:
        """Chebyshev distance; infinite across regions."""
        if other.region != self.region:
            return math.inf
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def is_near_to(self, other: Position) -> bool:
        return self.range_to(other) <= 1

    def direction_to(self, other: Position) -> Direction:
        """Direction of the first step toward another tile in the same region."""
        if other.region != self.region:
            return Direction.NONE
        return _DELTA_TO_DIRECTION.get((_sign(other.x - self.x), _sign(other.y - self.y)), Direction.NONE)

    def __str__(self) -> str:
        return f"[{self.region} {self.x},{self.y}]"


class HasPos(Protocol):
    """Anything exposing a position, e.g. a world object or another agent."""

    pos: Position


Goal = Union[Position, HasPos]


def normalize_pos(goal: Goal) -> Position:
    """Accept either a position or an object exposing one."""
    if isinstance(goal, Position):
        return goal
    return goal.pos


def is_exit(coord: tuple[int, int]) -> bool:
    x, y = coord
    return x == 0 or y == 0 or x == GRID_MAX or y == GRID_MAX


class StructureKind(Enum):
    """Kinds of static obstacles the cost matrix cares about."""

    ROAD = "road"
    CONTAINER = "container"
    RAMPART = "rampart"
    WALL = "wall"
    SPAWN = "spawn"
    EXTENSION = "extension"
    TOWER = "tower"
    STORAGE = "storage"
    OTHER = "other"


# Construction sites of these kinds never block movement
PERMISSIVE_SITE_KINDS = frozenset({StructureKind.CONTAINER, StructureKind.ROAD, StructureKind.RAMPART})


@dataclass(frozen=True)
class Structure:
    """A built structure inside an observed region."""

    kind: StructureKind
    pos: Position
    mine: bool = False
    public: bool = False  # Ramparts only: lets everyone through


@dataclass(frozen=True)
class ConstructionSite:
    """One of our own in-progress structures."""

    kind: StructureKind
    pos: Position


@dataclass(frozen=True)
class ControllerInfo:
    """Ownership signal for a region."""

    owned: bool  # Someone owns it
    mine: bool = False  # ... and it is us


@dataclass(frozen=True)
class TerrainCosts:
    """Per-tile terrain costs handed to the search oracle."""

    plain: int
    swamp: int
