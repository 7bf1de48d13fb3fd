"""
Compact path encoding.

A path is a string of direction digits ("1"-"8"), each one step relative to the
tile before it, starting from an implicit origin. Steps that cross into another
region are not encoded; every region is searched independently.
"""

from __future__ import annotations

from typing import Iterable, Optional

from travel_nav.types import DIRECTION_DELTAS, GRID_MAX, Direction, Position

OPPOSITE_DIRECTION: dict[Direction, Direction] = {
    Direction.NORTH: Direction.SOUTH,
    Direction.NORTH_EAST: Direction.SOUTH_WEST,
    Direction.EAST: Direction.WEST,
    Direction.SOUTH_EAST: Direction.NORTH_WEST,
    Direction.SOUTH: Direction.NORTH,
    Direction.SOUTH_WEST: Direction.NORTH_EAST,
    Direction.WEST: Direction.EAST,
    Direction.NORTH_WEST: Direction.SOUTH_EAST,
}


def opposite_direction(direction: Direction) -> Direction:
    return OPPOSITE_DIRECTION.get(direction, Direction.NONE)


def direction_to(origin: Position, target: Position) -> Direction:
    return origin.direction_to(target)


def position_at_direction(origin: Position, direction: Direction) -> Optional[Position]:
    """Tile one step from origin, or None if that step leaves the grid."""
    delta = DIRECTION_DELTAS.get(Direction(direction))
    if delta is None:
        return None
    x = origin.x + delta[0]
    y = origin.y + delta[1]
    if x < 0 or x > GRID_MAX or y < 0 or y > GRID_MAX:
        return None
    return Position(x, y, origin.region)


def parse_direction(char: str) -> Direction:
    """Decode one path character; anything unrecognised is NONE."""
    if len(char) != 1 or not char.isdigit():
        return Direction.NONE
    value = int(char)
    if value not in DIRECTION_DELTAS:
        return Direction.NONE
    return Direction(value)


def first_direction(path: str) -> Direction:
    return parse_direction(path[0]) if path else Direction.NONE


def serialize_path(start: Position, positions: Iterable[Position]) -> str:
    """Encode positions as steps from start, dropping cross-region steps."""
    encoded: list[str] = []
    last = start
    for position in positions:
        if position.region == last.region:
            direction = last.direction_to(position)
            if direction != Direction.NONE:
                encoded.append(str(int(direction)))
        last = position
    return "".join(encoded)


def decode_path(start: Position, path: str) -> list[Position]:
    """Positions visited by following path from start.

    Stops early at the first step that would leave the grid.
    """
    positions: list[Position] = []
    pos = start
    for char in path:
        nxt = position_at_direction(pos, parse_direction(char))
        if nxt is None:
            break
        positions.append(nxt)
        pos = nxt
    return positions


def append_direction(path: str, direction: Direction) -> str:
    return path + str(int(direction))


def prepend_directions(path: str, *directions: Direction) -> str:
    return "".join(str(int(d)) for d in directions) + path
