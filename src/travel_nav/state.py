"""
State classes for travel_nav.

NavigationState is the per-agent record persisted across ticks. It is stored as
a plain versioned dict so any key-value backend can hold it; records written by
older releases are upgraded by migrate_record() on load.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .types import Direction, Position

if TYPE_CHECKING:
    from .interfaces import SearchResult

RECORD_VERSION = 1


@dataclass
class NavigationState:
    """Navigation state for one agent."""

    destination: Position

    # Encoded path, one direction digit per step
    path: str = ""

    # Stuck detection
    stuck_count: int = 0
    last_coord: Optional[tuple[int, int]] = None

    # Bookkeeping for heavy navigation reports
    cumulative_cost: float = 0.0
    repath_count: int = 0
    travel_invocations: int = 0

    @property
    def repath_ratio(self) -> float:
        if self.travel_invocations == 0:
            return 0.0
        return self.repath_count / self.travel_invocations

    @classmethod
    def from_record(cls, record: Optional[dict[str, Any]], destination: Position) -> NavigationState:
        """Load from a stored record, or start fresh toward destination."""
        if record is None:
            return cls(destination=destination)
        current = migrate_record(record)
        dest = current.get("destination")
        last_coord = current.get("last_coord")
        return cls(
            destination=Position(dest["x"], dest["y"], dest["region"]) if dest else destination,
            path=current.get("path", ""),
            stuck_count=current.get("stuck_count", 0),
            last_coord=tuple(last_coord) if last_coord is not None else None,
            cumulative_cost=current.get("cumulative_cost", 0.0),
            repath_count=current.get("repath_count", 0),
            travel_invocations=current.get("travel_invocations", 0),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "version": RECORD_VERSION,
            "destination": {"x": self.destination.x, "y": self.destination.y, "region": self.destination.region},
            "path": self.path,
            "stuck_count": self.stuck_count,
            "last_coord": list(self.last_coord) if self.last_coord is not None else None,
            "cumulative_cost": self.cumulative_cost,
            "repath_count": self.repath_count,
            "travel_invocations": self.travel_invocations,
        }


def migrate_record(record: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a stored record to the current version.

    Pure: returns a new dict and leaves the input untouched.

    Version-less records use the legacy layout::

        {"state": {"prevX", "prevY", "stuck", "cpu", "numRepaths"?, "numTravelTo"?,
                   "destX", "destY", "roomName"}, "path"?}

    A legacy record without a "state" block carries no destination; the caller
    supplies one.

    Raises:
        ValueError: if the record claims a version newer than this release knows.
    """
    version = record.get("version", 0)
    if version == RECORD_VERSION:
        return copy.deepcopy(record)
    if version > RECORD_VERSION:
        raise ValueError(f"Unsupported navigation record version {version}")

    legacy = record.get("state")
    if legacy is None:
        return {
            "version": RECORD_VERSION,
            "destination": None,
            "path": record.get("path") or "",
            "stuck_count": 0,
            "last_coord": None,
            "cumulative_cost": 0.0,
            "repath_count": 0,
            "travel_invocations": 0,
        }

    return {
        "version": RECORD_VERSION,
        "destination": {"x": legacy["destX"], "y": legacy["destY"], "region": legacy["roomName"]},
        "path": record.get("path") or "",
        "stuck_count": legacy.get("stuck") or 0,
        "last_coord": [legacy["prevX"], legacy["prevY"]],
        "cumulative_cost": float(legacy.get("cpu") or 0.0),
        "repath_count": legacy.get("numRepaths") or 0,
        "travel_invocations": legacy.get("numTravelTo") or 0,
    }


@dataclass
class ReturnData:
    """Output capture for a single navigate() call."""

    next_dir: Optional[Direction] = None
    next_pos: Optional[Position] = None
    search_result: Optional[SearchResult] = None
    state: Optional[NavigationState] = None
    path: Optional[str] = None


@dataclass
class MemoryStateStore:
    """Dict-backed StateStore, the default when no external store is wired in."""

    records: dict[str, dict[str, Any]] = field(default_factory=dict)

    def get(self, agent_id: str) -> Optional[dict[str, Any]]:
        return self.records.get(agent_id)

    def set(self, agent_id: str, record: dict[str, Any]) -> None:
        self.records[agent_id] = record
