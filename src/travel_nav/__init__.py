"""
travel_nav - per-agent navigation for tick-based tile worlds.

Navigator.navigate() is the entry point: call it once per agent per tick with
a goal and it issues at most one step, reusing a cached path across ticks and
searching again only when it has to.
"""

from .debug_logger import NavDebugLogger, NavEvent
from .interfaces import SearchGoal, SearchResult
from .options import NavigatorConfig, TravelOptions
from .services import CostMatrix, CostMatrixCache, Navigator, RoutePlanner, StuckDetector, travel_to
from .state import MemoryStateStore, NavigationState, ReturnData, migrate_record
from .types import (
    ConstructionSite,
    ControllerInfo,
    Direction,
    Position,
    StatusCode,
    Structure,
    StructureKind,
    TerrainCosts,
)

__all__ = [
    "ConstructionSite",
    "ControllerInfo",
    "CostMatrix",
    "CostMatrixCache",
    "Direction",
    "MemoryStateStore",
    "NavDebugLogger",
    "NavEvent",
    "NavigationState",
    "Navigator",
    "NavigatorConfig",
    "Position",
    "ReturnData",
    "RoutePlanner",
    "SearchGoal",
    "SearchResult",
    "StatusCode",
    "Structure",
    "StructureKind",
    "StuckDetector",
    "TerrainCosts",
    "TravelOptions",
    "migrate_record",
    "travel_to",
]
