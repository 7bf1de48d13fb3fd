"""
Configuration for travel_nav.

TravelOptions is the per-call options bag accepted by Navigator.navigate;
NavigatorConfig holds the process-level tunables a Navigator is built with.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class TravelOptions(BaseModel):
    """Per-call navigation options.

    Anything left at its default defers to the Navigator's config.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    range: Optional[int] = Field(default=None, ge=0)
    just_path: bool = False  # Report the next step without moving

    # Costing
    ignore_roads: bool = False
    ignore_creeps: bool = True  # Other agents are not obstacles unless this is False
    ignore_structures: bool = False
    off_road: bool = False
    fresh_matrix: bool = False
    obstacles: list[Any] = Field(default_factory=list)  # Positions or objects with .pos
    room_callback: Optional[Callable[..., Any]] = None

    # Coarse region routing
    prefer_highway: bool = False
    highway_bias: Optional[float] = Field(default=None, gt=0)
    allow_hostile: bool = False
    allow_hazard_region: bool = False
    restrict_distance: Optional[int] = Field(default=None, gt=0)
    use_find_route: Optional[bool] = None
    route: Optional[dict[str, bool]] = None
    route_callback: Optional[Callable[[str], Optional[float]]] = None

    # Search budget
    max_ops: Optional[int] = Field(default=None, gt=0)
    max_regions: Optional[int] = Field(default=None, gt=0)

    # Behaviour
    moving_target: bool = False
    stuck_value: Optional[int] = Field(default=None, gt=0)
    repath: float = Field(default=0.0, ge=0.0, le=1.0)
    ensure_path: bool = False

    return_data: Optional[Any] = None  # A ReturnData to fill in; kept by reference


class NavigatorConfig(BaseModel):
    """Process-level navigation tunables."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_max_ops: int = Field(default=20000, gt=0)
    default_stuck_value: int = Field(default=2, gt=0)

    # Coarse planning kicks in above this region distance
    find_route_distance: int = Field(default=2, ge=0)
    # ensure_path retries with coarse planning only at or below this distance
    ensure_path_retry_distance: int = Field(default=2, ge=0)
    # Beyond this distance route_distance() skips planning
    route_distance_cutoff: int = Field(default=32, gt=0)

    # Heavy navigation reporting; lowering these surfaces misbehaving agents sooner
    report_max_cost_per_lifetick: float = Field(default=0.25, gt=0)
    report_max_repath_ratio: float = Field(default=0.2, gt=0)
    report_min_age: int = Field(default=20, ge=0)

    # Cost matrix values
    road_cost: int = Field(default=1, ge=1, le=254)
    container_cost: int = Field(default=5, ge=1, le=254)

    # Region route planner biasing
    default_highway_bias: float = Field(default=2.5, gt=0)
    hazard_penalty: float = Field(default=10.0, gt=0)
    restrict_distance_margin: int = Field(default=10, ge=0)

    track_region_status: bool = True
    debug: int = Field(default=1, ge=0, le=2)

    @classmethod
    def from_params(cls, **params: Any) -> NavigatorConfig:
        """Build from string-valued parameters, e.g. parsed from a URI query."""
        return cls.model_validate(params)
