"""
Coarse region routing.

Before a long search, the region adjacency graph is searched first and the
grid search is then restricted to the regions on that route. The per-region
costs bound the search, keep out of avoided regions, and optionally bias
toward highways and away from hazard regions.
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING, Callable, Optional

from travel_nav.interfaces import RouteFinder, WorldQuery

if TYPE_CHECKING:
    from travel_nav.debug_logger import NavDebugLogger
    from travel_nav.options import NavigatorConfig, TravelOptions

_REGION_NAME = re.compile(r"^[WE]([0-9]+)[NS]([0-9]+)$")


def region_coord(region: str) -> tuple[int, int]:
    """Parse a region name like "W12N5" into its (12, 5) lattice coordinate."""
    match = _REGION_NAME.match(region)
    if match is None:
        raise ValueError(f"Not a region name: {region!r}")
    return (int(match.group(1)), int(match.group(2)))


def is_highway(coord: tuple[int, int]) -> bool:
    return coord[0] % 10 == 0 or coord[1] % 10 == 0


def is_hazard_region(coord: tuple[int, int]) -> bool:
    """Regions in the 4..6 band on both axes, except the exact centre."""
    x_mod = coord[0] % 10
    y_mod = coord[1] % 10
    if x_mod == 5 and y_mod == 5:
        return False
    return 4 <= x_mod <= 6 and 4 <= y_mod <= 6


class RoutePlanner:
    """Computes the set of regions a long search may enter."""

    def __init__(
        self,
        world: WorldQuery,
        route_finder: RouteFinder,
        config: NavigatorConfig,
        logger: NavDebugLogger,
        tick_source: Callable[[], int],
    ) -> None:
        self._world = world
        self._route_finder = route_finder
        self._config = config
        self._logger = logger
        self._tick = tick_source

    def highway_bias(self, options: TravelOptions) -> float:
        if not options.prefer_highway:
            return 1.0
        return options.highway_bias or self._config.default_highway_bias

    def region_cost(self, region: str, origin: str, destination: str, options: TravelOptions) -> float:
        """Cost of entering region; inf keeps the route out of it."""
        if options.route_callback is not None:
            outcome = options.route_callback(region)
            if outcome is not None:
                return outcome

        restrict_distance = options.restrict_distance or (
            self._world.linear_distance(origin, destination) + self._config.restrict_distance_margin
        )
        if self._world.linear_distance(origin, region) > restrict_distance:
            return math.inf

        if (
            not options.allow_hostile
            and self._world.is_avoided(region)
            and region != destination
            and region != origin
        ):
            return math.inf

        bias = self.highway_bias(options)
        coord = region_coord(region)
        if options.prefer_highway and is_highway(coord):
            return 1.0

        # Hazard regions are only fine when we can see into them
        if not options.allow_hazard_region and not self._world.is_observed(region) and is_hazard_region(coord):
            return self._config.hazard_penalty * bias

        return bias

    def find_route(self, origin: str, destination: str, options: TravelOptions) -> Optional[dict[str, bool]]:
        """Allowed regions between origin and destination, or None on failure."""
        visited = self._route_finder.find_route(
            origin,
            destination,
            lambda region: self.region_cost(region, origin, destination, options),
        )
        if visited is None:
            self._logger.route_failed(self._tick(), origin, destination)
            return None

        allowed = {origin: True, destination: True}
        for region in visited:
            allowed[region] = True
        return allowed

    def route_distance(self, origin: str, destination: str, options: TravelOptions) -> Optional[int]:
        """Number of regions on the route, or the linear distance when too far to plan."""
        linear = self._world.linear_distance(origin, destination)
        if linear >= self._config.route_distance_cutoff:
            return linear
        allowed = self.find_route(origin, destination, options)
        if allowed is None:
            return None
        return len(allowed)
