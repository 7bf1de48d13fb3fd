"""
Navigator service for travel_nav.

Decides, once per agent per tick, whether to keep following the cached path,
extend it, or search again, and emits at most one step. Searches are expensive,
so a path is encoded compactly, persisted in the agent's record, and consumed
one direction per tick until it runs out, the destination moves, or the agent
stops making progress.
"""

from __future__ import annotations

import random
import time
from typing import Any, Callable, Optional, Protocol

from travel_nav.debug_logger import NavDebugLogger
from travel_nav.interfaces import (
    AgentHandle,
    RegionCost,
    RouteFinder,
    SearchGoal,
    SearchOracle,
    SearchResult,
    StateStore,
    VisualSink,
    WorldQuery,
)
from travel_nav.options import NavigatorConfig, TravelOptions
from travel_nav.services.cost_matrix import CostMatrix, CostMatrixCache
from travel_nav.services.path_codec import (
    append_direction,
    decode_path,
    first_direction,
    position_at_direction,
    serialize_path,
)
from travel_nav.services.route_planner import RoutePlanner
from travel_nav.services.stuck import StuckDetector
from travel_nav.state import MemoryStateStore, NavigationState, migrate_record
from travel_nav.types import Direction, Goal, Position, StatusCode, TerrainCosts, normalize_pos


class RandomSource(Protocol):
    def random(self) -> float: ...


def _perf_ms() -> float:
    return time.perf_counter() * 1000.0


class Navigator:
    """Per-agent path caching, repathing and stuck recovery on top of an external search."""

    def __init__(
        self,
        world: WorldQuery,
        search: SearchOracle,
        route_finder: RouteFinder,
        store: Optional[StateStore] = None,
        *,
        tick_source: Callable[[], int],
        rng: Optional[RandomSource] = None,
        cost_clock: Callable[[], float] = _perf_ms,
        visuals: Optional[VisualSink] = None,
        logger: Optional[NavDebugLogger] = None,
        config: Optional[NavigatorConfig] = None,
    ) -> None:
        self.config = config or NavigatorConfig()
        self._world = world
        self._search = search
        self._store: StateStore = store if store is not None else MemoryStateStore()
        self._tick = tick_source
        # Randomness only breaks symmetric deadlocks; seed it for reproducible runs
        self._rng: RandomSource = rng if rng is not None else random.Random()
        self._cost_clock = cost_clock
        self._visuals = visuals
        self.logger = logger or NavDebugLogger(level=self.config.debug)

        self.matrices = CostMatrixCache(
            world,
            tick_source,
            road_cost=self.config.road_cost,
            container_cost=self.config.container_cost,
        )
        self.route_planner = RoutePlanner(world, route_finder, self.config, self.logger, tick_source)
        self.stuck = StuckDetector()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def navigate(self, agent: AgentHandle, goal: Optional[Goal], options: Optional[TravelOptions] = None) -> StatusCode:
        """Move agent one step toward goal.

        Args:
            agent: The agent to move
            goal: A position, or anything exposing one as .pos
            options: Per-call options; see TravelOptions

        Returns:
            OK when a step was issued (or nothing was needed), otherwise the
            reason no step was taken, or the agent's own move result
        """
        options = options or TravelOptions()

        if self.config.track_region_status:
            self.update_region_status(agent.pos.region)

        if agent.spawning:
            return StatusCode.BUSY

        if goal is None:
            return StatusCode.INVALID_ARGS

        if agent.fatigue > 0:
            self._circle(agent.pos, "aqua", 0.3)
            return StatusCode.TIRED

        destination = normalize_pos(goal)

        # Close enough to skip the cache entirely
        range_to_destination = agent.pos.range_to(destination)
        if options.range and range_to_destination <= options.range:
            return StatusCode.OK
        if range_to_destination <= 1:
            if range_to_destination == 1 and not options.range:
                direction = agent.pos.direction_to(destination)
                if options.return_data is not None:
                    options.return_data.next_dir = direction
                    options.return_data.next_pos = destination
                    options.return_data.path = str(int(direction))
                return StatusCode.OK if options.just_path else agent.move(direction)
            return StatusCode.OK

        state = NavigationState.from_record(self._store.get(agent.name), destination)
        state.travel_invocations += 1

        if self.stuck.update(agent.pos, state):
            self._circle(agent.pos, "magenta", state.stuck_count * 0.2)

        # Stuck long enough: half the time, search again around other agents. The
        # coin flip keeps two agents blocking each other from repathing in lockstep.
        stuck_value = options.stuck_value or self.config.default_stuck_value
        if state.stuck_count >= stuck_value and self._rng.random() > 0.5:
            options = options.model_copy(update={"ignore_creeps": False, "fresh_matrix": True})
            state.path = ""

        if state.destination != destination:
            if state.destination.is_near_to(destination):
                # Destination moved one tile: extend instead of searching again
                state.path = append_direction(state.path, state.destination.direction_to(destination))
                state.destination = destination
            else:
                state.path = ""

        if options.repath and self._rng.random() < options.repath:
            state.path = ""

        new_path = False
        if not state.path:
            new_path = True
            state.destination = destination
            self._repath(agent, destination, state, options)

        # The first direction is the step issued last tick
        if state.stuck_count == 0 and not new_path:
            state.path = state.path[1:]

        self._save(agent, state)

        if not state.path:
            return StatusCode.NO_PATH

        next_direction = first_direction(state.path)
        if options.return_data is not None:
            if next_direction != Direction.NONE:
                options.return_data.next_dir = next_direction
                next_pos = position_at_direction(agent.pos, next_direction)
                if next_pos is not None:
                    options.return_data.next_pos = next_pos
            options.return_data.state = state
            options.return_data.path = state.path

        self.logger.step(self._tick(), agent.name, agent.pos, next_direction, len(state.path))
        return StatusCode.OK if options.just_path else agent.move(next_direction)

    def find_travel_path(
        self,
        origin: Goal,
        destination: Goal,
        options: Optional[TravelOptions] = None,
    ) -> SearchResult:
        """Run the search oracle from origin to destination.

        Regions the search may enter are narrowed by the coarse route planner
        when the regions are far apart (or when asked to), and each region's
        costs come from the matrix cache.
        """
        options = options or TravelOptions()
        max_ops = options.max_ops or self.config.default_max_ops
        search_range = options.range if options.range is not None else 1
        if options.moving_target:
            search_range = 0

        origin_pos = normalize_pos(origin)
        dest_pos = normalize_pos(destination)
        origin_region = origin_pos.region
        dest_region = dest_pos.region

        region_distance = self._world.linear_distance(origin_region, dest_region)
        allowed_regions = options.route
        if allowed_regions is None and self._wants_route(options, region_distance):
            allowed_regions = self.route_planner.find_route(origin_region, dest_region, options)

        def cost_callback(region: str) -> RegionCost:
            return self._region_matrix(region, origin_region, dest_region, allowed_regions, options)

        result = self._search.search(
            origin_pos,
            SearchGoal(pos=dest_pos, range=search_range),
            cost_callback=cost_callback,
            max_ops=max_ops,
            max_regions=options.max_regions,
            terrain=self.terrain_costs(options),
        )

        if result.incomplete and options.ensure_path and options.use_find_route is None:
            # A short search can miss a path that has to leave and re-enter nearby
            # regions; coarse planning finds those
            if region_distance <= self.config.ensure_path_retry_distance:
                self.logger.ensure_path_retry(self._tick(), origin_pos, dest_pos)
                result = self.find_travel_path(
                    origin_pos, dest_pos, options.model_copy(update={"use_find_route": True})
                )
                self.logger.ensure_path_result(self._tick(), not result.incomplete)

        return result

    @staticmethod
    def terrain_costs(options: TravelOptions) -> TerrainCosts:
        if options.off_road:
            return TerrainCosts(plain=1, swamp=1)
        if options.ignore_roads:
            return TerrainCosts(plain=1, swamp=5)
        return TerrainCosts(plain=2, swamp=10)

    def backstep(self, agent: AgentHandle, to_pos: Goal) -> bool:
        """Step aside toward to_pos without losing the cached path."""
        record = self._store.get(agent.name)
        if record is None:
            return False
        target = normalize_pos(to_pos)
        current = migrate_record(record)
        state = NavigationState.from_record(current, target)
        if not self.stuck.backstep(agent, state, target):
            return False
        updated = state.to_record()
        # The step target is not a destination; leave an unset one unset
        if current.get("destination") is None:
            updated["destination"] = None
        self._store.set(agent.name, updated)
        return True

    def path_length(self, agent: AgentHandle) -> int:
        return len(self._stored_path(agent))

    def path(self, agent: AgentHandle) -> list[Position]:
        """Remaining cached route as positions, starting after the agent's tile."""
        return decode_path(agent.pos, self._stored_path(agent))

    def next_pos(self, agent: AgentHandle, nth: int = 1) -> Optional[Position]:
        """Where the agent will be after nth more steps of its cached path."""
        if nth <= 0:
            return agent.pos
        encoded = self._stored_path(agent)
        if not encoded or nth > len(encoded):
            return None
        positions = decode_path(agent.pos, encoded[:nth])
        if len(positions) < nth:
            return None
        return positions[-1]

    def route_distance(self, origin: str, destination: str, options: Optional[TravelOptions] = None) -> Optional[int]:
        return self.route_planner.route_distance(origin, destination, options or TravelOptions())

    def update_region_status(self, region: str) -> None:
        """Flag regions owned by someone else as avoided, clear the flag otherwise."""
        controller = self._world.controller(region)
        if controller is None:
            return
        self._world.set_avoided(region, controller.owned and not controller.mine)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _repath(
        self,
        agent: AgentHandle,
        destination: Position,
        state: NavigationState,
        options: TravelOptions,
    ) -> None:
        started = self._cost_clock()
        result = self.find_travel_path(agent.pos, destination, options)
        cost_used = self._cost_clock() - started
        state.cumulative_cost = round(cost_used + state.cumulative_cost, 3)
        state.repath_count += 1

        self._report_heavy_cost(agent, destination, state)

        color = "orange"
        if result.incomplete:
            self.logger.incomplete_path(self._tick(), agent.name, agent.pos, destination)
            color = "red"

        if options.return_data is not None:
            options.return_data.search_result = result

        state.path = serialize_path(agent.pos, result.path)
        self._draw_path(agent.pos, result.path, color)
        state.stuck_count = 0

    def _report_heavy_cost(self, agent: AgentHandle, destination: Position, state: NavigationState) -> None:
        age = agent.age
        if age <= self.config.report_min_age:
            return
        cost_per_tick = state.cumulative_cost / age
        if (
            cost_per_tick > self.config.report_max_cost_per_lifetick
            or state.repath_ratio > self.config.report_max_repath_ratio
        ):
            self.logger.heavy_cost(
                self._tick(),
                agent.name,
                state.cumulative_cost,
                age,
                state.repath_count,
                state.travel_invocations,
                agent.pos,
                destination,
            )

    def _wants_route(self, options: TravelOptions, region_distance: int) -> bool:
        if options.use_find_route is None:
            return region_distance > self.config.find_route_distance
        return options.use_find_route

    def _region_matrix(
        self,
        region: str,
        origin_region: str,
        dest_region: str,
        allowed_regions: Optional[dict[str, bool]],
        options: TravelOptions,
    ) -> RegionCost:
        if allowed_regions is not None:
            if not allowed_regions.get(region):
                return False
        elif (
            not options.allow_hostile
            and self._world.is_avoided(region)
            and region != dest_region
            and region != origin_region
        ):
            return False

        if not self._world.is_observed(region):
            return CostMatrix()

        if options.ignore_structures:
            matrix = CostMatrix()
            if not options.ignore_creeps:
                self.matrices.add_agents(region, matrix)
        elif options.ignore_creeps or region != origin_region:
            matrix = self.matrices.structural_matrix(region, options.fresh_matrix)
        else:
            matrix = self.matrices.combined_matrix(region)

        if options.obstacles:
            matrix = self.matrices.with_obstacles(matrix, region, options.obstacles)

        if options.room_callback is not None:
            outcome = options.room_callback(region, matrix.clone())
            if outcome is not None:
                return outcome

        return matrix

    def _stored_path(self, agent: AgentHandle) -> str:
        record = self._store.get(agent.name)
        if record is None:
            return ""
        return migrate_record(record).get("path") or ""

    def _save(self, agent: AgentHandle, state: NavigationState) -> None:
        state.last_coord = agent.pos.coord
        self._store.set(agent.name, state.to_record())

    def _circle(self, pos: Position, color: str, opacity: float) -> None:
        if self._visuals is not None:
            self._visuals.circle(pos, color, opacity)

    def _draw_path(self, start: Position, positions: list[Position], color: str) -> None:
        if self._visuals is None:
            return
        self._visuals.circle(start, color, 0.5)
        last = start
        for position in positions:
            if position.region == last.region:
                self._visuals.line(position, last, color)
            last = position


def travel_to(navigator: Navigator, agent: AgentHandle, goal: Optional[Goal], **options: Any) -> StatusCode:
    """Keyword-argument convenience over Navigator.navigate."""
    return navigator.navigate(agent, goal, TravelOptions(**options))
