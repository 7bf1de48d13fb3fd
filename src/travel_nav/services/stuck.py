"""
Stuck detection and backstepping.

An agent is stuck when it did not move since the last tick, or when it only
shuffled along the region boundary (both tiles on an exit edge), which is what
two agents trading places across an exit look like.
"""

from __future__ import annotations

from travel_nav.interfaces import AgentHandle
from travel_nav.services.path_codec import opposite_direction, prepend_directions
from travel_nav.state import NavigationState
from travel_nav.types import Direction, Position, StatusCode, is_exit


class StuckDetector:
    """Tracks lack of progress and repairs cached paths after a forced step."""

    def is_stuck(self, pos: Position, state: NavigationState) -> bool:
        if state.last_coord is None:
            return False
        if pos.same_coord(state.last_coord):
            return True
        # Moved, but only along the edge
        return pos.is_exit() and is_exit(state.last_coord)

    def update(self, pos: Position, state: NavigationState) -> bool:
        """Advance or reset state.stuck_count. Returns whether the agent is stuck."""
        if self.is_stuck(pos, state):
            state.stuck_count += 1
            return True
        state.stuck_count = 0
        return False

    def backstep(self, agent: AgentHandle, state: NavigationState, to_pos: Position) -> bool:
        """Step toward to_pos, keeping the cached path valid from the new tile.

        When the agent can move, the step is taken now and its reverse is put in
        front of the path. When fatigued, both the step and its reverse are queued
        instead. Returns True if the path changed; with no cached path nothing
        happens.
        """
        if not state.path:
            return False

        direction = agent.pos.direction_to(to_pos)
        if direction == Direction.NONE:
            return False
        reverse = opposite_direction(direction)

        if agent.fatigue == 0:
            if agent.move(direction) != StatusCode.OK:
                return False
            state.path = prepend_directions(state.path, reverse)
        else:
            state.path = prepend_directions(state.path, direction, reverse)
        return True
