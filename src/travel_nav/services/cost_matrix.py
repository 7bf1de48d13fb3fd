"""
Cost matrices and their tick-scoped cache.

A CostMatrix is a per-region byte grid the search oracle reads traversal costs
from. The cache keeps two tiers per region:

- structural: static obstacles only, reused across ticks until a fresh build is
  requested on a later tick;
- combined: structural plus every observed agent, valid for a single tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import numpy as np

from travel_nav.interfaces import WorldQuery
from travel_nav.types import (
    DEFAULT_COST,
    GRID_SIZE,
    IMPASSABLE,
    PERMISSIVE_SITE_KINDS,
    Goal,
    Position,
    StructureKind,
    normalize_pos,
)


class CostMatrix:
    """GRID_SIZE x GRID_SIZE traversal costs, indexed by (x, y)."""

    __slots__ = ("_bits",)

    def __init__(self, bits: Optional[np.ndarray] = None) -> None:
        if bits is None:
            bits = np.full((GRID_SIZE, GRID_SIZE), DEFAULT_COST, dtype=np.uint8)
        self._bits = bits

    def get(self, x: int, y: int) -> int:
        return int(self._bits[x, y])

    def set(self, x: int, y: int, cost: int) -> None:
        self._bits[x, y] = cost

    def clone(self) -> CostMatrix:
        return CostMatrix(self._bits.copy())

    def count(self, cost: int) -> int:
        """Number of tiles holding exactly this cost."""
        return int(np.count_nonzero(self._bits == cost))

    def to_array(self) -> np.ndarray:
        return self._bits.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CostMatrix):
            return NotImplemented
        return bool(np.array_equal(self._bits, other._bits))

    __hash__ = None  # type: ignore[assignment]


@dataclass
class CacheEntry:
    matrix: CostMatrix
    tick: int


class CostMatrixCache:
    """Per-region cost matrices, owned by one Navigator."""

    def __init__(
        self,
        world: WorldQuery,
        tick_source: Callable[[], int],
        road_cost: int = 1,
        container_cost: int = 5,
    ) -> None:
        self._world = world
        self._tick = tick_source
        self.road_cost = road_cost
        self.container_cost = container_cost
        self._structural: dict[str, CacheEntry] = {}
        self._combined: dict[str, CacheEntry] = {}

    # ------------------------------------------------------------------
    # Cached tiers
    # ------------------------------------------------------------------

    def structural_matrix(self, region: str, fresh: bool = False) -> CostMatrix:
        """Static obstacles for region.

        Rebuilt only when missing, or when fresh is requested and the cached
        copy was built on an earlier tick.
        """
        now = self._tick()
        entry = self._structural.get(region)
        if entry is None or (fresh and entry.tick != now):
            matrix = self.add_structures(region, CostMatrix(), self.road_cost)
            entry = CacheEntry(matrix=matrix, tick=now)
            self._structural[region] = entry
        return entry.matrix

    def combined_matrix(self, region: str) -> CostMatrix:
        """Static obstacles plus every agent currently observed in region."""
        now = self._tick()
        entry = self._combined.get(region)
        if entry is None or entry.tick != now:
            matrix = self.add_agents(region, self.structural_matrix(region, fresh=True).clone())
            entry = CacheEntry(matrix=matrix, tick=now)
            self._combined[region] = entry
        return entry.matrix

    def with_obstacles(self, matrix: CostMatrix, region: str, obstacles: Iterable[Goal]) -> CostMatrix:
        """Uncached clone of matrix with extra impassable tiles."""
        result = matrix.clone()
        for obstacle in obstacles:
            pos = normalize_pos(obstacle)
            if pos.region != region:
                continue
            result.set(pos.x, pos.y, IMPASSABLE)
        return result

    def invalidate(self, region: str) -> None:
        self._structural.pop(region, None)
        self._combined.pop(region, None)

    def clear(self) -> None:
        self._structural.clear()
        self._combined.clear()

    def cached_regions(self) -> set[str]:
        return set(self._structural) | set(self._combined)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def add_structures(self, region: str, matrix: CostMatrix, road_cost: int) -> CostMatrix:
        """Mark roads cheap, containers semi-obstructed and everything else blocking.

        Ramparts only block when they are neither ours nor public. Our own
        construction sites block unless they will become a road, container or
        rampart.
        """
        impassable: list[Position] = []
        for structure in self._world.find_structures(region):
            if structure.kind == StructureKind.RAMPART:
                if not structure.mine and not structure.public:
                    impassable.append(structure.pos)
            elif structure.kind == StructureKind.ROAD:
                matrix.set(structure.pos.x, structure.pos.y, road_cost)
            elif structure.kind == StructureKind.CONTAINER:
                matrix.set(structure.pos.x, structure.pos.y, self.container_cost)
            else:
                impassable.append(structure.pos)

        for site in self._world.find_construction_sites(region):
            if site.kind in PERMISSIVE_SITE_KINDS:
                continue
            matrix.set(site.pos.x, site.pos.y, IMPASSABLE)

        # Blocking structures win over a road sharing the tile
        for pos in impassable:
            matrix.set(pos.x, pos.y, IMPASSABLE)

        return matrix

    def add_agents(self, region: str, matrix: CostMatrix) -> CostMatrix:
        for pos in self._world.find_agents(region):
            matrix.set(pos.x, pos.y, IMPASSABLE)
        return matrix
