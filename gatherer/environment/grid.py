"""Spatial grid model used by the pathfinder.

``TerrainGrid`` is the runtime counterpart of ``TerrainState``: plain
tuples and a frozenset so the search loop never touches pydantic models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterator, Tuple

from .schemas import TerrainState

Coord = Tuple[int, int]

# Four-directional movement in (dx, dy) order: up, down, left, right.
# y grows downward, so "up" is dy = -1.
CARDINAL_STEPS: Tuple[Coord, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))


@dataclass(frozen=True)
class TerrainGrid:
    """Square grid without impassable cells; hindered cells only cost more to enter."""

    size: int
    normal_cost: int = 1
    hindered_cost: int = 3
    hindered: FrozenSet[Coord] = field(default_factory=frozenset)

    @classmethod
    def from_state(cls, terrain: TerrainState) -> "TerrainGrid":
        return cls(
            size=terrain.size,
            normal_cost=terrain.normal_cost,
            hindered_cost=terrain.hindered_cost,
            hindered=frozenset(p.as_tuple() for p in terrain.hindered),
        )

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def is_hindered(self, x: int, y: int) -> bool:
        return (x, y) in self.hindered

    def entry_cost(self, x: int, y: int) -> int:
        """Cost of stepping onto (x, y). Direction of travel does not matter."""
        return self.hindered_cost if (x, y) in self.hindered else self.normal_cost

    def neighbors(self, coord: Coord) -> Iterator[Coord]:
        """Yield in-bounds 4-connected neighbours in up/down/left/right order."""
        x, y = coord
        for dx, dy in CARDINAL_STEPS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield nx, ny
