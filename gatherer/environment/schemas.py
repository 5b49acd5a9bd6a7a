"""Pydantic schemas for the grid environment.

These models mirror the lightweight dataclass in ``grid.py`` but keep
episode snapshots serializable. ``Position`` is frozen so it can live in
sets and act as a dictionary key.
"""

from __future__ import annotations

import math
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field


UNREACHABLE = math.inf
"""Cost sentinel returned when no path exists."""


class Position(BaseModel):
    """Integer grid coordinate. Compared by value of both fields."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(x=self.x + dx, y=self.y + dy)

    @classmethod
    def from_tuple(cls, coord: Tuple[int, int]) -> "Position":
        return cls(x=coord[0], y=coord[1])


class TerrainState(BaseModel):
    """Static terrain of one episode: square grid plus the hindered-tile overlay."""

    size: int = Field(..., gt=0, description="Cells per side")
    normal_cost: int = Field(1, gt=0, description="Cost of entering a normal cell")
    hindered_cost: int = Field(3, gt=0, description="Cost of entering a hindered cell")
    hindered: List[Position] = Field(
        default_factory=list,
        description="Cells with the elevated movement cost (mud)",
    )


class PathResult(BaseModel):
    """Ordered path from start to goal (inclusive) and its total traversal cost.

    ``cost`` is ``UNREACHABLE`` (+inf) with an empty ``path`` when no route exists.
    """

    path: List[Position] = Field(default_factory=list)
    cost: float = Field(UNREACHABLE, description="Sum of entry costs along the path")

    @property
    def reachable(self) -> bool:
        return not math.isinf(self.cost)

    @classmethod
    def unreachable(cls) -> "PathResult":
        return cls(path=[], cost=UNREACHABLE)
