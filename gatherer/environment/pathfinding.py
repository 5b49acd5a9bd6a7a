"""Cost-aware shortest paths on the 4-connected game grid (A*)."""

from __future__ import annotations

import heapq
import itertools
from typing import Dict, List, Optional, Set, Tuple, Union

from .grid import Coord, TerrainGrid
from .schemas import PathResult, Position, TerrainState

Terrain = Union[TerrainGrid, TerrainState]


def manhattan_distance(a: Coord, b: Coord) -> int:
    """Heuristic for A*. Admissible and consistent while every entry cost is >= 1."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def _as_coord(pos: Union[Position, Coord]) -> Coord:
    if isinstance(pos, Position):
        return pos.as_tuple()
    return (int(pos[0]), int(pos[1]))


def _reconstruct_path(parents: Dict[Coord, Optional[Coord]], node: Coord) -> List[Position]:
    """Walk predecessor links back to the start and reverse."""
    path: List[Position] = []
    current: Optional[Coord] = node
    while current is not None:
        path.append(Position.from_tuple(current))
        current = parents[current]
    path.reverse()
    return path


def find_path(
    start: Union[Position, Coord],
    goal: Union[Position, Coord],
    terrain: Terrain,
) -> PathResult:
    """Return the minimum-cost path from ``start`` to ``goal``.

    Entering a hindered cell costs ``hindered_cost``; any other in-bounds cell
    costs ``normal_cost``. Moves are up/down/left/right only. The result is a
    pure function of its inputs.

    Args:
        start: Starting cell
        goal: Target cell
        terrain: ``TerrainGrid`` or the serializable ``TerrainState``

    Returns:
        PathResult with the inclusive path and its cost. ``start == goal`` gives
        ``[start]`` with cost 0. An out-of-bounds endpoint gives the unreachable
        sentinel (empty path, infinite cost).

    Notes:
        Frontier ties on ``g + h`` are broken by push order (first pushed wins).
        A finalized cell is never expanded again; this relies on the Manhattan
        heuristic staying consistent, which holds because ``TerrainState``
        costs are all >= 1.
    """
    grid = terrain if isinstance(terrain, TerrainGrid) else TerrainGrid.from_state(terrain)
    start_xy = _as_coord(start)
    goal_xy = _as_coord(goal)

    if not grid.in_bounds(*start_xy) or not grid.in_bounds(*goal_xy):
        return PathResult.unreachable()

    if start_xy == goal_xy:
        return PathResult(path=[Position.from_tuple(start_xy)], cost=0)

    # Heap entries are (f, push_order, cell); push_order keeps ties stable.
    push_order = itertools.count()
    frontier: List[Tuple[int, int, Coord]] = [
        (manhattan_distance(start_xy, goal_xy), next(push_order), start_xy)
    ]
    g_score: Dict[Coord, int] = {start_xy: 0}
    parents: Dict[Coord, Optional[Coord]] = {start_xy: None}
    finalized: Set[Coord] = set()

    while frontier:
        _, _, current = heapq.heappop(frontier)
        # Stale heap entry left behind by a cheaper push of the same cell
        if current in finalized:
            continue
        finalized.add(current)

        if current == goal_xy:
            return PathResult(path=_reconstruct_path(parents, current), cost=g_score[current])

        for neighbor in grid.neighbors(current):
            if neighbor in finalized:
                continue
            tentative = g_score[current] + grid.entry_cost(*neighbor)
            if tentative < g_score.get(neighbor, tentative + 1):
                g_score[neighbor] = tentative
                parents[neighbor] = current
                f_score = tentative + manhattan_distance(neighbor, goal_xy)
                heapq.heappush(frontier, (f_score, next(push_order), neighbor))

    return PathResult.unreachable()
