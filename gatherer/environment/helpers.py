"""Utilities built on top of the pathfinder: hover previews and ASCII boards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Union

from .pathfinding import find_path
from .schemas import PathResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from gatherer.schemas import EpisodeState, Resource


Efficiency = Union[float, Literal["infinity"], None]


@dataclass(frozen=True)
class ResourcePreview:
    """What the board shows while a resource is hovered."""

    path: PathResult
    efficiency: Efficiency

    @property
    def tooltip(self) -> Optional[str]:
        if not self.path.path:
            return None
        return f"Cost: {self.path.cost:g}"


def preview_resource(state: "EpisodeState", resource: "Resource") -> ResourcePreview:
    """Path and estimated efficiency from the agent to ``resource``.

    The preview assumes the way back costs the same as the way out, so
    efficiency is ``value / (2 * cost)``. Standing on the resource yields
    ``"infinity"``; an unreachable resource yields ``None``.

    ``state`` must be a snapshot; nothing here mutates it.
    """

    result = find_path(state.agent.position, resource.position, state.terrain)
    if not result.path:
        return ResourcePreview(path=result, efficiency=None)

    total_cost = result.cost * 2
    if total_cost > 0:
        return ResourcePreview(path=result, efficiency=resource.value / total_cost)
    return ResourcePreview(path=result, efficiency="infinity")


_DEFAULT_CELL_SYMBOLS: Dict[str, str] = {
    "agent": "@ ",
    "agent_holding": "& ",
    "base": "H ",
    "normal": "t ",
    "golden": "$ ",
    "hindered": "~ ",
    "path": "* ",
    "empty": ". ",
}


def render_ascii_board(
    state: "EpisodeState",
    *,
    path: Optional[PathResult] = None,
    symbols: Optional[Dict[str, str]] = None,
) -> str:
    """Render the whole board, top row first.

    Precedence per cell: agent, base, resource, path preview, hindered, empty.
    Suitable for debug output and example scripts.
    """

    mapping = {**_DEFAULT_CELL_SYMBOLS}
    if symbols:
        mapping.update(symbols)

    size = state.terrain.size
    hindered = {p.as_tuple() for p in state.terrain.hindered}
    resources = {r.position.as_tuple(): r.kind for r in state.resources}
    path_cells = {p.as_tuple() for p in path.path} if path else set()
    agent = state.agent.position.as_tuple()
    base = state.base.as_tuple()

    lines: List[str] = []
    for y in range(size):
        row_chars: List[str] = []
        for x in range(size):
            cell = (x, y)
            if cell == agent:
                key = "agent_holding" if state.agent.holding else "agent"
            elif cell == base:
                key = "base"
            elif cell in resources:
                key = resources[cell]
            elif cell in path_cells:
                key = "path"
            elif cell in hindered:
                key = "hindered"
            else:
                key = "empty"
            row_chars.append(mapping.get(key, "??"))
        lines.append("".join(row_chars).rstrip())

    return "\n".join(lines)
