"""Grid environment for Gatherer: terrain model, pathfinding and previews."""

from .grid import CARDINAL_STEPS, TerrainGrid
from .schemas import (
    UNREACHABLE,
    PathResult,
    Position,
    TerrainState,
)
from .pathfinding import find_path, manhattan_distance
from .helpers import (
    ResourcePreview,
    preview_resource,
    render_ascii_board,
)

__all__ = [
    "CARDINAL_STEPS",
    "TerrainGrid",
    "UNREACHABLE",
    "PathResult",
    "Position",
    "TerrainState",
    "find_path",
    "manhattan_distance",
    "ResourcePreview",
    "preview_resource",
    "render_ascii_board",
]
