"""
Stochastic episode layout generation with a solvability check.

MapGenerator builds the initial EpisodeState of every episode:
- Base placed on a uniformly random cell; the agent starts on the base
- Hindered (mud) tiles and resources placed on distinct free cells
- Layout accepted only if at least one resource can be reached from the base
  and can reach the base back (the pathfinder is the oracle)

Unsolvable layouts are discarded and regenerated from scratch (no partial
repair). Regeneration is bounded by ``max_attempts``; exceeding it raises
MapGenerationError, which signals a configuration problem rather than bad luck.
"""

import random
from typing import List, Optional, Set, Tuple

from .config import Config
from .environment import Position, TerrainState, find_path
from .logging_utils import log_deterministic, log_error
from .schemas import AgentState, EpisodeState, GameSettings, Resource


class MapGenerationError(Exception):
    """Raised when no solvable layout was produced within the attempt limit."""

    def __init__(self, *, attempts: int, settings: GameSettings) -> None:
        self.attempts = attempts
        self.settings = settings
        message = (
            f"No solvable map after {attempts} attempts "
            f"({settings.grid_size}x{settings.grid_size} grid, "
            f"{settings.num_hindered_tiles} hindered tiles, {settings.num_resources} resources).\n\n"
            "Remediation tips:\n"
            "  - Reduce GATHERER_NUM_HINDERED_TILES or the resource counts\n"
            "  - Increase GATHERER_GRID_SIZE\n"
            "  - Raise GATHERER_MAX_GENERATION_ATTEMPTS"
        )
        super().__init__(message)


def is_solvable(base: Position, resources: List[Resource], terrain: TerrainState) -> bool:
    """True when some resource is reachable from the base and can reach it back."""
    for resource in resources:
        outbound = find_path(base, resource.position, terrain)
        if not outbound.reachable:
            continue
        if find_path(resource.position, base, terrain).reachable:
            return True
    return False


class MapGenerator:
    """Produce fresh, solvable EpisodeStates.

    Args:
        settings: Grid dimensions, entity counts, costs and values
        rng: Optional ``random.Random``; seed it for reproducible layouts
        max_attempts: Upper bound on full regenerations per ``generate`` call
    """

    def __init__(
        self,
        settings: GameSettings,
        *,
        rng: Optional[random.Random] = None,
        max_attempts: int = Config.MAX_GENERATION_ATTEMPTS,
    ) -> None:
        self.settings = settings
        self.rng = rng or random.Random()
        self.max_attempts = max(1, max_attempts)

    def generate(self, *, episode_id: int = 0, budget: Optional[int] = None) -> EpisodeState:
        """Return a solvable initial state with zero score and zero step-cost.

        Raises:
            MapGenerationError: If every attempt produced an unsolvable layout
        """
        for attempt in range(1, self.max_attempts + 1):
            base, terrain, resources = self._place_layout()
            if is_solvable(base, resources, terrain):
                if attempt > 1:
                    log_deterministic(f"Solvable map found on attempt {attempt}")
                return EpisodeState(
                    episode_id=episode_id,
                    agent=AgentState(position=base),
                    base=base,
                    terrain=terrain,
                    resources=resources,
                    score=0,
                    step_cost=0,
                    budget=budget if budget is not None else self.settings.budget,
                )
            log_error(f"Generated an unsolvable map (attempt {attempt}/{self.max_attempts}). Retrying...")

        raise MapGenerationError(attempts=self.max_attempts, settings=self.settings)

    def _place_layout(self) -> Tuple[Position, TerrainState, List[Resource]]:
        settings = self.settings
        occupied: Set[Tuple[int, int]] = set()

        def empty_cell() -> Position:
            # Rejection sampling; GameSettings guarantees a free cell exists.
            while True:
                cell = (
                    self.rng.randrange(settings.grid_size),
                    self.rng.randrange(settings.grid_size),
                )
                if cell not in occupied:
                    occupied.add(cell)
                    return Position.from_tuple(cell)

        base = empty_cell()
        hindered = [empty_cell() for _ in range(settings.num_hindered_tiles)]
        resources = [
            Resource(position=empty_cell(), kind="normal", value=settings.value_for("normal"))
            for _ in range(settings.num_normal_resources)
        ]
        resources.extend(
            Resource(position=empty_cell(), kind="golden", value=settings.value_for("golden"))
            for _ in range(settings.num_golden_resources)
        )
        return base, settings.terrain(hindered), resources
