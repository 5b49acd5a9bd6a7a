"""
Pydantic schemas for the Gatherer game.

All data structures shared between the session, the rules, the expert bot
and the dataset exporter are defined here.

Design Philosophy:
- Episode snapshots are immutable-by-convention: every mutation produces a new
  EpisodeState (``model_copy``) instead of editing the previous one in place
- Positions are frozen value objects so they can be compared and hashed
- Settings are injected, never read from globals inside game logic
"""

from enum import IntEnum
from typing import Dict, List, Literal, Optional, Set, Tuple

from pydantic import BaseModel, Field, model_validator

from gatherer.config import Config
from gatherer.environment.schemas import Position, TerrainState


ResourceKind = Literal["normal", "golden"]
HoldingKind = Literal["none", "normal", "golden"]
EventType = Literal["score-plus", "cost-minus", "action-info", "target-reached"]


# ============================================================================
# Actions
# ============================================================================


class Action(IntEnum):
    """Discrete action codes recorded in the decision dataset."""

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3
    COLLECT_OR_DELIVER = 4


# Unit move for each movement action. y grows downward (screen coordinates).
ACTION_DELTAS: Dict[Action, Tuple[int, int]] = {
    Action.UP: (0, -1),
    Action.DOWN: (0, 1),
    Action.LEFT: (-1, 0),
    Action.RIGHT: (1, 0),
}


def action_for_delta(dx: int, dy: int) -> Optional[Action]:
    """Return the movement action for a unit step, or None for any other delta."""
    for action, delta in ACTION_DELTAS.items():
        if delta == (dx, dy):
            return action
    return None


# ============================================================================
# Settings
# ============================================================================


class GameSettings(BaseModel):
    """Static game parameters injected into the generator, rules, session and bot.

    Field defaults come from ``Config`` (environment variables / .env). Tests and
    scripts override individual fields directly: ``GameSettings(grid_size=5)``.
    """

    grid_size: int = Field(Config.GRID_SIZE, gt=0, description="Cells per side")
    num_normal_resources: int = Field(Config.NUM_NORMAL_RESOURCES, ge=0)
    num_golden_resources: int = Field(Config.NUM_GOLDEN_RESOURCES, ge=0)
    num_hindered_tiles: int = Field(Config.NUM_HINDERED_TILES, ge=0)
    normal_cost: int = Field(Config.NORMAL_COST, gt=0, description="Cost of entering grass")
    hindered_cost: int = Field(Config.HINDERED_COST, gt=0, description="Cost of entering mud")
    normal_value: int = Field(Config.NORMAL_VALUE, gt=0)
    golden_value: int = Field(Config.GOLDEN_VALUE, gt=0)
    budget: int = Field(Config.BUDGET, gt=0, description="Step-cost budget per episode")
    benchmark_cost_per_point: int = Field(Config.BENCHMARK_COST_PER_POINT, gt=0)

    @model_validator(mode="after")
    def _check_layout(self) -> "GameSettings":
        # The heuristic used by the pathfinder assumes no cell is cheaper than grass.
        if self.hindered_cost < self.normal_cost:
            raise ValueError("hindered_cost must be >= normal_cost")
        # Rejection sampling in the map generator needs a free cell for every entity.
        entities = (
            1 + self.num_hindered_tiles + self.num_normal_resources + self.num_golden_resources
        )
        if entities > self.grid_size * self.grid_size:
            raise ValueError(
                f"{entities} entities do not fit on a {self.grid_size}x{self.grid_size} grid"
            )
        return self

    @property
    def num_resources(self) -> int:
        return self.num_normal_resources + self.num_golden_resources

    def target_score(self, budget: Optional[int] = None) -> int:
        """Score the player is asked to beat for a given budget."""
        return (budget if budget is not None else self.budget) // self.benchmark_cost_per_point

    def value_for(self, kind: ResourceKind) -> int:
        return self.golden_value if kind == "golden" else self.normal_value

    def terrain(self, hindered: List[Position]) -> TerrainState:
        return TerrainState(
            size=self.grid_size,
            normal_cost=self.normal_cost,
            hindered_cost=self.hindered_cost,
            hindered=list(hindered),
        )


# ============================================================================
# Episode State Schemas
# ============================================================================


class Resource(BaseModel):
    """A collectible tree: position, kind and the score granted on delivery."""

    position: Position
    kind: ResourceKind = "normal"
    value: int = Field(..., ge=0, description="Score granted on delivery")


class AgentState(BaseModel):
    """The player's avatar. Holds at most one resource at a time."""

    position: Position
    holding: Optional[Resource] = Field(
        None, description="Resource being carried; removed from the board while held"
    )


class EpisodeState(BaseModel):
    """Complete state of one episode at a point in time.

    Replaced wholesale on every applied command and on restart. ``episode_id``
    versions the session so commands issued against an older episode can be
    recognized and dropped.
    """

    episode_id: int = Field(..., ge=0, description="Monotonic episode version")
    agent: AgentState
    base: Position = Field(..., description="Delivery target, static for the episode")
    terrain: TerrainState
    # Live resources on the board. A held resource is NOT in this list.
    resources: List[Resource] = Field(default_factory=list)
    score: int = Field(0, ge=0)
    # Monotonically non-decreasing within an episode
    step_cost: int = Field(0, ge=0)
    budget: int = Field(..., gt=0)

    @property
    def remaining_cost(self) -> int:
        return self.budget - self.step_cost

    @property
    def budget_exhausted(self) -> bool:
        return self.step_cost >= self.budget

    @property
    def agent_at_base(self) -> bool:
        return self.agent.position == self.base

    def resource_index_at(self, position: Position) -> Optional[int]:
        """Index of the first resource on ``position``, or None."""
        for index, resource in enumerate(self.resources):
            if resource.position == position:
                return index
        return None

    def occupied_cells(self) -> Set[Position]:
        """Cells taken by the base, live resources and hindered tiles."""
        cells = {self.base}
        cells.update(r.position for r in self.resources)
        cells.update(self.terrain.hindered)
        return cells


class GameEvent(BaseModel):
    """Human-readable event emitted by the rules or the session (the event log)."""

    event_type: EventType
    icon: str = ""
    message: str
    episode_id: Optional[int] = None


# ============================================================================
# Dataset Schemas
# ============================================================================


class StateRepresentation(BaseModel):
    """Flat view of an episode state as recorded for the training dataset."""

    agent_pos: Tuple[int, int]
    holding: HoldingKind = "none"
    base_pos: Tuple[int, int]
    normal_resources_pos: List[Tuple[int, int]] = Field(default_factory=list)
    golden_resources_pos: List[Tuple[int, int]] = Field(default_factory=list)
    mud_pos: List[Tuple[int, int]] = Field(default_factory=list)
    remaining_cost: int


class DecisionRecord(BaseModel):
    """One (state, action) pair captured before the action was requested."""

    log_id: int = Field(..., ge=0)
    episode_id: int = Field(..., ge=0)
    state: StateRepresentation
    action: Action
    score: int
    cost: int
