"""
Game state mutation primitives for Gatherer.

GameRules owns the deterministic physics of an episode: single-step moves and
the combined collect-or-deliver action. It is used by GameSession when it
applies queued commands; the expert bot never calls it directly.

Every primitive returns a NEW EpisodeState together with the events it
produced. The input state is never modified, so snapshots handed out earlier
stay valid.
"""

import random
from typing import List, Optional, Tuple

from .environment import Position, TerrainGrid
from .schemas import (
    EpisodeState,
    GameEvent,
    GameSettings,
    Resource,
    action_for_delta,
)


class GameRules:
    """Move / collect / deliver rules plus resource respawn.

    Args:
        settings: Used for the target score that triggers ``target-reached``
        rng: Random source for respawn positions; seed for reproducibility
    """

    def __init__(self, settings: GameSettings, *, rng: Optional[random.Random] = None) -> None:
        self.settings = settings
        self.rng = rng or random.Random()

    def apply_move(self, state: EpisodeState, dx: int, dy: int) -> Tuple[EpisodeState, List[GameEvent]]:
        """Move the agent one cell and charge the entry cost of the destination.

        Moves off the grid leave the state unchanged and cost nothing.

        Raises:
            ValueError: If (dx, dy) is not one of the four unit moves
        """
        if action_for_delta(dx, dy) is None:
            raise ValueError(f"Invalid move delta ({dx}, {dy}); expected a unit cardinal step")

        grid = TerrainGrid.from_state(state.terrain)
        target = state.agent.position.offset(dx, dy)
        if not grid.in_bounds(target.x, target.y):
            return state, []

        hindered = grid.is_hindered(target.x, target.y)
        cost = grid.entry_cost(target.x, target.y)
        event = GameEvent(
            event_type="cost-minus",
            icon="🟫" if hindered else "🟩",
            message=f"Moved onto {'mud' if hindered else 'grass'}. Cost: -{cost}",
            episode_id=state.episode_id,
        )

        new_state = state.model_copy(
            update={
                "agent": state.agent.model_copy(update={"position": target}),
                "step_cost": state.step_cost + cost,
            },
            deep=True,
        )
        return new_state, [event]

    def apply_action(self, state: EpisodeState) -> Tuple[EpisodeState, List[GameEvent]]:
        """Deliver when holding on the base, collect when standing on a resource, else no-op."""
        agent = state.agent

        if agent.holding is not None and state.agent_at_base:
            return self._deliver(state)

        if agent.holding is None:
            index = state.resource_index_at(agent.position)
            if index is not None:
                return self._collect(state, index)

        return state, []

    def _collect(self, state: EpisodeState, index: int) -> Tuple[EpisodeState, List[GameEvent]]:
        collected = state.resources[index]
        remaining = [r for i, r in enumerate(state.resources) if i != index]
        new_state = state.model_copy(
            update={
                "agent": state.agent.model_copy(update={"holding": collected}),
                "resources": remaining,
            },
            deep=True,
        )
        event = GameEvent(
            event_type="action-info",
            icon="🌟" if collected.kind == "golden" else "🌳",
            message=f"Collected {collected.kind} tree.",
            episode_id=state.episode_id,
        )
        return new_state, [event]

    def _deliver(self, state: EpisodeState) -> Tuple[EpisodeState, List[GameEvent]]:
        delivered = state.agent.holding
        assert delivered is not None
        new_score = state.score + delivered.value
        target = self.settings.target_score(state.budget)

        events: List[GameEvent] = []
        if state.score < target <= new_score:
            events.append(
                GameEvent(
                    event_type="target-reached",
                    icon="🎯",
                    message=f"Target score of {target} reached!",
                    episode_id=state.episode_id,
                )
            )
        events.append(
            GameEvent(
                event_type="score-plus",
                icon="🏠",
                message=f"Delivered {delivered.kind} tree! Score: +{delivered.value}",
                episode_id=state.episode_id,
            )
        )

        # Delivered resource comes back as a fresh one of the same kind and value.
        respawned = Resource(
            position=self._spawn_position(state),
            kind=delivered.kind,
            value=delivered.value,
        )
        new_state = state.model_copy(
            update={
                "agent": state.agent.model_copy(update={"holding": None}),
                "score": new_score,
                "resources": [*state.resources, respawned],
            },
            deep=True,
        )
        return new_state, events

    def _spawn_position(self, state: EpisodeState) -> Position:
        """Uniformly random cell not taken by the base, a resource or mud.

        The agent's cell is allowed; the agent may share a cell with anything.
        """
        occupied = {p.as_tuple() for p in state.occupied_cells()}
        size = state.terrain.size
        free = [(x, y) for y in range(size) for x in range(size) if (x, y) not in occupied]
        if not free:
            raise RuntimeError("No free cell left to respawn a resource")
        return Position.from_tuple(self.rng.choice(free))
