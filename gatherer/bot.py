"""
Expert bot: greedy one-resource-at-a-time planner and step-by-step executor.

Architecture Role:
    The bot plays an episode through the session's command/observation
    surface. Each planning cycle:

        Idle -> Scanning -> NoneFound -> Terminating
                         -> Found -> MovingToResource -> Collecting
                                  -> MovingToBase -> Delivering -> Idle

    Any abort returns to Idle while the episode is active (the next cycle
    re-plans from scratch) or to Terminated when it is not.

Selection:
    For every available resource, price the round trip agent -> resource ->
    base with the pathfinder and pick the best value / cost ratio among the
    trips that fit into the remaining budget. Exact ties go to the resource
    closer to the agent. A positive-value resource with a zero-cost round
    trip wins immediately.

Synchronisation:
    Commands are fire-and-forget and applied by the session's update loop.
    After every command the bot suspends and polls (tenacity AsyncRetrying,
    bounded wait, fixed interval) until the expected post-condition is
    observed. A position mismatch before a step (desync) or a confirmation
    timeout aborts the cycle. Exactly one command is in flight at a time.
    A timed-out command may still be queued when a cycle aborts, so the bot
    awaits ``controls.idle()`` before re-planning; the next snapshot then
    includes every command the previous cycle issued.

Dependencies:
    - tenacity: bounded polling for confirmations
    - gatherer.environment.find_path: route pricing
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_delay, wait_fixed

from .config import Config
from .environment import PathResult, Position, TerrainState, find_path
from .logging_utils import log_bot, log_error
from .schemas import Action, EpisodeState, Resource, action_for_delta

PathFinder = Callable[[Position, Position, TerrainState], PathResult]
StateCondition = Callable[[EpisodeState], bool]


# =============================================================================
# EXCEPTIONS AND STATES
# =============================================================================


class InvalidPathStepError(ValueError):
    """Two consecutive path positions are not one cardinal step apart."""

    def __init__(self, current: Position, following: Position) -> None:
        self.current = current
        self.following = following
        super().__init__(
            f"Path step ({current.x}, {current.y}) -> ({following.x}, {following.y}) "
            "is not a unit cardinal move"
        )


class BotPhase(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    TERMINATING = "terminating"
    MOVING_TO_RESOURCE = "moving_to_resource"
    COLLECTING = "collecting"
    MOVING_TO_BASE = "moving_to_base"
    DELIVERING = "delivering"
    TERMINATED = "terminated"


class CycleOutcome(str, Enum):
    """Result of one planning cycle, as seen by the episode loop."""

    DELIVERED = "delivered"
    ABORTED = "aborted"
    EXHAUSTED = "exhausted"
    INACTIVE = "inactive"


class GameControls(Protocol):
    """Collaborator surface the bot plays through (implemented by GameSession)."""

    def observe_state(self) -> Optional[EpisodeState]:
        ...

    def observe_active(self) -> bool:
        ...

    def request_move(self, dx: int, dy: int) -> None:
        ...

    def request_collect_or_deliver(self) -> None:
        ...

    def notify_exhausted(self) -> None:
        ...

    def record_decision(self, action: Action, state: EpisodeState) -> object:
        ...

    async def idle(self) -> None:
        """Return once every issued command has been applied or dropped."""
        ...


# =============================================================================
# SELECTION
# =============================================================================


@dataclass(frozen=True)
class TargetChoice:
    """The resource chosen for a cycle and both legs of its round trip."""

    resource: Resource
    path_to_resource: PathResult
    path_to_base: PathResult
    efficiency: float

    @property
    def total_cost(self) -> float:
        return self.path_to_resource.cost + self.path_to_base.cost


def select_target(state: EpisodeState, *, find_path: PathFinder = find_path) -> Optional[TargetChoice]:
    """Pick the most efficient affordable resource in ``state`` (a snapshot).

    Returns None when no resource is both reachable and affordable, which means
    the episode has no profitable move left.
    """
    best: Optional[TargetChoice] = None
    max_efficiency = -1.0
    best_outbound_cost = math.inf

    for resource in state.resources:
        to_resource = find_path(state.agent.position, resource.position, state.terrain)
        to_base = find_path(resource.position, state.base, state.terrain)
        if not to_resource.reachable or not to_base.reachable:
            continue

        total_cost = to_resource.cost + to_base.cost

        # Zero cost and positive value: nothing can beat it, stop scanning.
        if total_cost == 0 and resource.value > 0:
            return TargetChoice(resource, to_resource, to_base, efficiency=math.inf)

        # Never commit to a round trip the budget cannot pay for in full.
        if state.step_cost + total_cost > state.budget:
            continue

        # Zero-cost, zero-value resource; worthless.
        if total_cost == 0:
            continue

        efficiency = resource.value / total_cost
        if efficiency > max_efficiency or (
            efficiency == max_efficiency and to_resource.cost < best_outbound_cost
        ):
            max_efficiency = efficiency
            best_outbound_cost = to_resource.cost
            best = TargetChoice(resource, to_resource, to_base, efficiency=efficiency)

    return best


# =============================================================================
# CONFIRMATION
# =============================================================================


class _NotConfirmed(Exception):
    """Expected post-condition not observed yet."""


async def wait_for_state(
    condition: StateCondition,
    observe_state: Callable[[], Optional[EpisodeState]],
    *,
    observe_active: Optional[Callable[[], bool]] = None,
    timeout: float = Config.CONFIRM_TIMEOUT,
    poll_interval: float = Config.POLL_INTERVAL,
) -> Optional[EpisodeState]:
    """Poll until ``condition`` holds on an observed snapshot.

    Returns the confirming snapshot, or None when ``timeout`` elapses or the
    episode is observed inactive before the condition holds.
    """
    try:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(_NotConfirmed),
            stop=stop_after_delay(timeout),
            wait=wait_fixed(poll_interval),
            reraise=True,
        ):
            with attempt:
                state = observe_state()
                if state is not None and condition(state):
                    return state
                if observe_active is not None and not observe_active():
                    return None
                raise _NotConfirmed()
    except _NotConfirmed:
        return None
    return None


# =============================================================================
# EXPERT BOT
# =============================================================================


class ExpertBot:
    """
    Greedy expert that plays full episodes through a GameControls surface.

    Attributes:
        phase: Current state-machine phase.
        delivered: Resources delivered in the current episode.
        aborted_cycles: Cycles abandoned while the episode was still active.
            A cycle cut short by the episode ending is not counted.
    """

    def __init__(
        self,
        controls: GameControls,
        *,
        find_path: PathFinder = find_path,
        confirm_timeout: float = Config.CONFIRM_TIMEOUT,
        poll_interval: float = Config.POLL_INTERVAL,
        max_aborted_cycles: int = Config.MAX_ABORTED_CYCLES,
    ) -> None:
        self.controls = controls
        self.find_path = find_path
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval
        self.max_aborted_cycles = max(1, max_aborted_cycles)

        self.phase = BotPhase.IDLE
        self.phase_history: List[BotPhase] = [BotPhase.IDLE]
        self.delivered = 0
        self.aborted_cycles = 0

    def reset(self) -> None:
        """Clear per-episode counters. Called by run_episode."""
        self.phase = BotPhase.IDLE
        self.phase_history = [BotPhase.IDLE]
        self.delivered = 0
        self.aborted_cycles = 0

    def _enter(self, phase: BotPhase) -> None:
        self.phase = phase
        self.phase_history.append(phase)

    async def _confirm(self, condition: StateCondition) -> Optional[EpisodeState]:
        return await wait_for_state(
            condition,
            self.controls.observe_state,
            observe_active=self.controls.observe_active,
            timeout=self.confirm_timeout,
            poll_interval=self.poll_interval,
        )

    def _abort(self, reason: str) -> CycleOutcome:
        if self.controls.observe_active():
            self.aborted_cycles += 1
            log_error(f"Bot: {reason}. Abandoning the current plan.")
            self._enter(BotPhase.IDLE)
            return CycleOutcome.ABORTED
        self._enter(BotPhase.TERMINATED)
        return CycleOutcome.INACTIVE

    async def execute_path(self, path: List[Position]) -> bool:
        """Drive the agent along ``path``, confirming every step.

        Returns True once the agent is confirmed on the last position. Paths of
        length 0 or 1 succeed immediately.

        Raises:
            InvalidPathStepError: If the path contains a non-unit step
        """
        if len(path) < 2:
            return True

        for current, following in zip(path, path[1:]):
            if not self.controls.observe_active():
                return False

            before = self.controls.observe_state()
            if before is None:
                return False

            if before.agent.position != current:
                log_error(
                    "Bot desync! Agent is not at the expected path position: "
                    f"expected ({current.x}, {current.y}), "
                    f"actual ({before.agent.position.x}, {before.agent.position.y})"
                )
                return False

            dx, dy = following.x - current.x, following.y - current.y
            action = action_for_delta(dx, dy)
            if action is None:
                raise InvalidPathStepError(current, following)

            self.controls.record_decision(action, before)
            self.controls.request_move(dx, dy)

            arrived = await self._confirm(lambda state: state.agent.position == following)
            if arrived is None:
                log_error(f"Bot failed to confirm move to ({following.x}, {following.y})")
                return False

        return True

    async def _request_action(self, condition: StateCondition) -> Optional[EpisodeState]:
        """Issue collect-or-deliver and wait for ``condition``."""
        before = self.controls.observe_state()
        if before is None or not self.controls.observe_active():
            return None
        self.controls.record_decision(Action.COLLECT_OR_DELIVER, before)
        self.controls.request_collect_or_deliver()
        return await self._confirm(condition)

    async def _deliver_from(self, path_to_base: PathResult) -> CycleOutcome:
        self._enter(BotPhase.MOVING_TO_BASE)
        if not await self.execute_path(path_to_base.path):
            return self._abort("return path to base failed")

        self._enter(BotPhase.DELIVERING)
        at_base = self.controls.observe_state()
        if at_base is None or not at_base.agent_at_base:
            return self._abort("agent is not on the base")
        if await self._request_action(lambda state: state.agent.holding is None) is None:
            return self._abort("delivery was not confirmed")

        self.delivered += 1
        self._enter(BotPhase.IDLE)
        return CycleOutcome.DELIVERED

    def _exhausted(self, message: str) -> CycleOutcome:
        self._enter(BotPhase.TERMINATING)
        log_bot(message)
        self.controls.notify_exhausted()
        self._enter(BotPhase.TERMINATED)
        return CycleOutcome.EXHAUSTED

    async def run_cycle(self) -> CycleOutcome:
        """Plan against a fresh snapshot and execute one fetch-deliver round trip."""
        if not self.controls.observe_active():
            self._enter(BotPhase.TERMINATED)
            return CycleOutcome.INACTIVE

        snapshot = self.controls.observe_state()
        if snapshot is None:
            self._enter(BotPhase.TERMINATED)
            return CycleOutcome.INACTIVE

        self._enter(BotPhase.SCANNING)

        # A resource still held from an abandoned cycle: plan only the delivery leg.
        held = snapshot.agent.holding
        if held is not None:
            to_base = self.find_path(snapshot.agent.position, snapshot.base, snapshot.terrain)
            if not to_base.reachable or snapshot.step_cost + to_base.cost > snapshot.budget:
                return self._exhausted("Held resource cannot be delivered within budget; ending episode.")
            log_bot(f"Returning held {held.kind} resource to base (cost {to_base.cost:g})")
            return await self._deliver_from(to_base)

        choice = select_target(snapshot, find_path=self.find_path)
        if choice is None:
            return self._exhausted("No affordable resource left; ending episode.")

        target = choice.resource
        log_bot(
            f"Target {target.kind} resource at ({target.position.x}, {target.position.y}): "
            f"round trip {choice.total_cost:g}, efficiency {choice.efficiency:.3f}"
        )

        self._enter(BotPhase.MOVING_TO_RESOURCE)
        if not await self.execute_path(choice.path_to_resource.path):
            return self._abort("path to resource failed")

        self._enter(BotPhase.COLLECTING)
        if await self._request_action(lambda state: state.agent.holding is not None) is None:
            return self._abort("collection was not confirmed")

        return await self._deliver_from(choice.path_to_base)

    async def wait_until_ready(self, episode_id: int) -> bool:
        """Restart barrier: True once episode ``episode_id`` is observed fresh and active."""
        ready = await self._confirm(
            lambda state: state.episode_id == episode_id and state.step_cost == 0
        )
        return ready is not None and self.controls.observe_active()

    async def run_episode(self, episode_id: Optional[int] = None) -> CycleOutcome:
        """Play cycles until the episode ends, is exhausted, or keeps aborting.

        Args:
            episode_id: When given, wait for that episode to be observed fresh
                before issuing the first command.

        Returns:
            The outcome that ended the loop.
        """
        self.reset()
        if episode_id is not None and not await self.wait_until_ready(episode_id):
            log_error(f"Bot: episode {episode_id} never became ready")
            self._enter(BotPhase.TERMINATED)
            return CycleOutcome.INACTIVE

        outcome = CycleOutcome.INACTIVE
        consecutive_aborts = 0
        while self.controls.observe_active():
            outcome = await self.run_cycle()
            if outcome in (CycleOutcome.EXHAUSTED, CycleOutcome.INACTIVE):
                break
            if outcome is CycleOutcome.ABORTED:
                # Let commands left over from the abandoned plan land before re-planning.
                await self.controls.idle()
                consecutive_aborts += 1
                if consecutive_aborts >= self.max_aborted_cycles:
                    log_error(f"Bot: {consecutive_aborts} consecutive aborted cycles; giving up.")
                    self.controls.notify_exhausted()
                    break
            else:
                consecutive_aborts = 0

        if self.phase is not BotPhase.TERMINATED:
            self._enter(BotPhase.TERMINATED)
        return outcome
