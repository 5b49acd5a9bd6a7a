"""
Interactive game session: the single owner of the live episode state.

GameSession exposes the command/observation surface the expert bot (or any
other controller) plays through:

    request_move(dx, dy)           fire-and-forget
    request_collect_or_deliver()   fire-and-forget
    notify_exhausted()             fire-and-forget
    observe_state()                snapshot read
    observe_active()               is the episode accepting actions
    record_decision(action, state) dataset hook
    idle()                         wait for queued commands to land

Commands are queued and applied by a background update task, so their effect
becomes observable only after the caller yields to the event loop. Callers
must confirm post-conditions by observing state; they can never assume a
command was applied synchronously.

Each episode is a versioned EpisodeState. Restart replaces it wholesale with
a freshly generated one (never a partial reset), and every queued command is
tagged with the episode it was issued against so stale commands are dropped.
"""

import asyncio
import contextlib
import random
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

from .dataset import DecisionLog
from .logging_utils import log_error, log_info, log_success
from .map_generator import MapGenerator
from .persistence import HighScoreStore, InMemoryHighScores
from .rules import GameRules
from .schemas import (
    Action,
    DecisionRecord,
    EpisodeState,
    GameEvent,
    GameSettings,
    action_for_delta,
)

StateListener = Callable[[Optional[EpisodeState], EpisodeState], None]
CommandKind = Literal["move", "action", "end", "restart"]


class SessionClosedError(RuntimeError):
    """Raised when a command is issued while the session update loop is not running."""


@dataclass
class _Command:
    kind: CommandKind
    episode_id: int
    dx: int = 0
    dy: int = 0
    reason: str = ""
    budget: Optional[int] = None
    done: Optional["asyncio.Future[EpisodeState]"] = None


class GameSession:
    """Owns the episode state and applies commands asynchronously.

    Args:
        settings: Game parameters (defaults from Config)
        generator: Object with ``generate(*, episode_id, budget)``; defaults to MapGenerator
        rules: Mutation primitives; defaults to GameRules
        high_scores: Best-score store keyed by budget
        decision_log: Dataset log shared across episodes
        rng: Random source shared by the default generator and rules
        apply_delay: Seconds the update loop waits before applying each command.
            Zero still defers the effect until the caller yields.
        state_listeners: Callables invoked with (previous_state, new_state) after
            every publication. Failures are logged and do not stop the session.
    """

    MAX_EVENTS = 100

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        *,
        generator: Optional[MapGenerator] = None,
        rules: Optional[GameRules] = None,
        high_scores: Optional[HighScoreStore] = None,
        decision_log: Optional[DecisionLog] = None,
        rng: Optional[random.Random] = None,
        apply_delay: float = 0.0,
        state_listeners: Optional[List[StateListener]] = None,
    ) -> None:
        self.settings = settings or GameSettings()
        rng = rng or random.Random()
        self.generator = generator or MapGenerator(self.settings, rng=rng)
        self.rules = rules or GameRules(self.settings, rng=rng)
        self.high_scores = high_scores or InMemoryHighScores()
        self.decision_log = decision_log or DecisionLog()
        self.apply_delay = apply_delay
        self.state_listeners: List[StateListener] = list(state_listeners or [])

        # Newest first, capped at MAX_EVENTS; reset on every restart.
        self.events: List[GameEvent] = []
        self.high_score = 0

        self._state: Optional[EpisodeState] = None
        self._active = False
        self._episode_counter = 0
        self._commands: Optional["asyncio.Queue[_Command]"] = None
        self._worker: Optional["asyncio.Task[None]"] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Initialize the high-score store and launch the update loop."""
        if self.running:
            return
        await self.high_scores.initialize()
        self._commands = asyncio.Queue()
        self._worker = asyncio.create_task(self._run())

    async def close(self) -> None:
        """Stop the update loop. Pending commands are discarded."""
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
        self._worker = None
        self._commands = None
        self._active = False
        await self.high_scores.close()

    async def __aenter__(self) -> "GameSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def idle(self) -> None:
        """Wait until every queued command has been applied."""
        if self._commands is not None:
            await self._commands.join()

    # ------------------------------------------------------------------
    # Observation surface
    # ------------------------------------------------------------------

    def observe_state(self) -> Optional[EpisodeState]:
        """Immutable snapshot of the current episode (None before the first restart)."""
        if self._state is None:
            return None
        return self._state.model_copy(deep=True)

    def observe_active(self) -> bool:
        return self._active

    @property
    def episode_id(self) -> int:
        return self._episode_counter

    # ------------------------------------------------------------------
    # Command surface
    # ------------------------------------------------------------------

    def request_move(self, dx: int, dy: int) -> None:
        if action_for_delta(dx, dy) is None:
            raise ValueError(f"Invalid move delta ({dx}, {dy})")
        self._enqueue(_Command(kind="move", episode_id=self._episode_counter, dx=dx, dy=dy))

    def request_collect_or_deliver(self) -> None:
        self._enqueue(_Command(kind="action", episode_id=self._episode_counter))

    def notify_exhausted(self) -> None:
        """Controller signal: no profitable action is left in this episode."""
        self.end_episode(reason="No profitable moves left.")

    def end_episode(self, reason: str = "Episode stopped.") -> None:
        self._enqueue(_Command(kind="end", episode_id=self._episode_counter, reason=reason))

    def record_decision(self, action: Action, state: EpisodeState) -> DecisionRecord:
        """Log the pre-action state of ``action``. Called before the action is requested."""
        return self.decision_log.record(action, state)

    async def restart(self, *, budget: Optional[int] = None) -> EpisodeState:
        """Replace the episode with a freshly generated one.

        Returns once the new state is published and active with zero step-cost.

        Raises:
            MapGenerationError: If no solvable layout could be generated
        """
        done: "asyncio.Future[EpisodeState]" = asyncio.get_running_loop().create_future()
        self._enqueue(
            _Command(kind="restart", episode_id=self._episode_counter, budget=budget, done=done)
        )
        return await done

    def _enqueue(self, command: _Command) -> None:
        if not self.running or self._commands is None:
            raise SessionClosedError(
                f"Cannot queue '{command.kind}': session is not running (call start() first)"
            )
        self._commands.put_nowait(command)

    # ------------------------------------------------------------------
    # Update loop
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        assert self._commands is not None
        queue = self._commands
        while True:
            command = await queue.get()
            try:
                if self.apply_delay > 0:
                    await asyncio.sleep(self.apply_delay)
                await self._apply(command)
            except Exception as exc:
                if command.done is not None and not command.done.done():
                    command.done.set_exception(exc)
                else:
                    log_error(f"[Session] Failed to apply '{command.kind}': {exc}")
            finally:
                queue.task_done()

    async def _apply(self, command: _Command) -> None:
        if command.kind == "restart":
            await self._start_episode(command)
            return

        state = self._state
        # Drop commands issued against a superseded or finished episode.
        if state is None or not self._active or command.episode_id != state.episode_id:
            return

        if command.kind == "end":
            await self._finish_episode(command.reason)
            return

        if command.kind == "move":
            new_state, events = self.rules.apply_move(state, command.dx, command.dy)
        else:
            new_state, events = self.rules.apply_action(state)

        self._publish(new_state, events)

        if new_state.budget_exhausted:
            await self._finish_episode("Budget reached!")

    async def _start_episode(self, command: _Command) -> None:
        budget = command.budget if command.budget is not None else self.settings.budget
        episode_id = self._episode_counter + 1
        state = self.generator.generate(episode_id=episode_id, budget=budget)

        self._episode_counter = episode_id
        self.high_score = await self.high_scores.get_high_score(budget)
        self.events = []
        self._active = True
        self._publish(
            state,
            [GameEvent(event_type="action-info", icon="🚀", message="New game started!", episode_id=episode_id)],
        )
        log_info(
            f"[Session] Episode {episode_id} started (budget {budget}, "
            f"target {self.settings.target_score(budget)}, high score {self.high_score})"
        )

        if command.done is not None and not command.done.done():
            command.done.set_result(state.model_copy(deep=True))

    async def _finish_episode(self, reason: str) -> None:
        state = self._state
        if state is None or not self._active:
            return
        self._active = False

        if await self.high_scores.record_score(state.budget, state.score):
            self.high_score = state.score
            self._add_event(
                GameEvent(
                    event_type="action-info",
                    icon="🏆",
                    message=f"New High Score: {state.score}!",
                    episode_id=state.episode_id,
                )
            )
        self._add_event(
            GameEvent(
                event_type="action-info",
                icon="🏁",
                message=f"{reason} Final Score: {state.score}",
                episode_id=state.episode_id,
            )
        )
        log_success(
            f"[Session] Episode {state.episode_id} finished: {reason} "
            f"score={state.score}, cost={state.step_cost}/{state.budget}"
        )

    def _publish(self, new_state: EpisodeState, events: List[GameEvent]) -> None:
        previous = self._state
        self._state = new_state
        for event in events:
            self._add_event(event)

        for listener in self.state_listeners:
            try:
                listener(previous, new_state)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_error(f"[Session] State listener failed: {exc}")

    def _add_event(self, event: GameEvent) -> None:
        self.events.insert(0, event)
        del self.events[self.MAX_EVENTS:]
