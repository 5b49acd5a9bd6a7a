"""
Batch runner: plays N expert-bot episodes through one GameSession.

Each episode:
1. Restart the session (barrier: returns once the fresh episode is published)
2. Run the bot until the episode ends, is exhausted, or keeps aborting
3. Drain the command queue and end the episode if the bot left it active
4. Summarize the final state and notify episode listeners

The session must already be started; the runner never closes it.
"""

from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from .bot import ExpertBot
from .config import Config
from .logging_utils import log_info, log_success
from .session import GameSession

BotFactory = Callable[[GameSession], ExpertBot]


class EpisodeSummary(BaseModel):
    """Outcome of one bot-played episode."""

    episode_id: int
    score: int
    step_cost: int
    budget: int
    delivered: int = 0
    aborted_cycles: int = 0
    target_reached: bool = False


class RunSummary(BaseModel):
    """Aggregate over every episode of a run."""

    episodes: List[EpisodeSummary] = Field(default_factory=list)

    @property
    def mean_score(self) -> float:
        if not self.episodes:
            return 0.0
        return sum(e.score for e in self.episodes) / len(self.episodes)

    @property
    def best_score(self) -> int:
        return max((e.score for e in self.episodes), default=0)

    @property
    def targets_reached(self) -> int:
        return sum(1 for e in self.episodes if e.target_reached)


EpisodeListener = Callable[[EpisodeSummary], None]


class BotRunner:
    """Drive ``episodes`` consecutive bot episodes on ``session``.

    Args:
        session: A started GameSession
        episodes: Number of episodes to play
        bot_factory: Builds the bot for the session (defaults to ExpertBot)
        episode_listeners: Called with each EpisodeSummary as it completes
    """

    def __init__(
        self,
        session: GameSession,
        *,
        episodes: int = Config.BOT_EPISODES,
        budget: Optional[int] = None,
        bot_factory: Optional[BotFactory] = None,
        episode_listeners: Optional[List[EpisodeListener]] = None,
    ) -> None:
        if episodes < 0:
            raise ValueError("episodes must be >= 0")
        self.session = session
        self.episodes = episodes
        self.budget = budget
        self.bot = (bot_factory or ExpertBot)(session)
        self.episode_listeners: List[EpisodeListener] = list(episode_listeners or [])

    async def run(self) -> RunSummary:
        summary = RunSummary()
        log_info(f"[Runner] Playing {self.episodes} episode(s)")

        for index in range(1, self.episodes + 1):
            episode = await self.run_episode()
            summary.episodes.append(episode)
            print(
                f"Episode {index}/{self.episodes}: score={episode.score} "
                f"cost={episode.step_cost}/{episode.budget} delivered={episode.delivered}"
            )
            for listener in self.episode_listeners:
                listener(episode)

        log_success(
            f"[Runner] {len(summary.episodes)} episode(s): mean score {summary.mean_score:.1f}, "
            f"best {summary.best_score}, target reached {summary.targets_reached}x"
        )
        return summary

    async def run_episode(self) -> EpisodeSummary:
        fresh = await self.session.restart(budget=self.budget)
        await self.bot.run_episode(fresh.episode_id)

        await self.session.idle()
        if self.session.observe_active():
            self.session.end_episode("Bot stopped.")
            await self.session.idle()

        final = self.session.observe_state()
        assert final is not None
        return EpisodeSummary(
            episode_id=final.episode_id,
            score=final.score,
            step_cost=final.step_cost,
            budget=final.budget,
            delivered=self.bot.delivered,
            aborted_cycles=self.bot.aborted_cycles,
            target_reached=final.score >= self.session.settings.target_score(final.budget),
        )
