"""Tests for the multi-episode bot runner."""

from __future__ import annotations

import random
from typing import Optional

import pytest

from gatherer.bot import ExpertBot
from gatherer.environment import Position, TerrainState
from gatherer.persistence import InMemoryHighScores
from gatherer.runner import BotRunner, EpisodeSummary, RunSummary
from gatherer.schemas import AgentState, EpisodeState, GameSettings, Resource
from gatherer.session import GameSession


class FixedLayout:
    def generate(self, *, episode_id: int = 0, budget: Optional[int] = None) -> EpisodeState:
        return EpisodeState(
            episode_id=episode_id,
            agent=AgentState(position=Position(x=0, y=0)),
            base=Position(x=0, y=0),
            terrain=TerrainState(size=5),
            resources=[Resource(position=Position(x=2, y=0), value=10)],
            budget=budget or 5,
        )


def fast_bot(session: GameSession) -> ExpertBot:
    return ExpertBot(session, confirm_timeout=1.0, poll_interval=0.001)


def settings() -> GameSettings:
    return GameSettings(grid_size=5, num_normal_resources=1, num_golden_resources=0, num_hindered_tiles=0, budget=5)


@pytest.mark.asyncio
async def test_runner_plays_each_episode_on_a_fresh_layout():
    finished = []
    high_scores = InMemoryHighScores()
    async with GameSession(settings(), generator=FixedLayout(), high_scores=high_scores) as session:
        runner = BotRunner(
            session,
            episodes=3,
            budget=5,
            bot_factory=fast_bot,
            episode_listeners=[finished.append],
        )
        summary = await runner.run()

        assert [e.episode_id for e in summary.episodes] == [1, 2, 3]
        assert all(e.score == 10 and e.step_cost == 4 and e.delivered == 1 for e in summary.episodes)
        assert summary.mean_score == 10
        assert summary.best_score == 10
        assert finished == summary.episodes
        assert not session.observe_active()
        assert await high_scores.get_high_score(5) == 10


@pytest.mark.asyncio
async def test_runner_reports_target_reached():
    async with GameSession(settings(), generator=FixedLayout()) as session:
        # Target for budget 5 is 5 // 4 == 1
        summary = await BotRunner(session, episodes=1, budget=5, bot_factory=fast_bot).run()

    assert summary.episodes[0].target_reached
    assert summary.targets_reached == 1


@pytest.mark.asyncio
async def test_runner_with_unaffordable_layout_scores_nothing():
    async with GameSession(settings(), generator=FixedLayout(), rng=random.Random(1)) as session:
        summary = await BotRunner(session, episodes=2, budget=3, bot_factory=fast_bot).run()

    assert [e.score for e in summary.episodes] == [0, 0]
    assert [e.step_cost for e in summary.episodes] == [0, 0]
    assert summary.best_score == 0


def test_empty_run_summary():
    summary = RunSummary()

    assert summary.mean_score == 0.0
    assert summary.best_score == 0
    assert summary.targets_reached == 0


def test_run_summary_aggregates():
    summary = RunSummary(
        episodes=[
            EpisodeSummary(episode_id=1, score=10, step_cost=4, budget=5, target_reached=True),
            EpisodeSummary(episode_id=2, score=30, step_cost=9, budget=10),
        ]
    )

    assert summary.mean_score == 20
    assert summary.best_score == 30
    assert summary.targets_reached == 1


def test_negative_episode_count_is_rejected():
    with pytest.raises(ValueError):
        BotRunner(GameSession(settings(), generator=FixedLayout()), episodes=-1)


@pytest.mark.asyncio
async def test_episode_ended_by_budget_mid_cycle_counts_no_abort():
    async with GameSession(settings(), generator=FixedLayout()) as session:
        # The round trip costs exactly the budget, so the last step ends the episode.
        summary = await BotRunner(session, episodes=1, budget=4, bot_factory=fast_bot).run()

    episode = summary.episodes[0]
    assert episode.step_cost == 4
    assert episode.score == 0
    assert episode.aborted_cycles == 0
