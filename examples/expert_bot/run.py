"""Expert bot batch run: play N episodes and optionally export the dataset.

Run with defaults from the environment / .env:

    python -m examples.expert_bot.run --episodes 10

Reproducible layouts, a smaller budget and a CSV dataset:

    python -m examples.expert_bot.run --episodes 5 --budget 60 --seed 7 --export decisions.csv

Show the first board and keep best scores between runs:

    python -m examples.expert_bot.run --episodes 3 --show-board --high-scores high_scores.json
"""

from __future__ import annotations

import argparse
import asyncio
import random
from pathlib import Path

from gatherer import (
    BotRunner,
    Config,
    EpisodeSummary,
    GameSession,
    GameSettings,
    InMemoryHighScores,
    JsonHighScores,
    render_ascii_board,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Gatherer expert bot batch run")
    parser.add_argument("--episodes", type=int, default=Config.BOT_EPISODES, help="Episodes to play")
    parser.add_argument("--budget", type=int, default=None, help="Step-cost budget per episode")
    parser.add_argument("--seed", type=int, default=None, help="Seed for map generation and respawns")
    parser.add_argument("--export", type=Path, default=None, help="Write the decision dataset to this CSV file")
    parser.add_argument("--high-scores", type=Path, default=None, help="JSON file holding best scores per budget")
    parser.add_argument("--show-board", action="store_true", help="Print the board at the start of each episode")
    return parser.parse_args()


async def main(args: argparse.Namespace) -> None:
    Config.validate()
    print(Config.display())
    print()

    settings = GameSettings()
    rng = random.Random(args.seed)
    high_scores = JsonHighScores(args.high_scores) if args.high_scores else InMemoryHighScores()

    def show_board(previous, state) -> None:
        # First publication of each episode.
        if previous is None or previous.episode_id != state.episode_id:
            print(render_ascii_board(state))
            print()

    def report(episode: EpisodeSummary) -> None:
        if episode.target_reached:
            print(f"  target reached in episode {episode.episode_id}")

    listeners = [show_board] if args.show_board else []
    async with GameSession(settings, rng=rng, high_scores=high_scores, state_listeners=listeners) as session:
        runner = BotRunner(
            session,
            episodes=args.episodes,
            budget=args.budget,
            episode_listeners=[report],
        )
        summary = await runner.run()

        print()
        print(f"Episodes: {len(summary.episodes)}")
        print(f"Mean score: {summary.mean_score:.1f}")
        print(f"Best score: {summary.best_score}")
        print(f"High score for this budget: {session.high_score}")

        if args.export:
            session.decision_log.export_csv(args.export, settings)


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
