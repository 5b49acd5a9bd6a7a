"""
State-action dataset capture and CSV export.

Every issued action (human or bot) is recorded together with the state the
decision was made in. The resulting log is exported as a flat CSV where each
entity list is padded to the configured count, so every row has the same
number of columns regardless of how many resources were on the board.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from .logging_utils import log_error, log_success
from .schemas import (
    Action,
    DecisionRecord,
    EpisodeState,
    GameSettings,
    StateRepresentation,
)

HOLDING_CODES: Dict[str, int] = {"none": 0, "normal": 1, "golden": 2}
PAD_VALUE = -1


def build_state_representation(state: EpisodeState) -> StateRepresentation:
    """Flatten an EpisodeState into the dataset's state columns."""
    holding = state.agent.holding.kind if state.agent.holding else "none"
    return StateRepresentation(
        agent_pos=state.agent.position.as_tuple(),
        holding=holding,
        base_pos=state.base.as_tuple(),
        normal_resources_pos=[r.position.as_tuple() for r in state.resources if r.kind == "normal"],
        golden_resources_pos=[r.position.as_tuple() for r in state.resources if r.kind == "golden"],
        mud_pos=[p.as_tuple() for p in state.terrain.hindered],
        remaining_cost=state.remaining_cost,
    )


def csv_header(settings: GameSettings) -> List[str]:
    """Column names for ``export_csv``; entity columns depend on the configured counts."""

    def axis_columns(prefix: str, count: int) -> List[str]:
        return [f"{prefix}_{i}_x" for i in range(count)] + [f"{prefix}_{i}_y" for i in range(count)]

    return [
        "episode_id", "log_id", "agent_x", "agent_y", "holding", "base_x", "base_y",
        *axis_columns("norm_res", settings.num_normal_resources),
        *axis_columns("gold_res", settings.num_golden_resources),
        *axis_columns("mud", settings.num_hindered_tiles),
        "remaining_cost", "action", "score", "cost",
    ]


def _pad(positions: Sequence[Tuple[int, int]], length: int) -> List[Tuple[int, int]]:
    padded = list(positions)[:length]
    while len(padded) < length:
        padded.append((PAD_VALUE, PAD_VALUE))
    return padded


def _flatten(positions: Sequence[Tuple[int, int]]) -> List[int]:
    # All x values first, then all y values, in the same order as csv_header.
    return [pos[0] for pos in positions] + [pos[1] for pos in positions]


def record_to_row(record: DecisionRecord, settings: GameSettings) -> List[int]:
    state = record.state
    return [
        record.episode_id,
        record.log_id,
        state.agent_pos[0],
        state.agent_pos[1],
        HOLDING_CODES[state.holding],
        state.base_pos[0],
        state.base_pos[1],
        *_flatten(_pad(state.normal_resources_pos, settings.num_normal_resources)),
        *_flatten(_pad(state.golden_resources_pos, settings.num_golden_resources)),
        *_flatten(_pad(state.mud_pos, settings.num_hindered_tiles)),
        state.remaining_cost,
        int(record.action),
        record.score,
        record.cost,
    ]


class DecisionLog:
    """Append-only log of (state, action) decisions across episodes."""

    def __init__(self) -> None:
        self.records: List[DecisionRecord] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self.records)

    def record(self, action: Action, state: EpisodeState) -> DecisionRecord:
        """Capture ``state`` as the pre-action state of ``action``."""
        entry = DecisionRecord(
            log_id=self._next_id,
            episode_id=state.episode_id,
            state=build_state_representation(state),
            action=Action(action),
            score=state.score,
            cost=state.step_cost,
        )
        self.records.append(entry)
        self._next_id += 1
        return entry

    def clear(self) -> None:
        self.records.clear()
        self._next_id = 0

    def export_csv(self, path: Path | str, settings: GameSettings) -> bool:
        """Write the dataset to ``path``. Returns False (and writes nothing) when empty."""
        if not self.records:
            log_error("No log data to export.")
            return False

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(csv_header(settings))
            for entry in self.records:
                writer.writerow(record_to_row(entry, settings))

        log_success(f"Exported {len(self.records)} decisions to {target}")
        return True
