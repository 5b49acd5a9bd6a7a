"""Tests for decision capture and CSV export."""

import csv

from gatherer.dataset import DecisionLog, build_state_representation, csv_header, record_to_row
from gatherer.environment import Position, TerrainState
from gatherer.schemas import Action, AgentState, EpisodeState, GameSettings, Resource


def dataset_settings() -> GameSettings:
    return GameSettings(grid_size=5, num_normal_resources=2, num_golden_resources=1, num_hindered_tiles=2)


def make_state(**overrides) -> EpisodeState:
    values = dict(
        episode_id=3,
        agent=AgentState(position=Position(x=1, y=2)),
        base=Position(x=0, y=0),
        terrain=TerrainState(size=5, hindered=[Position(x=4, y=4), Position(x=3, y=1)]),
        resources=[
            Resource(position=Position(x=2, y=0), kind="normal", value=10),
            Resource(position=Position(x=0, y=3), kind="golden", value=50),
        ],
        score=20,
        step_cost=7,
        budget=40,
    )
    values.update(overrides)
    return EpisodeState(**values)


def test_state_representation_splits_resources_by_kind():
    rep = build_state_representation(make_state())

    assert rep.agent_pos == (1, 2)
    assert rep.holding == "none"
    assert rep.base_pos == (0, 0)
    assert rep.normal_resources_pos == [(2, 0)]
    assert rep.golden_resources_pos == [(0, 3)]
    assert rep.mud_pos == [(4, 4), (3, 1)]
    assert rep.remaining_cost == 33


def test_state_representation_reports_held_kind():
    held = Resource(position=Position(x=1, y=2), kind="golden", value=50)
    rep = build_state_representation(make_state(agent=AgentState(position=Position(x=1, y=2), holding=held)))

    assert rep.holding == "golden"


def test_header_columns_depend_on_configured_counts():
    header = csv_header(dataset_settings())

    assert header[:7] == ["episode_id", "log_id", "agent_x", "agent_y", "holding", "base_x", "base_y"]
    assert header[7:11] == ["norm_res_0_x", "norm_res_1_x", "norm_res_0_y", "norm_res_1_y"]
    assert header[-4:] == ["remaining_cost", "action", "score", "cost"]
    assert len(header) == 7 + 4 + 2 + 4 + 4


def test_rows_are_padded_and_aligned_with_header():
    settings = dataset_settings()
    log = DecisionLog()
    record = log.record(Action.RIGHT, make_state())

    row = dict(zip(csv_header(settings), record_to_row(record, settings)))

    assert len(record_to_row(record, settings)) == len(csv_header(settings))
    assert row["episode_id"] == 3
    assert row["norm_res_0_x"] == 2
    assert row["norm_res_0_y"] == 0
    assert row["norm_res_1_x"] == -1
    assert row["norm_res_1_y"] == -1
    assert row["gold_res_0_x"] == 0
    assert row["gold_res_0_y"] == 3
    assert row["mud_1_x"] == 3
    assert row["mud_1_y"] == 1
    assert row["action"] == 3
    assert row["score"] == 20
    assert row["cost"] == 7


def test_log_ids_increase_and_reset_on_clear():
    log = DecisionLog()
    first = log.record(Action.UP, make_state())
    second = log.record(Action.COLLECT_OR_DELIVER, make_state())

    assert (first.log_id, second.log_id) == (0, 1)
    assert len(log) == 2

    log.clear()
    assert len(log) == 0
    assert log.record(Action.DOWN, make_state()).log_id == 0


def test_recording_does_not_alias_live_state():
    state = make_state()
    log = DecisionLog()
    record = log.record(Action.LEFT, state)

    state.resources.clear()

    assert record.state.normal_resources_pos == [(2, 0)]


def test_export_writes_header_and_rows(tmp_path):
    settings = dataset_settings()
    log = DecisionLog()
    log.record(Action.RIGHT, make_state())
    log.record(Action.COLLECT_OR_DELIVER, make_state(step_cost=8))
    path = tmp_path / "out" / "decisions.csv"

    assert log.export_csv(path, settings) is True

    with path.open(newline="") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == csv_header(settings)
    assert len(rows) == 3
    assert rows[2][-3] == "4"
    assert rows[2][-1] == "8"


def test_export_of_empty_log_writes_nothing(tmp_path, capsys):
    path = tmp_path / "decisions.csv"

    assert DecisionLog().export_csv(path, dataset_settings()) is False
    assert not path.exists()
    assert "No log data to export." in capsys.readouterr().out
