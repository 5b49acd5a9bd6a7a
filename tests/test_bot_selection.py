"""Tests for the greedy target selection used by the expert bot."""

import math

from gatherer.bot import select_target
from gatherer.environment import Position, TerrainState, find_path
from gatherer.schemas import AgentState, EpisodeState, Resource


def resource(x: int, y: int, value: int = 10, kind: str = "normal") -> Resource:
    return Resource(position=Position(x=x, y=y), kind=kind, value=value)


def make_state(resources, *, agent=(0, 0), base=(0, 0), budget=100, step_cost=0, hindered=()) -> EpisodeState:
    return EpisodeState(
        episode_id=1,
        agent=AgentState(position=Position.from_tuple(agent)),
        base=Position.from_tuple(base),
        terrain=TerrainState(size=5, hindered=[Position.from_tuple(c) for c in hindered]),
        resources=resources,
        budget=budget,
        step_cost=step_cost,
    )


def test_selects_single_reachable_resource():
    state = make_state([resource(2, 0)])

    choice = select_target(state)

    assert choice is not None
    assert choice.resource.position == Position(x=2, y=0)
    assert choice.path_to_resource.cost == 2
    assert choice.path_to_base.cost == 2
    assert choice.total_cost == 4
    assert choice.efficiency == 2.5


def test_round_trip_over_budget_is_skipped():
    state = make_state([resource(2, 0)], budget=3)

    assert select_target(state) is None


def test_round_trip_exactly_fitting_budget_is_kept():
    state = make_state([resource(2, 0)], budget=10, step_cost=6)

    assert select_target(state) is not None


def test_prefers_highest_value_per_cost():
    cheap_far = resource(4, 4, value=10)
    golden_near = resource(0, 2, value=50, kind="golden")
    state = make_state([cheap_far, golden_near])

    choice = select_target(state)

    assert choice.resource == golden_near


def test_mud_lowers_efficiency():
    # Same value and distance; the route to (0, 2) crosses mud both ways.
    muddy = resource(0, 2)
    clean = resource(2, 0)
    state = make_state([muddy, clean], hindered=[(0, 1), (1, 1), (1, 2)])

    choice = select_target(state)

    assert choice.resource == clean


def test_equal_efficiency_prefers_closer_resource():
    far = resource(0, 2, value=20)  # 20 / 4 = 5
    near = resource(1, 0, value=10)  # 10 / 2 = 5
    state = make_state([far, near])

    choice = select_target(state)

    assert choice.resource == near
    assert choice.path_to_resource.cost == 1


def test_zero_cost_resource_short_circuits_scan():
    rich = resource(1, 0, value=1000)
    underfoot = resource(0, 0, value=1)
    later = resource(0, 1, value=1000)
    state = make_state([rich, underfoot, later], budget=5, step_cost=5)

    choice = select_target(state)

    assert choice.resource == underfoot
    assert math.isinf(choice.efficiency)
    assert choice.total_cost == 0


def test_zero_cost_zero_value_resource_is_ignored():
    state = make_state([resource(0, 0, value=0)])

    assert select_target(state) is None


def test_unreachable_resource_is_skipped():
    stray = resource(9, 9)
    state = make_state([stray, resource(3, 0)])

    choice = select_target(state)

    assert choice.resource.position == Position(x=3, y=0)


def test_no_resources_means_no_target():
    assert select_target(make_state([])) is None


def test_uses_injected_pathfinder_for_both_legs():
    calls = []

    def counting_find_path(start, goal, terrain):
        calls.append((start.as_tuple(), goal.as_tuple()))
        return find_path(start, goal, terrain)

    state = make_state([resource(2, 0), resource(0, 3)], agent=(1, 1))
    select_target(state, find_path=counting_find_path)

    assert calls == [
        ((1, 1), (2, 0)),
        ((2, 0), (0, 0)),
        ((1, 1), (0, 3)),
        ((0, 3), (0, 0)),
    ]


def test_selection_does_not_mutate_snapshot():
    state = make_state([resource(2, 0), resource(1, 3)])
    before = state.model_copy(deep=True)

    select_target(state)

    assert state == before
