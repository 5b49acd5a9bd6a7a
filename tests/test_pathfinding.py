"""Tests for the A* pathfinder and the terrain grid it searches."""

import math

from gatherer.environment import (
    UNREACHABLE,
    Position,
    TerrainGrid,
    TerrainState,
    find_path,
    manhattan_distance,
)


def open_terrain(size: int = 5) -> TerrainState:
    return TerrainState(size=size)


def positions(*coords):
    return [Position(x=x, y=y) for x, y in coords]


def test_straight_line_path_on_open_grid():
    result = find_path(Position(x=0, y=0), Position(x=2, y=0), open_terrain())

    assert result.path == positions((0, 0), (1, 0), (2, 0))
    assert result.cost == 2
    assert result.reachable


def test_cost_equals_manhattan_distance_without_hindered_tiles():
    terrain = open_terrain(6)
    for start in [(0, 0), (5, 5), (2, 3), (4, 1)]:
        for goal in [(0, 5), (3, 3), (5, 0), (1, 4)]:
            result = find_path(start, goal, terrain)
            assert result.cost == manhattan_distance(start, goal)
            assert len(result.path) == result.cost + 1


def test_same_start_and_goal_returns_single_cell():
    terrain = TerrainState(size=4, hindered=positions((2, 2)))
    for coord in [(0, 0), (2, 2), (3, 1)]:
        result = find_path(coord, coord, terrain)
        assert result.path == [Position.from_tuple(coord)]
        assert result.cost == 0


def test_out_of_bounds_endpoint_is_unreachable():
    terrain = open_terrain(3)

    for start, goal in [((0, 0), (3, 0)), ((0, 0), (0, -1)), ((5, 5), (1, 1))]:
        result = find_path(start, goal, terrain)
        assert result.path == []
        assert result.cost == UNREACHABLE
        assert math.isinf(result.cost)
        assert not result.reachable


def test_hindered_tile_is_avoided_when_detour_is_cheaper():
    # Crossing the mud at (1, 0) costs 6; the detour through row 1 costs 4.
    terrain = TerrainState(size=3, hindered_cost=5, hindered=positions((1, 0)))

    result = find_path((0, 0), (2, 0), terrain)

    assert Position(x=1, y=0) not in result.path
    assert result.cost == 4


def test_hindered_tile_is_crossed_when_no_cheaper_route_exists():
    # A full column of mud: every route must enter exactly one hindered cell.
    terrain = TerrainState(size=3, hindered=positions((1, 0), (1, 1), (1, 2)))

    result = find_path((0, 1), (2, 1), terrain)

    assert result.cost == 3 + 1
    assert result.path[0] == Position(x=0, y=1)
    assert result.path[-1] == Position(x=2, y=1)


def test_path_is_made_of_unit_cardinal_steps():
    terrain = TerrainState(size=6, hindered=positions((2, 2), (2, 3), (3, 2), (1, 4)))

    result = find_path((0, 0), (5, 5), terrain)

    for current, following in zip(result.path, result.path[1:]):
        assert abs(current.x - following.x) + abs(current.y - following.y) == 1


def test_cost_is_symmetric_on_symmetric_overlay():
    terrain = TerrainState(size=5, hindered=positions((2, 0), (2, 1), (2, 2), (2, 3)))

    forward = find_path((0, 0), (4, 0), terrain)
    backward = find_path((4, 0), (0, 0), terrain)

    assert forward.cost == backward.cost


def test_path_cost_is_sum_of_entry_costs():
    terrain = TerrainState(size=5, hindered=positions((1, 1), (3, 3), (2, 4)))
    grid = TerrainGrid.from_state(terrain)

    result = find_path((0, 0), (4, 4), terrain)

    assert result.cost == sum(grid.entry_cost(p.x, p.y) for p in result.path[1:])


def test_accepts_grid_and_state_interchangeably():
    terrain = TerrainState(size=4, hindered=positions((1, 0)))
    grid = TerrainGrid.from_state(terrain)

    assert find_path((0, 0), (3, 0), terrain) == find_path((0, 0), (3, 0), grid)


def test_ties_are_broken_by_push_order():
    # Both L-shaped routes cost 2. The cell above the start is pushed first,
    # so the route through it wins.
    result = find_path((0, 1), (1, 0), open_terrain(2))

    assert result.path == positions((0, 1), (0, 0), (1, 0))


def test_grid_neighbors_follow_up_down_left_right_order():
    grid = TerrainGrid(size=3)

    assert list(grid.neighbors((1, 1))) == [(1, 0), (1, 2), (0, 1), (2, 1)]
    assert list(grid.neighbors((0, 0))) == [(0, 1), (1, 0)]
