import logging
import random

import pytest

from slide2048.game import (
    Direction,
    GridEngine,
    InvalidConfiguration,
    NoSpaceAvailable,
    WIN_TILE,
)


class LastCellRandom(random.Random):
    """Always picks the last empty cell in row-major order."""

    def randrange(self, n):
        return n - 1


def settle(rows, direction):
    engine = GridEngine.from_rows(rows)
    for _ in range(engine.size):
        if not engine._shift(direction):
            break
    return [list(row) for row in engine.rows]


def count_tiles(engine):
    return sum(1 for row in engine.rows for v in row if v != 0)


def test_new_grid_has_two_tiles():
    game = GridEngine(4, rng=random.Random(1))
    values = [v for row in game.rows for v in row]
    assert len(values) == 16
    assert values.count(2) == 2
    assert values.count(0) == 14
    assert not game.is_won()
    assert not game.is_lost()


def test_smallest_grid():
    game = GridEngine(2, rng=random.Random(0))
    assert game.size == 2
    assert count_tiles(game) == 2


@pytest.mark.parametrize("size", [-1, 0, 1])
def test_too_small_grid_is_rejected(size):
    with pytest.raises(InvalidConfiguration):
        GridEngine(size)


@pytest.mark.parametrize(
    "rows",
    [
        [[2]],
        [[2, 0], [0]],
        [[2, 0, 0], [0, 0, 0]],
        [[3, 0], [0, 0]],
        [[1, 0], [0, 0]],
        [[-2, 0], [0, 0]],
        [[2.0, 0], [0, 0]],
        [["2", 0], [0, 0]],
        [[True, 0], [0, 0]],
    ],
)
def test_from_rows_rejects_bad_grids(rows):
    with pytest.raises(InvalidConfiguration):
        GridEngine.from_rows(rows)


def test_direction_vectors():
    assert Direction.UP.vector == (0, -1)
    assert Direction.DOWN.vector == (0, 1)
    assert Direction.LEFT.vector == (-1, 0)
    assert Direction.RIGHT.vector == (1, 0)
    assert Direction.UP.is_vertical and Direction.DOWN.is_vertical
    assert Direction.LEFT.is_horizontal and Direction.RIGHT.is_horizontal
    assert not Direction.UP.is_horizontal


def test_cell_uses_column_then_row():
    game = GridEngine.from_rows([[0, 4], [8, 0]])
    assert game.cell(1, 0) == 4
    assert game.cell(0, 1) == 8


@pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (2, 0), (0, 2)])
def test_cell_outside_grid_raises(x, y):
    game = GridEngine.from_rows([[2, 4], [8, 16]])
    with pytest.raises(IndexError):
        game.cell(x, y)


def test_rows_is_a_snapshot():
    game = GridEngine.from_rows([[2, 0], [0, 0]])
    rows = game.rows
    game.move(Direction.RIGHT)
    assert rows == ((2, 0), (0, 0))


def test_merge_left_on_two_by_two():
    game = GridEngine.from_rows([[2, 2], [4, 4]], rng=LastCellRandom())
    assert game.move(Direction.LEFT)
    # settled grid is [[4, 0], [8, 0]], then a 2 lands in the last empty cell
    assert game.rows == ((4, 0), (8, 2))


def test_tile_count_after_merges():
    # two merges and one spawn: 4 - 2 + 1
    game = GridEngine.from_rows([[2, 2], [4, 4]], rng=random.Random(0))
    before = count_tiles(game)
    assert game.move(Direction.LEFT)
    assert count_tiles(game) == before - 2 + 1 == 3

    # one merge and one slide in a 3x3 row: 3 - 1 + 1
    game = GridEngine.from_rows([[0, 0, 0], [2, 4, 4], [0, 0, 0]], rng=random.Random(0))
    assert game.move(Direction.RIGHT)
    assert game.rows[1][1:] == (2, 8)
    assert count_tiles(game) == 3


def test_full_grid_without_merges_does_not_move():
    game = GridEngine.from_rows([[2, 4], [4, 2]])
    assert not game.move(Direction.UP)
    assert game.rows == ((2, 4), (4, 2))
    assert game.is_lost()


def test_blocked_move_does_not_spawn():
    game = GridEngine.from_rows([[2, 0], [4, 0]])
    assert not game.move(Direction.LEFT)
    assert game.rows == ((2, 0), (4, 0))


def test_tiles_slide_to_the_wall():
    rows = [
        [0, 0, 0, 2],
        [0, 0, 0, 0],
        [0, 4, 0, 0],
        [0, 0, 0, 0],
    ]
    assert settle(rows, Direction.LEFT) == [
        [2, 0, 0, 0],
        [0, 0, 0, 0],
        [4, 0, 0, 0],
        [0, 0, 0, 0],
    ]
    assert settle(rows, Direction.DOWN) == [
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 4, 0, 2],
    ]


def test_column_of_three_moving_down():
    rows = [
        [2, 0, 0, 0],
        [2, 0, 0, 0],
        [2, 0, 0, 0],
        [0, 0, 0, 0],
    ]
    assert [row[0] for row in settle(rows, Direction.DOWN)] == [0, 0, 2, 4]


def test_row_of_four_can_merge_repeatedly_in_one_move():
    # Sweeps keep no merge marks, so one move folds the whole row
    rows = [
        [2, 2, 2, 2],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ]
    assert settle(rows, Direction.LEFT)[0] == [8, 0, 0, 0]


def test_move_accepts_direction_index():
    game = GridEngine.from_rows([[0, 2], [0, 0]], rng=LastCellRandom())
    assert game.move(2)
    assert game.cell(0, 0) == 2


def test_spawn_fills_an_empty_cell_with_two():
    game = GridEngine.from_rows([[2, 4], [0, 8]])
    x, y = game.spawn_random_tile()
    assert (x, y) == (0, 1)
    assert game.rows == ((2, 4), (2, 8))


def test_spawn_on_full_grid_raises():
    game = GridEngine.from_rows([[2, 4], [4, 2]])
    with pytest.raises(NoSpaceAvailable):
        game.spawn_random_tile()


def test_spawn_is_uniform():
    rng = random.Random(1234)
    counts = {}
    for _ in range(9000):
        game = GridEngine.from_rows([[0] * 3 for _ in range(3)], rng=rng)
        place = game.spawn_random_tile()
        counts[place] = counts.get(place, 0) + 1
    assert len(counts) == 9
    assert all(800 < c < 1200 for c in counts.values())


def test_win_with_planted_tile():
    game = GridEngine.from_rows([[0, 0, 0], [0, WIN_TILE, 0], [0, 0, 2]])
    assert game.is_won()
    game = GridEngine.from_rows([[0, 0, 0], [0, 1024, 0], [0, 0, 2]])
    assert not game.is_won()


def test_lose_needs_full_grid_without_neighbours():
    assert GridEngine.from_rows([[2, 4], [4, 2]]).is_lost()
    assert not GridEngine.from_rows([[2, 2], [4, 8]]).is_lost()
    assert not GridEngine.from_rows([[2, 4], [2, 8]]).is_lost()
    assert not GridEngine.from_rows([[2, 4], [0, 8]]).is_lost()


def test_valid_does_not_change_the_grid():
    game = GridEngine.from_rows([[2, 0], [0, 0]])
    assert game.valid(Direction.RIGHT)
    assert not game.valid(Direction.LEFT)
    assert game.rows == ((2, 0), (0, 0))


def test_clone_is_independent():
    game = GridEngine.from_rows([[2, 0], [0, 0]], rng=random.Random(3))
    other = game.clone()
    other.move(Direction.RIGHT)
    assert game.rows == ((2, 0), (0, 0))
    assert other.cell(1, 0) == 2


def test_random_play_keeps_invariants():
    rng = random.Random(42)
    game = GridEngine(4, rng=rng)
    for _ in range(500):
        if game.is_lost():
            break
        before = game.rows
        before_sum = sum(map(sum, before))
        before_count = count_tiles(game)
        moved = game.move(rng.choice(list(Direction)))
        after_sum = sum(map(sum, game.rows))

        for row in game.rows:
            for v in row:
                assert v == 0 or (v >= 2 and v & (v - 1) == 0)
        if moved:
            # merges keep the total, the spawn adds one 2
            assert after_sum == before_sum + 2
            assert count_tiles(game) <= before_count + 1
        else:
            assert game.rows == before


def test_highest_tile_and_text():
    game = GridEngine.from_rows([[2, 0], [64, 8]])
    assert game.highest_tile() == 64
    assert str(game) == "   2    0\n  64    8"


def test_move_logs_grid_at_debug(caplog):
    game = GridEngine.from_rows([[2, 0], [0, 0]], rng=LastCellRandom())
    with caplog.at_level(logging.DEBUG, logger="slide2048.game"):
        game.move(Direction.RIGHT)
    assert "move RIGHT changed=True" in caplog.text
    assert str(game) in caplog.text
