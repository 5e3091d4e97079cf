import pytest

import core
from core import (
    DIRECTION,
    Board,
    InvalidValueError,
    NoEmptyCellsError,
    OutOfBoundsError,
    SeededRandom,
    apply_move,
    insert_random_tile,
    moves_available,
    process_line,
    spawn_tile,
)
from conftest import ScriptedRandom, parse_board


# --- Board ---

def test_new_board_is_empty():
    board = Board()
    assert (board.rows, board.cols) == (4, 4)
    assert board.count_empty() == 16
    assert len(board.empty_cells()) == 16
    assert not any(board.is_merged(r, c) for r in range(4) for c in range(4))


@pytest.mark.parametrize("rows, cols", [(1, 4), (4, 1), (0, 0), (2.0, 2)])
def test_board_rejects_bad_shape(rows, cols):
    with pytest.raises(ValueError):
        Board(rows, cols)


def test_rectangular_board():
    board = Board(2, 5)
    board.set(1, 4, 8)
    assert board.get(1, 4) == 8
    assert board.to_rows() == [[0, 0, 0, 0, 0], [0, 0, 0, 0, 8]]


@pytest.mark.parametrize("r, c", [(-1, 0), (0, -1), (4, 0), (0, 4)])
def test_get_and_set_out_of_bounds(r, c):
    board = Board()
    with pytest.raises(OutOfBoundsError):
        board.get(r, c)
    with pytest.raises(OutOfBoundsError):
        board.set(r, c, 2)


@pytest.mark.parametrize("value", [1, 3, 6, -2, 12, True, 2.0])
def test_set_rejects_invalid_values(value):
    board = Board()
    with pytest.raises(InvalidValueError):
        board.set(0, 0, value)
    assert board.get(0, 0) == 0


def test_set_accepts_large_powers_of_two():
    board = Board()
    board.set(0, 0, 2 ** 20)
    assert board.contains_value(2 ** 20)
    assert board.max_tile() == 2 ** 20


def test_empty_cells_and_contains_value():
    board = parse_board("""
        2 . . .
        . 4 . .
        . . . .
        . . . 8
    """)
    assert board.count_empty() == 13
    assert (0, 0) not in board.empty_cells()
    assert board.empty_cells()[0] == (0, 1)
    assert board.contains_value(4)
    assert not board.contains_value(16)


def test_from_rows_rejects_ragged_rows():
    with pytest.raises(ValueError):
        Board.from_rows([[2, 0], [0]])


def test_merge_flags_can_be_cleared():
    board = Board()
    board.mark_merged(1, 2)
    assert board.is_merged(1, 2)
    board.clear_merge_flags()
    assert not board.is_merged(1, 2)


# --- Line processing ---

@pytest.mark.parametrize("line, expected, score", [
    ([2, 2, 0, 0], [4, 0, 0, 0], 4),
    ([2, 2, 2, 2], [4, 4, 0, 0], 8),
    ([2, 2, 2, 0], [4, 2, 0, 0], 4),
    ([0, 4, 0, 8], [4, 8, 0, 0], 0),
    ([4, 4, 8, 0], [8, 8, 0, 0], 8),
    ([2, 0, 0, 2], [4, 0, 0, 0], 4),
    ([8, 4, 2, 2], [8, 4, 4, 0], 4),
    ([0, 0, 0, 0], [0, 0, 0, 0], 0),
])
def test_process_line(line, expected, score):
    result, flags, gained = process_line(line)
    assert result == expected
    assert gained == score
    assert len(flags) == len(line)


def test_process_line_flags_merged_positions():
    _, flags, _ = process_line([2, 2, 2, 2, 2])
    assert flags == [True, True, False, False, False]


# --- Move engine scenarios ---

def test_left_merge_simple():
    board = parse_board("""
        2 2 . .
        . . . .
        . . . .
        . . . .
    """)
    result = apply_move(board, DIRECTION.LEFT)
    assert result == (True, 4, 1)
    assert board == parse_board("""
        4 . . .
        . . . .
        . . . .
        . . . .
    """)


def test_left_merge_one_merge_per_tile():
    board = parse_board("""
        2 2 2 2
        . . . .
        . . . .
        . . . .
    """)
    result = apply_move(board, DIRECTION.LEFT)
    assert result.score_delta == 8
    assert result.merges == 2
    assert board.to_rows()[0] == [4, 4, 0, 0]


def test_left_with_triple():
    board = parse_board("""
        2 2 2 .
        . . . .
        . . . .
        . . . .
    """)
    result = apply_move(board, DIRECTION.LEFT)
    assert result.score_delta == 4
    assert board.to_rows()[0] == [4, 2, 0, 0]


def test_right_shift_without_merge():
    board = parse_board("""
        . 4 . 8
        . . . .
        . . . .
        . . . .
    """)
    result = apply_move(board, DIRECTION.RIGHT)
    assert result.changed
    assert result.score_delta == 0
    assert board.to_rows()[0] == [0, 0, 4, 8]


def test_unchanged_move_on_stuck_board():
    rows = """
        2 4 2 4
        4 2 4 2
        2 4 2 4
        4 2 4 2
    """
    board = parse_board(rows)
    result = apply_move(board, DIRECTION.LEFT)
    assert result == (False, 0, 0)
    assert board == parse_board(rows)
    assert not moves_available(board)


def test_vertical_merge_down():
    board = parse_board("""
        2 . . .
        2 . . .
        4 . . .
        4 . . .
    """)
    result = apply_move(board, DIRECTION.DOWN)
    assert result.score_delta == 12
    assert [row[0] for row in board.to_rows()] == [0, 0, 4, 8]


def test_up_moves_towards_row_zero():
    board = parse_board("""
        . . . .
        . . 2 .
        . . . .
        . . 2 4
    """)
    result = apply_move(board, DIRECTION.UP)
    assert result.score_delta == 4
    assert board.to_rows()[0] == [0, 0, 4, 4]
    assert board.count_empty() == 14


def test_right_merges_pair_nearest_right_edge():
    board = parse_board("""
        2 2 2 .
        . . . .
        . . . .
        . . . .
    """)
    apply_move(board, DIRECTION.RIGHT)
    assert board.to_rows()[0] == [0, 0, 2, 4]


def test_no_merge_cap():
    board = parse_board("""
        1024 1024 . .
        2048 2048 . .
        . . . .
        . . . .
    """)
    result = apply_move(board, DIRECTION.LEFT)
    assert result.score_delta == 2048 + 4096
    assert board.get(0, 0) == 2048
    assert board.get(1, 0) == 4096


def test_merged_tiles_do_not_chain():
    board = parse_board("""
        4 4 8 .
        . . . .
        . . . .
        . . . .
    """)
    apply_move(board, DIRECTION.LEFT)
    assert board.to_rows()[0] == [8, 8, 0, 0]


def test_move_clears_merge_flags():
    board = parse_board("""
        2 2 4 4
        2 2 4 4
        . . . .
        . . . .
    """)
    apply_move(board, DIRECTION.LEFT)
    assert not any(board.is_merged(r, c) for r in range(4) for c in range(4))


def test_packed_board_is_idempotent_in_each_direction():
    board = parse_board("""
        2 4 . .
        8 . . .
        . . . .
        . . . .
    """)
    assert not apply_move(board, DIRECTION.LEFT).changed
    assert not apply_move(board, DIRECTION.UP).changed
    assert board.to_rows()[0] == [2, 4, 0, 0]


def test_rectangular_board_moves():
    board = Board.from_rows([
        [2, 0, 2, 0, 4],
        [0, 0, 0, 0, 4],
    ])
    result = apply_move(board, DIRECTION.DOWN)
    assert board.to_rows() == [[0, 0, 0, 0, 0], [2, 0, 2, 0, 8]]
    assert result.score_delta == 8
    result = apply_move(board, DIRECTION.LEFT)
    assert board.to_rows()[1] == [4, 8, 0, 0, 0]
    assert result.score_delta == 4


# --- Moves available ---

def test_moves_available_with_empty_cell():
    board = parse_board("""
        2 4 2 4
        4 2 4 2
        2 4 2 4
        4 2 4 .
    """)
    assert moves_available(board)


@pytest.mark.parametrize("last_row", ["4 2 2 8", "4 2 4 4"])
def test_moves_available_with_equal_horizontal_neighbours(last_row):
    board = parse_board("""
        2 4 2 4
        4 2 4 2
        2 4 8 16
    """ + last_row)
    assert moves_available(board)


def test_moves_available_with_equal_vertical_neighbours():
    board = parse_board("""
        2 4 2 4
        4 2 4 2
        2 4 2 8
        4 2 4 8
    """)
    assert moves_available(board)


# --- Spawner ---

def test_spawn_picks_indexed_empty_cell_and_value():
    board = parse_board("""
        2 . . .
        . . . .
        . . . .
        . . . .
    """)
    rng = ScriptedRandom(2, 31)
    result = spawn_tile(board, rng)
    assert result == (True, (0, 3), 2)
    assert rng.calls == [15, 100]
    assert board.get(0, 3) == 2


@pytest.mark.parametrize("draw, value", [(0, 4), (30, 4), (31, 2), (99, 2)])
def test_spawn_value_threshold(draw, value):
    board = Board()
    result = spawn_tile(board, ScriptedRandom(0, draw))
    assert result.value == value
    assert board.get(0, 0) == value


def test_spawn_on_full_board_places_nothing():
    board = parse_board("""
        2 4
        4 2
    """)
    rng = ScriptedRandom()
    assert spawn_tile(board, rng) == (False, None, None)
    assert rng.calls == []


def test_insert_random_tile_requires_empty_cell():
    board = parse_board("""
        2 4
        4 2
    """)
    with pytest.raises(NoEmptyCellsError):
        insert_random_tile(board, ScriptedRandom())


def test_spawn_leaves_other_cells_alone():
    board = parse_board("""
        2 . . .
        . 4 . .
        . . . .
        . . . .
    """)
    before = board.to_rows()
    result = spawn_tile(board, SeededRandom(7))
    r, c = result.position
    after = board.to_rows()
    after[r][c] = 0
    assert after == before
    assert result.value in (2, 4)


def test_seeded_random_is_repeatable():
    first = SeededRandom(42)
    second = SeededRandom(42)
    assert [first.next_int(100) for _ in range(20)] == [second.next_int(100) for _ in range(20)]
    with pytest.raises(ValueError):
        first.next_int(0)


def test_spawn_probability_roughly_matches():
    rng = SeededRandom(1234)
    fours = sum(core.random_tile_value(rng) == 4 for _ in range(10000))
    assert 2800 < fours < 3400
