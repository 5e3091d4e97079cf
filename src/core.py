# core.py
# This file holds the board model and the move/spawn rules of the 2048 game.
# It has no I/O; adapters (cli_driver.py, api.py) drive it through game_state.py.

import logging
import random
from enum import Enum
from typing import List, NamedTuple, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

EMPTY = 0
DEFAULT_ROWS = 4
DEFAULT_COLS = 4

# A spawn draw above this threshold (out of 100) yields a 2, otherwise a 4.
SPAWN_TWO_THRESHOLD = 30

Position = Tuple[int, int]


class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


# --- Errors ---

class OutOfBoundsError(IndexError):
    """Raised when a (row, col) pair falls outside the board."""


class InvalidValueError(ValueError):
    """Raised when a cell is given a value that is neither 0 nor a power of two >= 2."""


class NoEmptyCellsError(RuntimeError):
    """Raised when a tile must be inserted but the board has no empty cell."""


# --- Randomness ---

class RandomSource(Protocol):
    """Anything that can hand out uniform integers in [0, bound)."""

    def next_int(self, bound: int) -> int:
        ...


class SeededRandom:
    """RandomSource backed by random.Random; pass a seed for repeatable games."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def next_int(self, bound: int) -> int:
        if bound <= 0:
            raise ValueError("bound must be positive")
        return self._random.randrange(bound)


def is_valid_tile_value(value: int) -> bool:
    """
    Checks whether a value may be stored in a cell.
    Args:
        value (int): Candidate cell value.
    Returns:
        bool: True for 0 (empty) or a power of two >= 2.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    if value == EMPTY:
        return True
    return value >= 2 and value & (value - 1) == 0


# --- Board ---

class Board:
    """
    A rows x cols grid of tile values plus a per-cell merged-this-turn flag.

    Values are 0 for an empty cell or a power of two >= 2. Merge flags are only
    set while a move is being applied and are all False between moves.
    """

    def __init__(self, rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS):
        for name, size in (("rows", rows), ("cols", cols)):
            if isinstance(size, bool) or not isinstance(size, int) or size < 2:
                raise ValueError(f"Board {name} must be an integer >= 2, got {size!r}.")
        self.rows = rows
        self.cols = cols
        self._cells: List[List[int]] = [[EMPTY] * cols for _ in range(rows)]
        self._merged: List[List[bool]] = [[False] * cols for _ in range(rows)]

    @classmethod
    def from_rows(cls, rows: List[List[int]]) -> "Board":
        """
        Builds a board from a list of lists of values.
        Args:
            rows (List[List[int]]): Row-major cell values.
        Returns:
            Board: A new board holding a copy of the values.
        Raises:
            ValueError: If the rows are ragged or smaller than 2x2.
            InvalidValueError: If any value is not a legal tile value.
        """
        if not rows or not all(len(row) == len(rows[0]) for row in rows):
            raise ValueError("Board must be a non-empty rectangular matrix.")
        board = cls(len(rows), len(rows[0]))
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                board.set(r, c, value)
        return board

    def _check_bounds(self, r: int, c: int) -> None:
        if not (0 <= r < self.rows and 0 <= c < self.cols):
            raise OutOfBoundsError(
                f"Cell ({r}, {c}) is outside the {self.rows}x{self.cols} board."
            )

    def get(self, r: int, c: int) -> int:
        self._check_bounds(r, c)
        return self._cells[r][c]

    def set(self, r: int, c: int, value: int) -> None:
        """
        Stores a value in a cell.
        Raises:
            OutOfBoundsError: If (r, c) is outside the board.
            InvalidValueError: If value is not 0 or a power of two >= 2.
        """
        self._check_bounds(r, c)
        if not is_valid_tile_value(value):
            raise InvalidValueError(
                f"Cell value must be 0 or a power of two >= 2, got {value!r}."
            )
        self._cells[r][c] = value

    def empty_cells(self) -> List[Position]:
        """Coordinates of empty cells in row-major order."""
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self._cells[r][c] == EMPTY
        ]

    def count_empty(self) -> int:
        return sum(row.count(EMPTY) for row in self._cells)

    def contains_value(self, value: int) -> bool:
        return any(value in row for row in self._cells)

    def max_tile(self) -> int:
        return max(max(row) for row in self._cells)

    def is_merged(self, r: int, c: int) -> bool:
        self._check_bounds(r, c)
        return self._merged[r][c]

    def mark_merged(self, r: int, c: int) -> None:
        self._check_bounds(r, c)
        self._merged[r][c] = True

    def clear_merge_flags(self) -> None:
        for row in self._merged:
            for c in range(self.cols):
                row[c] = False

    def clear(self) -> None:
        """Empties every cell and drops all merge flags."""
        for row in self._cells:
            for c in range(self.cols):
                row[c] = EMPTY
        self.clear_merge_flags()

    def to_rows(self) -> List[List[int]]:
        return [list(row) for row in self._cells]

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self):
        return f"Board({self._cells!r})"


# --- Lanes ---

def lane_positions(board: Board, direction: DIRECTION) -> List[List[Position]]:
    """
    Splits the board into lanes for a move direction.
    Each lane is a row (LEFT/RIGHT) or a column (UP/DOWN), ordered so that its
    first position sits on the edge the tiles travel towards.
    Args:
        board (Board): The board to slice.
        direction (DIRECTION): The move direction.
    Returns:
        List[List[Position]]: One list of (row, col) positions per lane.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    rows, cols = board.rows, board.cols
    if direction == DIRECTION.LEFT:
        return [[(r, c) for c in range(cols)] for r in range(rows)]
    if direction == DIRECTION.RIGHT:
        return [[(r, c) for c in reversed(range(cols))] for r in range(rows)]
    if direction == DIRECTION.UP:
        return [[(r, c) for r in range(rows)] for c in range(cols)]
    if direction == DIRECTION.DOWN:
        return [[(r, c) for r in reversed(range(rows))] for c in range(cols)]
    raise ValueError("Invalid direction specified for lane_positions.")


# --- Line Manipulation (Core Move Logic Helpers) ---

def _compress_line(line: List[int]) -> List[int]:
    """
    Moves all non-zero tiles to the start of the line, keeping their order,
    and pads the end with empties.
    """
    compressed = [value for value in line if value != EMPTY]
    return compressed + [EMPTY] * (len(line) - len(compressed))


def _merge_line(line: List[int]) -> Tuple[List[int], List[bool], int]:
    """
    Merges adjacent identical numbers in a compressed line, walking from index 0.
    Each tile takes part in at most one merge.
    Args:
        line (List[int]): A line already compressed towards index 0.
    Returns:
        Tuple[List[int], List[bool], int]: The merged (not yet recompressed)
            line, a flag per position marking freshly merged tiles, and the
            score gained.
    """
    n = len(line)
    merged_line = list(line)
    consumed = [False] * n
    merged_here = [False] * n
    score_increase = 0

    for i in range(n - 1):
        a, b = merged_line[i], merged_line[i + 1]
        if a == EMPTY or a != b or consumed[i] or consumed[i + 1]:
            continue
        merged_line[i] = a * 2
        merged_line[i + 1] = EMPTY
        consumed[i] = consumed[i + 1] = True
        merged_here[i] = True
        score_increase += a * 2

    return merged_line, merged_here, score_increase


def process_line(line: List[int]) -> Tuple[List[int], List[bool], int]:
    """
    Applies compress, merge, then compress again to a single line moving towards index 0.
    Args:
        line (List[int]): The line to process.
    Returns:
        Tuple[List[int], List[bool], int]: The processed line, a flag per
            position marking merged tiles, and the score increase.
    """
    compressed_line = _compress_line(line)
    merged_line, merged_here, score_delta = _merge_line(compressed_line)

    final_line: List[int] = []
    final_flags: List[bool] = []
    for value, flag in zip(merged_line, merged_here):
        if value != EMPTY:
            final_line.append(value)
            final_flags.append(flag)
    padding = len(line) - len(final_line)
    return final_line + [EMPTY] * padding, final_flags + [False] * padding, score_delta


# --- Core Game Move Processing ---

class MoveResult(NamedTuple):
    changed: bool
    score_delta: int
    merges: int


def apply_move(board: Board, direction: DIRECTION) -> MoveResult:
    """
    Slides and merges every lane of the board in place.
    Args:
        board (Board): The board to mutate.
        direction (DIRECTION): The direction to move.
    Returns:
        MoveResult: Whether any cell changed, the points scored and the number
            of merges performed. An unchanged board always scores 0.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    changed = False
    score_delta = 0
    merges = 0

    for lane in lane_positions(board, direction):
        before = [board.get(r, c) for r, c in lane]
        after, merged_flags, lane_score = process_line(before)
        if after == before:
            continue
        changed = True
        score_delta += lane_score
        merges += sum(merged_flags)
        for (r, c), value, merged in zip(lane, after, merged_flags):
            board.set(r, c, value)
            if merged:
                board.mark_merged(r, c)

    board.clear_merge_flags()
    logger.debug("Move %s: changed=%s score_delta=%d merges=%d",
                 direction.name, changed, score_delta, merges)
    return MoveResult(changed, score_delta, merges)


def moves_available(board: Board) -> bool:
    """
    Checks if any move is possible on the board.
    Args:
        board (Board): The game board.
    Returns:
        bool: True if an empty cell exists or two equal tiles are neighbours
            horizontally or vertically.
    """
    if board.count_empty() > 0:
        return True
    for r in range(board.rows):
        for c in range(board.cols):
            value = board.get(r, c)
            if c + 1 < board.cols and board.get(r, c + 1) == value:
                return True
            if r + 1 < board.rows and board.get(r + 1, c) == value:
                return True
    return False


# --- Tile Spawning ---

class SpawnResult(NamedTuple):
    placed: bool
    position: Optional[Position] = None
    value: Optional[int] = None


def random_tile_value(rng: RandomSource) -> int:
    """Draws the value of a new tile: 2 with probability 0.69, 4 with 0.31."""
    return 2 if rng.next_int(100) > SPAWN_TWO_THRESHOLD else 4


def spawn_tile(board: Board, rng: RandomSource) -> SpawnResult:
    """
    Adds a new tile to a uniformly chosen empty cell.
    Args:
        board (Board): The board to place the tile on.
        rng (RandomSource): Source of the cell and value draws.
    Returns:
        SpawnResult: placed=False when the board has no empty cell, otherwise
            the chosen position and value.
    """
    empty_cells = board.empty_cells()
    if not empty_cells:
        return SpawnResult(False)

    row, col = empty_cells[rng.next_int(len(empty_cells))]
    value = random_tile_value(rng)
    board.set(row, col, value)
    logger.debug("Spawned %d at (%d, %d)", value, row, col)
    return SpawnResult(True, (row, col), value)


def insert_random_tile(board: Board, rng: RandomSource) -> SpawnResult:
    """
    Like spawn_tile, for callers that guarantee an empty cell exists.
    Raises:
        NoEmptyCellsError: If the board is full.
    """
    result = spawn_tile(board, rng)
    if not result.placed:
        raise NoEmptyCellsError("Cannot insert a tile into a full board.")
    return result
