# game_state.py
# This file sequences a player turn on top of the rules in core.py:
# move -> optional spawn -> score update -> game over check.

import logging
from enum import Enum
from typing import NamedTuple, Optional, Tuple

import core
from core import DIRECTION, Board, RandomSource, SeededRandom, SpawnResult

logger = logging.getLogger(__name__)

DEFAULT_WIN_TILE = 2048


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    FRESH = "FRESH"          # Just reset, no move applied yet
    PLAYING = "PLAYING"
    GAME_OVER = "GAME_OVER"  # No empty cell and no equal neighbours


class MoveOutcome(NamedTuple):
    applied: bool
    changed: bool = False
    score_delta: int = 0
    spawned: Optional[SpawnResult] = None


class Snapshot(NamedTuple):
    """Read-only view of a game for renderers."""
    cells: Tuple[Tuple[int, ...], ...]
    score: int
    best_score: int
    game_over: bool
    won: bool
    max_tile: int
    progress: GameProgressState


class GameState:
    """
    Owns a Board, the current score and the best score of a single player.

    Not safe for concurrent mutation; callers serialise apply_move and reset.
    """

    def __init__(self, rows: int = core.DEFAULT_ROWS, cols: int = core.DEFAULT_COLS,
                 rng: Optional[RandomSource] = None, win_tile: int = DEFAULT_WIN_TILE):
        self.board = Board(rows, cols)
        self.rng = rng if rng is not None else SeededRandom()
        self.win_tile = win_tile
        self.score = 0
        self.best_score = 0
        self.progress = GameProgressState.FRESH
        self.reset()

    def reset(self) -> None:
        """Starts a new round with a single tile, carrying the best score forward."""
        self.best_score = max(self.best_score, self.score)
        self.score = 0
        self.board.clear()
        core.insert_random_tile(self.board, self.rng)
        self.progress = GameProgressState.FRESH
        logger.info("Game reset on %dx%d board (best score %d)",
                    self.board.rows, self.board.cols, self.best_score)

    def moves_available(self) -> bool:
        return core.moves_available(self.board)

    @property
    def game_over(self) -> bool:
        return self.progress == GameProgressState.GAME_OVER

    def _enter_game_over(self) -> None:
        if self.progress != GameProgressState.GAME_OVER:
            self.progress = GameProgressState.GAME_OVER
            logger.info("Game over with score %d", self.score)

    def apply_move(self, direction: DIRECTION) -> MoveOutcome:
        """
        Plays one turn in the given direction.
        Args:
            direction (DIRECTION): The direction to move.
        Returns:
            MoveOutcome: applied=False (and nothing mutated) when no move is
                possible; otherwise whether the board changed, the points
                scored and the spawned tile, if any.
        """
        if not self.moves_available():
            self._enter_game_over()
            return MoveOutcome(applied=False)

        result = core.apply_move(self.board, direction)
        spawned = None
        if result.changed:
            # A changed board always has room: either a tile moved or a merge freed a cell.
            spawned = core.spawn_tile(self.board, self.rng)

        self.score += result.score_delta
        self.progress = GameProgressState.PLAYING
        if not self.moves_available():
            self._enter_game_over()

        return MoveOutcome(True, result.changed, result.score_delta, spawned)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            cells=tuple(tuple(row) for row in self.board.to_rows()),
            score=self.score,
            best_score=self.best_score,
            game_over=self.game_over,
            won=self.board.contains_value(self.win_tile),
            max_tile=self.board.max_tile(),
            progress=self.progress,
        )
