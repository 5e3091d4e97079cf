import logging
import uuid
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import core
from colour_scheme import ColourSchemeError, load_colour_scheme
from game_config import load_settings
from game_state import GameProgressState, GameState

logger = logging.getLogger(__name__)

settings = load_settings()

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="Play 2048 over HTTP. Games are kept in server memory "
                "for the lifetime of the process.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Games in progress, keyed by game id
games: Dict[str, GameState] = {}

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    rows: Optional[int] = Field(
        default=None,
        gt=1,  # Board must be at least 2x2
        description="Number of board rows. Defaults to the server setting (4)."
    )
    cols: Optional[int] = Field(
        default=None,
        gt=1,
        description="Number of board columns. Defaults to the server setting (4)."
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the tile spawner, for repeatable games."
    )

class GameStateData(BaseModel):
    """Represents the observable state of a game instance."""
    game_id: str = Field(..., description="Identifier to use for later requests.")
    board: List[List[int]] = Field(..., description="The game board as a list of rows; 0 is an empty cell.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    best_score: int = Field(..., ge=0, description="Best score of earlier rounds of this game.")
    progress: GameProgressState = Field(
        ...,
        description="Current progress state of the game (FRESH, PLAYING, GAME_OVER)."
    )
    won: bool = Field(..., description="True once the board holds the win tile.")
    rows: int = Field(..., gt=1, description="Number of board rows.")
    cols: int = Field(..., gt=1, description="Number of board columns.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    direction: core.DIRECTION = Field(
        ...,
        description="Direction of the move (UP, DOWN, LEFT, RIGHT)."
    )

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    applied: bool = Field(..., description="False when the game was already over.")
    changed: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    score_delta: int = Field(..., ge=0, description="Points scored by this move.")
    spawned_position: Optional[Tuple[int, int]] = Field(
        default=None,
        description="(row, col) of the tile added after the move, if any."
    )
    spawned_value: Optional[int] = Field(default=None, description="Value of the added tile, if any.")
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was not effective or the game ended."
    )

class ColourSchemeData(BaseModel):
    """Colours for a renderer, as (R, G, B) triples."""
    background_colour: Optional[Tuple[int, int, int]] = None
    score_text_colour: Optional[Tuple[int, int, int]] = None
    tiles: Dict[int, Tuple[Tuple[int, int, int], Tuple[int, int, int]]] = Field(
        default_factory=dict,
        description="Tile value mapped to (fill colour, text colour)."
    )

# --- Helpers ---

def _get_game(game_id: str) -> GameState:
    game = games.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail=f"Unknown game id: {game_id}")
    return game


def _state_data(game_id: str, game: GameState) -> dict:
    snapshot = game.snapshot()
    return dict(
        game_id=game_id,
        board=[list(row) for row in snapshot.cells],
        score=snapshot.score,
        best_score=snapshot.best_score,
        progress=snapshot.progress,
        won=snapshot.won,
        rows=game.board.rows,
        cols=game.board.cols,
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(settings.rate_limit)
async def start_new_game(request: Request, new_game: NewGameSettings):
    """
    Creates a game and returns its initial state: a board with one random
    tile, score 0 and progress FRESH.

    - **rows** / **cols**: board dimensions, at least 2 each. Default 4x4.
    - **seed**: optional spawner seed.
    """
    try:
        game = GameState(
            new_game.rows if new_game.rows is not None else settings.rows,
            new_game.cols if new_game.cols is not None else settings.cols,
            rng=core.SeededRandom(new_game.seed if new_game.seed is not None else settings.seed),
            win_tile=settings.win_tile,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unexpected error in /game/new")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")

    game_id = uuid.uuid4().hex
    games[game_id] = game
    logger.info("Created game %s", game_id)
    return GameStateData(**_state_data(game_id, game))


@app.get("/game/{game_id}", response_model=GameStateData, summary="Get a Game's State")
@limiter.limit(settings.rate_limit)
async def get_game(request: Request, game_id: str):
    game = _get_game(game_id)
    return GameStateData(**_state_data(game_id, game))


@app.post("/game/{game_id}/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(settings.rate_limit)
async def make_move(request: Request, game_id: str, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    The API will:
    1. Slide and merge tiles in the requested direction.
    2. If the move changed the board, add a new random tile (2 or 4).
    3. Update the score and the game progress.

    On a finished game nothing changes and `applied` is false.
    """
    game = _get_game(game_id)
    try:
        outcome = game.apply_move(request_data.direction)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error in /game/%s/move", game_id)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    message_for_client: Optional[str] = None
    if not outcome.applied:
        message_for_client = "Game Over. No more valid moves."
    elif not outcome.changed:
        message_for_client = "Move was not effective; board state unchanged."
    elif game.game_over:
        message_for_client = "Game Over. No more valid moves."

    spawned = outcome.spawned
    return MoveResponseData(
        **_state_data(game_id, game),
        applied=outcome.applied,
        changed=outcome.changed,
        score_delta=outcome.score_delta,
        spawned_position=spawned.position if spawned else None,
        spawned_value=spawned.value if spawned else None,
        message=message_for_client
    )


@app.post("/game/{game_id}/reset", response_model=GameStateData, summary="Restart a Game")
@limiter.limit(settings.rate_limit)
async def reset_game(request: Request, game_id: str):
    """Starts a new round on the same game, keeping its best score."""
    game = _get_game(game_id)
    game.reset()
    return GameStateData(**_state_data(game_id, game))


@app.get("/colour-scheme", response_model=ColourSchemeData, summary="Get the Renderer Colour Scheme")
@limiter.limit(settings.rate_limit)
async def get_colour_scheme(request: Request):
    if not settings.colour_scheme_path:
        raise HTTPException(status_code=404, detail="No colour scheme configured.")
    try:
        scheme = load_colour_scheme(settings.colour_scheme_path)
    except (OSError, ColourSchemeError) as e:
        logger.exception("Could not load colour scheme from %s", settings.colour_scheme_path)
        raise HTTPException(status_code=500, detail=f"Could not load colour scheme: {str(e)}")
    return ColourSchemeData(
        background_colour=scheme.background_colour,
        score_text_colour=scheme.score_text_colour,
        tiles=scheme.tiles,
    )
