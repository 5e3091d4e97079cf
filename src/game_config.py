# game_config.py
# Settings shared by the CLI driver and the HTTP API.

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "GAME2048_"


class GameSettings(BaseModel):
    """Runtime settings, overridable through GAME2048_* environment variables."""
    rows: int = Field(default=4, gt=1, description="Number of board rows.")
    cols: int = Field(default=4, gt=1, description="Number of board columns.")
    win_tile: int = Field(default=2048, gt=0, description="Tile value reported as a win.")
    seed: Optional[int] = Field(default=None, description="Seed for the tile spawner; unset means unseeded.")
    rate_limit: str = Field(default="100/minute", description="slowapi limit applied to each API route.")
    log_level: str = Field(default="INFO", description="Root logging level for the CLI driver.")
    colour_scheme_path: Optional[str] = Field(
        default=None,
        description="Path to a colour-scheme file served by the API."
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> GameSettings:
    """
    Builds settings from environment variables such as GAME2048_ROWS.
    Args:
        environ (Optional[Mapping[str, str]]): Variables to read; defaults to os.environ.
    Returns:
        GameSettings: Validated settings; unset variables keep their defaults.
    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    environ = os.environ if environ is None else environ
    values = {}
    for name in GameSettings.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            values[name] = raw
    return GameSettings(**values)
