# colour_scheme.py
# Reads the line-oriented colour-scheme files used by renderers:
#
#   # comment
#   BackgroundColor = rgb(250, 248, 239)
#   ScoreTextColor = rgb(119, 110, 101)
#   TileTextColor = 2 rgb(238,228,218) rgb(119,110,101)

import logging
import re
from typing import Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

Colour = Tuple[int, int, int]

_RGB_PATTERN = re.compile(r"^(?:rgb)?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$")


class ColourSchemeError(ValueError):
    """Raised for a recognised entry whose value cannot be parsed."""


class ColourScheme:
    """Background and score colours plus a (fill, text) colour pair per tile value."""

    def __init__(self, background_colour: Optional[Colour] = None,
                 score_text_colour: Optional[Colour] = None,
                 tiles: Optional[Dict[int, Tuple[Colour, Colour]]] = None):
        self.background_colour = background_colour
        self.score_text_colour = score_text_colour
        self.tiles = dict(tiles or {})

    def colours_for(self, value: int) -> Optional[Tuple[Colour, Colour]]:
        return self.tiles.get(value)

    def __eq__(self, other):
        if not isinstance(other, ColourScheme):
            return NotImplemented
        return (self.background_colour, self.score_text_colour, self.tiles) == \
            (other.background_colour, other.score_text_colour, other.tiles)


def parse_colour(text: str) -> Colour:
    """
    Parses "rgb(R, G, B)" (or "(R, G, B)") into a tuple.
    Raises:
        ValueError: If the text is malformed or a component is outside 0..255.
    """
    match = _RGB_PATTERN.match(text.strip())
    if not match:
        raise ValueError(f"Not an rgb colour: {text!r}")
    colour = tuple(int(part) for part in match.groups())
    if any(component > 255 for component in colour):
        raise ValueError(f"Colour components must be in 0..255: {text!r}")
    return colour


def _split_tile_entry(value: str) -> Tuple[str, str, str]:
    # "2 rgb(1, 2, 3) rgb(4,5,6)" -> ("2", "rgb(1, 2, 3)", "rgb(4,5,6)")
    tile_value, _, rest = value.partition(" ")
    colours = re.findall(r"(?:rgb)?\([^)]*\)", rest)
    if len(colours) != 2:
        raise ValueError(f"Expected a tile value and two colours: {value!r}")
    return tile_value, colours[0], colours[1]


def parse_colour_scheme(lines: Iterable[str]) -> ColourScheme:
    """
    Parses colour-scheme lines.
    Blank lines, comments (#), lines without "=" and unknown keys are skipped.
    Args:
        lines (Iterable[str]): The file contents, one entry per line.
    Returns:
        ColourScheme: The parsed scheme.
    Raises:
        ColourSchemeError: If a recognised entry is malformed.
    """
    scheme = ColourScheme()
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, _, value = line.partition("=")
        key, value = key.strip(), value.strip()
        try:
            if key == "BackgroundColor":
                scheme.background_colour = parse_colour(value)
            elif key == "ScoreTextColor":
                scheme.score_text_colour = parse_colour(value)
            elif key == "TileTextColor":
                tile_value, fill, text = _split_tile_entry(value)
                scheme.tiles[int(tile_value)] = (parse_colour(fill), parse_colour(text))
            else:
                logger.debug("Skipping unknown colour-scheme key %r on line %d", key, line_number)
        except ValueError as e:
            raise ColourSchemeError(f"Line {line_number}: {e}") from e
    return scheme


def load_colour_scheme(path: str) -> ColourScheme:
    """Reads and parses a UTF-8 colour-scheme file."""
    with open(path, encoding="utf-8") as handle:
        scheme = parse_colour_scheme(handle)
    logger.info("Loaded colour scheme from %s (%d tile entries)", path, len(scheme.tiles))
    return scheme
