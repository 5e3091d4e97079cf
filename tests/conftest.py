import pytest

from core import Board


class ScriptedRandom:
    """RandomSource that replays fixed draws, then always returns 0."""

    def __init__(self, *draws):
        self.draws = list(draws)
        self.calls = []

    def next_int(self, bound):
        self.calls.append(bound)
        value = self.draws.pop(0) if self.draws else 0
        assert 0 <= value < bound
        return value


def parse_board(text):
    """Builds a Board from rows like "2 2 . ." where "." is empty."""
    rows = []
    for line in text.strip().splitlines():
        rows.append([0 if token == "." else int(token) for token in line.split()])
    return Board.from_rows(rows)


@pytest.fixture
def scripted_random():
    return ScriptedRandom
