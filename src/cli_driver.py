# cli_driver.py
# This file is intended to be run to play or test the 2048 game on the CLI

import logging
from typing import Optional, Union

import core
from core import DIRECTION
from game_config import GameSettings, load_settings
from game_state import GameState, Snapshot

RESET = "reset"
QUIT = "quit"

Command = Union[DIRECTION, str]

# Arrow keys arrive as ANSI escape sequences when typed at a line prompt.
KEY_BINDINGS = {
    "\x1b[A": DIRECTION.UP,
    "\x1b[B": DIRECTION.DOWN,
    "\x1b[C": DIRECTION.RIGHT,
    "\x1b[D": DIRECTION.LEFT,
    "W": DIRECTION.UP,
    "A": DIRECTION.LEFT,
    "S": DIRECTION.DOWN,
    "D": DIRECTION.RIGHT,
    "R": RESET,
    "Q": QUIT,
}


def translate_input(text: str) -> Optional[Command]:
    """
    Maps a line of player input to a command.
    Args:
        text (str): Raw input, e.g. "w", "R" or an arrow-key escape sequence.
    Returns:
        Optional[Command]: A DIRECTION, RESET, QUIT, or None for anything else.
    """
    key = text.strip()
    if not key.startswith("\x1b"):
        key = key.upper()
    return KEY_BINDINGS.get(key)


def build_game(settings: GameSettings) -> GameState:
    return GameState(
        settings.rows,
        settings.cols,
        rng=core.SeededRandom(settings.seed),
        win_tile=settings.win_tile,
    )


def main():
    settings = load_settings()
    logging.basicConfig(level=settings.log_level.upper())

    # 1. Initialize game
    game = build_game(settings)
    display_board_state(game.snapshot())

    # 2. Game Loop
    while True:
        move_input = input("Enter move (arrows or W/A/S/D, R to restart, Q to quit): ")
        command = translate_input(move_input)

        if command == QUIT:
            print("Quitting game.")
            break

        if command == RESET:
            game.reset()
            display_board_state(game.snapshot())
            continue

        if command is None:
            print("Invalid input. Use the arrow keys or W, A, S, D.")
            continue

        # 3. Process the move
        outcome = game.apply_move(command)

        if not outcome.applied:
            print("No more moves possible. Press R to restart or Q to quit.")
        elif not outcome.changed:
            print("Move did not change the board. Try a different direction.")

        display_board_state(game.snapshot())

    # 4. Game Ended
    print("\n--- Final Board State ---")
    display_board_state(game.snapshot())


# --- Display Function (Example of external usage) ---
def format_board(snapshot: Snapshot) -> str:
    """Renders the cells as tab-separated rows, with '.' for empty cells."""
    return "\n".join(
        "\t".join(str(value) if value else "." for value in row)
        for row in snapshot.cells
    )


def display_board_state(snapshot: Snapshot):
    """Prints the board, score, and game status to the console."""
    print(f"\nScore: {snapshot.score}\tBest: {snapshot.best_score}")
    if snapshot.game_over:
        print("GAME OVER!")
    elif snapshot.won:
        print(f"YOU REACHED {snapshot.max_tile}!")
    else:
        print(f"Status: {snapshot.progress.name}")

    print(format_board(snapshot))
    print("-" * (len(snapshot.cells[0]) * 6))  # Adjust width based on board size


if __name__ == "__main__":
    main()
