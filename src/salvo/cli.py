"""Command-line driver for playing against the hunt/target attacker."""

from __future__ import annotations

import argparse
import logging
import string
import time
from typing import Sequence

from opentelemetry.instrumentation.logging import LoggingInstrumentor

from salvo.config import MatchConfig, load_match_config
from salvo.engine.board import AttackResult, Board, CellState
from salvo.engine.match import Match, MatchPhase, Player, ShipPlacement
from salvo.engine.ship import Coordinate, Orientation, Ship
from salvo.telemetry import init_telemetry
from salvo.telemetry.logger import configure_logging

ROW_LABELS = string.ascii_uppercase

CELL_SYMBOLS = {
    CellState.HIT: "X",
    CellState.MISS: "o",
    CellState.SHIP: "S",
    CellState.EMPTY: ".",
}

RESULT_TEXT = {
    AttackResult.MISS: "miss",
    AttackResult.HIT: "hit",
    AttackResult.SUNK: "hit and sunk!",
}


def parse_coordinate(text: str, size: int = 10) -> Coordinate:
    """Parse ``A5`` (row letter, 1-based column) or ``"3 7"`` (0-based row and column)."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS[:size]:
            raise ValueError(f"Row must be between A and {ROW_LABELS[size - 1]}.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError(f"Column must be a number between 1 and {size}.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            row, col = map(int, parts)
        except ValueError as exc:
            raise ValueError("Row and column must be numbers.") from exc
    if row not in range(size) or col not in range(size):
        raise ValueError(f"Coordinates must be within the {size}x{size} board.")
    return Coordinate(row, col)


def format_coordinate(coord: Coordinate) -> str:
    return f"{ROW_LABELS[coord.row]}{coord.col + 1}"


def format_board(board: Board, show_ships: bool) -> str:
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(board.size))
    rows = [header]
    for row_index, row in enumerate(board.board_state()):
        symbols = []
        for state in row:
            if state is CellState.SHIP and not show_ships:
                state = CellState.EMPTY
            symbols.append(f"{CELL_SYMBOLS[state]:>2}")
        rows.append(f"{ROW_LABELS[row_index]} |" + " ".join(symbols))
    return "\n".join(rows)


def _prompt_orientation(length: int) -> Orientation:
    while True:
        raw = input(f"Place a ship of length {length}. Orientation [H/V]: ").strip().upper()
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return Orientation.HORIZONTAL
        if raw in {"V", "VER", "VERTICAL"}:
            return Orientation.VERTICAL
        print("Please enter H for horizontal or V for vertical.")


def _manual_layout(config: MatchConfig) -> list[ShipPlacement]:
    preview = Board(size=config.board_size, owner="preview")
    layout: list[ShipPlacement] = []
    for length in config.fleet:
        while True:
            print("\nCurrent layout:")
            print(format_board(preview, show_ships=True))
            orientation = _prompt_orientation(length)
            try:
                origin = parse_coordinate(input("Enter starting coordinate (e.g., A1): "), preview.size)
            except ValueError as exc:
                print(f"Invalid coordinate: {exc}")
                continue
            placement = ShipPlacement(length, origin, orientation)
            if preview.place_ship(Ship(length), origin, orientation):
                layout.append(placement)
                break
            print("Ship cannot be placed there (out of bounds or overlaps). Try again.")
    return layout


def _prompt_manual_setup() -> bool:
    while True:
        raw = input("Would you like to place your ships manually? [Y/n]: ").strip().lower()
        if raw in {"", "y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _prompt_for_attack(match: Match) -> AttackResult:
    size = match.config.board_size
    while True:
        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            coord = parse_coordinate(raw, size)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        result = match.human_attack(coord)
        if result is AttackResult.REPEAT:
            print("That cell has already been targeted. Choose another.")
            continue
        print(f"You fired at {format_coordinate(coord)}: {RESULT_TEXT[result]}")
        return result


def play_match(config: MatchConfig, random_placement: bool = False) -> Player | None:
    print("Welcome to salvo!\n")
    match = Match(config)
    layout: Sequence[ShipPlacement] | None = None
    if not random_placement and _prompt_manual_setup():
        layout = _manual_layout(config)
    match.setup(layout)
    if layout is None:
        print("\nYour ships have been positioned automatically.")

    while match.phase is MatchPhase.IN_PROGRESS:
        if match.current_player is Player.HUMAN:
            print("\nYour Board:")
            print(format_board(match.boards[Player.HUMAN], show_ships=True))
            print("\nEnemy Waters:")
            print(format_board(match.boards[Player.COMPUTER], show_ships=False))
            _prompt_for_attack(match)
        else:
            if config.computer_delay_ms:
                time.sleep(config.computer_delay_ms / 1000)
            outcome = match.computer_turn()
            if outcome.coord is None or outcome.result is None:
                print("The computer has run out of moves.")
            else:
                print(
                    f"Computer fired at {format_coordinate(outcome.coord)}: "
                    f"{RESULT_TEXT[outcome.result]}"
                )

    if match.winner is Player.HUMAN:
        print("\nCongratulations, you won!")
    else:
        print("\nThe computer won this time. Better luck next battle!")
    return match.winner


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play salvo via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--delay", type=int, default=None, help="Pause in milliseconds before the computer fires."
    )
    parser.add_argument(
        "--random-placement", action="store_true", help="Skip manual placement of your fleet."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine events.")
    args = parser.parse_args(argv)

    configure_logging(logging.INFO if args.verbose else logging.WARNING)
    telemetry = init_telemetry()
    if telemetry.enable_tracing or telemetry.enable_logging:
        LoggingInstrumentor().instrument()

    overrides = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.delay is not None:
        overrides["computer_delay_ms"] = args.delay
    config = MatchConfig.from_env(**overrides) if overrides else load_match_config()
    play_match(config, random_placement=args.random_placement)


if __name__ == "__main__":
    main()
