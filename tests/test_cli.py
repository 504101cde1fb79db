"""Tests for the command-line driver."""

from __future__ import annotations

import builtins

import pytest
from salvo import cli
from salvo.config import MatchConfig
from salvo.engine.board import Board
from salvo.engine.match import Player
from salvo.engine.ship import Coordinate, Orientation, Ship
from salvo.telemetry import TelemetryConfig


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("A5", Coordinate(0, 4)),
        (" j10 ", Coordinate(9, 9)),
        ("3 7", Coordinate(3, 7)),
    ],
)
def test_parse_coordinate(text: str, expected: Coordinate) -> None:
    assert cli.parse_coordinate(text) == expected


@pytest.mark.parametrize("text", ["", "K1", "A11", "A", "1 2 3", "x y", "10 0"])
def test_parse_coordinate_rejects_bad_input(text: str) -> None:
    with pytest.raises(ValueError):
        cli.parse_coordinate(text)


def test_format_board_hides_ships_from_opponent() -> None:
    board = Board(size=3)
    board.place_ship(Ship(2), Coordinate(0, 0), Orientation.HORIZONTAL)
    board.receive_attack(Coordinate(0, 0))
    board.receive_attack(Coordinate(2, 2))

    own = cli.format_board(board, show_ships=True).splitlines()
    enemy = cli.format_board(board, show_ships=False).splitlines()
    assert own[1] == "A | X  S  ."
    assert enemy[1] == "A | X  .  ."
    assert enemy[3] == "C | .  .  o"


def test_play_match_to_completion(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    labels = iter(f"{row}{col}" for row in "ABCDEFGHIJ" for col in range(1, 11))
    monkeypatch.setattr(builtins, "input", lambda _prompt="": next(labels))

    winner = cli.play_match(MatchConfig(seed=12), random_placement=True)
    assert winner in {Player.HUMAN, Player.COMPUTER}
    out = capsys.readouterr().out
    assert "Computer fired at" in out
    assert "You fired at A1" in out


def test_main_passes_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict = {}

    def fake_play(config: MatchConfig, random_placement: bool = False) -> None:
        captured["config"] = config
        captured["random_placement"] = random_placement

    monkeypatch.setattr(cli, "play_match", fake_play)
    monkeypatch.setattr(cli, "init_telemetry", lambda: TelemetryConfig())
    monkeypatch.delenv("SALVO_SEED", raising=False)

    cli.main(["--seed", "5", "--delay", "0", "--random-placement"])
    assert captured["config"].seed == 5
    assert captured["config"].computer_delay_ms == 0
    assert captured["random_placement"] is True
