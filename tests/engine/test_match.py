"""High-level match controller tests."""

from __future__ import annotations

import random

import pytest
from salvo.config import MatchConfig
from salvo.engine.board import AttackResult, Board, CellState
from salvo.engine.match import Match, MatchPhase, Player, ShipPlacement, TurnOutcome
from salvo.engine.ship import STANDARD_FLEET, Coordinate, Orientation

DEFAULT_LAYOUT = [
    ShipPlacement(5, Coordinate(0, 0), Orientation.HORIZONTAL),
    ShipPlacement(4, Coordinate(2, 2), Orientation.VERTICAL),
    ShipPlacement(3, Coordinate(4, 5), Orientation.HORIZONTAL),
    ShipPlacement(3, Coordinate(6, 2), Orientation.VERTICAL),
    ShipPlacement(2, Coordinate(8, 6), Orientation.HORIZONTAL),
]


class ScriptedAttacker:
    """Fires at a fixed list of coordinates, then reports exhaustion."""

    def __init__(self, targets: list[Coordinate]) -> None:
        self.targets = list(targets)
        self.updates: list[tuple[Coordinate, AttackResult]] = []

    def select_next_coordinate(self) -> Coordinate | None:
        return self.targets.pop(0) if self.targets else None

    def update_state(self, coord: Coordinate, result: AttackResult) -> None:
        self.updates.append((coord, result))


def _open_cells(match: Match, player: Player) -> list[Coordinate]:
    board = match.boards[player]
    return [
        Coordinate(row, col)
        for row in range(board.size)
        for col in range(board.size)
        if Coordinate(row, col) not in board.attacked_coordinates
    ]


def test_match_flow_reaches_a_winner() -> None:
    match = Match(rng_seed=42)
    match.setup()
    rng = random.Random(42)

    while match.get_state().phase is not MatchPhase.FINISHED:
        if match.current_player is Player.HUMAN:
            coord = rng.choice(_open_cells(match, Player.COMPUTER))
            assert match.human_attack(coord).consumes_turn
        else:
            outcome = match.computer_turn()
            assert outcome.result in {AttackResult.MISS, AttackResult.HIT, AttackResult.SUNK}

    state = match.get_state()
    assert state.winner in {Player.HUMAN, Player.COMPUTER}
    assert match.boards[state.winner.opponent()].all_sunk()


def test_setup_places_both_fleets() -> None:
    match = Match(rng_seed=3)
    match.setup()
    assert match.phase is MatchPhase.IN_PROGRESS
    assert match.current_player is Player.HUMAN
    for board in match.boards.values():
        assert board.has_fleet(STANDARD_FLEET)


def test_setup_with_manual_layout() -> None:
    match = Match(rng_seed=1)
    match.setup(DEFAULT_LAYOUT)
    human_board = match.boards[Player.HUMAN]
    assert human_board.has_fleet(STANDARD_FLEET)
    assert human_board.ship_at(Coordinate(0, 4)) is not None
    assert human_board.ship_at(Coordinate(5, 2)) is not None
    assert human_board.ship_at(Coordinate(9, 9)) is None


def test_setup_rejects_layout_with_wrong_fleet() -> None:
    match = Match()
    with pytest.raises(ValueError):
        match.setup(DEFAULT_LAYOUT[:-1])


def test_setup_rejects_overlapping_layout() -> None:
    layout = list(DEFAULT_LAYOUT)
    layout[-1] = ShipPlacement(2, Coordinate(0, 3), Orientation.VERTICAL)
    with pytest.raises(ValueError):
        Match().setup(layout)


def test_failed_setup_leaves_boards_empty_and_can_be_retried() -> None:
    match = Match(rng_seed=12)
    bad_layout = list(DEFAULT_LAYOUT)
    bad_layout[-1] = ShipPlacement(2, Coordinate(0, 3), Orientation.VERTICAL)
    with pytest.raises(ValueError):
        match.setup(bad_layout)

    assert match.phase is MatchPhase.SETUP
    assert all(board.ships == [] and board.grid == {} for board in match.boards.values())

    match.setup(DEFAULT_LAYOUT)
    assert match.phase is MatchPhase.IN_PROGRESS
    assert match.boards[Player.COMPUTER].has_fleet(STANDARD_FLEET)
    assert match.boards[Player.HUMAN].has_fleet(STANDARD_FLEET)
    assert match.boards[Player.HUMAN].ship_at(Coordinate(8, 7)) is not None


def test_failed_random_placement_keeps_previous_boards(monkeypatch: pytest.MonkeyPatch) -> None:
    match = Match(rng_seed=13)
    before = dict(match.boards)
    monkeypatch.setattr(Board, "place_fleet_randomly", lambda self, lengths, rng: False)
    with pytest.raises(RuntimeError):
        match.setup()

    assert all(match.boards[player] is before[player] for player in Player)
    assert match.phase is MatchPhase.SETUP

    monkeypatch.undo()
    match.setup()
    assert all(board.has_fleet(STANDARD_FLEET) for board in match.boards.values())


def test_setup_twice_requires_restart() -> None:
    match = Match(rng_seed=2)
    match.setup()
    with pytest.raises(RuntimeError):
        match.setup()


def test_attack_requires_match_in_progress() -> None:
    match = Match()
    with pytest.raises(RuntimeError):
        match.human_attack(Coordinate(0, 0))
    with pytest.raises(RuntimeError):
        match.computer_turn()


def test_turn_order_is_enforced() -> None:
    match = Match(rng_seed=1)
    match.setup()
    with pytest.raises(RuntimeError):
        match.computer_turn()

    match.human_attack(Coordinate(0, 0))
    assert match.current_player is Player.COMPUTER
    with pytest.raises(RuntimeError):
        match.human_attack(Coordinate(0, 1))


def test_invalid_and_repeat_attacks_keep_the_turn() -> None:
    match = Match(rng_seed=9)
    match.setup()

    assert match.human_attack(Coordinate(10, 10)) is AttackResult.INVALID
    assert match.current_player is Player.HUMAN

    match.human_attack(Coordinate(3, 3))
    match.computer_turn()
    assert match.human_attack(Coordinate(3, 3)) is AttackResult.REPEAT
    assert match.current_player is Player.HUMAN


def test_computer_wins_when_human_fleet_is_sunk() -> None:
    match = Match(rng_seed=4)
    match.setup(DEFAULT_LAYOUT)
    human_board = match.boards[Player.HUMAN]
    ship_cells = [cell for ship in human_board.ships for cell in human_board.cells_of(ship)]
    attacker = ScriptedAttacker(ship_cells)
    match.attacker = attacker

    computer_board = match.boards[Player.COMPUTER]
    empty_cells = [
        cell for cell in _open_cells(match, Player.COMPUTER) if cell not in computer_board.grid
    ]

    while match.phase is MatchPhase.IN_PROGRESS:
        if match.current_player is Player.HUMAN:
            assert match.human_attack(empty_cells.pop()) is AttackResult.MISS
        else:
            match.computer_turn()

    assert match.winner is Player.COMPUTER
    assert len(attacker.updates) == sum(STANDARD_FLEET)
    assert attacker.updates[-1][1] is AttackResult.SUNK


def test_attacker_exhaustion_hands_the_win_to_the_human() -> None:
    match = Match(rng_seed=5)
    match.setup()
    match.attacker = ScriptedAttacker([])
    match.human_attack(Coordinate(0, 0))

    assert match.computer_turn() == TurnOutcome(None, None)
    assert match.phase is MatchPhase.FINISHED
    assert match.winner is Player.HUMAN


def test_restart_replaces_boards_and_attacker() -> None:
    match = Match(rng_seed=6)
    match.setup()
    match.human_attack(Coordinate(1, 1))
    match.computer_turn()
    old_attacker = match.attacker
    old_boards = dict(match.boards)

    match.restart()
    assert match.attacker is not old_attacker
    assert all(match.boards[player] is not old_boards[player] for player in Player)
    assert all(not board.attacked_coordinates for board in match.boards.values())
    assert match.phase is MatchPhase.IN_PROGRESS
    assert match.current_player is Player.HUMAN
    assert match.winner is None


def test_state_snapshot_reflects_attacks() -> None:
    match = Match(rng_seed=8)
    match.setup()
    target = Coordinate(2, 7)
    match.human_attack(target)

    state = match.get_state()
    assert state.phase is MatchPhase.IN_PROGRESS
    assert state.current_player is Player.COMPUTER
    grid = state.boards[Player.COMPUTER]
    assert len(grid) == 10 and all(len(row) == 10 for row in grid)
    assert grid[target.row][target.col] in {CellState.HIT, CellState.MISS}


def test_config_controls_board_size_and_fleet() -> None:
    config = MatchConfig(board_size=6, fleet=(3, 2))
    match = Match(config, rng_seed=11)
    match.setup()
    assert all(board.size == 6 for board in match.boards.values())
    assert match.boards[Player.COMPUTER].has_fleet((3, 2))
    assert len(match.attacker.memory.available_moves) == 36  # type: ignore[attr-defined]
