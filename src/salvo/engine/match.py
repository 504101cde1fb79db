"""Match controller: one human against the hunt/target attacker."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from salvo.ai.attacker import HuntTargetAttacker
from salvo.api.contracts import Attacker
from salvo.config import MatchConfig
from salvo.telemetry import (
    MatchMetric,
    annotate_attack,
    get_logger,
    get_tracer,
    record_match_metric,
)
from salvo.telemetry.metrics import MATCH_SCOPE

from .board import AttackResult, Board, CellState
from .human import HumanAttacker
from .ship import Coordinate, Orientation, Ship, build_fleet


class MatchPhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Player(Enum):
    HUMAN = "human"
    COMPUTER = "computer"

    def opponent(self) -> Player:
        return Player.COMPUTER if self is Player.HUMAN else Player.HUMAN


@dataclass(frozen=True)
class ShipPlacement:
    """One entry of a manual fleet layout."""

    length: int
    origin: Coordinate
    orientation: Orientation


@dataclass(frozen=True)
class TurnOutcome:
    """Result of one scripted turn; ``coord`` and ``result`` are None on exhaustion."""

    coord: Coordinate | None
    result: AttackResult | None


@dataclass(frozen=True)
class MatchState:
    """Immutable snapshot of the current match."""

    phase: MatchPhase
    current_player: Player
    winner: Player | None
    boards: dict[Player, tuple[tuple[CellState, ...], ...]]


class Match:
    """Sequences turns between the human and the scripted attacker."""

    def __init__(self, config: MatchConfig | None = None, rng_seed: int | None = None) -> None:
        self.config = config or MatchConfig()
        seed = rng_seed if rng_seed is not None else self.config.seed
        self._rng = random.Random(seed)
        self._logger = get_logger("match")
        self._tracer = get_tracer(MATCH_SCOPE)
        self._match_id = 0
        self._started_at: float | None = None
        self._reset_state()

    def _reset_state(self) -> None:
        size = self.config.board_size
        self.boards: dict[Player, Board] = {player: self._new_board(player) for player in Player}
        self.attacker: Attacker = HuntTargetAttacker(
            size=size, rng=random.Random(self._rng.getrandbits(32))
        )
        self.human = HumanAttacker()
        self.phase = MatchPhase.SETUP
        self.current_player = Player.HUMAN
        self.winner: Player | None = None

    def _new_board(self, player: Player) -> Board:
        return Board(size=self.config.board_size, owner=player.value)

    def setup(self, human_layout: Sequence[ShipPlacement] | None = None) -> None:
        """Place both fleets and start the match.

        The computer's fleet is always random. The human's comes from
        ``human_layout`` when given, otherwise it is placed randomly too.
        Both fleets are built on fresh boards that replace the current ones
        only when every ship is placed, so a failed setup can be retried.
        """
        with self._tracer.start_as_current_span("match.setup") as span:
            if self.phase is not MatchPhase.SETUP:
                raise RuntimeError("Match already set up; use restart().")
            fleet = self.config.fleet
            boards = {player: self._new_board(player) for player in Player}
            if not boards[Player.COMPUTER].place_fleet_randomly(fleet, self._rng):
                raise RuntimeError("Could not place the computer fleet.")

            if human_layout is None:
                if not boards[Player.HUMAN].place_fleet_randomly(fleet, self._rng):
                    raise RuntimeError("Could not place the human fleet.")
            else:
                self._place_layout(boards[Player.HUMAN], human_layout)

            self.boards = boards
            self._match_id += 1
            span.set_attribute("match.id", self._match_id)
            self.phase = MatchPhase.IN_PROGRESS
            self.current_player = Player.HUMAN
            self.winner = None
            self._started_at = time.perf_counter()
            record_match_metric(MatchMetric.STARTED)
            self._logger.info("Match %d started with fleet %s", self._match_id, fleet)

    def restart(self, human_layout: Sequence[ShipPlacement] | None = None) -> None:
        """Throw away boards and attacker memory and set up a new match."""
        self._reset_state()
        self.setup(human_layout)

    def human_attack(self, coord: Coordinate) -> AttackResult:
        """Resolve the human's shot; INVALID and REPEAT leave the turn with the human."""
        with self._tracer.start_as_current_span("match.human_attack") as span:
            self._require_turn(Player.HUMAN)
            result = self.human.attack(self.boards[Player.COMPUTER], coord)
            annotate_attack(span, coord, result)
            self._after_attack(Player.HUMAN, coord, result)
            return result

    def computer_turn(self) -> TurnOutcome:
        """Let the attacker pick, resolve and learn from one shot."""
        with self._tracer.start_as_current_span("match.computer_turn") as span:
            self._require_turn(Player.COMPUTER)
            coord = self.attacker.select_next_coordinate()
            if coord is None:
                span.set_attribute("attacker.exhausted", True)
                self._logger.warning("Attacker has no moves left; human wins by default")
                self._finish(Player.HUMAN)
                return TurnOutcome(None, None)

            result = self.boards[Player.HUMAN].receive_attack(coord)
            self.attacker.update_state(coord, result)
            annotate_attack(span, coord, result)
            self._after_attack(Player.COMPUTER, coord, result)
            return TurnOutcome(coord, result)

    def get_state(self) -> MatchState:
        """Return an immutable view of the match."""
        return MatchState(
            phase=self.phase,
            current_player=self.current_player,
            winner=self.winner,
            boards={
                player: tuple(tuple(row) for row in board.board_state())
                for player, board in self.boards.items()
            },
        )

    def _place_layout(self, board: Board, layout: Sequence[ShipPlacement]) -> None:
        lengths = tuple(placement.length for placement in layout)
        if sorted(lengths) != sorted(self.config.fleet):
            raise ValueError("Layout does not match the configured fleet.")
        ships: list[Ship] = build_fleet(lengths)
        for ship, placement in zip(ships, layout):
            if not board.place_ship(ship, placement.origin, placement.orientation):
                raise ValueError(
                    f"Cannot place ship of length {placement.length} at "
                    f"({placement.origin.row},{placement.origin.col}) {placement.orientation.value}."
                )

    def _require_turn(self, player: Player) -> None:
        if self.phase is not MatchPhase.IN_PROGRESS:
            self._logger.error("Move rejected: match is %s", self.phase.value)
            raise RuntimeError("Match is not in progress.")
        if player is not self.current_player:
            self._logger.error("Move rejected: it is %s's turn", self.current_player.value)
            raise RuntimeError("It is not this player's turn.")

    def _after_attack(self, player: Player, coord: Coordinate, result: AttackResult) -> None:
        record_match_metric(
            MatchMetric.ATTACKS, attrs={"player": player.value, "result": result.value}
        )
        self._logger.info(
            "%s fired at (%d,%d): %s", player.value, coord.row, coord.col, result.value
        )
        if not result.consumes_turn:
            return
        if self.boards[player.opponent()].all_sunk():
            self._finish(player)
        else:
            self.current_player = player.opponent()

    def _finish(self, winner: Player) -> None:
        self.phase = MatchPhase.FINISHED
        self.winner = winner
        duration = (time.perf_counter() - self._started_at) if self._started_at else 0.0
        turns = sum(len(board.attacked_coordinates) for board in self.boards.values())
        record_match_metric(MatchMetric.COMPLETED, attrs={"winner": winner.value})
        record_match_metric(MatchMetric.TURNS, turns, {"winner": winner.value})
        with self._tracer.start_as_current_span("match.complete") as span:
            span.set_attribute("match.id", self._match_id)
            span.set_attribute("winner", winner.value)
            span.set_attribute("turns", turns)
            span.set_attribute("duration_ms", duration * 1000)
        self._logger.info(
            "Match %d finished. Winner=%s turns=%d duration_s=%.3f",
            self._match_id,
            winner.value,
            turns,
            duration,
        )
