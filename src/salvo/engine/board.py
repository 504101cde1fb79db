"""Single-player board: ship placement and attack resolution."""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from salvo.telemetry import annotate_attack, get_meter, get_tracer

from .ship import Coordinate, Orientation, Ship, build_fleet

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.board")
meter = get_meter("salvo.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "salvo_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

ATTACK_COUNTER = meter.create_counter(
    "salvo_engine_attacks_received",
    unit="1",
    description="Attacks resolved by a board, by result",
)

DEFAULT_PLACEMENT_ATTEMPTS = 1000


class AttackResult(Enum):
    """Outcome of a single attack against a board."""

    INVALID = "invalid"
    REPEAT = "repeat"
    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"

    @property
    def consumes_turn(self) -> bool:
        """Whether the attack actually landed on the board."""
        return self not in (AttackResult.INVALID, AttackResult.REPEAT)

    @property
    def is_hit(self) -> bool:
        return self in (AttackResult.HIT, AttackResult.SUNK)


class CellState(Enum):
    """State of a cell as seen by the board's owner."""

    EMPTY = "empty"
    SHIP = "ship"
    HIT = "hit"
    MISS = "miss"


@dataclass
class Board:
    """A square grid holding one player's fleet."""

    size: int = 10
    owner: str = "unknown"
    grid: dict[Coordinate, Ship] = field(default_factory=dict)
    attacked_coordinates: set[Coordinate] = field(default_factory=set)
    missed_coordinates: list[Coordinate] = field(default_factory=list)
    _placements: dict[Ship, tuple[Coordinate, ...]] = field(
        default_factory=dict, init=False, repr=False
    )

    @property
    def ships(self) -> list[Ship]:
        """Placed ships in placement order."""
        return list(self._placements)

    def is_within_bounds(self, coord: Coordinate) -> bool:
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size

    def ship_at(self, coord: Coordinate) -> Ship | None:
        return self.grid.get(coord)

    def cells_of(self, ship: Ship) -> tuple[Coordinate, ...]:
        """Cells occupied by a placed ship, starting at its origin."""
        return self._placements.get(ship, ())

    def can_place_ship(
        self, ship: Ship, origin: Coordinate, orientation: Orientation | str
    ) -> bool:
        """Check a placement without touching the board."""
        return self._placement_cells(ship, origin, orientation)[0] is not None

    def place_ship(self, ship: Ship, origin: Coordinate, orientation: Orientation | str) -> bool:
        """Place ``ship`` with its first cell at ``origin``.

        Returns False, leaving the board untouched, when the ship is not a
        valid unplaced Ship, the orientation is unknown, or any cell of the
        run is out of bounds or occupied.
        """
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("board.owner", self.owner)
            span.set_attribute("ship.origin.row", origin.row)
            span.set_attribute("ship.origin.col", origin.col)
            cells, reason = self._placement_cells(ship, origin, orientation)
            if cells is None:
                span.set_attribute("placement.rejected", reason)
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.warning(
                    "ship_placement_failed",
                    extra={
                        "owner": self.owner,
                        "reason": reason,
                        "row": origin.row,
                        "col": origin.col,
                        "orientation": str(orientation),
                    },
                )
                return False

            for cell in cells:
                self.grid[cell] = ship
            self._placements[ship] = cells
            ship.placed = True
            span.set_attribute("ship.length", ship.length)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info(
                "ship_placed",
                extra={
                    "owner": self.owner,
                    "ship": ship.name,
                    "length": ship.length,
                    "row": origin.row,
                    "col": origin.col,
                },
            )
            return True

    def receive_attack(self, coord: Coordinate) -> AttackResult:
        """Resolve an attack against this board and report its outcome."""
        with tracer.start_as_current_span("board.receive_attack") as span:
            span.set_attribute("board.owner", self.owner)
            result = self._resolve(coord)
            annotate_attack(span, coord, result)
            ATTACK_COUNTER.add(1, attributes={"result": result.value, "owner": self.owner})
            if result.consumes_turn:
                logger.info(
                    "attack_%s",
                    result.value,
                    extra={"row": coord.row, "col": coord.col, "owner": self.owner},
                )
            else:
                logger.warning(
                    "attack_rejected",
                    extra={
                        "row": coord.row,
                        "col": coord.col,
                        "owner": self.owner,
                        "result": result.value,
                    },
                )
            return result

    def all_sunk(self) -> bool:
        """True when no placed ship is left afloat (including when none are placed)."""
        return all(ship.is_sunk() for ship in self._placements)

    def has_fleet(self, lengths: Iterable[int]) -> bool:
        """Check that exactly the given ship lengths are on the board."""
        return Counter(ship.length for ship in self._placements) == Counter(lengths)

    def cell_state(self, coord: Coordinate) -> CellState:
        attacked = coord in self.attacked_coordinates
        if coord in self.grid:
            return CellState.HIT if attacked else CellState.SHIP
        return CellState.MISS if attacked else CellState.EMPTY

    def board_state(self) -> list[list[CellState]]:
        """Row-major view of every cell, for presentation layers."""
        return [
            [self.cell_state(Coordinate(row, col)) for col in range(self.size)]
            for row in range(self.size)
        ]

    def place_ship_randomly(
        self,
        ship: Ship,
        rng: random.Random,
        max_attempts: int = DEFAULT_PLACEMENT_ATTEMPTS,
    ) -> bool:
        """Try random origins and orientations until the ship fits."""
        orientations = list(Orientation)
        for attempt in range(1, max_attempts + 1):
            origin = Coordinate(rng.randrange(self.size), rng.randrange(self.size))
            orientation = rng.choice(orientations)
            if self.can_place_ship(ship, origin, orientation):
                self.place_ship(ship, origin, orientation)
                logger.debug(
                    "random_ship_placed",
                    extra={"ship": ship.name, "attempts": attempt, "owner": self.owner},
                )
                return True
        return False

    def place_fleet_randomly(self, lengths: Iterable[int], rng: random.Random) -> bool:
        """Randomly place one ship per length; stops at the first ship that does not fit."""
        with tracer.start_as_current_span("board.place_fleet_randomly") as span:
            span.set_attribute("board.owner", self.owner)
            for ship in build_fleet(tuple(lengths)):
                if not self.place_ship_randomly(ship, rng):
                    logger.error(
                        "random_fleet_placement_failed",
                        extra={"owner": self.owner, "length": ship.length},
                    )
                    return False
            return True

    def _resolve(self, coord: Coordinate) -> AttackResult:
        if not self.is_within_bounds(coord):
            return AttackResult.INVALID
        if coord in self.attacked_coordinates:
            return AttackResult.REPEAT

        self.attacked_coordinates.add(coord)
        ship = self.grid.get(coord)
        if ship is None:
            self.missed_coordinates.append(coord)
            return AttackResult.MISS
        ship.hit()
        return AttackResult.SUNK if ship.is_sunk() else AttackResult.HIT

    def _placement_cells(
        self, ship: Ship, origin: Coordinate, orientation: Orientation | str
    ) -> tuple[tuple[Coordinate, ...] | None, str]:
        """Return the cells a placement would cover, or None and the reason it is invalid."""
        if not isinstance(ship, Ship) or ship.length < 1:
            return None, "invalid_ship"
        if ship.placed:
            return None, "already_placed"
        try:
            orientation = Orientation(orientation)
        except ValueError:
            return None, "invalid_orientation"

        direction = orientation.direction
        cells = tuple(origin.step(direction, offset) for offset in range(ship.length))
        if not all(self.is_within_bounds(cell) for cell in cells):
            return None, "out_of_bounds"
        if any(cell in self.grid for cell in cells):
            return None, "overlap"
        return cells, ""
