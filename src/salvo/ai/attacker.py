"""Hunt/target attacker for the scripted player.

The attacker alternates between two modes. In HUNT it fires at a shuffled
checkerboard of cells, since any ship of length two or more must cover at
least one cell where ``row + col`` is even. The first hit switches it to
TARGET: it tries the orthogonal neighbours of that hit, and once a second
adjacent hit reveals the ship's axis it walks along that axis, turning
around at the first miss. Sinking the ship returns it to HUNT.

Each turn follows the same cycle::

    coord = attacker.select_next_coordinate()   # None when out of moves
    result = opponent_board.receive_attack(coord)
    attacker.update_state(coord, result)

``attack`` runs that cycle against any ``AttackTarget``.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from salvo.api.contracts import AttackTarget
from salvo.engine.board import AttackResult
from salvo.engine.ship import Coordinate, Direction
from salvo.telemetry import annotate_attack, get_meter, get_tracer

logger = logging.getLogger(__name__)
meter = get_meter("salvo.ai.attacker")

DECISION_COUNTER = meter.create_counter(
    "salvo_attacker_decisions",
    unit="1",
    description="Coordinates chosen by the scripted attacker, by selection source",
)


class AttackMode(Enum):
    HUNT = "hunt"
    TARGET = "target"


@dataclass
class AttackerMemory:
    """Everything the scripted player remembers about the opponent's board."""

    size: int = 10
    attacks_made: set[Coordinate] = field(default_factory=set)
    available_moves: set[Coordinate] = field(default_factory=set)
    mode: AttackMode = AttackMode.HUNT
    hunt_queue: list[Coordinate] = field(default_factory=list)
    hits_on_current_ship: list[Coordinate] = field(default_factory=list)
    confirmed_direction: Direction | None = None
    pending_targets: deque[Coordinate] = field(default_factory=deque)

    @classmethod
    def fresh(cls, size: int, rng: random.Random) -> AttackerMemory:
        """Memory for a new match: every cell available, parity pool shuffled."""
        cells = [Coordinate(row, col) for row in range(size) for col in range(size)]
        hunt_queue = [cell for cell in cells if (cell.row + cell.col) % 2 == 0]
        rng.shuffle(hunt_queue)
        return cls(size=size, available_moves=set(cells), hunt_queue=hunt_queue)

    def is_open(self, coord: Coordinate) -> bool:
        """In bounds and not fired at yet."""
        in_bounds = 0 <= coord.row < self.size and 0 <= coord.col < self.size
        return in_bounds and coord not in self.attacks_made

    def record_attack(self, coord: Coordinate) -> None:
        self.attacks_made.add(coord)
        self.available_moves.discard(coord)

    def clear_current_ship(self) -> None:
        self.mode = AttackMode.HUNT
        self.hits_on_current_ship.clear()
        self.confirmed_direction = None
        self.pending_targets.clear()


class HuntTargetAttacker:
    """Scripted player that hunts on a checkerboard and follows up on hits."""

    def __init__(self, size: int = 10, rng: random.Random | None = None) -> None:
        self.size = size
        self._rng = rng or random.Random()
        self.memory = AttackerMemory.fresh(size, self._rng)
        self.last_attack: tuple[Coordinate, AttackResult] | None = None
        self._tracer = get_tracer("salvo.ai.attacker")

    @property
    def mode(self) -> AttackMode:
        return self.memory.mode

    def has_moves(self) -> bool:
        return bool(self.memory.available_moves)

    def reset(self) -> None:
        """Forget everything; used when a match restarts."""
        self.memory = AttackerMemory.fresh(self.size, self._rng)
        self.last_attack = None

    def select_next_coordinate(self) -> Coordinate | None:
        """Decide where to fire next, or return None when no moves remain."""
        with self._tracer.start_as_current_span("attacker.select_next_coordinate") as span:
            span.set_attribute("attacker.mode", self.memory.mode.value)
            if not self.memory.available_moves:
                span.set_attribute("attacker.exhausted", True)
                logger.info("attacker_no_moves_left")
                return None

            coord, source = self._choose()
            span.set_attribute("attacker.source", source)
            annotate_attack(span, coord)
            DECISION_COUNTER.add(1, attributes={"source": source})
            logger.debug(
                "attacker_selected",
                extra={"row": coord.row, "col": coord.col, "source": source},
            )
            return coord

    def update_state(self, coord: Coordinate, result: AttackResult) -> None:
        """Apply the outcome of an attack this player made."""
        memory = self.memory
        if result is AttackResult.INVALID:
            logger.warning("attacker_invalid_result", extra={"row": coord.row, "col": coord.col})
            return

        memory.record_attack(coord)
        self.last_attack = (coord, result)
        if result is AttackResult.REPEAT:
            return

        if result is AttackResult.SUNK:
            if memory.mode is AttackMode.TARGET:
                logger.info(
                    "attacker_ship_sunk",
                    extra={"hits": len(memory.hits_on_current_ship) + 1},
                )
            memory.clear_current_ship()
        elif result is AttackResult.MISS:
            if memory.mode is AttackMode.TARGET and memory.confirmed_direction is not None:
                memory.confirmed_direction = memory.confirmed_direction.opposite()
                logger.debug(
                    "attacker_direction_reversed",
                    extra={"direction": memory.confirmed_direction.name},
                )
        elif memory.mode is AttackMode.HUNT:
            memory.mode = AttackMode.TARGET
            memory.hits_on_current_ship = [coord]
            memory.confirmed_direction = None
            memory.pending_targets = deque(
                cell for cell in coord.neighbours() if memory.is_open(cell)
            )
            logger.debug("attacker_target_acquired", extra={"row": coord.row, "col": coord.col})
        else:
            self._register_follow_up_hit(coord)

    def attack(self, target: AttackTarget) -> AttackResult | None:
        """Play one full turn against ``target``; None means no moves were left."""
        coord = self.select_next_coordinate()
        if coord is None:
            return None
        result = target.receive_attack(coord)
        self.update_state(coord, result)
        return result

    def _choose(self) -> tuple[Coordinate, str]:
        memory = self.memory
        if memory.mode is AttackMode.TARGET:
            if memory.confirmed_direction is not None:
                coord = self._probe_confirmed_direction(memory.confirmed_direction)
                if coord is not None:
                    return coord, "direction"
            coord = self._next_pending_target()
            if coord is not None:
                return coord, "pending"
            logger.debug("attacker_target_abandoned")
            memory.clear_current_ship()

        coord = self._next_hunt_candidate()
        if coord is not None:
            return coord, "hunt"
        return self._rng.choice(sorted(memory.available_moves)), "random"

    def _register_follow_up_hit(self, coord: Coordinate) -> None:
        memory = self.memory
        memory.hits_on_current_ship.append(coord)
        if memory.confirmed_direction is not None:
            return

        direction = Direction.between(memory.hits_on_current_ship[-2], coord)
        if direction is None:
            memory.pending_targets.extend(
                cell for cell in coord.neighbours() if memory.is_open(cell)
            )
            return

        memory.confirmed_direction = direction
        if direction.is_horizontal():
            on_axis = [cell for cell in memory.pending_targets if cell.row == coord.row]
        else:
            on_axis = [cell for cell in memory.pending_targets if cell.col == coord.col]
        memory.pending_targets = deque(on_axis)
        logger.debug("attacker_direction_confirmed", extra={"direction": direction.name})

    def _probe_confirmed_direction(self, direction: Direction) -> Coordinate | None:
        memory = self.memory
        hits = memory.hits_on_current_ship
        coord = self._walk(hits[-1], direction)
        if coord is None:
            coord = self._walk(hits[0], direction.opposite())
        if coord is None:
            logger.debug("attacker_direction_exhausted", extra={"direction": direction.name})
            memory.confirmed_direction = None
        return coord

    def _walk(self, origin: Coordinate, direction: Direction) -> Coordinate | None:
        """First unattacked cell beyond ``origin``, passing only over this ship's hits."""
        memory = self.memory
        known_hits = set(memory.hits_on_current_ship)
        for distance in range(1, memory.size + 1):
            cell = origin.step(direction, distance)
            if memory.is_open(cell):
                return cell
            if cell not in known_hits:
                return None
        return None

    def _next_pending_target(self) -> Coordinate | None:
        pending = self.memory.pending_targets
        while pending:
            cell = pending.popleft()
            if self.memory.is_open(cell):
                return cell
        return None

    def _next_hunt_candidate(self) -> Coordinate | None:
        queue = self.memory.hunt_queue
        while queue:
            cell = queue.pop()
            if self.memory.is_open(cell):
                return cell
        return None
