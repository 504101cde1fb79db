"""Attack bookkeeping for the human player."""

from __future__ import annotations

from salvo.api.contracts import AttackTarget

from .board import AttackResult
from .ship import Coordinate


class HumanAttacker:
    """Remembers where the human has fired so repeats never reach the board."""

    def __init__(self) -> None:
        self.attacks_made: set[Coordinate] = set()

    def attack(self, target: AttackTarget, coord: Coordinate) -> AttackResult:
        if coord in self.attacks_made:
            return AttackResult.REPEAT
        result = target.receive_attack(coord)
        if result is not AttackResult.INVALID:
            self.attacks_made.add(coord)
        return result
