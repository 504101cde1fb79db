"""Interfaces the match controller relies on.

The engine's own ``Board`` and ``HuntTargetAttacker`` satisfy these
structurally; tests provide small explicit fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from salvo.engine.board import AttackResult
from salvo.engine.ship import Coordinate


@runtime_checkable
class AttackTarget(Protocol):
    """Board-side contract: the only way attacks affect a player's fleet."""

    size: int

    def receive_attack(self, coord: Coordinate) -> AttackResult:
        """Resolve one attack and report its outcome."""

    def all_sunk(self) -> bool:
        """Return whether every placed ship has been sunk."""


@runtime_checkable
class Attacker(Protocol):
    """Scripted-player contract, used once per turn: select, resolve, update."""

    def select_next_coordinate(self) -> Coordinate | None:
        """Return the next coordinate to fire at, or None when no moves remain."""

    def update_state(self, coord: Coordinate, result: AttackResult) -> None:
        """Feed back the outcome of the attack at ``coord``."""
