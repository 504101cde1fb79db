"""Board, ship and match primitives."""

from .board import AttackResult, Board, CellState
from .ship import STANDARD_FLEET, Coordinate, Direction, Orientation, Ship, build_fleet

__all__ = [
    "AttackResult",
    "Board",
    "CellState",
    "Coordinate",
    "Direction",
    "Orientation",
    "STANDARD_FLEET",
    "Ship",
    "build_fleet",
]
