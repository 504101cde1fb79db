"""Ship and coordinate domain model for the salvo engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

STANDARD_FLEET: tuple[int, ...] = (5, 4, 3, 3, 2)

SHIP_NAMES: dict[int, tuple[str, ...]] = {
    5: ("carrier",),
    4: ("battleship",),
    3: ("cruiser", "submarine"),
    2: ("destroyer",),
}


@dataclass(frozen=True, order=True)
class Coordinate:
    """Immutable board coordinate."""

    row: int
    col: int

    def step(self, direction: Direction, distance: int = 1) -> Coordinate:
        """Return the coordinate ``distance`` cells away along ``direction``."""
        d_row, d_col = direction.value
        return Coordinate(self.row + d_row * distance, self.col + d_col * distance)

    def neighbours(self) -> list[Coordinate]:
        """Return the four orthogonal neighbours (bounds are not checked)."""
        return [self.step(direction) for direction in Direction]


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def direction(self) -> Direction:
        """Direction in which a ship extends from its origin."""
        return Direction.RIGHT if self is Orientation.HORIZONTAL else Direction.DOWN


class Direction(Enum):
    """Axis-aligned unit vectors expressed as ``(d_row, d_col)``."""

    RIGHT = (0, 1)
    DOWN = (1, 0)
    LEFT = (0, -1)
    UP = (-1, 0)

    def opposite(self) -> Direction:
        d_row, d_col = self.value
        return Direction((-d_row, -d_col))

    def is_horizontal(self) -> bool:
        return self.value[0] == 0

    @classmethod
    def between(cls, start: Coordinate, end: Coordinate) -> Direction | None:
        """Return the unit direction from ``start`` to ``end``.

        Only orthogonally adjacent pairs carry a direction; diagonal,
        distant or identical pairs return ``None``.
        """
        delta = (end.row - start.row, end.col - start.col)
        if abs(delta[0]) + abs(delta[1]) != 1:
            return None
        return cls(delta)


@dataclass(eq=False)
class Ship:
    """A single ship: a fixed length and a running damage counter.

    Ships compare by identity so the same length can appear several times
    in one fleet. A ship belongs to at most one board; ``placed`` is set by
    the board that accepts it.
    """

    length: int
    name: str | None = None
    hits: int = field(default=0, init=False)
    placed: bool = field(default=False, init=False)

    def hit(self) -> None:
        """Record one point of damage."""
        self.hits += 1

    def is_sunk(self) -> bool:
        """A ship is sunk once it has taken as many hits as it is long."""
        return self.hits >= self.length


def build_fleet(lengths: tuple[int, ...] = STANDARD_FLEET) -> list[Ship]:
    """Create one ship per length, naming them after the standard classes."""
    seen: dict[int, int] = {}
    fleet: list[Ship] = []
    for length in lengths:
        index = seen.get(length, 0)
        seen[length] = index + 1
        names = SHIP_NAMES.get(length, ())
        name = names[index] if index < len(names) else None
        fleet.append(Ship(length, name=name))
    return fleet
