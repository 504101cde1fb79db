"""Tests for Ship and coordinate primitives."""

from salvo.engine.ship import (
    STANDARD_FLEET,
    Coordinate,
    Direction,
    Orientation,
    Ship,
    build_fleet,
)


def test_ship_sinks_exactly_at_length_and_stays_sunk() -> None:
    ship = Ship(3)
    for idx in range(1, 3 + 1):
        ship.hit()
        assert ship.is_sunk() is (idx == 3)
    ship.hit()
    assert ship.is_sunk()
    assert ship.hits == 4


def test_ships_compare_by_identity() -> None:
    assert Ship(2) != Ship(2)
    ship = Ship(2)
    assert ship == ship
    assert len({Ship(2), Ship(2)}) == 2


def test_direction_between_adjacent_cells() -> None:
    assert Direction.between(Coordinate(4, 2), Coordinate(4, 3)) is Direction.RIGHT
    assert Direction.between(Coordinate(4, 3), Coordinate(4, 2)) is Direction.LEFT
    assert Direction.between(Coordinate(4, 2), Coordinate(5, 2)) is Direction.DOWN
    assert Direction.between(Coordinate(4, 2), Coordinate(3, 2)) is Direction.UP


def test_direction_between_ignores_diagonal_and_distant_pairs() -> None:
    assert Direction.between(Coordinate(4, 2), Coordinate(5, 3)) is None
    assert Direction.between(Coordinate(4, 2), Coordinate(4, 4)) is None
    assert Direction.between(Coordinate(4, 2), Coordinate(4, 2)) is None


def test_direction_opposite_and_axis() -> None:
    assert Direction.RIGHT.opposite() is Direction.LEFT
    assert Direction.UP.opposite() is Direction.DOWN
    assert Direction.LEFT.is_horizontal()
    assert not Direction.DOWN.is_horizontal()


def test_coordinate_step_and_neighbours() -> None:
    origin = Coordinate(4, 2)
    assert origin.step(Direction.RIGHT, 3) == Coordinate(4, 5)
    assert set(origin.neighbours()) == {
        Coordinate(4, 3),
        Coordinate(5, 2),
        Coordinate(4, 1),
        Coordinate(3, 2),
    }


def test_orientation_direction() -> None:
    assert Orientation.HORIZONTAL.direction is Direction.RIGHT
    assert Orientation.VERTICAL.direction is Direction.DOWN


def test_build_fleet_names_standard_ships() -> None:
    fleet = build_fleet()
    assert [ship.length for ship in fleet] == list(STANDARD_FLEET)
    assert [ship.name for ship in fleet] == [
        "carrier",
        "battleship",
        "cruiser",
        "submarine",
        "destroyer",
    ]
    assert all(ship.hits == 0 for ship in fleet)


def test_build_fleet_leaves_unknown_lengths_unnamed() -> None:
    fleet = build_fleet((1, 2, 2))
    assert [ship.name for ship in fleet] == [None, "destroyer", None]
