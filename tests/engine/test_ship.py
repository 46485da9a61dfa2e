"""Tests for ship geometry."""

import pytest

from seabattle.engine.ship import (
    Coordinate,
    Orientation,
    Ship,
    buffer_zone,
    fleet_composition,
    line,
)


def test_ship_cells_horizontal() -> None:
    ship = Ship(Coordinate(2, 3), 3, Orientation.HORIZONTAL)
    assert ship.cells() == (Coordinate(2, 3), Coordinate(3, 3), Coordinate(4, 3))
    assert ship.end == Coordinate(4, 3)


def test_ship_cells_vertical() -> None:
    ship = Ship(Coordinate(5, 1), 2, Orientation.VERTICAL)
    assert ship.cells() == (Coordinate(5, 1), Coordinate(5, 2))


def test_ship_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        Ship(Coordinate(0, 0), 0)


def test_line_walks_backwards_and_rejects_diagonals() -> None:
    assert line(Coordinate(3, 1), Coordinate(1, 1)) == (
        Coordinate(3, 1),
        Coordinate(2, 1),
        Coordinate(1, 1),
    )
    assert line(Coordinate(4, 4), Coordinate(4, 4)) == (Coordinate(4, 4),)
    with pytest.raises(ValueError):
        line(Coordinate(0, 0), Coordinate(2, 2))


def test_buffer_zone_has_no_diagonal_corners() -> None:
    zone = set(buffer_zone(Coordinate(2, 3), Coordinate(4, 3), 8))
    expected = {
        Coordinate(2, 2), Coordinate(3, 2), Coordinate(4, 2),
        Coordinate(2, 4), Coordinate(3, 4), Coordinate(4, 4),
        Coordinate(1, 3), Coordinate(5, 3),
    }
    assert zone == expected
    assert Coordinate(1, 2) not in zone
    assert Coordinate(5, 4) not in zone


def test_buffer_zone_skips_lines_off_the_grid() -> None:
    ship = Ship(Coordinate(0, 0), 2, Orientation.VERTICAL)
    assert set(ship.buffer(8)) == {Coordinate(0, 2), Coordinate(1, 0), Coordinate(1, 1)}


def test_fleet_composition_is_triangular() -> None:
    assert fleet_composition(4) == [(4, 1), (3, 2), (2, 3), (1, 4)]
    assert fleet_composition(1) == [(1, 1)]


def test_neighbours_are_orthogonal() -> None:
    assert set(Coordinate(0, 0).neighbours()) == {
        Coordinate(-1, 0), Coordinate(1, 0), Coordinate(0, -1), Coordinate(0, 1),
    }
