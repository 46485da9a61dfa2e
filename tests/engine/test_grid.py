"""Tests for the Grid data structure."""

import pytest

from seabattle.engine.errors import OutOfBounds
from seabattle.engine.grid import CellState, Grid, new_grid
from seabattle.engine.ship import Coordinate


def test_new_grid_is_empty() -> None:
    grid = new_grid(8)
    assert grid.size == 8
    assert grid.count(CellState.EMPTY) == 64
    assert grid.remaining_life == 0
    assert grid.survivors == ()
    assert grid.largest_surviving_size() == 0


def test_concealed_grid_starts_in_mist() -> None:
    grid = Grid(6, concealed=True)
    assert grid.count(CellState.MIST) == 36
    assert grid.base_state is CellState.MIST
    assert grid.ship_state is CellState.CONCEALED


def test_get_and_set_round_trip() -> None:
    grid = Grid()
    grid.set(Coordinate(7, 0), CellState.MISS)
    assert grid.get(Coordinate(7, 0)) is CellState.MISS
    assert grid.rows()[0][7] is CellState.MISS


@pytest.mark.parametrize(
    "coord", [Coordinate(8, 0), Coordinate(0, 8), Coordinate(-1, 3), Coordinate(2, -1)]
)
def test_out_of_bounds_access_raises(coord: Coordinate) -> None:
    grid = Grid()
    with pytest.raises(OutOfBounds) as excinfo:
        grid.get(coord)
    assert excinfo.value.coord == coord
    with pytest.raises(IndexError):
        grid.set(coord, CellState.MISS)
    assert grid.count(CellState.EMPTY) == 64


def test_grid_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Grid(0)


def test_ship_accounting() -> None:
    grid = Grid()
    grid.register_ship(3)
    grid.register_ship(1)
    assert grid.survivors == (1, 0, 1)
    assert grid.remaining_life == 4
    assert grid.largest_surviving_size() == 3

    grid.record_hit()
    grid.record_sunk(3)
    assert grid.remaining_life == 3
    assert grid.largest_surviving_size() == 1


def test_reset_restores_base_state() -> None:
    grid = Grid(5, concealed=True)
    grid.set(Coordinate(1, 1), CellState.CONCEALED)
    grid.register_ship(1)
    grid.reset(4)
    assert grid.count(CellState.MIST) == 25
    assert grid.remaining_life == 0
    assert grid.survivors == (0, 0, 0, 0)


def test_cells_iterates_row_major() -> None:
    grid = Grid(4)
    coords = [coord for coord, _ in grid.cells()]
    assert coords[:5] == [
        Coordinate(0, 0), Coordinate(1, 0), Coordinate(2, 0), Coordinate(3, 0), Coordinate(0, 1),
    ]
    assert len(coords) == 16


def test_open_states() -> None:
    assert CellState.EMPTY.is_open
    assert CellState.CONCEALED.is_open
    assert CellState.SHIP_INTACT.is_open
    assert not CellState.BUFFER.is_open
    assert not CellState.SHIP_HIT.is_open
    assert not CellState.MISS.is_open
