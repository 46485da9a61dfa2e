"""Tests for hit resolution and sink detection."""

import random

import pytest

from seabattle.engine.errors import OutOfBounds
from seabattle.engine.grid import CellState, Grid
from seabattle.engine.placement import place_fleet, place_ships
from seabattle.engine.ship import Coordinate, Orientation, Ship
from seabattle.engine.strike import Outcome, find_sunk_ship, strike


def _grid_with(*ships: Ship, concealed: bool = False) -> Grid:
    grid = Grid(8, concealed=concealed)
    place_ships(grid, list(ships))
    return grid


def test_three_cell_ship_sinks_on_third_hit() -> None:
    grid = _grid_with(Ship(Coordinate(2, 3), 3, Orientation.HORIZONTAL))
    assert grid.survivors == (0, 0, 1)

    first = strike(grid, Coordinate(2, 3))
    assert first.outcome is Outcome.HIT
    assert not first.ends_turn
    assert strike(grid, Coordinate(3, 3)).outcome is Outcome.HIT

    sunk = strike(grid, Coordinate(4, 3))
    assert sunk.outcome is Outcome.SUNK
    assert sunk.sunk == (Coordinate(2, 3), Coordinate(3, 3), Coordinate(4, 3))
    assert sunk.ship_size == 3
    assert grid.survivors == (0, 0, 0)
    assert grid.remaining_life == 0
    assert all(grid.get(coord) is CellState.SHIP_SUNK for coord in sunk.sunk)


def test_sinking_marks_halo_on_visible_grid() -> None:
    grid = _grid_with(Ship(Coordinate(2, 3), 3, Orientation.HORIZONTAL))
    for x in (2, 3, 4):
        strike(grid, Coordinate(x, 3))
    for coord in (Coordinate(3, 2), Coordinate(3, 4), Coordinate(1, 3), Coordinate(5, 3)):
        assert grid.get(coord) is CellState.BUFFER
    assert grid.get(Coordinate(1, 2)) is CellState.EMPTY


def test_sinking_on_concealed_grid_reveals_nothing_around() -> None:
    grid = _grid_with(Ship(Coordinate(0, 0), 2, Orientation.VERTICAL), concealed=True)
    strike(grid, Coordinate(0, 0))
    result = strike(grid, Coordinate(0, 1))
    assert result.outcome is Outcome.SUNK
    assert grid.count(CellState.BUFFER) == 0
    assert grid.get(Coordinate(1, 0)) is CellState.MIST


def test_vertical_ship_struck_out_of_order() -> None:
    grid = _grid_with(Ship(Coordinate(5, 1), 3, Orientation.VERTICAL))
    assert strike(grid, Coordinate(5, 2)).outcome is Outcome.HIT
    assert strike(grid, Coordinate(5, 1)).outcome is Outcome.HIT
    result = strike(grid, Coordinate(5, 3))
    assert result.outcome is Outcome.SUNK
    assert result.sunk == (Coordinate(5, 1), Coordinate(5, 2), Coordinate(5, 3))


def test_single_cell_ship_sinks_immediately() -> None:
    grid = _grid_with(Ship(Coordinate(7, 7), 1))
    result = strike(grid, Coordinate(7, 7))
    assert result.outcome is Outcome.SUNK
    assert result.sunk == (Coordinate(7, 7),)
    assert grid.survivors == (0,)


def test_miss_is_idempotent() -> None:
    grid = _grid_with(Ship(Coordinate(0, 0), 1))
    first = strike(grid, Coordinate(4, 4))
    assert first.outcome is Outcome.MISS
    assert first.ends_turn
    assert grid.get(Coordinate(4, 4)) is CellState.MISS

    for _ in range(3):
        again = strike(grid, Coordinate(4, 4))
        assert again.outcome is Outcome.MISS
        assert again.repeated
        assert not again.ends_turn
        assert grid.remaining_life == 1


def test_restriking_damaged_or_sunk_cells_is_a_no_op() -> None:
    grid = _grid_with(Ship(Coordinate(1, 1), 2, Orientation.HORIZONTAL), Ship(Coordinate(5, 5), 1))
    strike(grid, Coordinate(1, 1))
    life = grid.remaining_life
    damaged = strike(grid, Coordinate(1, 1))
    assert damaged.outcome is Outcome.HIT and damaged.repeated
    assert grid.remaining_life == life

    strike(grid, Coordinate(5, 5))
    survivors = grid.survivors
    for _ in range(2):
        again = strike(grid, Coordinate(5, 5))
        assert again.outcome is Outcome.HIT
        assert again.repeated
    assert grid.survivors == survivors
    assert grid.remaining_life == life - 1


def test_restriking_halo_cell_changes_nothing() -> None:
    grid = _grid_with(Ship(Coordinate(3, 3), 1))
    strike(grid, Coordinate(3, 3))
    result = strike(grid, Coordinate(3, 2))
    assert result.outcome is Outcome.MISS
    assert result.repeated
    assert grid.get(Coordinate(3, 2)) is CellState.BUFFER


@pytest.mark.parametrize("coord", [Coordinate(8, 0), Coordinate(0, 8), Coordinate(-1, 0)])
def test_out_of_bounds_strike_leaves_grid_unmodified(coord: Coordinate) -> None:
    grid = _grid_with(Ship(Coordinate(0, 0), 2))
    before = grid.rows()
    with pytest.raises(OutOfBounds):
        strike(grid, coord)
    assert grid.rows() == before
    assert grid.remaining_life == 2


def test_find_sunk_ship_reports_nothing_while_cells_remain() -> None:
    grid = _grid_with(Ship(Coordinate(0, 4), 4, Orientation.HORIZONTAL))
    strike(grid, Coordinate(1, 4))
    assert find_sunk_ship(grid, Coordinate(1, 4)) == ()


@pytest.mark.parametrize("seed", [3, 11, 2024])
def test_life_tracks_unstruck_cells_and_sinks_are_exact(seed: int) -> None:
    rng = random.Random(seed)
    grid = Grid(8)
    ships = place_fleet(grid, rng=rng)
    owner = {coord: ship for ship in ships for coord in ship.cells()}
    struck: dict[Ship, set[Coordinate]] = {ship: set() for ship in ships}

    targets = [coord for coord, _ in grid.cells()]
    rng.shuffle(targets)
    for coord in targets:
        result = strike(grid, coord)
        # Every fresh hit takes one point of life, so life counts unstruck ship cells.
        assert grid.remaining_life == grid.count(CellState.SHIP_INTACT)
        ship = owner.get(coord)
        if ship is None:
            assert result.outcome is Outcome.MISS
            continue
        struck[ship].add(coord)
        if len(struck[ship]) == ship.size:
            assert result.outcome is Outcome.SUNK
            assert set(result.sunk) == set(ship.cells())
        else:
            assert result.outcome is Outcome.HIT

    assert grid.remaining_life == 0
    assert grid.count(CellState.SHIP_INTACT, CellState.SHIP_HIT) == 0
    assert grid.survivors == (0, 0, 0, 0)
