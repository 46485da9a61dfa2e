"""Randomised fleet placement with a no-touching buffer rule."""

from __future__ import annotations

import logging
import random

from seabattle.telemetry import get_meter, get_tracer

from .errors import OutOfBounds, PlacementError
from .grid import CellState, Grid
from .ship import Coordinate, Orientation, Ship, fleet_composition

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.placement")
meter = get_meter("seabattle.engine.placement")

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_placements",
    unit="1",
    description="Ship placement attempts by result",
)

DEFAULT_MAX_SHIP_SIZE = 4
DEFAULT_RETRIES = 30


def can_place_ship(grid: Grid, ship: Ship) -> bool:
    """Check that the ship fits and every cell it covers is still free."""
    cells = ship.cells()
    if not all(grid.in_bounds(coord) for coord in cells):
        return False
    return all(grid.get(coord).is_base for coord in cells)


def place_ship(grid: Grid, ship: Ship) -> None:
    """Put a ship on the grid and reserve its buffer zone.

    Raises ``OutOfBounds`` when part of the ship is off the grid and
    ``PlacementError`` when it would overlap a ship or a reserved cell.
    The grid is left untouched in both cases.
    """
    for coord in ship.cells():
        grid.check(coord)
    if not can_place_ship(grid, ship):
        logger.warning(
            "ship_placement_rejected",
            extra={"x": ship.start.x, "y": ship.start.y, "size": ship.size},
        )
        raise PlacementError(ship.size, f"Ship of size {ship.size} overlaps an occupied cell.")
    _mark_ship(grid, ship)


def _mark_ship(grid: Grid, ship: Ship) -> None:
    for coord in ship.cells():
        grid.set(coord, grid.ship_state)
    for coord in ship.buffer(grid.size):
        if grid.get(coord).is_base:
            grid.set(coord, CellState.BUFFER)
    grid.register_ship(ship.size)


def random_ship(grid: Grid, size: int, rng: random.Random) -> Ship:
    """Draw an orientation and an anchor that keep a ship of ``size`` on the grid."""
    orientation = Orientation.HORIZONTAL if rng.randrange(2) else Orientation.VERTICAL
    dx, dy = orientation.step
    x = rng.randrange(grid.size - dx * (size - 1))
    y = rng.randrange(grid.size - dy * (size - 1))
    return Ship(Coordinate(x, y), size, orientation)


def try_place_ship(grid: Grid, size: int, retries: int, rng: random.Random) -> Ship | None:
    """Make up to ``retries`` random attempts; return the placed ship or None."""
    for attempt in range(1, retries + 1):
        candidate = random_ship(grid, size, rng)
        if can_place_ship(grid, candidate):
            _mark_ship(grid, candidate)
            logger.debug(
                "ship_placed",
                extra={
                    "x": candidate.start.x,
                    "y": candidate.start.y,
                    "size": size,
                    "orientation": candidate.orientation.value,
                    "attempts": attempt,
                },
            )
            return candidate
    return None


def clear_buffers(grid: Grid) -> None:
    """Turn every reserved buffer cell back into an empty (or mist) cell."""
    for coord, state in grid.cells():
        if state is CellState.BUFFER:
            grid.set(coord, grid.base_state)


def place_ships(grid: Grid, ships: list[Ship]) -> None:
    """Place a hand-made layout in order, then release the buffer cells."""
    try:
        for ship in ships:
            place_ship(grid, ship)
    except (OutOfBounds, PlacementError):
        grid.reset(len(grid.survivors))
        raise
    clear_buffers(grid)


def place_fleet(
    grid: Grid,
    max_ship_size: int = DEFAULT_MAX_SHIP_SIZE,
    retries: int = DEFAULT_RETRIES,
    rng: random.Random | None = None,
) -> list[Ship]:
    """Randomly place the standard fleet, largest ships first.

    The grid is reset before placement. If a ship cannot be placed within
    ``retries`` attempts the grid is reset again and ``PlacementError`` is
    raised; callers start over instead of repairing the board.
    """
    if max_ship_size < 1 or max_ship_size > grid.size:
        raise ValueError(f"max_ship_size must be between 1 and {grid.size}.")
    if retries < 1:
        raise ValueError("retries must be positive.")
    rng = rng or random.Random()

    with tracer.start_as_current_span("placement.place_fleet") as span:
        span.set_attribute("grid.size", grid.size)
        span.set_attribute("grid.concealed", grid.concealed)
        span.set_attribute("fleet.max_ship_size", max_ship_size)
        grid.reset(max_ship_size)
        ships: list[Ship] = []
        for size, count in fleet_composition(max_ship_size):
            for _ in range(count):
                ship = try_place_ship(grid, size, retries, rng)
                if ship is None:
                    grid.reset(max_ship_size)
                    PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "size": size})
                    span.set_attribute("placement.failed_size", size)
                    logger.error(
                        "fleet_placement_failed",
                        extra={"size": size, "retries": retries, "placed": len(ships)},
                    )
                    raise PlacementError(size)
                PLACEMENT_COUNTER.add(1, attributes={"result": "success", "size": size})
                ships.append(ship)
        clear_buffers(grid)
        span.set_attribute("fleet.ships", len(ships))
        logger.info(
            "fleet_placed",
            extra={"ships": len(ships), "life": grid.remaining_life, "concealed": grid.concealed},
        )
        return ships
