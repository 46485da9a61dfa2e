"""Hit resolution and sink detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from seabattle.telemetry import get_meter, get_tracer

from .grid import CellState, Grid
from .ship import Coordinate, buffer_zone

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.strike")
meter = get_meter("seabattle.engine.strike")

STRIKE_COUNTER = meter.create_counter(
    "seabattle_engine_strikes",
    unit="1",
    description="Strikes resolved against a grid",
)


class Outcome(Enum):
    """Result class of a single strike."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"


@dataclass(frozen=True)
class StrikeResult:
    """Outcome of a strike, with the cells of a ship it sank."""

    outcome: Outcome
    sunk: tuple[Coordinate, ...] = ()
    repeated: bool = False

    @property
    def ends_turn(self) -> bool:
        """Only a miss on a fresh cell passes the turn."""
        return self.outcome is Outcome.MISS and not self.repeated

    @property
    def ship_size(self) -> int:
        return len(self.sunk)


def _walk(grid: Grid, origin: Coordinate, dx: int, dy: int) -> list[Coordinate] | None:
    """Collect struck ship cells from ``origin`` in one direction.

    Returns None as soon as an unstruck ship cell shows up.
    """
    found: list[Coordinate] = []
    coord = Coordinate(origin.x + dx, origin.y + dy)
    while grid.in_bounds(coord):
        state = grid.get(coord)
        if state.is_unstruck_ship:
            return None
        if state is not CellState.SHIP_HIT:
            break
        found.append(coord)
        coord = Coordinate(coord.x + dx, coord.y + dy)
    return found


def find_sunk_ship(grid: Grid, coord: Coordinate) -> tuple[Coordinate, ...]:
    """Return the whole ship through ``coord`` if it is sunk, else ``()``.

    The cells are sorted by row, then column.
    """
    cells = [coord]
    for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
        found = _walk(grid, coord, dx, dy)
        if found is None:
            return ()
        cells.extend(found)
    return tuple(sorted(cells, key=lambda c: (c.y, c.x)))


def mark_sunk_halo(grid: Grid, sunk: tuple[Coordinate, ...]) -> None:
    """Reveal the empty cells around a sunk ship as permanently ruled out."""
    for coord in buffer_zone(sunk[0], sunk[-1], grid.size):
        if grid.get(coord) is CellState.EMPTY:
            grid.set(coord, CellState.BUFFER)


def strike(grid: Grid, coord: Coordinate) -> StrikeResult:
    """Apply a strike and report a miss, a hit or a sinking.

    Striking a cell that was already resolved changes nothing and returns a
    ``repeated`` result: ``MISS`` for misses and ruled-out cells, ``HIT``
    for damaged or sunk ship cells.
    """
    with tracer.start_as_current_span("strike.resolve") as span:
        span.set_attribute("strike.x", coord.x)
        span.set_attribute("strike.y", coord.y)
        span.set_attribute("grid.concealed", grid.concealed)
        state = grid.get(coord)

        if state.is_base:
            grid.set(coord, CellState.MISS)
            result = StrikeResult(Outcome.MISS)
        elif state.is_unstruck_ship:
            grid.set(coord, CellState.SHIP_HIT)
            grid.record_hit()
            sunk = find_sunk_ship(grid, coord)
            if sunk:
                for cell in sunk:
                    grid.set(cell, CellState.SHIP_SUNK)
                grid.record_sunk(len(sunk))
                if not grid.concealed:
                    mark_sunk_halo(grid, sunk)
                result = StrikeResult(Outcome.SUNK, sunk=sunk)
                logger.info(
                    "strike_sunk",
                    extra={
                        "x": coord.x,
                        "y": coord.y,
                        "size": len(sunk),
                        "survivors": list(grid.survivors),
                    },
                )
            else:
                result = StrikeResult(Outcome.HIT)
        elif state in (CellState.SHIP_HIT, CellState.SHIP_SUNK):
            result = StrikeResult(Outcome.HIT, repeated=True)
        else:
            result = StrikeResult(Outcome.MISS, repeated=True)

        span.set_attribute("strike.outcome", result.outcome.value)
        span.set_attribute("strike.repeated", result.repeated)
        span.set_attribute("grid.life", grid.remaining_life)
        STRIKE_COUNTER.add(
            1,
            attributes={
                "outcome": result.outcome.value,
                "repeated": result.repeated,
                "concealed": grid.concealed,
            },
        )
        logger.debug(
            "strike_resolved",
            extra={
                "x": coord.x,
                "y": coord.y,
                "outcome": result.outcome.value,
                "repeated": result.repeated,
                "life": grid.remaining_life,
            },
        )
        return result
