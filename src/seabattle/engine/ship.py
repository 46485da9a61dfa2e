"""Ship geometry for the SeaBattle engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    """Immutable grid coordinate; ``x`` is the column and ``y`` the row."""

    x: int
    y: int

    def neighbours(self) -> tuple[Coordinate, ...]:
        """Orthogonal neighbours in left, right, up, down order (unbounded)."""
        return (
            Coordinate(self.x - 1, self.y),
            Coordinate(self.x + 1, self.y),
            Coordinate(self.x, self.y - 1),
            Coordinate(self.x, self.y + 1),
        )


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def step(self) -> tuple[int, int]:
        return (1, 0) if self is Orientation.HORIZONTAL else (0, 1)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def line(p0: Coordinate, p1: Coordinate) -> tuple[Coordinate, ...]:
    """Return the cells from ``p0`` to ``p1`` inclusive along one axis."""
    if p0.x != p1.x and p0.y != p1.y:
        raise ValueError("Line endpoints must share a row or a column.")
    dx = _sign(p1.x - p0.x)
    dy = _sign(p1.y - p0.y)
    length = max(abs(p1.x - p0.x), abs(p1.y - p0.y)) + 1
    return tuple(Coordinate(p0.x + dx * i, p0.y + dy * i) for i in range(length))


def buffer_zone(first: Coordinate, last: Coordinate, size: int) -> tuple[Coordinate, ...]:
    """Return the cells reserved around the segment ``first``..``last``.

    The zone is the row above and the row below the segment over its
    x-range, followed by the column left and the column right of it over
    its y-range. Lines that fall off a ``size`` x ``size`` grid are
    skipped. Diagonal corners are not part of the zone, so two ships may
    touch corner to corner.
    """
    cells: list[Coordinate] = []
    for y in (first.y - 1, last.y + 1):
        if 0 <= y < size:
            cells.extend(line(Coordinate(first.x, y), Coordinate(last.x, y)))
    for x in (first.x - 1, last.x + 1):
        if 0 <= x < size:
            cells.extend(line(Coordinate(x, first.y), Coordinate(x, last.y)))
    return tuple(cells)


def fleet_composition(max_ship_size: int) -> list[tuple[int, int]]:
    """Return ``(size, count)`` pairs, largest first: size s gets M - s + 1 ships."""
    return [(size, max_ship_size - size + 1) for size in range(max_ship_size, 0, -1)]


@dataclass(frozen=True)
class Ship:
    """A straight ship anchored at its top-left cell."""

    start: Coordinate
    size: int
    orientation: Orientation = Orientation.HORIZONTAL

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError("Ship size must be positive.")

    @property
    def end(self) -> Coordinate:
        dx, dy = self.orientation.step
        return Coordinate(self.start.x + dx * (self.size - 1), self.start.y + dy * (self.size - 1))

    def cells(self) -> tuple[Coordinate, ...]:
        """Return the ordered footprint of the ship."""
        return line(self.start, self.end)

    def buffer(self, grid_size: int) -> tuple[Coordinate, ...]:
        return buffer_zone(self.start, self.end, grid_size)
