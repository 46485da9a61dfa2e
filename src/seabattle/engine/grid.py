"""Square grid of cell states for a single side."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator

from .errors import OutOfBounds
from .ship import Coordinate

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 8


class CellState(Enum):
    """State of a single grid cell."""

    EMPTY = "empty"
    MIST = "mist"
    MISS = "miss"
    CONCEALED = "concealed"
    SHIP_INTACT = "ship_intact"
    SHIP_HIT = "ship_hit"
    SHIP_SUNK = "ship_sunk"
    BUFFER = "buffer"

    @property
    def is_open(self) -> bool:
        """True when an attacker has not struck or ruled out the cell yet."""
        return self in OPEN_STATES

    @property
    def is_unstruck_ship(self) -> bool:
        return self in (CellState.SHIP_INTACT, CellState.CONCEALED)

    @property
    def is_base(self) -> bool:
        return self in (CellState.EMPTY, CellState.MIST)


OPEN_STATES = frozenset(
    {CellState.EMPTY, CellState.MIST, CellState.SHIP_INTACT, CellState.CONCEALED}
)


class Grid:
    """An N x N board with a remaining-life counter and per-size survivor counts.

    Cells are kept in a flat list indexed by ``x + y * size``. A concealed
    grid is the one the human strikes: empty cells start as ``MIST`` and
    ships are placed as ``CONCEALED``.
    """

    def __init__(self, size: int = DEFAULT_GRID_SIZE, concealed: bool = False) -> None:
        if size < 1:
            raise ValueError("Grid size must be positive.")
        self.size = size
        self.concealed = concealed
        self._cells: list[CellState] = [self.base_state] * (size * size)
        self._life = 0
        self._survivors: list[int] = []

    def __repr__(self) -> str:
        return (
            f"Grid(size={self.size}, concealed={self.concealed}, "
            f"life={self._life}, survivors={self._survivors})"
        )

    @property
    def base_state(self) -> CellState:
        """State of a cell that holds nothing."""
        return CellState.MIST if self.concealed else CellState.EMPTY

    @property
    def ship_state(self) -> CellState:
        """State of a freshly placed, unstruck ship cell."""
        return CellState.CONCEALED if self.concealed else CellState.SHIP_INTACT

    def in_bounds(self, coord: Coordinate) -> bool:
        return 0 <= coord.x < self.size and 0 <= coord.y < self.size

    def check(self, coord: Coordinate) -> None:
        """Raise ``OutOfBounds`` unless the coordinate lies on the grid."""
        if not self.in_bounds(coord):
            logger.error(
                "grid_out_of_bounds",
                extra={"x": coord.x, "y": coord.y, "size": self.size},
            )
            raise OutOfBounds(coord, self.size)

    def get(self, coord: Coordinate) -> CellState:
        self.check(coord)
        return self._cells[coord.x + coord.y * self.size]

    def set(self, coord: Coordinate, state: CellState) -> None:
        self.check(coord)
        self._cells[coord.x + coord.y * self.size] = state

    def cells(self) -> Iterator[tuple[Coordinate, CellState]]:
        """Yield every coordinate with its state in row-major order."""
        for index, state in enumerate(self._cells):
            yield Coordinate(index % self.size, index // self.size), state

    def count(self, *states: CellState) -> int:
        wanted = set(states)
        return sum(1 for state in self._cells if state in wanted)

    def rows(self) -> tuple[tuple[CellState, ...], ...]:
        """Return an immutable row-major copy of the cells."""
        return tuple(
            tuple(self._cells[y * self.size : (y + 1) * self.size]) for y in range(self.size)
        )

    @property
    def remaining_life(self) -> int:
        """Ship cells that have not been struck yet."""
        return self._life

    @property
    def survivors(self) -> tuple[int, ...]:
        """Floating ships per size; index 0 holds size-1 ships."""
        return tuple(self._survivors)

    def largest_surviving_size(self) -> int:
        """Return the largest ship size still afloat, or 0 when none are."""
        for index in range(len(self._survivors) - 1, -1, -1):
            if self._survivors[index] > 0:
                return index + 1
        return 0

    def reset(self, max_ship_size: int = 0) -> None:
        """Return every cell to the base state and clear the counters."""
        self._cells = [self.base_state] * (self.size * self.size)
        self._life = 0
        self._survivors = [0] * max_ship_size

    def register_ship(self, size: int) -> None:
        """Account for a newly placed ship of ``size`` cells."""
        if len(self._survivors) < size:
            self._survivors.extend([0] * (size - len(self._survivors)))
        self._survivors[size - 1] += 1
        self._life += size

    def record_hit(self) -> None:
        self._life -= 1

    def record_sunk(self, size: int) -> None:
        self._survivors[size - 1] -= 1


def new_grid(size: int = DEFAULT_GRID_SIZE, concealed: bool = False) -> Grid:
    """Create an empty grid (mist-covered when ``concealed``)."""
    return Grid(size=size, concealed=concealed)
