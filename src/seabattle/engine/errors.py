"""Error taxonomy for the SeaBattle engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .ship import Coordinate


class SeaBattleError(Exception):
    """Base class for every error raised by the engine."""


class OutOfBounds(SeaBattleError, IndexError):
    """A coordinate lies outside the grid."""

    def __init__(self, coord: Coordinate, size: int) -> None:
        super().__init__(f"Coordinate ({coord.x}, {coord.y}) is outside the {size}x{size} grid.")
        self.coord = coord
        self.size = size


class PlacementError(SeaBattleError, RuntimeError):
    """A ship could not be placed; the board must be initialised again."""

    def __init__(self, ship_size: int, message: str | None = None) -> None:
        super().__init__(message or f"Cannot place ship of size {ship_size}.")
        self.ship_size = ship_size


class TargetingError(SeaBattleError, RuntimeError):
    """The opponent ran out of legal cells to strike."""


class NoCandidate(TargetingError):
    """No open cell next to a damaged ship."""

    def __init__(self, last_hit: Coordinate) -> None:
        super().__init__(f"No follow-up candidate around ({last_hit.x}, {last_hit.y}).")
        self.last_hit = last_hit


class NoTarget(TargetingError):
    """Hunt mode found no cell with a positive weight."""


class GameStateError(SeaBattleError, RuntimeError):
    """A move was attempted out of phase or out of turn."""
