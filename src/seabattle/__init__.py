"""SeaBattle: grid combat rules and a scripted opponent."""

from __future__ import annotations

from .config import GameConfig
from .engine.errors import (
    GameStateError,
    NoCandidate,
    NoTarget,
    OutOfBounds,
    PlacementError,
    SeaBattleError,
    TargetingError,
)
from .engine.game import GameController, GameOutcome, GamePhase, GameState
from .engine.grid import CellState, Grid, new_grid
from .engine.placement import place_fleet, place_ship, place_ships
from .engine.ship import Coordinate, Orientation, Ship
from .engine.strike import Outcome, StrikeResult, strike
from .engine.targeting import pick_next_opponent_target
from .engine.turn import Side, TurnState


def remaining_life(grid: Grid) -> int:
    """Ship cells on ``grid`` that have not been struck yet."""
    return grid.remaining_life


def survivor_counts(grid: Grid) -> tuple[int, ...]:
    """Floating ships per size, smallest size first."""
    return grid.survivors


__all__ = [
    "CellState",
    "Coordinate",
    "GameConfig",
    "GameController",
    "GameOutcome",
    "GamePhase",
    "GameState",
    "GameStateError",
    "Grid",
    "NoCandidate",
    "NoTarget",
    "Orientation",
    "OutOfBounds",
    "Outcome",
    "PlacementError",
    "SeaBattleError",
    "Ship",
    "Side",
    "StrikeResult",
    "TargetingError",
    "TurnState",
    "new_grid",
    "pick_next_opponent_target",
    "place_fleet",
    "place_ship",
    "place_ships",
    "remaining_life",
    "strike",
    "survivor_counts",
]
