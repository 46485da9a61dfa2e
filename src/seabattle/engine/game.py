"""Two-sided SeaBattle game controller."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from seabattle.config import GameConfig
from seabattle.telemetry import get_meter, get_tracer

from .errors import GameStateError, TargetingError
from .grid import CellState, Grid
from .placement import place_fleet
from .ship import Coordinate
from .strike import Outcome, StrikeResult, strike
from .targeting import pick_next_opponent_target
from .turn import Side, TurnState

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.game")
meter = get_meter("seabattle.engine.game")

MOVE_COUNTER = meter.create_counter(
    "seabattle_engine_moves",
    unit="1",
    description="Strikes made through the GameController",
)


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class GameOutcome(Enum):
    """How a finished match ended."""

    SELF_WON = "self_won"
    OPPONENT_WON = "opponent_won"
    TARGETING_EXHAUSTED = "targeting_exhausted"

    @property
    def winner(self) -> Side | None:
        if self is GameOutcome.SELF_WON:
            return Side.SELF
        if self is GameOutcome.OPPONENT_WON:
            return Side.OPPONENT
        return None


@dataclass(frozen=True)
class GridSnapshot:
    """Immutable view of one grid."""

    cells: tuple[tuple[CellState, ...], ...]
    remaining_life: int
    survivors: tuple[int, ...]


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current match."""

    phase: GamePhase
    current: Side
    outcome: GameOutcome | None
    grids: Mapping[Side, GridSnapshot]
    messages: tuple[str, ...]

    @property
    def winner(self) -> Side | None:
        return self.outcome.winner if self.outcome is not None else None


Move = tuple[Coordinate, StrikeResult]


class GameController:
    """Owns both grids, the random source and the turn state machine.

    ``self_grid`` holds the human's fleet and is struck by the scripted
    opponent; ``opponent_grid`` is concealed and struck by the human.
    """

    def __init__(self, config: GameConfig | None = None, rng: random.Random | None = None) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.grids: dict[Side, Grid] = {
            Side.SELF: Grid(self.config.grid_size, concealed=False),
            Side.OPPONENT: Grid(self.config.grid_size, concealed=True),
        }
        self.phase = GamePhase.SETUP
        self.outcome: GameOutcome | None = None
        self.turn = TurnState()
        self.messages: list[str] = []

    @property
    def self_grid(self) -> Grid:
        return self.grids[Side.SELF]

    @property
    def opponent_grid(self) -> Grid:
        return self.grids[Side.OPPONENT]

    @property
    def current(self) -> Side:
        return self.turn.current

    @property
    def winner(self) -> Side | None:
        return self.outcome.winner if self.outcome is not None else None

    def target_grid(self, side: Side) -> Grid:
        """Grid that ``side`` strikes."""
        return self.grids[side.other()]

    def setup(self) -> None:
        """Place a fresh fleet on both grids and start the match.

        ``PlacementError`` propagates and the phase stays ``SETUP``.
        """
        with tracer.start_as_current_span("game.setup") as span:
            self.phase = GamePhase.SETUP
            self.outcome = None
            self.turn.reset()
            self.messages.clear()
            for side, grid in self.grids.items():
                place_fleet(
                    grid,
                    max_ship_size=self.config.max_ship_size,
                    retries=self.config.placement_retries,
                    rng=self.rng,
                )
                logger.debug("game_fleet_placed", extra={"side": side.value})
            self.phase = GamePhase.IN_PROGRESS
            span.set_attribute("grid.size", self.config.grid_size)
            logger.info(
                "game_setup_complete",
                extra={"phase": self.phase.value, "current": self.current.value},
            )

    def _require_turn(self, side: Side) -> None:
        if self.phase is not GamePhase.IN_PROGRESS:
            logger.error(
                "move_rejected_game_not_in_progress",
                extra={"side": side.value, "phase": self.phase.value},
            )
            raise GameStateError("Game is not in progress.")
        if side is not self.current:
            logger.error(
                "move_rejected_wrong_side",
                extra={"side": side.value, "current": self.current.value},
            )
            raise GameStateError("It is not this side's turn.")

    def _apply(self, side: Side, coord: Coordinate) -> StrikeResult:
        grid = self.target_grid(side)
        result = strike(grid, coord)
        MOVE_COUNTER.add(1, attributes={"side": side.value, "outcome": result.outcome.value})
        if result.outcome is Outcome.SUNK:
            self.messages.append(
                f"Sunk, remaining: {list(self.self_grid.survivors)}, "
                f"{list(self.opponent_grid.survivors)}"
            )
        if grid.remaining_life == 0:
            won = GameOutcome.SELF_WON if side is Side.SELF else GameOutcome.OPPONENT_WON
            self._finish(won)
        elif result.ends_turn:
            self.turn.current = side.other()
        return result

    def _finish(self, outcome: GameOutcome) -> None:
        self.phase = GamePhase.FINISHED
        self.outcome = outcome
        self.messages.append(f"Game over: {outcome.value}")
        logger.info("game_finished", extra={"outcome": outcome.value})

    def human_strike(self, coord: Coordinate) -> StrikeResult:
        """Strike the concealed grid on behalf of the human side."""
        with tracer.start_as_current_span("game.human_strike") as span:
            span.set_attribute("x", coord.x)
            span.set_attribute("y", coord.y)
            self._require_turn(Side.SELF)
            result = self._apply(Side.SELF, coord)
            span.set_attribute("outcome", result.outcome.value)
            return result

    def opponent_strike(self) -> Move:
        """Let the scripted opponent choose and make a single strike.

        A ``TargetingError`` ends the match as ``TARGETING_EXHAUSTED`` and is
        re-raised.
        """
        with tracer.start_as_current_span("game.opponent_strike") as span:
            self._require_turn(Side.OPPONENT)
            try:
                coord = pick_next_opponent_target(self.self_grid, self.turn, self.rng)
            except TargetingError as exc:
                span.record_exception(exc)
                logger.error(
                    "opponent_targeting_exhausted",
                    extra={"error": str(exc), "mode": self.turn.mode.value},
                )
                self._finish(GameOutcome.TARGETING_EXHAUSTED)
                raise
            self.turn.pending_target = coord
            result = self._apply(Side.OPPONENT, coord)
            self.turn.pending_target = None
            if result.outcome is Outcome.HIT and not result.repeated:
                self.turn.last_hit = coord
            elif result.outcome is Outcome.SUNK or result.ends_turn:
                # A sink or a fresh miss sends the next turn back to hunting.
                self.turn.last_hit = None
            span.set_attribute("x", coord.x)
            span.set_attribute("y", coord.y)
            span.set_attribute("outcome", result.outcome.value)
            return coord, result

    def play_opponent_turn(self) -> list[Move]:
        """Strike until the opponent misses or the match ends."""
        moves: list[Move] = []
        while self.phase is GamePhase.IN_PROGRESS and self.current is Side.OPPONENT:
            moves.append(self.opponent_strike())
        return moves

    def open_targets(self, side: Side) -> list[Coordinate]:
        """Cells ``side`` may still usefully strike."""
        if self.phase is not GamePhase.IN_PROGRESS:
            return []
        return [coord for coord, state in self.target_grid(side).cells() if state.is_open]

    def get_state(self) -> GameState:
        """Return an immutable view of the match."""
        grids = {
            side: GridSnapshot(
                cells=grid.rows(),
                remaining_life=grid.remaining_life,
                survivors=grid.survivors,
            )
            for side, grid in self.grids.items()
        }
        return GameState(
            phase=self.phase,
            current=self.current,
            outcome=self.outcome,
            grids=MappingProxyType(grids),
            messages=tuple(self.messages),
        )
