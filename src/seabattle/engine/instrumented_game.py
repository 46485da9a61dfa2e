"""Game controller with tracing, metrics and logging hooks."""

from __future__ import annotations

import time
from typing import Any

from seabattle.engine.game import GameController, GamePhase, Move
from seabattle.engine.ship import Coordinate
from seabattle.engine.strike import Outcome, StrikeResult
from seabattle.engine.turn import Side
from seabattle.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedGameController(GameController):
    """Wraps GameController with a span per match and per strike."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("seabattle.engine")
        self._tracer = get_tracer("seabattle.engine")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id = 0
        self.strike_counts: dict[Side, int] = {Side.SELF: 0, Side.OPPONENT: 0}

    def setup(self) -> None:
        self._start_game_span()
        self.strike_counts = {Side.SELF: 0, Side.OPPONENT: 0}
        with self._tracer.start_as_current_span("seabattle.engine.setup") as span:
            span.set_attribute("game.id", self._game_id)
            try:
                super().setup()
            except Exception as exc:
                span.record_exception(exc)
                record_game_metric("seabattle_game_setup_failures_total", 1)
                self._close_game_span()
                raise
            life = self.self_grid.remaining_life
            span.set_attribute("fleet.life", life)
            record_game_metric(
                "seabattle_game_setup_total", 1, {"grid_size": self.config.grid_size}
            )
            self._logger.info("Setup finished for game %d (fleet life %d)", self._game_id, life)

    def human_strike(self, coord: Coordinate) -> StrikeResult:
        with self._tracer.start_as_current_span("seabattle.engine.human_strike") as span:
            span.set_attribute("game.id", self._game_id)
            result = super().human_strike(coord)
            self._record(span, Side.SELF, coord, result)
            return result

    def opponent_strike(self) -> Move:
        with self._tracer.start_as_current_span("seabattle.engine.opponent_strike") as span:
            span.set_attribute("game.id", self._game_id)
            span.set_attribute("mode", self.turn.mode.value)
            try:
                coord, result = super().opponent_strike()
            except Exception as exc:
                span.record_exception(exc)
                span.set_attribute("error", True)
                record_game_metric(
                    "seabattle_game_errors_total", 1, {"side": Side.OPPONENT.value}
                )
                if self.phase is GamePhase.FINISHED:
                    self._finish_game()
                raise
            self._record(span, Side.OPPONENT, coord, result)
            return coord, result

    def _record(self, span: Any, side: Side, coord: Coordinate, result: StrikeResult) -> None:
        self.strike_counts[side] += 1
        span.set_attribute("coord.x", coord.x)
        span.set_attribute("coord.y", coord.y)
        span.set_attribute("outcome", result.outcome.name)
        span.set_attribute("repeated", result.repeated)

        record_game_metric("seabattle_strikes_total", 1, {"side": side.value})
        record_game_metric(
            "seabattle_strikes_by_outcome_total",
            1,
            {"side": side.value, "outcome": result.outcome.value},
        )
        if result.outcome is Outcome.SUNK:
            record_game_metric(
                "seabattle_ships_sunk_total", 1, {"side": side.value, "size": result.ship_size}
            )

        self._logger.info(
            "strike side=%s coord=(%d,%d) outcome=%s",
            side.value,
            coord.x,
            coord.y,
            result.outcome.name,
        )
        if self.phase is GamePhase.FINISHED:
            self._finish_game()

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id += 1
        self._game_span_cm = self._tracer.start_as_current_span("seabattle.engine.game")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._game_id)

    def _finish_game(self) -> None:
        if self._game_span_cm is None:
            return
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        strikes = sum(self.strike_counts.values())
        outcome = self.outcome.value if self.outcome else "unknown"

        record_game_metric("seabattle_game_completed_total", 1, {"outcome": outcome})
        record_game_metric("seabattle_game_duration_seconds", duration, {"outcome": outcome})

        with self._tracer.start_as_current_span("seabattle.engine.game_complete") as span:
            span.set_attribute("game.id", self._game_id)
            span.set_attribute("outcome", outcome)
            span.set_attribute("strikes", strikes)
            span.set_attribute("duration_ms", duration * 1000)

        if self._game_span is not None:
            self._game_span.set_attribute("outcome", outcome)
            self._game_span.set_attribute("strikes", strikes)

        self._logger.info(
            "Game %d finished. outcome=%s strikes=%d duration_s=%.3f",
            self._game_id,
            outcome,
            strikes,
            duration,
        )
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
