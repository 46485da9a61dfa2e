"""Headless command-line driver that plays matches against the scripted opponent."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Sequence

from pydantic import ValidationError

from seabattle.config import GameConfig
from seabattle.engine.errors import PlacementError, TargetingError
from seabattle.engine.game import GameController, GamePhase
from seabattle.engine.instrumented_game import InstrumentedGameController
from seabattle.engine.ship import Coordinate
from seabattle.engine.strike import Outcome, StrikeResult
from seabattle.engine.targeting import pick_next_opponent_target
from seabattle.engine.turn import Side, TurnState
from seabattle.telemetry import configure_console, init_telemetry

logger = logging.getLogger(__name__)

STRATEGIES = ("random", "heuristic")
SETUP_ATTEMPTS = 5


class SelfStriker:
    """Chooses strikes for the human side when nobody is at the keyboard."""

    def __init__(self, strategy: str, rng: random.Random) -> None:
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {strategy!r}.")
        self.strategy = strategy
        self.rng = rng
        self.turn = TurnState(current=Side.SELF)

    def choose(self, game: GameController) -> Coordinate:
        if self.strategy == "random":
            return self.rng.choice(game.open_targets(Side.SELF))
        return pick_next_opponent_target(game.opponent_grid, self.turn, self.rng)

    def observe(self, coord: Coordinate, result: StrikeResult) -> None:
        if result.outcome is Outcome.HIT and not result.repeated:
            self.turn.last_hit = coord
        elif result.outcome is Outcome.SUNK or result.ends_turn:
            self.turn.last_hit = None


def setup_game(game: GameController, attempts: int = SETUP_ATTEMPTS) -> int:
    """Set the game up, starting over after a failed placement.

    Returns the number of attempts used. The last ``PlacementError`` is
    re-raised once every attempt has failed.
    """
    if attempts < 1:
        raise ValueError("attempts must be positive.")
    for attempt in range(1, attempts):
        try:
            game.setup()
            return attempt
        except PlacementError as exc:
            logger.warning(
                "setup_attempt_failed",
                extra={"attempt": attempt, "attempts": attempts, "ship_size": exc.ship_size},
            )
    game.setup()
    return attempts


def play_match(
    game: GameController, striker: SelfStriker, setup_attempts: int = SETUP_ATTEMPTS
) -> int:
    """Run one match to the end and return the number of strikes made."""
    setup_game(game, setup_attempts)
    strikes = 0
    while game.phase is GamePhase.IN_PROGRESS:
        if game.current is Side.SELF:
            coord = striker.choose(game)
            striker.observe(coord, game.human_strike(coord))
            strikes += 1
        else:
            strikes += len(game.play_opponent_turn())
    return strikes


def _format_summary(index: int, game: GameController, strikes: int) -> str:
    outcome = game.outcome.value if game.outcome else "unfinished"
    return (
        f"game {index}: {outcome} after {strikes} strikes "
        f"(life self={game.self_grid.remaining_life} "
        f"opponent={game.opponent_grid.remaining_life})"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate SeaBattle matches headlessly.")
    parser.add_argument("--games", type=int, default=1, help="Number of matches to play.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument("--grid-size", type=int, default=None)
    parser.add_argument("--max-ship-size", type=int, default=None)
    parser.add_argument("--retries", type=int, default=None, help="Placement attempts per ship.")
    parser.add_argument(
        "--setup-attempts",
        type=int,
        default=SETUP_ATTEMPTS,
        help="Fresh placements to try before giving up on a game.",
    )
    parser.add_argument(
        "--self-strategy",
        choices=STRATEGIES,
        default="random",
        help="How the human side picks its strikes.",
    )
    parser.add_argument(
        "--telemetry", action="store_true", help="Enable OpenTelemetry from the environment."
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_console(args.log_level.upper())

    try:
        config = GameConfig.from_env(
            grid_size=args.grid_size,
            max_ship_size=args.max_ship_size,
            placement_retries=args.retries,
            seed=args.seed,
        )
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    if args.setup_attempts < 1:
        print("Invalid configuration: --setup-attempts must be positive.", file=sys.stderr)
        return 2

    controller_cls = GameController
    if args.telemetry:
        init_telemetry()
        controller_cls = InstrumentedGameController

    rng = random.Random(config.seed)
    striker = SelfStriker(args.self_strategy, rng)
    wins = {Side.SELF: 0, Side.OPPONENT: 0}
    for index in range(1, args.games + 1):
        game = controller_cls(config, rng=rng)
        striker.turn.reset()
        try:
            strikes = play_match(game, striker, args.setup_attempts)
        except PlacementError as exc:
            logger.error(
                "setup_failed",
                extra={"game": index, "ship_size": exc.ship_size, "attempts": args.setup_attempts},
            )
            print(f"game {index}: setup failed ({exc})", file=sys.stderr)
            return 1
        except TargetingError as exc:
            print(f"game {index}: targeting exhausted ({exc})", file=sys.stderr)
            continue
        if game.winner is not None:
            wins[game.winner] += 1
        print(_format_summary(index, game, strikes))

    print(f"self wins: {wins[Side.SELF]}, opponent wins: {wins[Side.OPPONENT]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
