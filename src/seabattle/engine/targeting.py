"""Opponent targeting: a weighted hunt plus a follow-up on damaged ships."""

from __future__ import annotations

import logging
import random

import numpy as np
import numpy.typing as npt

from seabattle.telemetry import get_meter

from .errors import NoCandidate, NoTarget
from .grid import CellState, Grid
from .ship import Coordinate
from .turn import TargetMode, TurnState

logger = logging.getLogger(__name__)
meter = get_meter("seabattle.engine.targeting")

PICK_COUNTER = meter.create_counter(
    "seabattle_engine_target_picks",
    unit="1",
    description="Targets chosen by the opponent, by mode",
)

WeightMap = npt.NDArray[np.int64]

_AXES = ((1, 0), (0, 1))


def _open_mask(grid: Grid) -> npt.NDArray[np.bool_]:
    mask = np.zeros((grid.size, grid.size), dtype=bool)
    for coord, state in grid.cells():
        mask[coord.y, coord.x] = state.is_open
    return mask


def _score_line(line: npt.NDArray[np.bool_], largest_size: int) -> npt.NDArray[np.int64]:
    scores = np.zeros(line.shape[0], dtype=np.int64)
    start = None
    # The trailing False closes a run that reaches the edge.
    for index, is_open in enumerate([*line.tolist(), False]):
        if is_open and start is None:
            start = index
        elif not is_open and start is not None:
            length = index - start
            if length >= largest_size:
                for offset in range(length):
                    scores[start + offset] = min(offset + 1, length - offset, largest_size)
            start = None
    return scores


def hunt_weights(grid: Grid, largest_size: int) -> WeightMap:
    """Weight every cell by how well the largest ship fits through it.

    Each maximal run of open cells along a row, and separately along a
    column, that is at least ``largest_size`` long gives its cells
    ``min(distance from start + 1, distance from end + 1, largest_size)``.
    Shorter runs contribute nothing. The two passes are summed and the
    result is flat, indexed by ``x + y * size``.
    """
    if largest_size < 1:
        raise ValueError("largest_size must be positive.")
    mask = _open_mask(grid)
    weights = np.zeros((grid.size, grid.size), dtype=np.int64)
    for y in range(grid.size):
        weights[y, :] += _score_line(mask[y, :], largest_size)
    for x in range(grid.size):
        weights[:, x] += _score_line(mask[:, x], largest_size)
    return weights.reshape(-1)


def pick_hunt(grid: Grid, rng: random.Random) -> Coordinate:
    """Pick uniformly among the open cells with the highest hunt weight.

    Open cells in runs too short for the largest ship score zero but stay
    eligible, so ``NoTarget`` means no open cell is left at all.
    """
    largest = grid.largest_surviving_size()
    if largest == 0:
        logger.error("hunt_no_survivors", extra={"life": grid.remaining_life})
        raise NoTarget("No ship left afloat to hunt.")
    open_cells = _open_mask(grid).reshape(-1)
    if not open_cells.any():
        logger.error("hunt_no_target", extra={"largest_size": largest})
        raise NoTarget("No open cell left to strike.")
    weights = hunt_weights(grid, largest)
    best = int(weights[open_cells].max())
    index = rng.choice(np.flatnonzero(open_cells & (weights == best)).tolist())
    return Coordinate(index % grid.size, index // grid.size)


def _run_ends(grid: Grid, origin: Coordinate, dx: int, dy: int) -> list[Coordinate]:
    """Open cells just past both ends of the damaged run through ``origin``."""
    ends: list[Coordinate] = []
    for sign in (-1, 1):
        coord = Coordinate(origin.x + sign * dx, origin.y + sign * dy)
        while grid.in_bounds(coord) and grid.get(coord) is CellState.SHIP_HIT:
            coord = Coordinate(coord.x + sign * dx, coord.y + sign * dy)
        if grid.in_bounds(coord) and grid.get(coord).is_open:
            ends.append(coord)
    return ends


def follow_up_candidates(grid: Grid, last_hit: Coordinate) -> list[Coordinate]:
    """Cells worth striking next to finish the ship damaged at ``last_hit``.

    Once a damaged neighbour fixes the ship's axis only that axis is
    searched; the perpendicular one is never revisited.
    """
    grid.check(last_hit)
    for dx, dy in _AXES:
        neighbours = (
            Coordinate(last_hit.x - dx, last_hit.y - dy),
            Coordinate(last_hit.x + dx, last_hit.y + dy),
        )
        if any(grid.in_bounds(n) and grid.get(n) is CellState.SHIP_HIT for n in neighbours):
            return _run_ends(grid, last_hit, dx, dy)
    return [n for n in last_hit.neighbours() if grid.in_bounds(n) and grid.get(n).is_open]


def pick_follow_up(grid: Grid, last_hit: Coordinate, rng: random.Random) -> Coordinate:
    candidates = follow_up_candidates(grid, last_hit)
    if not candidates:
        logger.error("follow_up_no_candidate", extra={"x": last_hit.x, "y": last_hit.y})
        raise NoCandidate(last_hit)
    return rng.choice(candidates)


def pick_next_opponent_target(
    grid: Grid, turn_state: TurnState, rng: random.Random | None = None
) -> Coordinate:
    """Choose the opponent's next strike: finish a damaged ship, else hunt."""
    rng = rng or random.Random()
    if turn_state.last_hit is not None:
        mode = TargetMode.FINISH
        target = pick_follow_up(grid, turn_state.last_hit, rng)
    else:
        mode = TargetMode.HUNT
        target = pick_hunt(grid, rng)
    PICK_COUNTER.add(1, attributes={"mode": mode.value})
    logger.debug("target_picked", extra={"mode": mode.value, "x": target.x, "y": target.y})
    return target
