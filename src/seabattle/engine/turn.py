"""Turn bookkeeping shared by the controller and the targeting engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .ship import Coordinate


class Side(Enum):
    """The two sides of a match."""

    SELF = "self"
    OPPONENT = "opponent"

    def other(self) -> Side:
        return Side.OPPONENT if self is Side.SELF else Side.SELF


class TargetMode(Enum):
    HUNT = "hunt"
    FINISH = "finish"


@dataclass
class TurnState:
    """Whose turn it is, plus the opponent's follow-up memory.

    ``last_hit`` is the opponent's last hit that did not sink a ship; while
    it is set the opponent finishes that ship instead of hunting.
    """

    current: Side = Side.SELF
    pending_target: Coordinate | None = None
    last_hit: Coordinate | None = None

    @property
    def mode(self) -> TargetMode:
        return TargetMode.FINISH if self.last_hit is not None else TargetMode.HUNT

    def reset(self) -> None:
        self.current = Side.SELF
        self.pending_target = None
        self.last_hit = None
