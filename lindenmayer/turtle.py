"""Turtle interpretation of a symbol stream.

Each symbol is looked up in an action table and applied to a :class:`Cursor`.
Drawing actions record :class:`Segment` objects; nothing is rendered here.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Union

from lindenmayer.errors import EmptyCursorStackError
from lindenmayer.geometry import Cursor, Point, Segment, normalize

logger = logging.getLogger(__name__)


# -------------------------
# Actions
# -------------------------


@dataclass(frozen=True)
class NoOp:
    pass


@dataclass(frozen=True)
class Unknown:
    """Reported by :meth:`TurtleInterpreter.step` for symbols with no action."""


@dataclass(frozen=True)
class Custom:
    """Does nothing to the cursor; reported so callers can act on ``name``."""

    name: str


@dataclass(frozen=True)
class MoveForward:
    distance: float


@dataclass(frozen=True)
class MoveForwardAndSave:
    """Move forward and record the line travelled as a segment."""

    distance: float


@dataclass(frozen=True)
class MoveTo:
    position: Point


@dataclass(frozen=True)
class DrawTo:
    position: Point


@dataclass(frozen=True)
class Rotate:
    """Turn counter-clockwise by ``degrees`` (clockwise when negative)."""

    degrees: float

    @classmethod
    def from_radians(cls, radians: float) -> Rotate:
        return cls(math.degrees(radians))


@dataclass(frozen=True)
class SetHeading:
    heading: Point

    def __post_init__(self) -> None:
        object.__setattr__(self, "heading", normalize(self.heading))


@dataclass(frozen=True)
class PushCursor:
    pass


@dataclass(frozen=True)
class PopCursor:
    pass


@dataclass(frozen=True)
class PushPosition:
    pass


@dataclass(frozen=True)
class PopPosition:
    pass


@dataclass(frozen=True)
class PushHeading:
    pass


@dataclass(frozen=True)
class PopHeading:
    pass


Action = Union[
    NoOp,
    Unknown,
    Custom,
    MoveForward,
    MoveForwardAndSave,
    MoveTo,
    DrawTo,
    Rotate,
    SetHeading,
    PushCursor,
    PopCursor,
    PushPosition,
    PopPosition,
    PushHeading,
    PopHeading,
]

UNKNOWN = Unknown()


# -------------------------
# Interpreter
# -------------------------


@dataclass(frozen=True)
class Interpretation:
    segments: list[Segment]
    cursor: Cursor


class TurtleInterpreter:
    """Apply an action table to a stream of symbols, one symbol per step.

    The interpreter owns its cursor and stacks for the whole pass. It consumes
    ``symbols`` lazily, so it can be fed straight from an expander.
    """

    def __init__(
        self,
        symbols: Iterable[str],
        actions: Mapping[str, Action],
        cursor: Cursor | None = None,
    ) -> None:
        self._symbols = iter(symbols)
        self.actions = dict(actions)
        self.cursor = cursor if cursor is not None else Cursor()
        self.segments: list[Segment] = []
        self.cursors: list[Cursor] = []
        self.positions: list[Point] = []
        self.headings: list[Point] = []

    def step(self) -> Action | None:
        """Apply the next symbol's action and return it.

        Symbols missing from the table leave the cursor alone and are reported
        as :data:`UNKNOWN`. Returns None once the input is exhausted.
        """
        sym = next(self._symbols, None)
        if sym is None:
            return None
        action = self.actions.get(sym)
        if action is None:
            return UNKNOWN
        self._apply(sym, action)
        return action

    def __iter__(self) -> Iterator[Action]:
        while True:
            action = self.step()
            if action is None:
                return
            yield action

    def run(self) -> Interpretation:
        """Consume the remaining input and return the segments and final cursor."""
        steps = 0
        for _ in self:
            steps += 1
        logger.debug(
            "Interpreted %d symbols into %d segments", steps, len(self.segments)
        )
        return Interpretation(self.segments, self.cursor)

    def _apply(self, sym: str, action: Action) -> None:
        cur = self.cursor

        if isinstance(action, MoveForwardAndSave):
            self.cursor = cur.forward(action.distance)
            self.segments.append(Segment(cur.position, self.cursor.position))
        elif isinstance(action, MoveForward):
            self.cursor = cur.forward(action.distance)
        elif isinstance(action, Rotate):
            self.cursor = cur.rotate_degrees(action.degrees)
        elif isinstance(action, PushCursor):
            self.cursors.append(cur)
        elif isinstance(action, PopCursor):
            if not self.cursors:
                raise EmptyCursorStackError("cursor", sym)
            self.cursor = self.cursors.pop()
        elif isinstance(action, DrawTo):
            self.cursor = cur.with_position(action.position)
            self.segments.append(Segment(cur.position, self.cursor.position))
        elif isinstance(action, MoveTo):
            self.cursor = cur.with_position(action.position)
        elif isinstance(action, SetHeading):
            self.cursor = cur.with_heading(action.heading)
        elif isinstance(action, PushPosition):
            self.positions.append(cur.position)
        elif isinstance(action, PopPosition):
            if not self.positions:
                raise EmptyCursorStackError("position", sym)
            self.cursor = cur.with_position(self.positions.pop())
        elif isinstance(action, PushHeading):
            self.headings.append(cur.heading)
        elif isinstance(action, PopHeading):
            if not self.headings:
                raise EmptyCursorStackError("heading", sym)
            self.cursor = cur.with_heading(self.headings.pop())
        elif isinstance(action, (NoOp, Unknown, Custom)):
            pass
        else:
            raise TypeError(f"Unknown action {action!r} for symbol '{sym}'")


def interpret(
    symbols: Iterable[str],
    actions: Mapping[str, Action],
    cursor: Cursor | None = None,
) -> Interpretation:
    """Run a fresh interpreter over ``symbols`` to completion."""
    return TurtleInterpreter(symbols, actions, cursor).run()


# -------------------------
# Polylines
# -------------------------


def segments_to_polylines(segments: Iterable[Segment]) -> list[list[Point]]:
    """Chain consecutive segments that share an endpoint into polylines."""
    polylines: list[list[Point]] = []
    for seg in segments:
        if polylines and polylines[-1][-1] == seg.start:
            polylines[-1].append(seg.end)
        else:
            polylines.append([seg.start, seg.end])
    return polylines
