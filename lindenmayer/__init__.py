"""Memory-efficient L-system expansion and turtle interpretation.

>>> from lindenmayer import DeterministicExpander
>>> "".join(DeterministicExpander("A", {"A": "AB", "B": "A"}, 5))
'ABAABABAABAAB'
"""

from lindenmayer.errors import (
    ConfigError,
    EmptyCursorStackError,
    InvalidRuleError,
    LSystemError,
)
from lindenmayer.expand import (
    DeterministicExpander,
    StochasticExpander,
    stream_expand,
    stream_expand_stochastic,
)
from lindenmayer.geometry import Cursor, Point, Segment
from lindenmayer.materialize import (
    materialize,
    materialize_levels,
    materialize_stochastic,
)
from lindenmayer.rules import Alternative, RuleTable, WeightedRuleTable
from lindenmayer.turtle import (
    Action,
    Custom,
    DrawTo,
    Interpretation,
    MoveForward,
    MoveForwardAndSave,
    MoveTo,
    NoOp,
    PopCursor,
    PopHeading,
    PopPosition,
    PushCursor,
    PushHeading,
    PushPosition,
    Rotate,
    SetHeading,
    TurtleInterpreter,
    Unknown,
    interpret,
    segments_to_polylines,
)

__version__ = "0.1.0"

__all__ = [
    "Action",
    "Alternative",
    "ConfigError",
    "Cursor",
    "Custom",
    "DeterministicExpander",
    "DrawTo",
    "EmptyCursorStackError",
    "Interpretation",
    "InvalidRuleError",
    "LSystemError",
    "MoveForward",
    "MoveForwardAndSave",
    "MoveTo",
    "NoOp",
    "Point",
    "PopCursor",
    "PopHeading",
    "PopPosition",
    "PushCursor",
    "PushHeading",
    "PushPosition",
    "Rotate",
    "RuleTable",
    "Segment",
    "SetHeading",
    "StochasticExpander",
    "TurtleInterpreter",
    "Unknown",
    "WeightedRuleTable",
    "interpret",
    "materialize",
    "materialize_levels",
    "materialize_stochastic",
    "segments_to_polylines",
    "stream_expand",
    "stream_expand_stochastic",
]
