"""Exceptions raised by lindenmayer."""

from __future__ import annotations


class LSystemError(Exception):
    pass


class ConfigError(LSystemError, ValueError):
    pass


class InvalidRuleError(ConfigError):
    """A rule table entry is malformed (bad key, empty alternatives, bad weight)."""


class EmptyCursorStackError(LSystemError, IndexError):
    """A pop action found its stack empty.

    This is a grammar bug (an unmatched ``]`` or similar), never something the
    interpreter recovers from.
    """

    def __init__(self, stack: str, symbol: str | None = None) -> None:
        self.stack = stack
        self.symbol = symbol
        where = f" (symbol '{symbol}')" if symbol is not None else ""
        super().__init__(f"pop from empty {stack} stack{where}")


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigError(msg)


def _check_depth(depth: int) -> None:
    _require(
        isinstance(depth, int) and not isinstance(depth, bool),
        "depth must be an integer",
    )
    _require(depth >= 0, "depth must be >= 0")
