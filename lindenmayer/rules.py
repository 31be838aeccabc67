"""Rule tables mapping a symbol to the production(s) it rewrites to.

A symbol absent from a table is terminal: it rewrites to itself at every depth.
Absence is the only way to mark a terminal. An entry mapping to the empty
production is a real rule that erases the symbol, and a weighted entry with no
alternatives at all is rejected.
"""

from __future__ import annotations

import bisect
import logging
import math
import random
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from lindenmayer.errors import InvalidRuleError

logger = logging.getLogger(__name__)


def _check_symbol(symbol: Any) -> str:
    if not (isinstance(symbol, str) and len(symbol) == 1):
        raise InvalidRuleError(
            f"rule keys must be single-character strings; got {symbol!r}"
        )
    return symbol


def _check_production(production: Any, symbol: str) -> str:
    if not isinstance(production, str):
        raise InvalidRuleError(
            f"production for '{symbol}' must be a string; "
            f"got {type(production).__name__}"
        )
    return production


def _check_weight(weight: Any, symbol: str) -> float:
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise InvalidRuleError(f"weight for '{symbol}' must be a number")
    w = float(weight)
    if not math.isfinite(w) or w <= 0:
        raise InvalidRuleError(
            f"weight for '{symbol}' must be positive and finite; got {weight!r}"
        )
    return w


# -------------------------
# Deterministic rules
# -------------------------


class RuleTable(Mapping[str, str]):
    """Read-only mapping of symbol -> production."""

    __slots__ = ("_rules", "_translation")

    def __init__(self, rules: Mapping[str, str] | None = None) -> None:
        checked: dict[str, str] = {}
        for symbol, production in (rules or {}).items():
            checked[_check_symbol(symbol)] = _check_production(production, symbol)
        self._rules = checked
        self._translation = str.maketrans(checked) if checked else {}
        logger.debug("RuleTable built with %d rules", len(checked))

    @classmethod
    def coerce(cls, rules: Mapping[str, str]) -> RuleTable:
        if isinstance(rules, RuleTable):
            return rules
        return cls(rules)

    def lookup(self, symbol: str) -> str | None:
        """Return the production for ``symbol``, or None if it is terminal."""
        return self._rules.get(symbol)

    def translation(self) -> dict[int, str]:
        """Table for ``str.translate`` that applies one rewriting pass."""
        return self._translation

    def symbols(self) -> set[str]:
        """Every symbol named by the table, as a key or inside a production."""
        out = set(self._rules)
        for production in self._rules.values():
            out.update(production)
        return out

    def __getitem__(self, symbol: str) -> str:
        return self._rules[symbol]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({self._rules!r})"


# -------------------------
# Weighted (stochastic) rules
# -------------------------


@dataclass(frozen=True)
class Alternative:
    production: str
    weight: float = 1.0


# A value may be a bare production (one alternative of weight 1) or a sequence
# of Alternative / (production, weight) pairs.
WeightedRules = Mapping[str, Union[str, Sequence[Any]]]


def _coerce_alternatives(symbol: str, options: Any) -> tuple[Alternative, ...]:
    if isinstance(options, str):
        return (Alternative(options, 1.0),)
    if not isinstance(options, Sequence):
        raise InvalidRuleError(
            f"alternatives for '{symbol}' must be a string or a sequence"
        )
    if len(options) == 0:
        raise InvalidRuleError(
            f"empty alternative list for '{symbol}'; "
            "omit the symbol to make it terminal"
        )

    alternatives: list[Alternative] = []
    for option in options:
        if isinstance(option, Alternative):
            production, weight = option.production, option.weight
        elif isinstance(option, Sequence) and not isinstance(option, str):
            if len(option) != 2:
                raise InvalidRuleError(
                    f"alternative for '{symbol}' must be a (production, weight) pair"
                )
            production, weight = option
        else:
            raise InvalidRuleError(
                f"alternative for '{symbol}' must be a (production, weight) pair"
            )
        alternatives.append(
            Alternative(
                _check_production(production, symbol), _check_weight(weight, symbol)
            )
        )
    return tuple(alternatives)


class WeightedRuleTable(Mapping[str, tuple[Alternative, ...]]):
    """Read-only mapping of symbol -> weighted alternatives.

    Weights need not sum to 1. The chance of an alternative being picked is its
    weight divided by the total weight of its symbol's own alternatives.
    """

    __slots__ = ("_alternatives", "_cumulative")

    def __init__(self, rules: WeightedRules | None = None) -> None:
        alternatives: dict[str, tuple[Alternative, ...]] = {}
        cumulative: dict[str, tuple[list[float], tuple[str, ...]]] = {}
        for symbol, options in (rules or {}).items():
            _check_symbol(symbol)
            alts = _coerce_alternatives(symbol, options)
            totals: list[float] = []
            running = 0.0
            for alt in alts:
                running += alt.weight
                totals.append(running)
            alternatives[symbol] = alts
            cumulative[symbol] = (totals, tuple(a.production for a in alts))
        self._alternatives = alternatives
        self._cumulative = cumulative
        logger.debug(
            "WeightedRuleTable built with %d symbols, %d alternatives",
            len(alternatives),
            sum(len(a) for a in alternatives.values()),
        )

    @classmethod
    def coerce(cls, rules: WeightedRules) -> WeightedRuleTable:
        if isinstance(rules, WeightedRuleTable):
            return rules
        return cls(rules)

    def lookup(self, symbol: str) -> tuple[Alternative, ...] | None:
        """Return the alternatives for ``symbol``, or None if it is terminal."""
        return self._alternatives.get(symbol)

    def choose(self, symbol: str, rng: random.Random) -> str | None:
        """Pick a production for ``symbol`` with one draw from ``rng``.

        Terminal symbols return None and consume nothing, so the number of
        draws made equals the number of non-terminal nodes expanded.
        """
        entry = self._cumulative.get(symbol)
        if entry is None:
            return None
        totals, productions = entry
        pick = rng.random() * totals[-1]
        index = bisect.bisect_right(totals, pick)
        return productions[min(index, len(productions) - 1)]

    def symbols(self) -> set[str]:
        out = set(self._alternatives)
        for alts in self._alternatives.values():
            for alt in alts:
                out.update(alt.production)
        return out

    def __getitem__(self, symbol: str) -> tuple[Alternative, ...]:
        return self._alternatives[symbol]

    def __iter__(self) -> Iterator[str]:
        return iter(self._alternatives)

    def __len__(self) -> int:
        return len(self._alternatives)

    def __repr__(self) -> str:
        return f"WeightedRuleTable({self._alternatives!r})"
