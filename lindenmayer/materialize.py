"""Eager expansion into a single string.

Faster than pulling symbols one at a time from a generator when the whole
result is needed anyway (e.g. to write it to a file), at the price of memory
proportional to the output. Callers are expected to bound the depth.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping

from lindenmayer.errors import _check_depth
from lindenmayer.rules import RuleTable, WeightedRuleTable, WeightedRules

logger = logging.getLogger(__name__)


def materialize(axiom: str, rules: Mapping[str, str], depth: int) -> str:
    """Apply the rules ``depth`` times and return the resulting string."""
    return materialize_levels(axiom, rules, depth)[-1]


def materialize_levels(
    axiom: str, rules: Mapping[str, str], depth: int
) -> list[str]:
    """Return the axiom followed by the expansion at every depth up to ``depth``."""
    _check_depth(depth)
    table = RuleTable.coerce(rules).translation()

    out = [axiom]
    expression = axiom
    for _ in range(depth):
        expression = expression.translate(table)
        out.append(expression)
    logger.debug("Materialized %d levels, final length %d", depth, len(expression))
    return out


def materialize_stochastic(
    axiom: str, rules: WeightedRules, depth: int, rng: random.Random
) -> str:
    """Eager counterpart of :func:`~lindenmayer.expand.stream_expand_stochastic`.

    Level-by-level rewriting would consume draws in a different order from
    the lazy expander, so this walks the derivation tree depth-first too. It
    saves work by appending whole productions that land on depth 0 and whole
    depth-0 remainders in one step.
    """
    _check_depth(depth)
    table = WeightedRuleTable.coerce(rules)
    choose = table.choose

    parts: list[str] = []
    stack: list[tuple[str, int, int]] = [(axiom, 0, depth)]

    while stack:
        s, i, d = stack.pop()
        if d == 0:
            parts.append(s[i:])
            continue

        while i < len(s):
            ch = s[i]
            i += 1
            repl = choose(ch, rng)
            if repl is None:
                parts.append(ch)
            elif d == 1:
                parts.append(repl)
            else:
                if i < len(s):
                    stack.append((s, i, d))
                stack.append((repl, 0, d - 1))
                break

    result = "".join(parts)
    logger.debug("Materialized stochastic expansion of length %d", len(result))
    return result
