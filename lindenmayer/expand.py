"""Lazy, depth-first L-system expansion.

The depth-N expansion of an axiom is the left-to-right leaf sequence of an
implicit derivation tree. Instead of building every intermediate string, the
generators here walk that tree with an explicit stack of frames, one per level
currently open, and yield one symbol per step. Working memory is bounded by the
depth, not by the length of the output.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Generator, Iterator, Mapping

from lindenmayer.errors import _check_depth, _require
from lindenmayer.materialize import materialize, materialize_stochastic
from lindenmayer.rules import RuleTable, WeightedRuleTable, WeightedRules

logger = logging.getLogger(__name__)

_Lookup = Callable[[str], "str | None"]


def _walk(axiom: str, lookup: _Lookup, depth: int) -> Generator[str, None, None]:
    # Frame: (symbols, index, remaining depth for those symbols).
    stack: list[tuple[str, int, int]] = [(axiom, 0, depth)]

    while stack:
        s, i, d = stack.pop()
        if i >= len(s):
            continue

        ch = s[i]
        # Keep the continuation only while the level has symbols left, so the
        # stack never holds more than depth + 1 frames.
        if i + 1 < len(s):
            stack.append((s, i + 1, d))

        repl = lookup(ch) if d > 0 else None
        if repl is None:
            yield ch
        else:
            # Pushed after the continuation so it is traversed first.
            stack.append((repl, 0, d - 1))


# -------------------------
# Functional forms
# -------------------------


def stream_expand(
    axiom: str, rules: Mapping[str, str], depth: int
) -> Generator[str, None, None]:
    """Yield the depth-``depth`` expansion of ``axiom`` one symbol at a time."""
    _check_depth(depth)
    table = RuleTable.coerce(rules)
    return _walk(axiom, table.lookup, depth)


def stream_expand_stochastic(
    axiom: str, rules: WeightedRules, depth: int, rng: random.Random
) -> Generator[str, None, None]:
    """Like :func:`stream_expand` but picks each production with a draw from ``rng``.

    Draws are made in traversal order, once per non-terminal node, so the
    output depends only on the configuration and the state of ``rng``.
    """
    _check_depth(depth)
    table = WeightedRuleTable.coerce(rules)

    def lookup(symbol: str) -> str | None:
        return table.choose(symbol, rng)

    return _walk(axiom, lookup, depth)


# -------------------------
# Expanders
# -------------------------


class DeterministicExpander:
    """Reusable expansion configuration; each iteration is a fresh traversal.

    >>> "".join(DeterministicExpander("A", {"A": "AB", "B": "A"}, 3))
    'ABAAB'
    """

    def __init__(self, axiom: str, rules: Mapping[str, str], depth: int) -> None:
        _check_depth(depth)
        self.axiom = axiom
        self.rules = RuleTable.coerce(rules)
        self.depth = depth

    def __iter__(self) -> Iterator[str]:
        logger.debug(
            "Expanding axiom of %d symbols to depth %d", len(self.axiom), self.depth
        )
        return _walk(self.axiom, self.rules.lookup, self.depth)

    def materialize(self) -> str:
        """Return the whole expansion as one string."""
        return materialize(self.axiom, self.rules, self.depth)

    def __repr__(self) -> str:
        return (
            f"DeterministicExpander(axiom={self.axiom!r}, "
            f"rules={self.rules!r}, depth={self.depth})"
        )


class StochasticExpander:
    """Expansion with weighted random choice of productions.

    ``seed`` fixes every draw of a traversal. Without one, a seed is taken from
    system entropy once, here, and kept in :attr:`seed`, so the same instance
    replays the same sequence each time it is iterated and the run can be
    reproduced later from the logged seed.
    """

    def __init__(
        self,
        axiom: str,
        rules: WeightedRules,
        depth: int,
        seed: int | None = None,
    ) -> None:
        _check_depth(depth)
        self.axiom = axiom
        self.rules = WeightedRuleTable.coerce(rules)
        self.depth = depth
        if seed is None:
            seed = random.SystemRandom().getrandbits(64)
            logger.debug("No seed given; using %d from system entropy", seed)
        _require(
            isinstance(seed, int) and not isinstance(seed, bool),
            "seed must be an integer",
        )
        self.seed = seed

    def new_rng(self) -> random.Random:
        """A random stream in the state every traversal of this expander starts from."""
        return random.Random(self.seed)

    def __iter__(self) -> Iterator[str]:
        logger.debug(
            "Expanding axiom of %d symbols to depth %d with seed %d",
            len(self.axiom),
            self.depth,
            self.seed,
        )
        rng = self.new_rng()
        rules = self.rules

        def lookup(symbol: str) -> str | None:
            return rules.choose(symbol, rng)

        return _walk(self.axiom, lookup, self.depth)

    def materialize(self) -> str:
        """Return the whole expansion as one string, identical to iterating."""
        return materialize_stochastic(
            self.axiom, self.rules, self.depth, self.new_rng()
        )

    def __repr__(self) -> str:
        return (
            f"StochasticExpander(axiom={self.axiom!r}, rules={self.rules!r}, "
            f"depth={self.depth}, seed={self.seed})"
        )
