import random

import pytest

from lindenmayer import Alternative, InvalidRuleError, RuleTable, WeightedRuleTable
from lindenmayer.errors import ConfigError


class TestRuleTable:
    def test_lookup(self) -> None:
        rules = RuleTable({"A": "AB", "B": "A"})
        assert rules.lookup("A") == "AB"
        assert rules.lookup("C") is None
        assert len(rules) == 2
        assert dict(rules) == {"A": "AB", "B": "A"}

    def test_empty_production_is_not_terminal(self) -> None:
        rules = RuleTable({"A": ""})
        assert rules.lookup("A") == ""
        assert rules.lookup("A") is not None

    def test_multichar_key(self) -> None:
        with pytest.raises(InvalidRuleError):
            RuleTable({"AB": "A"})

    def test_non_string_production(self) -> None:
        with pytest.raises(InvalidRuleError):
            RuleTable({"A": 3})  # type: ignore[dict-item]

    def test_invalid_rule_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            RuleTable({"": "A"})

    def test_coerce_keeps_instance(self) -> None:
        rules = RuleTable({"A": "B"})
        assert RuleTable.coerce(rules) is rules
        assert isinstance(RuleTable.coerce({"A": "B"}), RuleTable)

    def test_symbols(self) -> None:
        assert RuleTable({"X": "F[X]"}).symbols() == {"X", "F", "[", "]"}

    def test_translation(self) -> None:
        table = RuleTable({"A": "AB", "B": "A"}).translation()
        assert "ABC".translate(table) == "ABAC"


class TestWeightedRuleTable:
    def test_pairs_and_alternatives(self) -> None:
        rules = WeightedRuleTable(
            {"A": [("AB", 2), Alternative("B", 0.5)], "B": "A"}
        )
        assert rules.lookup("A") == (Alternative("AB", 2.0), Alternative("B", 0.5))
        assert rules.lookup("B") == (Alternative("A", 1.0),)
        assert rules.lookup("C") is None

    @pytest.mark.parametrize(
        "options",
        [
            [],
            [("A", 0)],
            [("A", -1)],
            [("A", float("nan"))],
            [("A", float("inf"))],
            [("A", True)],
            [("A", "2")],
            [("A", 1, 2)],
            [None],
            42,
        ],
    )
    def test_invalid_alternatives(self, options: object) -> None:
        with pytest.raises(InvalidRuleError):
            WeightedRuleTable({"A": options})  # type: ignore[dict-item]

    def test_empty_production_allowed(self) -> None:
        rules = WeightedRuleTable({"A": [("", 1)]})
        assert rules.choose("A", random.Random(0)) == ""

    def test_terminal_consumes_no_draw(self) -> None:
        rules = WeightedRuleTable({"A": [("B", 1), ("C", 1)]})
        rng = random.Random(5)
        state = rng.getstate()
        assert rules.choose("Z", rng) is None
        assert rng.getstate() == state

    def test_single_alternative_still_draws(self) -> None:
        rules = WeightedRuleTable({"A": "B"})
        rng = random.Random(5)
        state = rng.getstate()
        assert rules.choose("A", rng) == "B"
        assert rng.getstate() != state

    def test_weighted_selection_bias(self) -> None:
        rules = WeightedRuleTable({"A": [("B", 2), ("C", 1)]})
        rng = random.Random(1234)
        picks = [rules.choose("A", rng) for _ in range(6000)]
        ratio = picks.count("B") / picks.count("C")
        assert 1.7 < ratio < 2.35

    def test_symbols(self) -> None:
        rules = WeightedRuleTable({"X": [("F[X]", 1), ("G", 1)]})
        assert rules.symbols() == {"X", "F", "[", "]", "G"}
