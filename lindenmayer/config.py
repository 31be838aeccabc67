"""JSON configuration for L-system runs.

A configuration document describes an L-system (axiom, rules, depth and an
optional seed), a turtle interpretation (angle, step, start pose and a command
table) and SVG output options. See ``example/`` for complete documents.
"""

from __future__ import annotations

import json
import logging
import math
import os
import random
from dataclasses import dataclass, fields
from typing import Any, Literal, Union, cast

from lindenmayer.errors import ConfigError, _require
from lindenmayer.expand import DeterministicExpander, StochasticExpander
from lindenmayer.geometry import Cursor, heading_from_degrees
from lindenmayer.rules import Alternative, RuleTable, WeightedRuleTable
from lindenmayer.svg import SvgOptions, SvgStyle
from lindenmayer.turtle import (
    Action,
    Custom,
    DrawTo,
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
)

logger = logging.getLogger(__name__)

DefaultAction = Literal["forward_draw", "forward_move", "noop"]
DEFAULT_ACTIONS: tuple[str, ...] = ("forward_draw", "forward_move", "noop")


def _as_float(x: Any, path: str) -> float:
    _require(
        isinstance(x, (int, float)) and not isinstance(x, bool),
        f"{path} must be a number",
    )
    # json.load accepts NaN and Infinity literals.
    _require(math.isfinite(x), f"{path} must be finite")
    return float(x)


def _as_int(x: Any, path: str) -> int:
    _require(
        isinstance(x, int) and not isinstance(x, bool), f"{path} must be an integer"
    )
    return int(x)


def _as_str(x: Any, path: str) -> str:
    _require(isinstance(x, str), f"{path} must be a string")
    return cast(str, x)


def _as_bool(x: Any, path: str) -> bool:
    _require(isinstance(x, bool), f"{path} must be a boolean")
    return cast(bool, x)


def _as_dict(x: Any, path: str) -> dict[str, Any]:
    _require(isinstance(x, dict), f"{path} must be an object")
    return cast(dict[str, Any], x)


# -------------------------
# Config model
# -------------------------


@dataclass(frozen=True)
class TurtleConfig:
    angle_deg: float
    step: float
    start: Cursor
    # symbol -> action, already resolved against angle_deg and step
    commands: dict[str, Action]


@dataclass(frozen=True)
class LSystemConfig:
    name: str
    axiom: str
    depth: int
    rules: Union[RuleTable, WeightedRuleTable]
    seed: int | None
    turtle: TurtleConfig
    svg: SvgOptions

    @property
    def stochastic(self) -> bool:
        return isinstance(self.rules, WeightedRuleTable)

    def alphabet(self) -> set[str]:
        return set(self.axiom) | self.rules.symbols()


def build_expander(cfg: LSystemConfig) -> DeterministicExpander | StochasticExpander:
    if isinstance(cfg.rules, WeightedRuleTable):
        return StochasticExpander(cfg.axiom, cfg.rules, cfg.depth, seed=cfg.seed)
    return DeterministicExpander(cfg.axiom, cfg.rules, cfg.depth)


def build_actions(
    cfg: LSystemConfig, default_action: DefaultAction = "forward_draw"
) -> dict[str, Action]:
    """Return the command table with every uncovered symbol of the system
    mapped to ``default_action``.

    The interpreter itself treats symbols without an action as no-ops, so
    ``"noop"`` leaves the table as configured.
    """
    _require(
        default_action in DEFAULT_ACTIONS,
        f"default_action must be one of {', '.join(DEFAULT_ACTIONS)}; "
        f"got {default_action!r}",
    )
    actions = dict(cfg.turtle.commands)
    if default_action == "noop":
        return actions

    fallback: Action
    if default_action == "forward_draw":
        fallback = MoveForwardAndSave(cfg.turtle.step)
    else:
        fallback = MoveForward(cfg.turtle.step)
    for sym in sorted(cfg.alphabet().difference(actions)):
        logger.debug("Symbol '%s' has no command; using %s", sym, default_action)
        actions[sym] = fallback
    return actions


# -------------------------
# Parsing
# -------------------------


def _parse_alternative(x: Any, path: str) -> tuple[str, float]:
    if isinstance(x, dict):
        _require("production" in x, f"{path} must have field 'production'")
        return (
            _as_str(x["production"], f"{path}.production"),
            _as_float(x.get("weight", 1), f"{path}.weight"),
        )
    _require(
        isinstance(x, list) and len(x) == 2,
        f"{path} must be an object or a [production, weight] pair",
    )
    return (_as_str(x[0], f"{path}[0]"), _as_float(x[1], f"{path}[1]"))


def parse_rules(obj: Any) -> Union[RuleTable, WeightedRuleTable]:
    rules_obj = _as_dict(obj, "rules")
    if not any(isinstance(v, list) for v in rules_obj.values()):
        for k, v in rules_obj.items():
            _as_str(v, f"rules['{k}']")
        return RuleTable(rules_obj)

    weighted: dict[str, Any] = {}
    for k, v in rules_obj.items():
        if isinstance(v, str):
            weighted[k] = v
        else:
            _require(isinstance(v, list), f"rules['{k}'] must be a string or a list")
            weighted[k] = [
                _parse_alternative(alt, f"rules['{k}'][{i}]")
                for i, alt in enumerate(v)
            ]
    return WeightedRuleTable(weighted)


def rules_to_json(rules: Union[RuleTable, WeightedRuleTable]) -> dict[str, Any]:
    """The ``"rules"`` object that :func:`parse_rules` reads back as ``rules``."""
    if isinstance(rules, RuleTable):
        return dict(rules)

    out: dict[str, Any] = {}
    for symbol, alts in rules.items():
        if len(alts) == 1 and alts[0].weight == 1.0:
            out[symbol] = alts[0].production
        else:
            out[symbol] = [
                {"production": alt.production, "weight": alt.weight} for alt in alts
            ]
    if out and all(isinstance(v, str) for v in out.values()):
        # At least one list keeps the table weighted.
        symbol = next(iter(out))
        out[symbol] = [{"production": out[symbol], "weight": 1.0}]
    return out


def parse_command(
    sym: str, obj: dict[str, Any], *, angle_deg: float, step: float
) -> Action:
    path = f"turtle.commands['{sym}']"
    atype = obj.get("type")
    _require(isinstance(atype, str), f"command for '{sym}' must have string field 'type'")

    if atype == "noop":
        return NoOp()
    if atype == "forward":
        draw = _as_bool(obj.get("draw"), f"{path}.draw")
        dist = step * _as_float(obj.get("step", 1), f"{path}.step")
        return MoveForwardAndSave(dist) if draw else MoveForward(dist)
    if atype == "turn":
        direction = obj.get("direction")
        _require(
            direction in (-1, 1) and not isinstance(direction, bool),
            f"turn command for '{sym}' must have direction -1 or 1",
        )
        mult = _as_float(obj.get("angle", 1), f"{path}.angle")
        return Rotate(direction * mult * angle_deg)
    if atype == "turn_abs":
        return Rotate(_as_float(obj.get("angle"), f"{path}.angle"))
    if atype == "set_heading":
        return SetHeading(
            heading_from_degrees(_as_float(obj.get("angle"), f"{path}.angle"))
        )
    if atype in ("move_to", "draw_to"):
        pos = (
            _as_float(obj.get("x"), f"{path}.x"),
            _as_float(obj.get("y"), f"{path}.y"),
        )
        return DrawTo(pos) if atype == "draw_to" else MoveTo(pos)
    if atype == "custom":
        return Custom(_as_str(obj.get("name", sym), f"{path}.name"))

    simple: dict[str, Action] = {
        "push": PushCursor(),
        "pop": PopCursor(),
        "push_position": PushPosition(),
        "pop_position": PopPosition(),
        "push_heading": PushHeading(),
        "pop_heading": PopHeading(),
    }
    if atype in simple:
        return simple[atype]
    raise ConfigError(f"Unknown command type '{atype}' for symbol '{sym}'")


def parse_turtle(obj: Any) -> TurtleConfig:
    turtle = _as_dict(obj, "turtle")
    angle_deg = _as_float(turtle.get("angle", 90), "turtle.angle")
    step = _as_float(turtle.get("step", 10), "turtle.step")
    _require(step > 0, "turtle.step must be > 0")

    start_obj = _as_dict(turtle.get("start", {}), "turtle.start")
    start = Cursor.at(
        _as_float(start_obj.get("x", 0), "turtle.start.x"),
        _as_float(start_obj.get("y", 0), "turtle.start.y"),
        _as_float(start_obj.get("heading", 0), "turtle.start.heading"),
    )

    commands_obj = _as_dict(turtle.get("commands", {}), "turtle.commands")
    commands: dict[str, Action] = {}
    for sym, action in commands_obj.items():
        _require(
            isinstance(sym, str) and len(sym) == 1,
            "turtle.commands keys must be single-character strings",
        )
        commands[sym] = parse_command(
            sym,
            _as_dict(action, f"turtle.commands['{sym}']"),
            angle_deg=angle_deg,
            step=step,
        )
    return TurtleConfig(angle_deg=angle_deg, step=step, start=start, commands=commands)


def _optional_positive(svg: dict[str, Any], key: str) -> float | None:
    if svg.get(key) is None:
        return None
    value = _as_float(svg[key], f"svg.{key}")
    _require(value > 0, f"svg.{key} must be > 0")
    return value


def parse_style(obj: Any) -> SvgStyle:
    style_obj = _as_dict(obj, "svg.style")
    names = [f.name for f in fields(SvgStyle)]
    unknown = sorted(set(style_obj).difference(names))
    _require(not unknown, f"svg.style has unknown keys: {', '.join(unknown)}")

    defaults = SvgStyle()
    values: dict[str, Any] = {}
    for name in names:
        value = style_obj.get(name, getattr(defaults, name))
        if name == "stroke_width":
            values[name] = _as_float(value, f"svg.style.{name}")
        else:
            values[name] = _as_str(value, f"svg.style.{name}")
    return SvgStyle(**values)


def parse_svg(obj: Any) -> SvgOptions:
    svg = _as_dict(obj, "svg")
    precision = _as_int(svg.get("precision", 3), "svg.precision")
    _require(0 <= precision <= 10, "svg.precision must be between 0 and 10")

    background = svg.get("background")
    if background is not None:
        background = _as_str(background, "svg.background")
    return SvgOptions(
        margin=_as_float(svg.get("margin", 10), "svg.margin"),
        precision=precision,
        flip_y=_as_bool(svg.get("flip_y", True), "svg.flip_y"),
        width=_optional_positive(svg, "width"),
        height=_optional_positive(svg, "height"),
        background=background,
        style=parse_style(svg.get("style", {})),
    )


def parse_config(obj: Any) -> LSystemConfig:
    obj = _as_dict(obj, "root")

    axiom = _as_str(obj.get("axiom", ""), "axiom")
    _require(len(axiom) > 0, "axiom must be non-empty")
    depth = _as_int(obj.get("depth", 0), "depth")
    _require(depth >= 0, "depth must be >= 0")

    seed = obj.get("seed")
    if seed is not None:
        seed = _as_int(seed, "seed")

    cfg = LSystemConfig(
        name=_as_str(obj.get("name", "L-System"), "name"),
        axiom=axiom,
        depth=depth,
        rules=parse_rules(obj.get("rules", {})),
        seed=seed,
        turtle=parse_turtle(obj.get("turtle", {})),
        svg=parse_svg(obj.get("svg", {})),
    )
    logger.debug(
        "Parsed config %r: depth=%d rules=%d stochastic=%s",
        cfg.name,
        cfg.depth,
        len(cfg.rules),
        cfg.stochastic,
    )
    return cfg


def load_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        text = f.read()
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"{path} is not valid JSON: {e.msg} at line {e.lineno}"
        ) from e
    logger.debug("Loaded %d bytes of JSON from %s", len(text), path)
    return cast(dict[str, Any], obj)


def load_config(path: str) -> LSystemConfig:
    return parse_config(load_json(path))


def dump_json(obj: dict[str, Any], path: str) -> None:
    text = json.dumps(obj, indent=2, ensure_ascii=False) + "\n"
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


# -------------------------
# Random config generator
# -------------------------

_X_TOKENS = ("F", "X", "+", "-", "[X]")
_X_TOKEN_WEIGHTS = (9, 4, 3, 3, 1)


def _random_branch(rng: random.Random, budget: int, nesting: int = 0) -> str:
    """Random run of F, turns and nested ``[...]`` branches.

    Branches are generated whole, so brackets always balance.
    """
    out: list[str] = []
    while budget > 0:
        roll = rng.random()
        if roll < 0.2 and nesting < 3 and budget > 2:
            inner = rng.randint(1, budget - 2)
            out.append("[" + _random_branch(rng, inner, nesting + 1) + "]")
            budget -= inner + 2
        elif roll < 0.6:
            out.append("F")
            budget -= 1
        else:
            out.append(rng.choice("+-"))
            budget -= 1
    word = "".join(out)
    return word if "F" in word else word + "F"


def _random_x_alternative(rng: random.Random) -> Alternative:
    tokens = rng.choices(_X_TOKENS, weights=_X_TOKEN_WEIGHTS, k=rng.randint(3, 6))
    return Alternative("".join(tokens), float(rng.randint(1, 4)))


def generate_random_config(seed: int | None = None) -> dict[str, Any]:
    """Build a small plant-like configuration for experimentation.

    Systems grown from ``X`` get one to three alternatives for ``X``; with more
    than one the rules are weighted and the config carries a seed that fixes
    the output.
    """
    rng = random.Random(seed)

    angle = rng.choice([15, 20, 22.5, 25, 30, 36, 45, 60, 90])
    depth = rng.randint(3, 6)
    step = rng.choice([5, 8, 10, 12, 15])

    rules: Union[RuleTable, WeightedRuleTable]
    if rng.random() < 0.5:
        axiom = "F"
        rules = RuleTable({"F": _random_branch(rng, rng.randint(10, 22))})
    else:
        axiom = "X"
        grow = _random_branch(rng, rng.randint(4, 8))
        options = [_random_x_alternative(rng) for _ in range(rng.randint(1, 3))]
        if len(options) == 1:
            rules = RuleTable({"F": grow, "X": options[0].production})
        else:
            rules = WeightedRuleTable({"F": grow, "X": options})

    cfg: dict[str, Any] = {
        "name": "Random L-System",
        "axiom": axiom,
        "depth": depth,
        "seed": rng.randint(0, 2**32 - 1),
        "rules": rules_to_json(rules),
        "turtle": {
            "angle": angle,
            "step": step,
            "start": {"x": 0, "y": 0, "heading": 90},
            "commands": {
                "F": {"type": "forward", "draw": True},
                "f": {"type": "forward", "draw": False},
                "+": {"type": "turn", "direction": 1},
                "-": {"type": "turn", "direction": -1},
                "[": {"type": "push"},
                "]": {"type": "pop"},
                "X": {"type": "noop"},
            },
        },
        "svg": {"margin": 10, "precision": 3, "flip_y": True},
    }
    logger.debug(
        "Generated random config: axiom=%s depth=%d stochastic=%s",
        axiom,
        depth,
        isinstance(rules, WeightedRuleTable),
    )
    return cfg
