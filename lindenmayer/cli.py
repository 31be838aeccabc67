"""Command-line front end.

Run:
  python -m lindenmayer render config.json output.svg
  python -m lindenmayer expand config.json output.txt [--stream]
  python -m lindenmayer random out.json --seed 123
  python -m lindenmayer --help
"""

from __future__ import annotations

import argparse
import itertools
import logging
import sys
from typing import TextIO, cast

from lindenmayer.config import (
    DEFAULT_ACTIONS,
    DefaultAction,
    build_actions,
    build_expander,
    dump_json,
    generate_random_config,
    load_config,
)
from lindenmayer.errors import ConfigError, LSystemError
from lindenmayer.expand import DeterministicExpander, StochasticExpander
from lindenmayer.svg import write_svg
from lindenmayer.turtle import interpret, segments_to_polylines

logger = logging.getLogger(__name__)

_STREAM_CHUNK = 1 << 16

HELP_EPILOG = r"""
CONFIGURATION

  {
    "name": "Fractal plant",
    "axiom": "X",
    "depth": 5,
    "seed": 7,
    "rules": {
      "X": [{"production": "F+[[X]-X]-F[-FX]+X", "weight": 2},
            ["F-[[X]+X]+F[+FX]-X", 1]],
      "F": "FF"
    },
    "turtle": {
      "angle": 25, "step": 5,
      "start": {"x": 0, "y": 0, "heading": 90},
      "commands": {
        "F": {"type": "forward", "draw": true},
        "+": {"type": "turn", "direction": 1},
        "-": {"type": "turn", "direction": -1},
        "[": {"type": "push"},
        "]": {"type": "pop"},
        "X": {"type": "noop"}
      }
    },
    "svg": {"margin": 10, "precision": 3, "flip_y": true}
  }

  A rule value that is a string is deterministic. A list of weighted
  alternatives makes the system stochastic; "seed" then fixes the output.

  Command types: forward (draw, step), turn (direction, angle), turn_abs
  (angle), set_heading (angle), move_to / draw_to (x, y), push, pop,
  push_position, pop_position, push_heading, pop_heading, custom (name), noop.
"""


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lindenmayer",
        description="Expand L-systems and render them to SVG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )
    p.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser("render", help="Render a JSON config to an SVG file.")
    pr.add_argument("config", help="Path to the input JSON config.")
    pr.add_argument("output", help="Path to write the SVG output.")
    pr.add_argument(
        "--default-action",
        choices=list(DEFAULT_ACTIONS),
        default="forward_draw",
        help=(
            "What to do for symbols not found in turtle.commands. "
            "Default: forward_draw (unknown symbols draw forward)."
        ),
    )

    pe = sub.add_parser("expand", help="Write the expanded symbol string to a file.")
    pe.add_argument("config", help="Path to the input JSON config.")
    pe.add_argument("output", help="Path to write the expansion, or - for stdout.")
    pe.add_argument(
        "--stream",
        action="store_true",
        help="Write from the lazy expander in chunks instead of building the "
        "whole string in memory first.",
    )

    pg = sub.add_parser("random", help="Generate a random JSON config.")
    pg.add_argument("output", help="Where to write the generated JSON file.")
    pg.add_argument(
        "--seed", type=int, default=None, help="Seed for repeatable randomness."
    )

    return p


# -------------------------
# Commands
# -------------------------


def cmd_render(
    config_path: str, output_path: str, default_action: DefaultAction
) -> None:
    cfg = load_config(config_path)
    expander = build_expander(cfg)
    result = interpret(expander, build_actions(cfg, default_action), cfg.turtle.start)
    write_svg(
        segments_to_polylines(result.segments),
        output_path,
        cfg.svg,
        title=cfg.name,
    )


def _write_expansion(
    expander: DeterministicExpander | StochasticExpander, out: TextIO, stream: bool
) -> int:
    if not stream:
        text = expander.materialize()
        out.write(text)
        return len(text)

    written = 0
    symbols = iter(expander)
    while True:
        chunk = "".join(itertools.islice(symbols, _STREAM_CHUNK))
        if not chunk:
            return written
        out.write(chunk)
        written += len(chunk)


def cmd_expand(config_path: str, output_path: str, stream: bool) -> None:
    # The output is only opened once the config has loaded.
    expander = build_expander(load_config(config_path))
    if output_path == "-":
        n = _write_expansion(expander, sys.stdout, stream)
        sys.stdout.write("\n")
    else:
        with open(output_path, "w", encoding="utf-8") as f:
            n = _write_expansion(expander, f, stream)
            f.write("\n")
    logger.info("Wrote %d symbols to %s", n, output_path)


def cmd_random(output_path: str, seed: int | None) -> None:
    dump_json(generate_random_config(seed), output_path)
    logger.info("Wrote random config to %s", output_path)


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd == "render":
            cmd_render(
                args.config, args.output, cast(DefaultAction, args.default_action)
            )
        elif args.cmd == "expand":
            cmd_expand(args.config, args.output, args.stream)
        elif args.cmd == "random":
            cmd_random(args.output, args.seed)
        else:
            raise AssertionError("unreachable")
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    except LSystemError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2
    return 0
