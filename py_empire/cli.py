"""
Command line front end.

Generates a world, prints it as text and reports where each player starts.

Usage:
    py-empire [-w water] [-s smooth] [-p players] [--seed SEED] [--box]
"""

import argparse
import sys
from typing import List, Optional

import structlog

from .config import configure_logging
from .core.exceptions import WorldGenError
from .core.world_generator import GenerationOptions, generate_world
from .utils.random import set_random_seed

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-empire", description="Generate an Empire world and seat the players"
    )
    parser.add_argument(
        "-w", "--water", type=int, default=70,
        help="percentage of map that is water, 10..90 (default 70)",
    )
    parser.add_argument(
        "-s", "--smooth", type=int, default=5,
        help="smoothing passes used to clump land together (default 5)",
    )
    parser.add_argument(
        "-p", "--players", type=int, default=2, help="number of players, 1..4 (default 2)"
    )
    parser.add_argument("--seed", default="default", help="random seed")
    parser.add_argument("--box", action="store_true", help="rectangular test map")
    parser.add_argument("--sim", action="store_true", help="starting cities build armies")
    parser.add_argument("--reveal-all", action="store_true", help="remove the fog of war")
    parser.add_argument("--no-cities", action="store_true", help="print land instead of cities")
    parser.add_argument("--log-level", default="WARNING", help="logging level")
    return parser


def validate(args: argparse.Namespace) -> Optional[str]:
    """Return an error message for out of range arguments."""
    if args.water < 10 or args.water > 90:
        return "-w argument must be in the range 10..90."
    if args.smooth < 0:
        return "-s argument must be greater or equal to zero."
    if args.players < 1 or args.players > 4:
        return "-p argument must be in the range 1..4."
    return None


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    error = validate(args)
    if error:
        print(f"py-empire: {error}", file=sys.stderr)
        return 1

    configure_logging(level=args.log_level, log_format="console")

    options = GenerationOptions(
        water_ratio=args.water,
        smooth=args.smooth,
        num_players=args.players,
        box_map=args.box,
        sim_mode=args.sim,
        reveal_all=args.reveal_all,
        seed=args.seed,
    )
    prng = set_random_seed(args.seed)

    try:
        result = generate_world(options, prng=prng)
    except WorldGenError as e:
        logger.error("World generation failed", error=str(e))
        print(f"py-empire: {e}", file=sys.stderr)
        return 1

    print(result.world.to_text(show_cities=not args.no_cities))
    for owner, city in result.starts.items():
        row, col = result.world.row_col(city.loc)
        print(f"{owner.name}'s city is at {row},{col}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
