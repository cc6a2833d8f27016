"""CLI for running self-play games.

Usage::

    python -m hexfit.engine.autoplay_cli --strategy greedy --games 20

    # Smaller board, procedural shapes, no solvability guarantee
    python -m hexfit.engine.autoplay_cli --radius 3 --procedural \\
        --no-guarantee-solvability --games 50
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from hexfit.config import settings
from hexfit.engine.autoplay import STRATEGIES, run_autoplay


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Hexfit self-play")
    parser.add_argument("--games", type=int, default=10)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument(
        "--strategy",
        default="greedy",
        help=f"Play strategy ({', '.join(STRATEGIES)})",
    )
    parser.add_argument("--radius", type=int, default=settings.board_radius)
    parser.add_argument("--tray-size", type=int, default=settings.tray_size)
    parser.add_argument("--max-moves", type=int, default=1000)
    parser.add_argument(
        "--procedural",
        action="store_true",
        help="Deal procedurally generated shapes instead of catalog shapes",
    )
    parser.add_argument(
        "--adaptive-sizing",
        action=argparse.BooleanOptionalAction,
        default=settings.use_adaptive_sizing,
        help="Shrink dealt shapes as the board fills up",
    )
    parser.add_argument(
        "--guarantee-solvability",
        action=argparse.BooleanOptionalAction,
        default=settings.guarantee_solvability,
        help="Only deal sets with at least one placeable piece",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper())

    factory = STRATEGIES.get(args.strategy)
    if factory is None:
        print(
            f"Unknown strategy: {args.strategy!r}. "
            f"Available: {', '.join(STRATEGIES)}",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        run_settings = settings.with_overrides(
            board_radius=args.radius,
            tray_size=args.tray_size,
            use_procedural_generation=args.procedural,
            use_adaptive_sizing=args.adaptive_sizing,
            guarantee_solvability=args.guarantee_solvability,
        )
    except ValidationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        sys.exit(1)

    print(
        f"Autoplay: {args.strategy}, {args.games} games, radius {args.radius}, "
        f"tray {args.tray_size}"
    )
    print()

    result = run_autoplay(
        strategy=factory(args.seed),
        num_games=args.games,
        base_seed=args.seed,
        settings=run_settings,
        max_moves=args.max_moves,
        progress_callback=lambda done, total: print(
            f"\r  Game {done}/{total}", end="", flush=True
        ),
    )
    print()
    print()
    print(result.summary())


if __name__ == "__main__":
    main()
