from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .bean import Mode, create_beans
from .board import GaltonBoard
from .experiments import run_to_completion
from .io_utils import get_logger
from .viz_utils import format_board, format_slot_counts

USAGE_EXAMPLES = """\
Example: python -m galton_board.run_machine 10 400 luck
Example: python -m galton_board.run_machine 20 1000 skill debug

The optional fourth argument must be the word "debug"; any other token is
rejected with this usage message instead of being ignored."""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="galton_board.run_machine",
        description="Run the bean counter in text mode and print the slot bean counts.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("slot_count", type=int, help="number of slots (>= 1)")
    p.add_argument("bean_count", type=int, help="number of beans (>= 0)")
    p.add_argument("mode", choices=[m.value for m in Mode], help="decision regime")
    p.add_argument(
        "debug",
        nargs="?",
        choices=["debug"],
        help="print the machine after every step",
    )
    p.add_argument("--seed", type=int, default=None, help="generator seed (default: fresh entropy)")
    p.add_argument("--results-dir", type=Path, default=None, help="where the run log is written")
    return p


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.slot_count < 1:
        parser.error("slot_count must be >= 1")
    if args.bean_count < 0:
        parser.error("bean_count must be >= 0")
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    debug = args.debug == "debug"
    logger = get_logger(mode="machine", root=args.results_dir)

    rng = np.random.default_rng(args.seed)
    board = GaltonBoard(args.slot_count)
    beans = create_beans(args.bean_count, args.slot_count, args.mode, rng)
    board.reset(beans)
    logger.info(
        f"RUN START slots={args.slot_count} beans={args.bean_count} mode={args.mode} seed={args.seed}"
    )

    if debug:
        print(format_board(board))

    steps = run_to_completion(board, step_hook=(lambda b: print(format_board(b))) if debug else None)

    logger.info(f"RUN END steps={steps} mean_slot={board.average_slot_bean_count():.6g}")
    print("Slot bean counts:")
    print(format_slot_counts(board))


if __name__ == "__main__":
    main()
