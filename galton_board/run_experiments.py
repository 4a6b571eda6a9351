from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .bean import Mode
from .experiments import run_trials, summarise_trials
from .io_utils import ensure_results_layout, get_logger
from .viz_utils import plot_slot_histogram


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run multi-seed bean counter trials.")
    p.add_argument(
        "--mode",
        choices=["full", "quick"],
        default="full",
        help="full: BEAN_COUNT beans x N_SEEDS; quick: smaller dev run writing _quick outputs",
    )
    p.add_argument("--slots", type=int, default=config.SLOT_COUNT, help="number of slots")
    p.add_argument("--beans", type=int, default=None, help="beans per run (default depends on --mode)")
    p.add_argument(
        "--decision",
        choices=["luck", "skill", "both"],
        default="both",
        help="decision regime(s) to run",
    )
    p.add_argument("--plot", action="store_true", help="write slot histograms under results/figures/")
    p.add_argument("--results-dir", type=Path, default=None, help="override the results directory")
    args = p.parse_args(argv)
    if args.slots < 1:
        p.error("--slots must be >= 1")
    if args.beans is not None and args.beans < 0:
        p.error("--beans must be >= 0")
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    mode = args.mode

    root = ensure_results_layout(args.results_dir)
    logger = get_logger(mode=mode, root=root)

    if mode == "quick":
        bean_count = config.BEAN_COUNT_QUICK
        n_seeds = config.N_SEEDS_QUICK
    else:
        bean_count = config.BEAN_COUNT
        n_seeds = config.N_SEEDS
    if args.beans is not None:
        bean_count = args.beans
    suffix = "" if mode == "full" else f"_{mode}"

    decisions = [Mode.LUCK, Mode.SKILL] if args.decision == "both" else [Mode(args.decision)]
    logger.info(f"RUN START mode={mode} slots={args.slots} beans={bean_count} n_seeds={n_seeds}")

    for decision in decisions:
        out_path = root / "trials" / f"trials_{decision.value}_s{args.slots}_b{bean_count}{suffix}.csv"
        df = run_trials(
            slot_count=args.slots,
            bean_count=bean_count,
            mode=decision,
            n_seeds=n_seeds,
            base_seed=config.BASE_SEED,
            out_path=out_path,
            logger_info=logger.info,
            logger_warn=logger.warning,
        )
        summary = summarise_trials(df, slot_count=args.slots)
        logger.info(
            f"{decision.value}: mean_slot={summary['mean_slot']:.4f} "
            f"(std {summary['std_mean_slot']:.4f}) upper={summary['mean_slot_upper']:.4f} "
            f"lower={summary['mean_slot_lower']:.4f} reproduced={summary['frac_reproduced']:.2f}"
        )
        if args.plot:
            fig_path = plot_slot_histogram(
                summary["slot_mean"],
                root / "figures" / f"slots_{decision.value}_s{args.slots}_b{bean_count}{suffix}.png",
                title=f"{decision.value}: mean slot counts over {summary['n_seeds']} seeds",
                mode=decision.value,
                errors=summary["slot_std"],
            )
            logger.info(f"wrote {fig_path}")

    logger.info("RUN END")


if __name__ == "__main__":
    main()
