from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from . import config
from .bean import Bean, Mode, create_beans
from .board import GaltonBoard
from .io_utils import atomic_write_csv, read_csv_or_empty, seed_indices_present


@dataclass(frozen=True)
class RunStats:
    """Diagnostics for a single (parameter, seed) run."""

    slot_counts: tuple[int, ...]
    mean_slot: float
    steps: int
    mean_slot_upper: float  # after upper_half() on the repeat() rerun
    mean_slot_lower: float  # after lower_half() on a hard-reset rerun
    repeat_reproduced: bool


def _seed_for(*, base_seed: int, seed_index: int) -> int:
    return int(base_seed + seed_index)


def _slot_columns(slot_count: int) -> list[str]:
    return [f"slot_{i}" for i in range(slot_count)]


def _std_across_seeds(x: pd.Series) -> float:
    if len(x) <= 1:
        return 0.0
    return float(x.std(ddof=1))


def _reset_beans(beans: list[Bean]) -> None:
    for b in beans:
        b.reset()


def run_to_completion(
    board: GaltonBoard,
    *,
    step_hook: Optional[Callable[[GaltonBoard], None]] = None,
) -> int:
    """Advance until the machine is finished; returns the number of productive steps."""
    steps = 0
    while board.advance_step():
        steps += 1
        if step_hook is not None:
            step_hook(board)
    return steps


def simulate_run(
    *,
    slot_count: int,
    bean_count: int,
    mode: Mode | str,
    rng: np.random.Generator,
    debug_hook: Optional[Callable[[GaltonBoard], None]] = None,
    warn_hook: Optional[Callable[[str], None]] = None,
    context: str = "",
) -> RunStats:
    """
    Drain one machine three times and summarise it.

    1. reset(beans) and drain: slot counts, mean slot, step count.
    2. repeat() with every bean reset, drain again: did the counts repeat?
       Then upper_half() on that distribution.
    3. reset(beans) with every bean reset, drain, lower_half().

    All draws come from `rng`, so a fixed seed reproduces the whole run.
    """
    if slot_count < 1:
        raise ValueError("slot_count must be >= 1")
    mode = Mode(mode)
    suffix = f" [{context}]" if context else ""

    beans = create_beans(bean_count, slot_count, mode, rng)
    board = GaltonBoard(slot_count)

    board.reset(beans)
    steps = run_to_completion(board, step_hook=debug_hook)
    counts = tuple(board.slot_counts())
    mean_slot = board.average_slot_bean_count()
    if sum(counts) != bean_count and warn_hook is not None:
        warn_hook(f"settled {sum(counts)} of {bean_count} beans{suffix}")

    board.repeat()
    _reset_beans(beans)
    run_to_completion(board)
    repeat_reproduced = tuple(board.slot_counts()) == counts
    if mode is Mode.SKILL and not repeat_reproduced and warn_hook is not None:
        warn_hook(f"skill-mode rerun changed the slot counts{suffix}")
    board.upper_half()
    mean_slot_upper = board.average_slot_bean_count()

    _reset_beans(beans)
    board.reset(beans)
    run_to_completion(board)
    board.lower_half()
    mean_slot_lower = board.average_slot_bean_count()

    return RunStats(
        slot_counts=counts,
        mean_slot=float(mean_slot),
        steps=int(steps),
        mean_slot_upper=float(mean_slot_upper),
        mean_slot_lower=float(mean_slot_lower),
        repeat_reproduced=bool(repeat_reproduced),
    )


def run_trials(
    *,
    slot_count: int,
    bean_count: int,
    mode: Mode | str,
    n_seeds: int,
    base_seed: int = config.BASE_SEED,
    out_path: Optional[Path] = None,
    logger_info: Optional[Callable[[str], None]] = None,
    logger_warn: Optional[Callable[[str], None]] = None,
    progress: bool = True,
) -> pd.DataFrame:
    """
    One row per seed index, seeded deterministically from `base_seed`.

    With `out_path`, seeds already present in that CSV are skipped and the
    CSV is rewritten atomically after every new seed, so an interrupted
    sweep resumes where it stopped.
    """
    if n_seeds <= 0:
        raise ValueError("n_seeds must be positive")
    mode = Mode(mode)
    columns = [
        "slot_count",
        "bean_count",
        "mode",
        "seed_index",
        "seed",
        "mean_slot",
        "mean_slot_upper",
        "mean_slot_lower",
        "steps",
        "repeat_reproduced",
    ] + _slot_columns(slot_count)

    if out_path is not None:
        df = read_csv_or_empty(out_path, expected_columns=columns)
    else:
        df = pd.DataFrame(columns=columns)

    key = {"slot_count": slot_count, "bean_count": bean_count, "mode": mode.value}
    present = seed_indices_present(df, key=key, seed_index_col="seed_index")
    missing = [i for i in range(n_seeds) if i not in present]
    if not missing:
        if logger_info is not None:
            logger_info(f"trials {mode.value}: all {n_seeds} seeds present")
        return df.sort_values("seed_index", ignore_index=True)

    if logger_info is not None:
        logger_info(
            f"START trials {mode.value}: slots={slot_count} beans={bean_count} missing_seeds={missing}"
        )

    rows = []
    for seed_index in tqdm(missing, desc=f"trials_{mode.value}", leave=True, disable=not progress):
        seed = _seed_for(base_seed=base_seed, seed_index=seed_index)
        stats = simulate_run(
            slot_count=slot_count,
            bean_count=bean_count,
            mode=mode,
            rng=np.random.default_rng(seed),
            warn_hook=logger_warn,
            context=f"{mode.value} seed_index={seed_index}",
        )
        row = {
            "slot_count": int(slot_count),
            "bean_count": int(bean_count),
            "mode": mode.value,
            "seed_index": int(seed_index),
            "seed": int(seed),
            "mean_slot": stats.mean_slot,
            "mean_slot_upper": stats.mean_slot_upper,
            "mean_slot_lower": stats.mean_slot_lower,
            "steps": stats.steps,
            "repeat_reproduced": stats.repeat_reproduced,
        }
        row.update(dict(zip(_slot_columns(slot_count), stats.slot_counts)))
        rows.append(row)

        new_rows = pd.DataFrame(rows, columns=columns)
        current = new_rows if df.empty else pd.concat([df, new_rows], ignore_index=True)
        if out_path is not None:
            atomic_write_csv(current, out_path)

    if logger_info is not None:
        logger_info(f"END trials {mode.value}")
    return current.sort_values("seed_index", ignore_index=True)


def summarise_trials(df: pd.DataFrame, *, slot_count: int) -> dict:
    """Across-seed means/stds of the per-seed statistics and the slot distribution."""
    n_seeds = int(len(df))
    if n_seeds == 0:
        nan = float("nan")
        return {
            "n_seeds": 0,
            "mean_slot": nan,
            "std_mean_slot": nan,
            "mean_slot_upper": nan,
            "mean_slot_lower": nan,
            "frac_reproduced": nan,
            "slot_mean": np.full(slot_count, np.nan),
            "slot_std": np.full(slot_count, np.nan),
        }

    slots = df[_slot_columns(slot_count)].to_numpy(dtype=float)
    slot_std = slots.std(axis=0, ddof=1) if n_seeds > 1 else np.zeros(slot_count)
    return {
        "n_seeds": n_seeds,
        "mean_slot": float(df["mean_slot"].mean()),
        "std_mean_slot": _std_across_seeds(df["mean_slot"]),
        "mean_slot_upper": float(df["mean_slot_upper"].mean()),
        "mean_slot_lower": float(df["mean_slot_lower"].mean()),
        "frac_reproduced": float(df["repeat_reproduced"].astype(bool).mean()),
        "slot_mean": slots.mean(axis=0),
        "slot_std": slot_std,
    }
