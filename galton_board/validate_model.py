from __future__ import annotations

"""
Sanity-check / validation script.

Does NOT write into galton_board/results/. Runs one luck board and one skill
board with a fixed seed and prints distribution diagnostics to the console.
"""

import numpy as np

from .bean import Mode, create_beans
from .board import GaltonBoard
from .experiments import run_to_completion
from .viz_utils import format_slot_counts


def _pct(x: float) -> str:
    return f"{100.0 * x:.2f}%"


def _drain(slot_count: int, bean_count: int, mode: Mode, seed: int) -> tuple[GaltonBoard, list, int]:
    rng = np.random.default_rng(seed)
    beans = create_beans(bean_count, slot_count, mode, rng)
    board = GaltonBoard(slot_count)
    board.reset(beans)
    steps = run_to_completion(board)
    return board, beans, steps


def main() -> None:
    slot_count = 10
    bean_count = 2_000
    seed = 123

    for mode in (Mode.LUCK, Mode.SKILL):
        board, beans, steps = _drain(slot_count, bean_count, mode, seed)
        counts = np.asarray(board.slot_counts(), dtype=float)
        print(f"[VALIDATION] {mode.value} mode (slots={slot_count}, beans={bean_count}, seed={seed})")
        print(format_slot_counts(board))
        print(f"steps={steps} (expected {bean_count + slot_count - 1})")
        print(f"mean slot={board.average_slot_bean_count():.6g}")
        print(f"edge slots share={_pct(float((counts[0] + counts[-1]) / counts.sum()))}")
        if mode is Mode.SKILL:
            levels = np.asarray([b.skill_level for b in beans], dtype=float)
            print(
                f"skill level mean={float(np.mean(levels)):.6g} "
                f"(target {(slot_count - 1) * 0.5:.6g}), std={float(np.std(levels)):.6g}"
            )
            before = board.slot_counts()
            board.repeat()
            for b in beans:
                b.reset()
            run_to_completion(board)
            print(f"repeat() reproduces skill counts: {board.slot_counts() == before}")

        n = board.settled_bean_count()
        board.upper_half()
        print(f"upper_half kept {board.settled_bean_count()} of {n}, mean slot={board.average_slot_bean_count():.6g}")
        print("")

    print("[VALIDATION COMPLETE]")


if __name__ == "__main__":
    main()
