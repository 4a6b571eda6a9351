"""
Visualisation utilities for galton_board.

Text rendering of the lattice is what the CLI prints in debug mode; the
matplotlib histogram is written by the sweep driver under results/figures/.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from .board import GaltonBoard  # noqa: E402
from .config import XSPACING  # noqa: E402


COLOURS = {
    "luck": "#0072B2",   # blue
    "skill": "#D55E00",  # orange
}


def _indent(slot_count: int, y: int) -> int:
    root_indent = (slot_count - 1) * (XSPACING + 1) // 2 + (XSPACING + 1)
    return root_indent - (XSPACING + 1) // 2 * y


def format_slot_counts(board: GaltonBoard) -> str:
    """Per-slot bean counts as one row of fixed-width fields."""
    width = XSPACING + 1
    return "".join(f"{board.slot_bean_count(i):>{width}d}" for i in range(board.slot_count))


def format_board(board: GaltonBoard) -> str:
    """
    ASCII depiction of the machine.

    Each peg prints as 1 when the row's in-flight bean sits above it and 0
    otherwise; the slot counts row is attached at the bottom.
    """
    lines = []
    for y in range(board.slot_count):
        x_bean = board.in_flight_bean_xpos(y)
        fields = []
        for x in range(y + 1):
            spacing = _indent(board.slot_count, y) if x == 0 else XSPACING + 1
            fields.append(f"{1 if x == x_bean else 0:>{spacing}d}")
        lines.append("".join(fields))
    lines.append(format_slot_counts(board))
    return "\n".join(lines)


def plot_slot_histogram(
    counts: Sequence[float],
    path: Path,
    *,
    title: str = "Slot bean counts",
    mode: str = "luck",
    errors: Sequence[float] | None = None,
) -> Path:
    """Bar chart of per-slot counts (optionally with error bars) saved as PNG."""
    counts_arr = np.asarray(counts, dtype=float)
    x = np.arange(len(counts_arr))

    fig, ax = plt.subplots(figsize=(7.0, 4.0))
    ax.bar(
        x,
        counts_arr,
        color=COLOURS.get(mode, "#009E73"),
        alpha=0.8,
        yerr=None if errors is None else np.asarray(errors, dtype=float),
        capsize=3 if errors is not None else 0,
    )
    ax.set_xticks(x)
    ax.set_xlabel("Slot")
    ax.set_ylabel("Beans")
    ax.set_title(title)
    ax.grid(True, axis="y", alpha=0.3)
    fig.tight_layout()

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path
