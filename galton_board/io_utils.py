from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional
from uuid import uuid4

import pandas as pd

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def results_root() -> Path:
    """Default results directory, next to the package sources."""
    return Path(__file__).resolve().parent / "results"


def ensure_results_layout(root: Optional[Path] = None) -> Path:
    root = results_root() if root is None else Path(root)
    for sub in ("trials", "figures"):
        (root / sub).mkdir(parents=True, exist_ok=True)
    return root


def get_logger(*, mode: str = "full", root: Optional[Path] = None) -> logging.Logger:
    """
    Return the `galton_board` logger writing to `<root>/runs[_<mode>].log` and stderr.

    Calling again with another root or mode moves the handlers to the new
    log file; calling with the same ones is a no-op.
    """
    root = ensure_results_layout(root)
    log_path = root / ("runs.log" if mode == "full" else f"runs_{mode}.log")
    logger = logging.getLogger("galton_board")
    if getattr(logger, "_log_path", None) == log_path:
        return logger

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in (logging.FileHandler(log_path, mode="a", encoding="utf-8"), logging.StreamHandler()):
        handler.setLevel(logging.INFO)
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger._log_path = log_path  # type: ignore[attr-defined]
    return logger


def atomic_write_csv(df: pd.DataFrame, path: Path) -> None:
    """Write `df` beside `path` under a temporary name, then rename over it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.parent / f".{path.name}.{os.getpid()}.{uuid4().hex}.tmp"
    df.to_csv(tmp, index=False)
    os.replace(tmp, path)


def read_csv_or_empty(path: Path, *, expected_columns: Optional[Iterable[str]] = None) -> pd.DataFrame:
    columns = list(expected_columns or [])
    if not path.exists():
        return pd.DataFrame(columns=columns)
    df = pd.read_csv(path)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns {missing}")
    return df


def seed_indices_present(df: pd.DataFrame, *, key: dict, seed_index_col: str = "seed_index") -> set[int]:
    """Seed indices already recorded for rows whose `key` columns all match."""
    if df.empty:
        return set()
    matches = pd.concat([df[k] == v for k, v in key.items()], axis=1).all(axis=1)
    return {int(x) for x in df.loc[matches, seed_index_col]}
