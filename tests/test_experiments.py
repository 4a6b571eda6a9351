import numpy as np
import pandas as pd
import pytest

from galton_board import GaltonBoard, Mode, create_beans
from galton_board.experiments import run_to_completion, run_trials, simulate_run, summarise_trials


def test_run_to_completion_counts_productive_steps():
    board = GaltonBoard(4)
    board.reset(create_beans(5, 4, Mode.LUCK, np.random.default_rng(0)))
    seen = []
    steps = run_to_completion(board, step_hook=lambda b: seen.append(b.settled_bean_count()))
    assert steps == 8
    assert len(seen) == steps
    assert seen[-1] == 5


def test_simulate_run_skill_mode_repeats():
    warnings = []
    stats = simulate_run(
        slot_count=6,
        bean_count=40,
        mode=Mode.SKILL,
        rng=np.random.default_rng(11),
        warn_hook=warnings.append,
    )
    assert sum(stats.slot_counts) == 40
    assert len(stats.slot_counts) == 6
    assert stats.steps == 40 + 6 - 1
    assert stats.repeat_reproduced is True
    assert stats.mean_slot_upper >= stats.mean_slot >= stats.mean_slot_lower
    assert warnings == []


def test_simulate_run_is_deterministic_for_a_seed():
    a = simulate_run(slot_count=5, bean_count=30, mode="luck", rng=np.random.default_rng(9))
    b = simulate_run(slot_count=5, bean_count=30, mode="luck", rng=np.random.default_rng(9))
    assert a == b


def test_simulate_run_without_beans():
    stats = simulate_run(slot_count=3, bean_count=0, mode=Mode.LUCK, rng=np.random.default_rng(0))
    assert stats.slot_counts == (0, 0, 0)
    assert stats.mean_slot == 0.0
    assert stats.steps == 0
    assert stats.repeat_reproduced is True


def test_simulate_run_rejects_empty_machine():
    with pytest.raises(ValueError):
        simulate_run(slot_count=0, bean_count=1, mode=Mode.LUCK, rng=np.random.default_rng(0))


def test_run_trials_rows_per_seed():
    df = run_trials(slot_count=4, bean_count=12, mode=Mode.SKILL, n_seeds=3, base_seed=100, progress=False)
    assert list(df["seed_index"]) == [0, 1, 2]
    assert list(df["seed"]) == [100, 101, 102]
    assert (df[["slot_0", "slot_1", "slot_2", "slot_3"]].sum(axis=1) == 12).all()
    assert df["repeat_reproduced"].all()


def test_run_trials_resumes_from_csv(tmp_path):
    out = tmp_path / "trials.csv"
    infos = []
    first = run_trials(
        slot_count=3,
        bean_count=8,
        mode=Mode.LUCK,
        n_seeds=2,
        out_path=out,
        logger_info=infos.append,
        progress=False,
    )
    assert out.exists()
    on_disk = pd.read_csv(out)
    assert len(on_disk) == 2

    second = run_trials(
        slot_count=3,
        bean_count=8,
        mode=Mode.LUCK,
        n_seeds=3,
        out_path=out,
        logger_info=infos.append,
        progress=False,
    )
    assert list(second["seed_index"]) == [0, 1, 2]
    assert list(second["mean_slot"][:2]) == pytest.approx(list(first["mean_slot"]))
    assert any("missing_seeds=[2]" in msg for msg in infos)

    third = run_trials(slot_count=3, bean_count=8, mode=Mode.LUCK, n_seeds=3, out_path=out, progress=False)
    assert len(third) == 3


def test_run_trials_rejects_bad_seed_count():
    with pytest.raises(ValueError):
        run_trials(slot_count=3, bean_count=1, mode=Mode.LUCK, n_seeds=0)


def test_summarise_trials():
    df = run_trials(slot_count=4, bean_count=20, mode=Mode.LUCK, n_seeds=4, progress=False)
    summary = summarise_trials(df, slot_count=4)
    assert summary["n_seeds"] == 4
    assert summary["slot_mean"].shape == (4,)
    assert summary["slot_mean"].sum() == pytest.approx(20.0)
    assert summary["std_mean_slot"] >= 0.0
    assert 0.0 <= summary["frac_reproduced"] <= 1.0


def test_summarise_empty_trials():
    summary = summarise_trials(pd.DataFrame(), slot_count=3)
    assert summary["n_seeds"] == 0
    assert np.isnan(summary["mean_slot"])


def test_run_trials_returns_sorted_rows_when_csv_complete(tmp_path):
    out = tmp_path / "trials.csv"
    run_trials(slot_count=3, bean_count=4, mode=Mode.SKILL, n_seeds=3, out_path=out, progress=False)
    on_disk = pd.read_csv(out)
    on_disk.iloc[::-1].to_csv(out, index=False)

    again = run_trials(slot_count=3, bean_count=4, mode=Mode.SKILL, n_seeds=3, out_path=out, progress=False)
    assert list(again["seed_index"]) == [0, 1, 2]
