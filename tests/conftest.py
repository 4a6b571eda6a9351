import numpy as np
import pytest

from galton_board import Bean, GaltonBoard, Mode


class ScriptedRng:
    """Generator stand-in that replays fixed draws."""

    def __init__(self, draws=(), normals=()):
        self._draws = list(draws)
        self._normals = list(normals)
        self.normal_calls = []

    def integers(self, high):
        assert high == 2
        return self._draws.pop(0)

    def normal(self, loc, scale):
        self.normal_calls.append((loc, scale))
        return self._normals.pop(0)

    @property
    def remaining_draws(self):
        return len(self._draws)


@pytest.fixture
def scripted_rng():
    return ScriptedRng


@pytest.fixture
def skill_bean():
    """Factory for a SKILL bean with a forced skill level."""

    def make(slot_count, level):
        bean = Bean(slot_count, Mode.SKILL, np.random.default_rng(0))
        bean.skill_level = level
        bean.reset()
        return bean

    return make


@pytest.fixture
def luck_bean_to_slot():
    """Factory for a LUCK bean whose own draws land it in `slot`."""

    def make(slot_count, slot):
        rows = slot_count - 1
        draws = [0] * (rows - slot) + [1] * slot
        return Bean(slot_count, Mode.LUCK, ScriptedRng(draws))

    return make


def drain(board: GaltonBoard) -> int:
    steps = 0
    while board.advance_step():
        steps += 1
    return steps


@pytest.fixture
def drain_board():
    return drain
