from __future__ import annotations

import math
from enum import Enum

import numpy as np

from .config import SKILL_PROBABILITY


class Mode(str, Enum):
    """Decision regime of a bean; values double as CLI tokens."""

    LUCK = "luck"
    SKILL = "skill"


def _derive_skill_level(slot_count: int, rng: np.random.Generator) -> int:
    """
    Draw a skill level from the normal approximation of Binomial(n, p).

    mean  = (slot_count - 1) * p
    stdev = sqrt(slot_count * p * (1 - p))

    The sample is rounded half-up and clamped to [0, slot_count - 1].
    """
    p = SKILL_PROBABILITY
    mean = (slot_count - 1) * p
    stdev = math.sqrt(slot_count * p * (1.0 - p))
    sample = float(rng.normal(loc=mean, scale=stdev))
    level = int(math.floor(sample + 0.5))
    return max(0, min(slot_count - 1, level))


class Bean:
    """
    One falling bean.

    In LUCK mode each peg costs one uniform {0, 1} draw from the shared
    generator (0 = left, 1 = right). In SKILL mode the bean goes right
    `skill_level` times and then left, without touching the generator.
    Movement is clamped to [0, slot_count - 1]; a blocked move leaves the
    bean where it is.
    """

    __slots__ = ("slot_count", "mode", "skill_level", "skill_remaining", "_position", "_rng")

    def __init__(self, slot_count: int, mode: Mode | str, rng: np.random.Generator) -> None:
        if slot_count < 1:
            raise ValueError("slot_count must be >= 1")
        self.slot_count = int(slot_count)
        self.mode = Mode(mode)
        self._rng = rng
        self._position = 0
        self.skill_level = 0
        if self.mode is Mode.SKILL:
            self.skill_level = _derive_skill_level(self.slot_count, rng)
        self.skill_remaining = self.skill_level

    def __repr__(self) -> str:
        return (
            f"Bean(mode={self.mode.value}, position={self._position}, "
            f"skill_level={self.skill_level}, skill_remaining={self.skill_remaining})"
        )

    @property
    def position(self) -> int:
        return self._position

    def reset(self) -> None:
        """Back to column 0 with the full skill budget; skill_level is kept."""
        self._position = 0
        self.skill_remaining = self.skill_level

    def choose(self) -> None:
        """Make the left/right decision for one peg."""
        rightmost = self.slot_count - 1
        if self.mode is Mode.LUCK:
            go_right = int(self._rng.integers(2)) == 1
            if go_right:
                if self._position < rightmost:
                    self._position += 1
            elif self._position > 0:
                self._position -= 1
            return

        if self.skill_remaining > 0 and self._position < rightmost:
            self._position += 1
            self.skill_remaining -= 1
        elif self._position > 0:
            self._position -= 1


def create_bean(slot_count: int, mode: Mode | str, rng: np.random.Generator) -> Bean:
    return Bean(slot_count, mode, rng)


def create_beans(
    bean_count: int,
    slot_count: int,
    mode: Mode | str,
    rng: np.random.Generator,
) -> list[Bean]:
    """Create `bean_count` beans sharing one generator, in draw order."""
    if bean_count < 0:
        raise ValueError("bean_count must be >= 0")
    return [Bean(slot_count, mode, rng) for _ in range(bean_count)]
