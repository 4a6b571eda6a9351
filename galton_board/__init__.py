"""
Galton Board — Bean Counter Simulation

This package implements a stepwise bean counter (quincunx): beans fall one
row per tick through a triangular lattice of pegs, deciding left/right at
each peg either by luck (a fair random draw) or by skill (a per-bean
right-move budget drawn once), and pile up in the slots at the bottom.
"""

from .bean import Bean, Mode, create_bean, create_beans  # noqa: F401
from .board import BoardState, GaltonBoard  # noqa: F401
from .config import (  # noqa: F401
    BASE_SEED,
    BEAN_COUNT,
    BEAN_COUNT_QUICK,
    N_SEEDS,
    N_SEEDS_QUICK,
    NO_BEAN_IN_YPOS,
    SKILL_PROBABILITY,
    SLOT_COUNT,
    XSPACING,
)
