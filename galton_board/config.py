"""
Configuration for the bean counter simulation and its experiment drivers.

Only numpy/pandas/tqdm/matplotlib are assumed available in the environment.
"""

# Machine defaults
SLOT_COUNT = 10
BEAN_COUNT = 400

# Sweep sizes
N_SEEDS = 20
N_SEEDS_QUICK = 3
BEAN_COUNT_QUICK = 50

# Skill derivation: binomial(slot_count, p) approximated by a normal
SKILL_PROBABILITY = 0.5

# Presentation (odd spacing keeps the lattice centred)
XSPACING = 3

# Sentinel returned for an empty row
NO_BEAN_IN_YPOS = -1

# Randomness
BASE_SEED = 12345
