from __future__ import annotations

# Exploration share per page depth; deeper pages use DEEP_EXPLORATION_RATIO
DEPTH_EXPLORATION_RATIOS = (0.08, 0.14, 0.20, 0.27, 0.34)
DEEP_EXPLORATION_RATIO = 0.42

# 32-bit linear congruential generator (Numerical Recipes constants)
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32
