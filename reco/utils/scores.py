"""
Score helpers: clamping and log-scaled normalization used by the scoring stages.
"""

import math


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def log_ratio(value: float, max_value: float) -> float:
    """
    log(value + 1) / log(max_value + 1), clamped to [0, 1].

    Non-positive values (unknown or sentinel counts such as -1) give 0.0.
    """
    if value <= 0 or max_value <= 0:
        return 0.0
    return clamp01(math.log(value + 1) / math.log(max_value + 1))
