"""
Detector agreement measure.

Disagreement between detectors is expressed as the population standard
deviation of their raw 0-100 scores. `statistics.pstdev` works on exact
fractions internally, so identical scores always give exactly 0.0.
"""

import statistics
from typing import Sequence


def calculate_variance(scores: Sequence[float]) -> float:
    """Population standard deviation (divisor N). Fewer than two scores → 0."""
    if len(scores) < 2:
        return 0.0
    return float(statistics.pstdev(scores))
