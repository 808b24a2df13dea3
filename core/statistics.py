"""
statistics.py
--------------
Numeric primitives used by the pattern analyzer.

Every function is total over its input: an empty sequence returns a defined
fallback instead of raising, because callers guard emptiness upstream.
"""

import numpy as np
from typing import Sequence


def mode(values: Sequence[float]) -> float | None:
    """
    Most frequent value.

    Ties go to the smallest value. np.unique returns values sorted ascending
    and argmax returns the first maximum, so the tie-break does not depend on
    input order.

    Returns None for an empty sequence.
    """
    if len(values) == 0:
        return None

    uniques, counts = np.unique(np.asarray(values), return_counts=True)
    return uniques[int(np.argmax(counts))].item()


def has_repeats(values: Sequence[float]) -> bool:
    """True when at least one value occurs more than once."""
    return len(set(values)) < len(values)


def median(values: Sequence[float]) -> float:
    """Standard median. Returns 0 for an empty sequence."""
    if len(values) == 0:
        return 0
    return float(np.median(np.asarray(values, dtype=float)))


def variance(values: Sequence[float]) -> float:
    """Population variance (divides by N). Returns 0 for an empty sequence."""
    if len(values) == 0:
        return 0
    return float(np.var(np.asarray(values, dtype=float), ddof=0))


def round_half_up(value: float) -> int:
    """Rounds halves toward positive infinity, e.g. 20.5 -> 21, -20.5 -> -20."""
    return int(np.floor(value + 0.5))
