"""Half-open time interval helpers."""

from datetime import datetime


def intervals_overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    """``[s1, e1)`` and ``[s2, e2)`` overlap; touching endpoints do not."""
    return s1 < e2 and s2 < e1
