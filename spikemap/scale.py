"""Square-root spike height scale.

Spike height grows with the square root of the count so the drawn area,
not the height, tracks the number. The domain is [0, max] where max is the
largest count on the most recent date; the range is [0, max_height].
"""

from __future__ import annotations

import math
from typing import Iterable

from spikemap.types import Record

DEFAULT_MAX_HEIGHT = 400.0


class SqrtScale:
    """Monotonic map from a count in [0, domain_max] to [0, range_max].

    A zero or non-finite domain maximum yields a scale that maps every
    input to 0. Counts above domain_max continue along the same curve.
    """

    def __init__(self, domain_max: float, range_max: float = DEFAULT_MAX_HEIGHT):
        self.range_max = float(range_max)
        if domain_max is None or not math.isfinite(domain_max) or domain_max <= 0:
            self.domain_max = 0.0
        else:
            self.domain_max = float(domain_max)

    def __call__(self, value: float) -> float:
        if self.domain_max == 0.0 or value is None or not value > 0:
            return 0.0
        return self.range_max * math.sqrt(value / self.domain_max)

    def __repr__(self) -> str:
        return f"SqrtScale(domain_max={self.domain_max}, range_max={self.range_max})"


def spike_scale(latest: Iterable[Record], max_height: float = DEFAULT_MAX_HEIGHT) -> SqrtScale:
    """Scale fitted to the largest count among the latest date's records."""
    domain_max = max((r.cases for r in latest), default=0)
    return SqrtScale(domain_max, max_height)
