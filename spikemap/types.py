"""Core data types for spikemap.

This module is the single home for:
  - Record: one normalised row of the case-count log
  - Region: a county feature enriched with centroid and per-date series
  - Feature: a named region geometry from the geometry source
  - REGION_REMAP: hard-coded city → county identifier corrections

Records are immutable once built. Regions are enriched once at setup and
carry two per-frame scratch fields (cases, height) that only the frame
renderer writes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date as Date
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


# ═══════════════════════════════════════════════════════════════════════
# REGION IDENTIFIER CORRECTIONS
# ═══════════════════════════════════════════════════════════════════════

# (county, state) → region id. The source reports these cities instead of
# the counties that hold them, with no FIPS code of their own.
REGION_REMAP: Dict[Tuple[str, str], str] = {
    ("New York City", "New York"): "36061",   # New York County
    ("Kansas City", "Missouri"): "29095",     # Jackson County
}


def normalize_region_id(county: str, state: str, region_id: str) -> str:
    """Return the corrected region id for a (county, state) pair.

    Pairs not in REGION_REMAP keep their literal identifier, including
    blanks; those never match a geometry and are simply never drawn.
    """
    return REGION_REMAP.get((county, state), region_id)


# ═══════════════════════════════════════════════════════════════════════
# RECORD
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Record:
    """One (date, region) case count."""
    date: Date
    region_id: str
    cases: int
    county: str = ""
    state: str = ""


# ═══════════════════════════════════════════════════════════════════════
# REGION
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Region:
    """A county feature bound to its screen centroid and case series.

    x, y are screen coordinates (y grows downward). ``series`` maps a date
    to the records for that date; ``cases`` and ``height`` are rewritten on
    every rendered frame.
    """
    id: str
    name: str
    geometry: Any = None
    x: float = math.nan
    y: float = math.nan
    series: Dict[Date, List[Record]] = field(default_factory=dict)
    cases: int = 0
    height: float = 0.0

    def record_for(self, day: Date) -> Optional[Record]:
        """First record for ``day``, or None when the region has no data."""
        records = self.series.get(day)
        if not records:
            return None
        return records[0]


class Feature(NamedTuple):
    """A named region geometry as read from the geometry source."""
    id: str
    name: str
    geometry: Any
