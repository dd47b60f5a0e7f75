"""Temporal index (precomputed per-date and per-region lookups).

Built once after loading, read-only afterwards:
  - dates: distinct dates in first-seen order (input is assumed to be
    date-sorted upstream and is never re-sorted)
  - cases_by_date[d]: the records for date d, in input order
  - total_by_date[d]: sum of cases over those records
  - cases_by_region_by_date[region_id][d]: records for one region on one day

Whether cases are cumulative or daily is up to the data source; totals are
plain sums and are not checked for monotonicity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as Date
from typing import Dict, Iterable, List, Optional

from spikemap.types import Record, normalize_region_id


@dataclass
class TemporalIndex:
    """Container of precomputed lookups over a record log."""
    dates: List[Date]
    cases_by_date: Dict[Date, List[Record]]
    total_by_date: Dict[Date, int]
    cases_by_region_by_date: Dict[str, Dict[Date, List[Record]]]

    @property
    def latest_date(self) -> Optional[Date]:
        return self.dates[-1] if self.dates else None

    def latest_cases(self) -> List[Record]:
        """Records of the last date in the index (empty if no dates)."""
        if not self.dates:
            return []
        return self.cases_by_date[self.dates[-1]]

    def total_for(self, day: Date) -> Optional[int]:
        return self.total_by_date.get(day)


def build_temporal_index(records: Iterable[Record]) -> TemporalIndex:
    """Group records by date and by (region, date).

    Region ids are re-normalised before grouping so records built by hand
    get the same city → county corrections as loaded ones.
    """
    cases_by_date: Dict[Date, List[Record]] = {}
    total_by_date: Dict[Date, int] = {}
    by_region: Dict[str, Dict[Date, List[Record]]] = {}

    for r in records:
        region_id = normalize_region_id(r.county, r.state, r.region_id)
        if region_id != r.region_id:
            r = Record(date=r.date, region_id=region_id, cases=r.cases,
                       county=r.county, state=r.state)
        # dicts keep insertion order, so key order is first-seen order
        cases_by_date.setdefault(r.date, []).append(r)
        total_by_date[r.date] = total_by_date.get(r.date, 0) + r.cases
        by_region.setdefault(r.region_id, {}).setdefault(r.date, []).append(r)

    return TemporalIndex(
        dates=list(cases_by_date.keys()),
        cases_by_date=cases_by_date,
        total_by_date=total_by_date,
        cases_by_region_by_date=by_region,
    )
