"""Shared fixtures for spikemap tests."""

from datetime import date

import matplotlib
matplotlib.use("Agg")

import geopandas as gpd
import pytest
from shapely.geometry import box

from spikemap.types import Record


def make_records(rows):
    """rows: iterable of (iso_date, region_id, cases)."""
    return [
        Record(date=date.fromisoformat(d), region_id=rid, cases=c)
        for d, rid, c in rows
    ]


@pytest.fixture
def records_from():
    """The make_records helper, as a fixture."""
    return make_records


@pytest.fixture
def sample_records():
    """Three dates, three counties; 20003 has no row on the first date."""
    return make_records([
        ("2020-03-01", "20001", 1),
        ("2020-03-01", "20002", 4),
        ("2020-03-02", "20001", 2),
        ("2020-03-02", "20002", 9),
        ("2020-03-02", "20003", 1),
        ("2020-03-03", "20001", 5),
        ("2020-03-03", "20002", 16),
        ("2020-03-03", "20003", 25),
    ])


@pytest.fixture
def county_frame():
    """Small lon/lat county boxes in Kansas plus one in Alaska."""
    return gpd.GeoDataFrame(
        {
            "id": ["20001", "20002", "20003", "02020"],
            "name": ["Allen", "Anderson", "Atchison", "Anchorage"],
        },
        geometry=[
            box(-96.0, 38.0, -95.5, 38.5),
            box(-95.5, 39.0, -95.0, 39.5),
            box(-95.0, 37.0, -94.5, 37.5),
            box(-150.0, 61.0, -149.5, 61.5),
        ],
        crs="EPSG:4326",
    )
