"""Dataset loaders (CSV → Record list, geometry file → GeometrySet).

Case rows follow the NYT county layout: date, county, state, fips, cases.
Every column is read as text so FIPS codes keep their leading zeros and
blank codes stay blank. Rows with a malformed date or a case count that is
not a finite, non-negative whole number are dropped; one warning reports
how many.

Geometry is read with geopandas. County, state and nation layers may live
in one multi-layer file (TopoJSON, GeoPackage) or be derived: states by
dissolving counties on the 2-digit state prefix, the nation by dissolving
states.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd

from spikemap.types import Feature, Record, normalize_region_id

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


# ═══════════════════════════════════════════════════════════════════════
# CASE RECORDS
# ═══════════════════════════════════════════════════════════════════════

def records_from_frame(df: pd.DataFrame) -> List[Record]:
    """Normalise a raw case DataFrame into Records, preserving row order.

    Missing optional columns (county, state, fips) are treated as blank.
    """
    missing = [c for c in ("date", "cases") if c not in df.columns]
    if missing:
        raise KeyError(f"Missing required column(s) {missing}. Available={list(df.columns)}")

    n = len(df)
    blank = pd.Series([""] * n, index=df.index, dtype=object)
    county = df["county"].fillna("").astype(str) if "county" in df.columns else blank
    state = df["state"].fillna("").astype(str) if "state" in df.columns else blank
    fips = df["fips"].fillna("").astype(str) if "fips" in df.columns else blank

    dates = pd.to_datetime(df["date"], format=DATE_FORMAT, errors="coerce")
    cases = pd.to_numeric(df["cases"], errors="coerce").astype(float)

    # finite whole numbers only
    valid = dates.notna() & np.isfinite(cases) & (cases >= 0) & (cases == np.floor(cases))
    dropped = int(n - valid.sum())
    if dropped:
        logger.warning("Dropped %d of %d rows with a malformed date or case count", dropped, n)

    records: List[Record] = []
    for d, c, co, st, fp in zip(dates[valid], cases[valid], county[valid], state[valid], fips[valid]):
        co, st = co.strip(), st.strip()
        records.append(Record(
            date=d.date(),
            region_id=normalize_region_id(co, st, fp.strip()),
            cases=int(c),
            county=co,
            state=st,
        ))
    return records


def load_cases_csv(path: Union[str, Path]) -> List[Record]:
    """Read a county case CSV and return its normalised Records."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Case data not found: {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.rename(columns={c: str(c).strip().lower() for c in df.columns}, inplace=True)
    records = records_from_frame(df)
    logger.info("Loaded %d records from %s", len(records), path.name)
    return records


# ═══════════════════════════════════════════════════════════════════════
# GEOMETRY
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class GeometrySet:
    """County features plus the aggregate outlines drawn beneath them."""
    counties: gpd.GeoDataFrame
    states: gpd.GeoDataFrame
    nation: gpd.GeoDataFrame


def _feature_ids(gdf: gpd.GeoDataFrame, id_column: Optional[str]) -> pd.Series:
    if id_column is not None:
        return gdf[id_column].astype(str)
    for candidate in ("id", "GEOID", "fips"):
        if candidate in gdf.columns:
            return gdf[candidate].astype(str)
    return pd.Series(gdf.index.astype(str), index=gdf.index)


def _read_layer(path: Path, layer: Optional[str], available: List[str]) -> Optional[gpd.GeoDataFrame]:
    if layer is None:
        return None
    if layer not in available:
        logger.info("No '%s' layer in %s; deriving it", layer, path.name)
        return None
    return gpd.read_file(path, layer=layer)


def derive_states(counties: gpd.GeoDataFrame, ids: pd.Series) -> gpd.GeoDataFrame:
    """Dissolve counties into states on the 2-digit FIPS state prefix."""
    grouped = counties.assign(state_id=ids.str[:2])
    return grouped[["state_id", "geometry"]].dissolve(by="state_id").reset_index()


def derive_nation(states: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Dissolve all states into a single nation outline."""
    return gpd.GeoDataFrame(geometry=[states.geometry.union_all()], crs=states.crs)


def load_geometry(
    path: Union[str, Path],
    counties_layer: Optional[str] = "counties",
    states_layer: Optional[str] = "states",
    nation_layer: Optional[str] = "nation",
    id_column: Optional[str] = None,
) -> GeometrySet:
    """Read county, state and nation geometry from one file.

    Counties are required; the other two layers are derived when absent.
    County ids are normalised to strings in an ``id`` column.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Geometry file not found: {path}")

    available = list(gpd.list_layers(path)["name"])
    counties = _read_layer(path, counties_layer, available)
    if counties is None:
        counties = gpd.read_file(path)
    if counties.crs is None:
        counties = counties.set_crs("EPSG:4326")
    ids = _feature_ids(counties, id_column)
    counties = counties.assign(id=ids.values)

    states = _read_layer(path, states_layer, available)
    if states is None:
        states = derive_states(counties, counties["id"])
    elif states.crs is None:
        states = states.set_crs(counties.crs)

    nation = _read_layer(path, nation_layer, available)
    if nation is None:
        nation = derive_nation(states)
    elif nation.crs is None:
        nation = nation.set_crs(counties.crs)

    logger.info("Loaded %d county features from %s", len(counties), path.name)
    return GeometrySet(counties=counties, states=states, nation=nation)


def county_features(counties: gpd.GeoDataFrame, name_column: str = "name") -> List[Feature]:
    """Flatten a county GeoDataFrame (with an ``id`` column) into Features."""
    names = counties[name_column].astype(str) if name_column in counties.columns \
        else counties["id"].astype(str)
    return [
        Feature(id=str(i), name=n, geometry=g)
        for i, n, g in zip(counties["id"], names, counties.geometry)
    ]
