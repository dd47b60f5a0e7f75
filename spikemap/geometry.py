"""Region binding and static outline layers.

bind_regions() attaches each county feature to its screen centroid and its
per-date case series, keeping only counties that have both. The result is
sorted by centroid y (north first) so that spikes painted later, which sit
further south and lower on screen, overdraw the ones behind them.

build_base_map() turns the projected nation / county / state geometry into
plain vertex arrays once, so each frame can redraw the outlines from
scratch without touching geopandas. Borders are meshed: each shared edge
is kept once, and edges lying on the outer outline are left to the nation
fill (for counties, edges on a state border are left to the state layer).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date as Date
from typing import Callable, Dict, Iterable, List, Tuple

import numpy as np
import shapely
from shapely.geometry import (
    GeometryCollection,
    LineString,
    LinearRing,
    MultiLineString,
    MultiPolygon,
    Polygon,
)

from spikemap.types import Feature, Record, Region

Centroid = Callable[[object], Tuple[float, float]]


# ═══════════════════════════════════════════════════════════════════════
# REGION BINDING
# ═══════════════════════════════════════════════════════════════════════

def bind_regions(
    features: Iterable[Feature],
    series_by_region: Dict[str, Dict[Date, List[Record]]],
    centroid: Centroid,
) -> List[Region]:
    """Enrich qualifying features into Regions, sorted by centroid y.

    A feature qualifies when its centroid is finite and at least one dated
    record exists for its id.
    """
    regions: List[Region] = []
    for f in features:
        series = series_by_region.get(f.id)
        if not series:
            continue
        x, y = centroid(f.geometry)
        if not (math.isfinite(x) and math.isfinite(y)):
            continue
        regions.append(Region(id=f.id, name=f.name, geometry=f.geometry,
                              x=x, y=y, series=series))
    regions.sort(key=lambda r: r.y)
    return regions


# ═══════════════════════════════════════════════════════════════════════
# BASE MAP
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class BaseMap:
    """Screen-space vertex arrays for the layers under the spikes."""
    nation: List[np.ndarray] = field(default_factory=list)         # filled rings
    county_lines: List[np.ndarray] = field(default_factory=list)   # strokes
    state_lines: List[np.ndarray] = field(default_factory=list)    # strokes


def polygon_rings(geom) -> List[np.ndarray]:
    """Exterior rings of every polygon in ``geom``."""
    if geom is None or geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [np.asarray(geom.exterior.coords)]
    if isinstance(geom, (MultiPolygon, GeometryCollection)):
        rings: List[np.ndarray] = []
        for part in geom.geoms:
            rings.extend(polygon_rings(part))
        return rings
    return []


def boundary_lines(geom) -> List[np.ndarray]:
    """All boundary line strings of ``geom`` as (n, 2) arrays."""
    if geom is None or geom.is_empty:
        return []
    if isinstance(geom, (LineString, LinearRing)):
        return [np.asarray(geom.coords)]
    if isinstance(geom, (Polygon, MultiPolygon)):
        return boundary_lines(geom.boundary)
    if isinstance(geom, (MultiLineString, GeometryCollection)):
        lines: List[np.ndarray] = []
        for part in geom.geoms:
            lines.extend(boundary_lines(part))
        return lines
    return []


def _outline(geoms: List, tolerance: float):
    """Buffered union of the boundaries of ``geoms``, or None when there are none."""
    parts = [g.boundary for g in geoms if g is not None and not g.is_empty]
    if not parts:
        return None
    return shapely.union_all(parts).buffer(tolerance)


def interior_lines(geoms: List, outline=None) -> List[np.ndarray]:
    """Edges of ``geoms`` as (n, 2) arrays, each drawn once, minus anything along ``outline``."""
    parts = [g.boundary for g in geoms if g is not None and not g.is_empty]
    if not parts:
        return []
    edges = shapely.union_all(parts)
    if outline is not None:
        edges = edges.difference(outline)
    if edges.is_empty:
        return []
    return boundary_lines(shapely.line_merge(edges))


def build_base_map(nation: Iterable, counties: Iterable, states: Iterable,
                   tolerance: float = 0.5) -> BaseMap:
    """Collect outline layers from projected geometries.

    Only interior borders are stroked: state lines are the state edges off
    the coastline, county lines are the county edges off every state border.
    ``tolerance`` is how far (in screen units) an edge may stray from an
    outline and still count as lying on it.
    """
    nation, counties, states = list(nation), list(counties), list(states)
    base = BaseMap()
    for g in nation:
        base.nation.extend(polygon_rings(g))
    base.state_lines = interior_lines(states, _outline(nation, tolerance))
    base.county_lines = interior_lines(counties, _outline(states + nation, tolerance))
    return base
