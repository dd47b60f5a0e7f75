"""Map projection into the logical canvas.

Geometry is reprojected with geopandas (default: USA Contiguous Albers
Equal Area) and then fitted by a single affine transform so that the
configured lon/lat extent fills the map box. Screen y grows downward.

Alaska, Hawaii and Puerto Rico are cut out of the lower-48 transform and
drawn as insets along the bottom of the map box, each in its own Albers
projection, at the sizes and offsets of the usual composite USA layout
(Alaska at 0.35×). Offsets are multiples of the lower-48 scale in pixels
per earth radius, measured from the lower-48 centre.

Anything whose centroid still lands outside the map box (Guam, the Virgin
Islands, or everything off-extent with insets disabled) gets a NaN centroid
and is dropped by the geometry binder.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import geopandas as gpd
import numpy as np
import shapely
from shapely import affinity
from shapely.geometry import Point, box

SOURCE_CRS = "EPSG:4326"
EARTH_RADIUS = 6378137.0
LOWER48_CENTER = (-96.6, 38.7)


@dataclass(frozen=True)
class Inset:
    """One region projected on its own and placed beside the lower 48."""
    name: str
    crs: str
    center: Tuple[float, float]       # lon/lat placed at the offset point
    scale: float                      # relative to the lower-48 scale
    offset: Tuple[float, float]       # in lower-48 pixels per earth radius
    area: object                      # lon/lat polygon cut out of the main map


INSETS = (
    Inset("alaska", "EPSG:3338", (-156.0, 58.5), 0.35, (-0.307, 0.201),
          shapely.union(box(-180.0, 51.0, -129.9, 72.0), box(172.0, 51.0, 180.0, 54.0))),
    Inset("hawaii", "ESRI:102007", (-160.0, 19.9), 1.0, (-0.205, 0.212),
          box(-161.0, 18.5, -154.5, 22.5)),
    Inset("puerto rico",
          "+proj=aea +lat_1=8 +lat_2=18 +lat_0=18 +lon_0=-66 +ellps=GRS80 +units=m +no_defs",
          (-66.0, 18.0), 1.0, (0.350, 0.224),
          box(-68.0, 17.5, -65.1, 18.7)),
)


def _project_point(lonlat: Tuple[float, float], crs: str) -> Point:
    return gpd.GeoSeries([Point(*lonlat)], crs=SOURCE_CRS).to_crs(crs).iloc[0]


class MapProjection:
    """Fit a projected lon/lat extent into a screen rectangle.

    Args:
        crs: Target CRS for reprojection.
        extent: (lon_min, lat_min, lon_max, lat_max) to fit.
        frame: (left, top, width, height) of the map box in logical units.
        insets: Draw Alaska, Hawaii and Puerto Rico as insets.
    """

    def __init__(self, crs: str, extent: Sequence[float], frame: Tuple[float, float, float, float],
                 insets: bool = True):
        self.crs = crs
        self.extent = tuple(extent)
        self.frame = tuple(frame)
        left, top, width, height = self.frame

        # densify so the curved projected outline gives true bounds
        outline = shapely.segmentize(box(*self.extent), 0.5)
        minx, miny, maxx, maxy = gpd.GeoSeries([outline], crs=SOURCE_CRS).to_crs(crs).total_bounds
        s = min(width / (maxx - minx), height / (maxy - miny))
        cx, cy = (minx + maxx) / 2.0, (miny + maxy) / 2.0
        self.scale = s
        # [a, b, d, e, xoff, yoff] for shapely's affine_transform; y is flipped
        self.matrix = [s, 0.0, 0.0, -s, left + width / 2.0 - s * cx, top + height / 2.0 + s * cy]
        self.bounds = (left, top, left + width, top + height)

        self.insets: List[Tuple[Inset, list]] = []
        if insets:
            anchor = affinity.affine_transform(_project_point(LOWER48_CENTER, crs), self.matrix)
            k = s * EARTH_RADIUS
            for inset in INSETS:
                si = s * inset.scale
                c = _project_point(inset.center, inset.crs)
                tx = anchor.x + inset.offset[0] * k
                ty = anchor.y + inset.offset[1] * k
                self.insets.append((inset, [si, 0.0, 0.0, -si, tx - si * c.x, ty + si * c.y]))

    @classmethod
    def for_canvas(cls, crs: str, extent: Sequence[float], width: float, height: float,
                   map_width: float, map_height: float, insets: bool = True) -> "MapProjection":
        """Map box of map_width × map_height, centred horizontally, bottom-aligned."""
        left = (width - map_width) / 2.0
        top = height - map_height
        return cls(crs, extent, (left, top, map_width, map_height), insets=insets)

    def inset_anchor(self, name: str) -> Tuple[float, float]:
        """Screen point where an inset's centre lon/lat is drawn."""
        for inset, matrix in self.insets:
            if inset.name == name:
                p = affinity.affine_transform(_project_point(inset.center, inset.crs), matrix)
                return (p.x, p.y)
        raise KeyError(f"No inset '{name}'. Available={[i.name for i, _ in self.insets]}")

    def project(self, geoms: gpd.GeoSeries) -> gpd.GeoSeries:
        """Reproject and fit a GeoSeries (or GeoDataFrame geometry) to screen units.

        Geometry overlapping an inset area is split: the part inside goes
        through that inset's transform, the rest through the lower-48 one,
        and the pieces are merged back into one geometry per row.
        """
        if isinstance(geoms, gpd.GeoDataFrame):
            geoms = geoms.geometry
        if geoms.crs is None:
            geoms = geoms.set_crs(SOURCE_CRS)
        if not self.insets:
            return geoms.to_crs(self.crs).affine_transform(self.matrix)

        lonlat = geoms.to_crs(SOURCE_CRS)
        areas = shapely.union_all([inset.area for inset, _ in self.insets])
        result = np.array(lonlat.to_crs(self.crs).affine_transform(self.matrix), dtype=object)

        hit = lonlat.intersects(areas).to_numpy()
        if hit.any():
            part = lonlat[hit]
            merged = np.array(part.difference(areas).to_crs(self.crs).affine_transform(self.matrix),
                              dtype=object)
            for inset, matrix in self.insets:
                piece = part.intersection(inset.area).to_crs(inset.crs).affine_transform(matrix)
                merged = shapely.union(merged, np.array(piece, dtype=object))
            result[hit] = merged
        return gpd.GeoSeries(result, index=geoms.index, crs=self.crs)

    def centroid(self, geom) -> Tuple[float, float]:
        """Screen centroid of a projected geometry, NaN when outside the map box."""
        if geom is None or geom.is_empty:
            return (math.nan, math.nan)
        c = shapely.centroid(geom)
        x, y = float(shapely.get_x(c)), float(shapely.get_y(c))
        x0, y0, x1, y1 = self.bounds
        if not (x0 <= x <= x1 and y0 <= y <= y1):
            return (math.nan, math.nan)
        return (x, y)
