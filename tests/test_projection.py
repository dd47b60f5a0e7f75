"""Tests for spikemap.projection — fitting projected geometry to the map box."""

import math

import geopandas as gpd
import pytest
import shapely
from shapely.geometry import Point, Polygon, box

from spikemap.projection import MapProjection

EXTENT = [-125.0, 24.0, -66.5, 49.5]


@pytest.fixture(scope="module")
def projection():
    return MapProjection.for_canvas("ESRI:102003", EXTENT, 1200, 820, 975, 610)


class TestMapBox:
    def test_for_canvas_frame(self, projection):
        assert projection.frame == (112.5, 210.0, 975, 610)
        assert projection.bounds == (112.5, 210.0, 1087.5, 820.0)

    def test_extent_fits_inside_box(self, projection):
        outline = gpd.GeoSeries([shapely.segmentize(box(*EXTENT), 0.5)], crs="EPSG:4326")
        minx, miny, maxx, maxy = projection.project(outline).total_bounds
        x0, y0, x1, y1 = projection.bounds
        assert minx >= x0 - 1e-6 and maxx <= x1 + 1e-6
        assert miny >= y0 - 1e-6 and maxy <= y1 + 1e-6
        # fills at least one dimension
        assert max((maxx - minx) / 975, (maxy - miny) / 610) == pytest.approx(1.0, rel=1e-3)

    def test_y_grows_southward(self, projection):
        pts = gpd.GeoSeries([Point(-98.0, 45.0), Point(-98.0, 30.0)], crs="EPSG:4326")
        north, south = projection.project(pts)
        assert south.y > north.y

    def test_x_grows_eastward(self, projection):
        pts = gpd.GeoSeries([Point(-110.0, 38.0), Point(-80.0, 38.0)], crs="EPSG:4326")
        west, east = projection.project(pts)
        assert east.x > west.x

    def test_missing_crs_assumed_lonlat(self, projection):
        pts = gpd.GeoSeries([Point(-98.0, 38.0)])
        projected = projection.project(pts)
        x0, y0, x1, y1 = projection.bounds
        p = projected.iloc[0]
        assert x0 <= p.x <= x1 and y0 <= p.y <= y1

    def test_accepts_geodataframe(self, projection, county_frame):
        projected = projection.project(county_frame)
        assert isinstance(projected, gpd.GeoSeries)
        assert len(projected) == len(county_frame)


class TestCentroid:
    def test_inside(self, projection, county_frame):
        projected = projection.project(county_frame)
        x, y = projection.centroid(projected.iloc[0])
        assert math.isfinite(x) and math.isfinite(y)

    def test_alaska_without_insets_outside_box(self, county_frame):
        flat = MapProjection.for_canvas("ESRI:102003", EXTENT, 1200, 820, 975, 610, insets=False)
        x, y = flat.centroid(flat.project(county_frame).iloc[3])
        assert math.isnan(x) and math.isnan(y)

    def test_empty_geometry(self, projection):
        x, y = projection.centroid(Polygon())
        assert math.isnan(x) and math.isnan(y)

    def test_none_geometry(self, projection):
        assert all(math.isnan(v) for v in projection.centroid(None))

    def test_screen_space_centroid(self, projection):
        x, y = projection.centroid(box(500, 400, 520, 440))
        assert (x, y) == pytest.approx((510.0, 420.0))


class TestInsets:
    def test_anchorage_drawn_in_alaska_inset(self, projection, county_frame):
        projected = projection.project(county_frame)
        x, y = projection.centroid(projected.iloc[3])
        assert math.isfinite(x) and math.isfinite(y)
        # bottom-left of the map, left of and below Kansas
        kx, ky = projection.centroid(projected.iloc[0])
        assert x < kx and y > ky
        ax, ay = projection.inset_anchor("alaska")
        assert abs(x - ax) < 60 and abs(y - ay) < 60

    def test_alaska_drawn_smaller(self, projection):
        cell = gpd.GeoSeries([box(-150.0, 61.0, -149.0, 62.0), box(-98.0, 38.0, -97.0, 39.0)],
                             crs="EPSG:4326")
        alaska, kansas = projection.project(cell)
        assert alaska.area < kansas.area

    @pytest.mark.parametrize("name, lonlat", [
        ("hawaii", (-157.85, 21.3)),        # Honolulu
        ("puerto rico", (-66.1, 18.4)),     # San Juan
    ])
    def test_island_insets_inside_box(self, projection, name, lonlat):
        lon, lat = lonlat
        projected = projection.project(
            gpd.GeoSeries([box(lon - 0.1, lat - 0.1, lon + 0.1, lat + 0.1)], crs="EPSG:4326"))
        x, y = projection.centroid(projected.iloc[0])
        assert math.isfinite(x) and math.isfinite(y)
        assert y > projection.inset_anchor("alaska")[1] - 100

    def test_puerto_rico_right_of_hawaii(self, projection):
        hx, _ = projection.inset_anchor("hawaii")
        px, _ = projection.inset_anchor("puerto rico")
        ax, _ = projection.inset_anchor("alaska")
        assert ax < hx < px

    def test_feature_across_inset_edge_kept_whole(self, projection):
        # part falls in the Alaska cut-out, the rest goes through the lower-48 transform
        straddle = gpd.GeoSeries([box(-135.0, 50.0, -125.0, 56.0)], crs="EPSG:4326")
        projected = projection.project(straddle).iloc[0]
        assert projected.geom_type == "MultiPolygon"
        assert len(projected.geoms) == 2

    def test_index_and_order_kept(self, projection, county_frame):
        projected = projection.project(county_frame.set_index("id"))
        assert list(projected.index) == ["20001", "20002", "20003", "02020"]

    def test_unknown_inset(self, projection):
        with pytest.raises(KeyError, match="No inset"):
            projection.inset_anchor("guam")

    def test_insets_disabled(self):
        flat = MapProjection.for_canvas("ESRI:102003", EXTENT, 1200, 820, 975, 610, insets=False)
        assert flat.insets == []
