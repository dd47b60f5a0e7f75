"""SpikeMap: wires load → index → bind → scrubber → renderer.

All chart state (temporal index, scale, projection, regions, figure,
renderer, scrubber) lives on one SpikeMap object built once at startup.

Usage:
    sm = SpikeMap.from_config(load_config("configs/default.yaml"))
    sm.show()                       # interactive window
    sm.export_gif("out/map.gif")    # headless animation
"""

from __future__ import annotations

import logging
from datetime import date as Date
from pathlib import Path
from typing import List, Optional, Union

from spikemap.config import SpikeMapConfig, default_config
from spikemap.geometry import bind_regions, build_base_map
from spikemap.indexing import build_temporal_index
from spikemap.loader import GeometrySet, county_features, load_cases_csv, load_geometry
from spikemap.projection import MapProjection
from spikemap.scale import spike_scale
from spikemap.scrubber import Scrubber, TickScheduler, make_scheduler
from spikemap.types import Record
from spikemap.utils import format_date, timer
from spikemap.viz.render import Frame, FrameRenderer
from spikemap.viz.style import TEXT_COLOR, map_figure, save_figure

logger = logging.getLogger(__name__)


class SpikeMap:
    """The assembled chart.

    Args:
        records: Normalised case records, date-sorted.
        geometry: County / state / nation geometry (lon/lat or any CRS).
        config: Full configuration (defaults when omitted).
    """

    def __init__(self, records: List[Record], geometry: GeometrySet,
                 config: Optional[SpikeMapConfig] = None):
        self.config = config if config is not None else default_config()
        r = self.config.render

        self.index = build_temporal_index(records)
        self.scale = spike_scale(self.index.latest_cases(), r.max_spike_height)

        self.projection = MapProjection.for_canvas(
            r.crs, r.extent, r.width, r.height, r.map_width, r.map_height,
            insets=r.insets,
        )
        counties = geometry.counties.set_geometry(self.projection.project(geometry.counties))
        self.regions = bind_regions(
            county_features(counties, self.config.data.name_column),
            self.index.cases_by_region_by_date,
            self.projection.centroid,
        )
        self.base_map = build_base_map(
            nation=self.projection.project(geometry.nation),
            counties=counties.geometry,
            states=self.projection.project(geometry.states),
        )
        logger.info("%d dates, %d regions with data", len(self.index.dates), len(self.regions))

        self.fig, self.ax = map_figure(r.width, r.height, r.device_pixel_ratio, r.dpi)
        self.total_label = self.fig.text(0.5, 0.82, "", ha='center', va='center',
                                         fontsize=16, fontweight='bold', color=TEXT_COLOR)
        self.date_label = self.fig.text(0.5, 0.87, "", ha='center', va='center',
                                        fontsize=13, color=TEXT_COLOR)
        self.renderer = FrameRenderer(
            self.ax, self.regions, self.base_map, self.scale,
            self.index.total_by_date, self.total_label, style=r,
        )
        self.scrubber: Optional[Scrubber] = None
        self.controls = None

    @classmethod
    def from_config(cls, config: SpikeMapConfig) -> "SpikeMap":
        """Load the configured case CSV and geometry file and build the chart."""
        d = config.data
        with timer("load cases"):
            records = load_cases_csv(d.cases_csv)
        with timer("load geometry"):
            geometry = load_geometry(d.geometry, d.counties_layer, d.states_layer,
                                     d.nation_layer, d.id_column)
        with timer("build chart"):
            return cls(records, geometry, config)

    # ── frames ───────────────────────────────────────────────────────

    @property
    def dates(self) -> List[Date]:
        return self.index.dates

    def format_date(self, day: Date) -> str:
        return format_date(day, self.config.scrubber.date_format)

    def render(self, day: Date) -> Frame:
        """Draw ``day``; unknown dates draw an empty frame."""
        return self.renderer.render(day)

    # ── scrubber ─────────────────────────────────────────────────────

    def build_scrubber(self, scheduler: TickScheduler, autoplay: Optional[bool] = None,
                       loop: Optional[bool] = None) -> Scrubber:
        """Create the date scrubber and subscribe the renderer to it."""
        s = self.config.scrubber
        self.scrubber = Scrubber(
            self.dates,
            format=self.format_date,
            initial=min(s.initial, len(self.dates) - 1),
            delay=s.delay_ms,
            autoplay=s.autoplay if autoplay is None else autoplay,
            loop=s.loop if loop is None else loop,
            alternate=s.alternate,
            scheduler=scheduler,
        )
        self.scrubber.on_label(self.date_label.set_text)
        self.scrubber.subscribe(self.render)
        self.date_label.set_text(self.scrubber.label)
        return self.scrubber

    def show(self) -> None:
        """Open the interactive window with Play / Pause and a date slider."""
        import matplotlib.pyplot as plt
        from spikemap.viz.controls import ScrubberControls

        if not self.dates:
            logger.warning("No dated records; nothing to animate")
            return
        scheduler = make_scheduler(self.config.scrubber.delay_ms, self.fig.canvas)
        scrubber = self.build_scrubber(scheduler)
        self.controls = ScrubberControls(self.fig, scrubber)
        self.render(scrubber.value)
        plt.show()

    # ── headless output ──────────────────────────────────────────────

    def save_date(self, day: Date, path: Union[str, Path]) -> Path:
        """Render one date to an image file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.date_label.set_text(self.format_date(day))
        self.render(day)
        save_figure(self.fig, path)
        return path

    def export_gif(self, path: Union[str, Path], fps: Optional[int] = None) -> Optional[Path]:
        from spikemap.viz.animations import export_gif

        if not self.dates:
            logger.warning("No dated records; nothing to animate")
            return None
        return export_gif(self, Path(path), fps or self.config.output.fps)
