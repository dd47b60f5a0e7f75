"""Per-date frame drawing.

FrameRenderer owns the map axes. Each render(date):
  1. keeps the regions that have a record for that exact date and writes
     their scratch fields (cases, height)
  2. picks the top-N of those by cases (stable on ties)
  3. clears the axes and redraws, bottom to top: nation fill, county
     borders, state borders, one spike per region, top-N annotations
  4. sets the total label from the per-date totals

Spikes are triangles from (x - w, y) up to the tip (x, y - h) and back to
(x + w, y). The fill fades from the theme colour at the tip to the
background at the base; it is drawn as horizontal bands inside a single
PathCollection, interleaved per spike with the spike's outline, so the
north-to-south region order is also the paint order.

Each top-N annotation is one label, "name count" with the count in bold
theme colour, centred horizontally just above the spike tip.

Rendering the same date twice produces the same artists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as Date
from typing import Callable, Dict, List, Optional

import matplotlib.colors as mcolors
import matplotlib.patheffects as path_effects
import numpy as np
from matplotlib.collections import LineCollection, PathCollection, PolyCollection
from matplotlib.offsetbox import AnnotationBbox, HPacker, TextArea
from matplotlib.path import Path as MplPath

from spikemap.config import RenderSection
from spikemap.geometry import BaseMap
from spikemap.scale import SqrtScale
from spikemap.types import Region
from spikemap.viz.style import apply_map_theme

UNKNOWN_TOTAL = "n/a"


def format_count(n) -> str:
    """Thousands-separated count."""
    return f"{int(n):,}"


def format_total(total: Optional[int]) -> str:
    if total is None:
        return f"{UNKNOWN_TOTAL} total cases"
    return f"{format_count(total)} total cases"


@dataclass
class Frame:
    """What one render() call put on screen."""
    date: Date
    regions: List[Region] = field(default_factory=list)
    top: List[Region] = field(default_factory=list)
    annotations: List[str] = field(default_factory=list)
    total_text: str = ""

    @property
    def n_spikes(self) -> int:
        return len(self.regions)


def select_regions(regions: List[Region], day: Date, scale: SqrtScale) -> List[Region]:
    """Regions with a record for ``day``, scratch fields updated, order kept."""
    shown: List[Region] = []
    for region in regions:
        record = region.record_for(day)
        if record is None:
            continue
        region.cases = record.cases
        region.height = scale(record.cases)
        shown.append(region)
    return shown


def top_regions(regions: List[Region], n: int) -> List[Region]:
    """The ``n`` highest-count regions, descending; ties keep input order."""
    return sorted(regions, key=lambda r: r.cases, reverse=True)[:n]


def spike_paths(regions: List[Region], half_width: float, steps: int,
                tip_color, base_color, stroke_color):
    """Build paths and per-path colours for the spike layer.

    For each region: its open outline first, then ``steps`` filled bands
    from tip to base.

    Returns:
        (paths, facecolors, edgecolors, linewidths)
    """
    tip = np.asarray(mcolors.to_rgba(tip_color))
    base = np.asarray(mcolors.to_rgba(base_color))
    stroke = mcolors.to_rgba(stroke_color)
    none = (0.0, 0.0, 0.0, 0.0)

    t = np.linspace(0.0, 1.0, steps + 1)          # 0 at the tip, 1 at the base
    mid = (t[:-1] + t[1:]) / 2.0
    band_colors = tip[None, :] * (1.0 - mid[:, None]) + base[None, :] * mid[:, None]
    outline_codes = [MplPath.MOVETO, MplPath.LINETO, MplPath.LINETO]

    paths, faces, edges, widths = [], [], [], []
    for r in regions:
        x, y, h = r.x, r.y, r.height
        paths.append(MplPath(
            [(x - half_width, y), (x, y - h), (x + half_width, y)], outline_codes,
        ))
        faces.append(none)
        edges.append(stroke)
        widths.append(1.0)

        ys = y - h + h * t
        ws = half_width * t
        for i in range(steps):
            paths.append(MplPath([
                (x - ws[i], ys[i]), (x + ws[i], ys[i]),
                (x + ws[i + 1], ys[i + 1]), (x - ws[i + 1], ys[i + 1]),
                (x - ws[i], ys[i]),
            ], closed=True))
            faces.append(tuple(band_colors[i]))
            edges.append(none)
            widths.append(0.0)
    return paths, faces, edges, widths


class FrameRenderer:
    """Draws one date at a time onto an exclusively owned Axes.

    Args:
        ax: Axes in logical canvas units (see viz.style.map_figure).
        regions: Bound regions, already sorted by centroid y.
        base_map: Static outline layers.
        scale: Count → spike height.
        total_by_date: Per-date totals for the total label.
        total_label: Text artist for the total (outside the axes).
        style: Layout and colours.
    """

    def __init__(
        self,
        ax,
        regions: List[Region],
        base_map: BaseMap,
        scale: SqrtScale,
        total_by_date: Dict[Date, int],
        total_label=None,
        style: Optional[RenderSection] = None,
        count_format: Callable[[int], str] = format_count,
    ):
        self.ax = ax
        self.regions = regions
        self.base_map = base_map
        self.scale = scale
        self.total_by_date = total_by_date
        self.total_label = total_label
        self.style = style if style is not None else RenderSection()
        self.count_format = count_format
        self.last_frame: Optional[Frame] = None

    # ── public ───────────────────────────────────────────────────────

    def render(self, day: Date) -> Frame:
        s = self.style
        shown = select_regions(self.regions, day, self.scale)
        top = top_regions(shown, s.top_n)

        self.ax.clear()
        apply_map_theme(self.ax, s.width, s.height)
        self._draw_map()
        self._draw_spikes(shown)
        annotations = self._draw_annotations(top)

        total_text = format_total(self.total_by_date.get(day))
        if self.total_label is not None:
            self.total_label.set_text(total_text)

        self.last_frame = Frame(date=day, regions=shown, top=top,
                                annotations=annotations, total_text=total_text)
        return self.last_frame

    # ── layers ───────────────────────────────────────────────────────

    def _draw_map(self) -> None:
        s = self.style
        base = self.base_map
        if base.nation:
            self.ax.add_collection(PolyCollection(
                base.nation, facecolors=s.background_color, edgecolors='none', zorder=1,
            ))
        if base.county_lines:
            self.ax.add_collection(LineCollection(
                base.county_lines, colors=s.county_stroke, linewidths=0.5,
                joinstyle='round', capstyle='round', zorder=2,
            ))
        if base.state_lines:
            self.ax.add_collection(LineCollection(
                base.state_lines, colors=s.state_stroke, linewidths=0.5,
                joinstyle='round', capstyle='round', zorder=2,
            ))

    def _draw_spikes(self, shown: List[Region]) -> None:
        if not shown:
            return
        s = self.style
        paths, faces, edges, widths = spike_paths(
            shown, s.spike_half_width, s.gradient_steps,
            s.theme_color, s.background_color, s.theme_color,
        )
        spikes = PathCollection(
            paths, facecolors=faces, edgecolors=edges, linewidths=widths, zorder=3,
        )
        spikes.set_joinstyle('round')
        spikes.set_capstyle('round')
        self.ax.add_collection(spikes)

    def _draw_annotations(self, top: List[Region]) -> List[str]:
        s = self.style
        halo = [path_effects.withStroke(linewidth=3, foreground=s.halo_color)]
        texts: List[str] = []
        for r in top:
            count = self.count_format(r.cases)
            # name and count centred together above the tip
            label = HPacker(children=[
                TextArea(r.name, textprops=dict(
                    fontsize=8, color=s.text_color, path_effects=halo)),
                TextArea(count, textprops=dict(
                    fontsize=8, fontweight='bold', color=s.theme_color, path_effects=halo)),
            ], align='baseline', pad=0, sep=2)
            self.ax.add_artist(AnnotationBbox(
                label, (r.x, r.y - r.height - s.label_offset),
                frameon=False, pad=0, box_alignment=(0.5, 0.0), zorder=4,
            ))
            texts.append(f"{r.name} {count}")
        return texts
