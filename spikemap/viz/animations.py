"""Headless GIF export of the date animation.

The same Scrubber that drives the interactive window drives the export,
ticked by a ManualScheduler once per animation frame: frame 0 shows the
initial date, every later frame fires one tick. Looping is switched off so
the export plays through the dates once and stops at the last one; the
scrubber is paused once the file is written so no tick stays armed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation, PillowWriter

from spikemap.scrubber import ManualScheduler

if TYPE_CHECKING:
    from spikemap.app import SpikeMap

logger = logging.getLogger(__name__)


def export_gif(spikemap: "SpikeMap", output_path: Path, fps: int = 4) -> Path:
    """Animate every date from the configured initial index to the end.

    Args:
        spikemap: Assembled chart.
        output_path: GIF output path.
        fps: Frames per second.

    Returns:
        Path to saved GIF.
    """
    scheduler = ManualScheduler()
    scrubber = spikemap.build_scrubber(scheduler, autoplay=True, loop=False)
    n_frames = len(scrubber) - scrubber.index

    def update(frame: int):
        if frame == 0:
            spikemap.render(scrubber.value)
        else:
            scheduler.fire()
        return []

    anim = FuncAnimation(
        spikemap.fig, update, frames=n_frames, init_func=lambda: [],
        interval=1000 // fps, blit=False, repeat=False,
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    anim.save(str(output_path), writer=PillowWriter(fps=fps), dpi=spikemap.fig.dpi)
    if scrubber.running:
        scrubber.toggle()
    plt.close(spikemap.fig)
    logger.info("Saved %d-frame animation to %s", n_frames, output_path)
    return output_path
