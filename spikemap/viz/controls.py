"""Matplotlib widgets bound to a Scrubber.

A Play / Pause button, an index slider spanning [0, len - 1] with step 1,
and an output text showing the formatted label. The scrubber stays the only
source of truth: button clicks call toggle(), slider drags call a user
seek(), and the widgets repaint from the scrubber's label / state
notifications. Slider updates made on the scrubber's behalf are flagged so
they are not mistaken for user drags.
"""

from __future__ import annotations

from typing import Sequence

from matplotlib.widgets import Button, Slider

from spikemap.scrubber import Scrubber
from spikemap.viz.style import BACKGROUND, TEXT_COLOR, THEME_COLOR

PLAY_LABEL = "Play"
PAUSE_LABEL = "Pause"


class ScrubberControls:
    """Widgets for one scrubber on one figure.

    Rects are figure fractions (left, bottom, width, height).
    """

    def __init__(
        self,
        fig,
        scrubber: Scrubber,
        button_rect: Sequence[float] = (0.10, 0.93, 0.07, 0.035),
        slider_rect: Sequence[float] = (0.20, 0.93, 0.45, 0.035),
    ):
        self.fig = fig
        self.scrubber = scrubber
        self._syncing = False

        self.button_ax = fig.add_axes(button_rect)
        self.slider_ax = fig.add_axes(slider_rect)
        self.button = Button(self.button_ax, self._button_text(scrubber.running),
                             color=BACKGROUND, hovercolor='#e0e0e0')
        self.slider = Slider(
            self.slider_ax, "", 0, max(len(scrubber) - 1, 1),
            valinit=scrubber.index, valstep=1, color=THEME_COLOR,
        )
        self.slider.valtext.set_visible(False)
        self.output = self.slider_ax.text(
            1.03, 0.5, scrubber.label, transform=self.slider_ax.transAxes,
            va='center', ha='left', fontsize=11, color=TEXT_COLOR,
        )

        self.button.on_clicked(self._on_click)
        self.slider.on_changed(self._on_slide)
        scrubber.on_label(self._on_label)
        scrubber.on_state(self._on_state)

    @staticmethod
    def _button_text(running: bool) -> str:
        return PAUSE_LABEL if running else PLAY_LABEL

    def _on_click(self, event) -> None:
        self.scrubber.toggle()

    def _on_slide(self, val) -> None:
        if self._syncing:
            return
        self.scrubber.seek(int(round(val)), user=True)

    def _on_label(self, label: str) -> None:
        self._syncing = True
        try:
            self.slider.set_val(self.scrubber.index)
        finally:
            self._syncing = False
        self.output.set_text(label)
        self.fig.canvas.draw_idle()

    def _on_state(self, running: bool) -> None:
        self.button.label.set_text(self._button_text(running))
        self.fig.canvas.draw_idle()
