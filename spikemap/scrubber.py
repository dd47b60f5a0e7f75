"""Play / pause / seek / loop driver over an ordered sequence of values.

The Scrubber is a two-state machine (stopped, playing) that owns a current
index into ``values``. It knows nothing about widgets or drawing: every
index change synchronously stores the formatted label, hands it to label
listeners and then hands the new current value to value subscribers. Any
UI (see viz.controls) binds to that contract.

Ticks come from a single injected TickScheduler. The scheduler is
one-shot: ``schedule(callback)`` arms exactly one future call and returns a
handle, and the scrubber re-arms on every tick. Three schedulers exist:

  IntervalScheduler  fixed delay, a matplotlib canvas timer
  RepaintScheduler   next canvas repaint (draw_event)
  ManualScheduler    fires only when ``fire()`` is called (export, tests)

Usage:
    scrub = Scrubber(dates, format=str, scheduler=ManualScheduler())
    scrub.subscribe(renderer.render)
    scrub.toggle()      # play
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# TICK SCHEDULERS
# ═══════════════════════════════════════════════════════════════════════

class TickScheduler:
    """Arms one future call of a callback. Handles are opaque."""

    def schedule(self, callback: Callable[[], None]) -> Any:
        raise NotImplementedError

    def cancel(self, handle: Any) -> None:
        raise NotImplementedError


class ManualScheduler(TickScheduler):
    """Holds armed callbacks until ``fire()`` runs them."""

    def __init__(self):
        self._pending: Dict[int, Callable[[], None]] = {}
        self._next_handle = 0

    def schedule(self, callback):
        self._next_handle += 1
        self._pending[self._next_handle] = callback
        return self._next_handle

    def cancel(self, handle):
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def fire(self) -> int:
        """Run every armed callback once; returns how many ran.

        Callbacks armed while firing wait for the next call.
        """
        callbacks = list(self._pending.values())
        self._pending.clear()
        for cb in callbacks:
            cb()
        return len(callbacks)


class IntervalScheduler(TickScheduler):
    """One-shot matplotlib timer ``delay_ms`` after scheduling."""

    def __init__(self, canvas, delay_ms: int):
        self.canvas = canvas
        self.delay_ms = int(delay_ms)

    def schedule(self, callback):
        timer = self.canvas.new_timer(interval=self.delay_ms)
        timer.single_shot = True
        timer.add_callback(callback)
        timer.start()
        return timer

    def cancel(self, handle):
        handle.stop()


class RepaintScheduler(TickScheduler):
    """Runs the callback on the next canvas ``draw_event``.

    Scheduling also asks the canvas for an idle redraw so the event comes.
    """

    def __init__(self, canvas):
        self.canvas = canvas

    def schedule(self, callback):
        cid_box: List[int] = []

        def on_draw(event):
            self.canvas.mpl_disconnect(cid_box[0])
            callback()

        cid_box.append(self.canvas.mpl_connect("draw_event", on_draw))
        self.canvas.draw_idle()
        return cid_box[0]

    def cancel(self, handle):
        self.canvas.mpl_disconnect(handle)


def make_scheduler(delay_ms: Optional[int], canvas=None) -> TickScheduler:
    """Pick the tick source from configuration.

    No canvas → ManualScheduler; ``delay_ms`` None → RepaintScheduler;
    otherwise IntervalScheduler.
    """
    if canvas is None:
        return ManualScheduler()
    if delay_ms is None:
        return RepaintScheduler(canvas)
    return IntervalScheduler(canvas, delay_ms)


# ═══════════════════════════════════════════════════════════════════════
# SCRUBBER
# ═══════════════════════════════════════════════════════════════════════

class Scrubber:
    """Animation driver over ``values``.

    Args:
        values: Ordered values to step through (at least one).
        format: value → label text. Defaults to ``str``.
        initial: Starting index.
        delay: Milliseconds between ticks, or None for repaint-synced ticks.
            Only used to describe the configuration; the tick source itself
            is ``scheduler``.
        autoplay: Start playing immediately.
        loop: Keep going past the ends; False stops at the edge.
        alternate: Reverse direction at the ends instead of wrapping.
        scheduler: Tick source (default: ManualScheduler).

    Raises:
        ValueError: If values is empty or initial is out of range.
    """

    def __init__(
        self,
        values: Sequence,
        format: Optional[Callable[[Any], str]] = None,
        initial: int = 0,
        delay: Optional[int] = None,
        autoplay: bool = True,
        loop: bool = True,
        alternate: bool = False,
        scheduler: Optional[TickScheduler] = None,
    ):
        self.values = list(values)
        if not self.values:
            raise ValueError("Scrubber needs at least one value")
        if not 0 <= initial < len(self.values):
            raise ValueError(
                f"initial index {initial} outside [0, {len(self.values) - 1}]"
            )
        self.format = format if format is not None else str
        self.delay = delay
        self.loop = loop
        self.alternate = alternate
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()

        self.index = initial
        self.direction = 1
        self.label = ""
        self._handle = None
        self._value_listeners: List[Callable[[Any], None]] = []
        self._label_listeners: List[Callable[[str], None]] = []
        self._state_listeners: List[Callable[[bool], None]] = []

        self._emit()
        if autoplay:
            self._start()
        else:
            self._stop()

    # ── listeners ────────────────────────────────────────────────────

    def subscribe(self, callback: Callable[[Any], None]) -> None:
        """Call ``callback(value)`` after every index change."""
        self._value_listeners.append(callback)

    def on_label(self, callback: Callable[[str], None]) -> None:
        """Call ``callback(label)`` after every index change, before values."""
        self._label_listeners.append(callback)

    def on_state(self, callback: Callable[[bool], None]) -> None:
        """Call ``callback(running)`` whenever playback starts or stops."""
        self._state_listeners.append(callback)

    # ── state ────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def value(self):
        return self.values[self.index]

    def __len__(self) -> int:
        return len(self.values)

    # ── transitions ──────────────────────────────────────────────────

    def toggle(self) -> None:
        """Play if stopped (stepping once right away), stop if playing."""
        if self.running:
            self._stop()
            return
        n = len(self.values)
        self.direction = -1 if self.alternate and self.index == n - 1 else 1
        self.index = (self.index + self.direction) % n
        self._emit()
        self._start()

    def tick(self) -> None:
        """Advance one step as the tick source does.

        While playing the tick source is re-armed first, so at most one
        handle is ever live. At an edge: stop when not looping, reverse
        when alternating, otherwise wrap.
        """
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = self.scheduler.schedule(self.tick)

        n = len(self.values)
        edge = n - 1 if self.direction > 0 else 0
        if self.index == edge:
            if not self.loop:
                self._stop()
                return
            if self.alternate:
                self.direction = -self.direction
        self.index = (self.index + self.direction + n) % n
        self._emit()

    def seek(self, index: int, user: bool = True) -> None:
        """Jump to ``index`` (clamped to the valid range).

        A user seek while playing stops playback first; programmatic seeks
        (``user=False``) leave the run state alone.
        """
        if user and self.running:
            self.toggle()
        self.index = min(max(int(index), 0), len(self.values) - 1)
        self._emit()

    # ── internals ────────────────────────────────────────────────────

    def _start(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
        self._handle = self.scheduler.schedule(self.tick)
        logger.debug("scrubber playing from index %d", self.index)
        for cb in self._state_listeners:
            cb(True)

    def _stop(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
        logger.debug("scrubber stopped at index %d", self.index)
        for cb in self._state_listeners:
            cb(False)

    def _emit(self) -> None:
        value = self.values[self.index]
        self.label = self.format(value)
        for cb in self._label_listeners:
            cb(self.label)
        for cb in self._value_listeners:
            cb(value)
