"""Tests for spikemap.scrubber — play / pause / seek state machine and tick sources."""

import pytest

from spikemap.scrubber import (
    IntervalScheduler,
    ManualScheduler,
    RepaintScheduler,
    Scrubber,
    TickScheduler,
    make_scheduler,
)


def _scrubber(n=3, **kwargs):
    scheduler = ManualScheduler()
    kwargs.setdefault("scheduler", scheduler)
    return Scrubber(list(range(n)), **kwargs), kwargs["scheduler"]


def _play(scrubber, scheduler, ticks):
    seen = []
    for _ in range(ticks):
        scheduler.fire()
        seen.append(scrubber.index)
    return seen


# ── Fakes ─────────────────────────────────────────────────────────────

class FakeTimer:
    def __init__(self, interval):
        self.interval = interval
        self.single_shot = False
        self.callbacks = []
        self.started = False
        self.stopped = False

    def add_callback(self, cb):
        self.callbacks.append(cb)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True


class FakeCanvas:
    def __init__(self):
        self.timers = []
        self.handlers = {}
        self.draw_requests = 0
        self._cid = 0

    def new_timer(self, interval):
        timer = FakeTimer(interval)
        self.timers.append(timer)
        return timer

    def mpl_connect(self, name, func):
        self._cid += 1
        self.handlers[self._cid] = (name, func)
        return self._cid

    def mpl_disconnect(self, cid):
        self.handlers.pop(cid, None)

    def draw_idle(self):
        self.draw_requests += 1

    def repaint(self):
        for name, func in list(self.handlers.values()):
            if name == "draw_event":
                func(None)


# ── Construction ──────────────────────────────────────────────────────

class TestConstruction:
    def test_empty_values_rejected(self):
        with pytest.raises(ValueError, match="at least one"):
            Scrubber([])

    @pytest.mark.parametrize("initial", [-1, 3])
    def test_initial_out_of_range(self, initial):
        with pytest.raises(ValueError, match="initial"):
            Scrubber([1, 2, 3], initial=initial)

    def test_initial_label(self):
        s = Scrubber(["a", "b"], format=str.upper, initial=1, autoplay=False)
        assert s.index == 1
        assert s.value == "b"
        assert s.label == "B"

    def test_default_format_is_str(self):
        s = Scrubber([7], autoplay=False)
        assert s.label == "7"

    def test_autoplay_arms_one_tick(self):
        s, sched = _scrubber()
        assert s.running
        assert sched.pending == 1
        assert s.index == 0

    def test_no_autoplay(self):
        s, sched = _scrubber(autoplay=False)
        assert not s.running
        assert sched.pending == 0

    def test_len(self):
        s, _ = _scrubber(n=5)
        assert len(s) == 5

    def test_base_scheduler_is_abstract(self):
        with pytest.raises(NotImplementedError):
            TickScheduler().schedule(lambda: None)


# ── Playback ──────────────────────────────────────────────────────────

class TestPlayback:
    def test_wraparound(self):
        s, sched = _scrubber(n=3)
        assert _play(s, sched, 5) == [1, 2, 0, 1, 2]

    def test_full_cycle_returns_to_start(self):
        s, sched = _scrubber(n=4)
        _play(s, sched, 4)
        assert s.index == 0
        assert s.direction == 1

    def test_ping_pong(self):
        s, sched = _scrubber(n=3, alternate=True)
        assert [s.index] + _play(s, sched, 6) == [0, 1, 2, 1, 0, 1, 2]

    def test_no_loop_stops_at_end(self):
        s, sched = _scrubber(n=3, loop=False)
        assert _play(s, sched, 2) == [1, 2]
        sched.fire()
        assert s.index == 2
        assert not s.running
        assert sched.pending == 0

    def test_no_loop_alternate_stops_at_end(self):
        s, sched = _scrubber(n=3, loop=False, alternate=True)
        _play(s, sched, 3)
        assert s.index == 2
        assert not s.running

    def test_single_pending_tick(self):
        s, sched = _scrubber(n=4)
        for _ in range(10):
            sched.fire()
            assert sched.pending == 1

    def test_single_value(self):
        s, sched = _scrubber(n=1)
        assert _play(s, sched, 3) == [0, 0, 0]

    def test_manual_tick_while_stopped(self):
        s, sched = _scrubber(autoplay=False)
        s.tick()
        assert s.index == 1
        assert not s.running
        assert sched.pending == 0


# ── Toggle ────────────────────────────────────────────────────────────

class TestToggle:
    def test_play_steps_immediately(self):
        s, sched = _scrubber(autoplay=False)
        s.toggle()
        assert s.running
        assert s.index == 1
        assert sched.pending == 1

    def test_pause_does_not_step(self):
        s, sched = _scrubber()
        s.toggle()
        assert not s.running
        assert s.index == 0
        assert sched.pending == 0

    def test_play_from_last_wraps(self):
        s, _ = _scrubber(initial=2, autoplay=False)
        s.toggle()
        assert s.index == 0

    def test_play_from_last_alternate_reverses(self):
        s, sched = _scrubber(initial=2, autoplay=False, alternate=True)
        s.toggle()
        assert s.index == 1
        assert s.direction == -1
        sched.fire()
        assert s.index == 0

    def test_play_pause_play(self):
        s, sched = _scrubber(autoplay=False)
        s.toggle()
        s.toggle()
        s.toggle()
        assert s.index == 2
        assert sched.pending == 1


# ── Seek ──────────────────────────────────────────────────────────────

class TestSeek:
    def test_user_seek_stops(self):
        s, sched = _scrubber(n=5)
        s.seek(3)
        assert s.index == 3
        assert not s.running
        assert sched.pending == 0

    def test_programmatic_seek_keeps_playing(self):
        s, sched = _scrubber(n=5)
        s.seek(3, user=False)
        assert s.running
        sched.fire()
        assert s.index == 4

    def test_user_seek_emits_once(self):
        s, _ = _scrubber(n=5)
        seen = []
        s.subscribe(seen.append)
        s.seek(3)
        assert seen == [3]

    @pytest.mark.parametrize("target, expected", [(-4, 0), (99, 4), (2.6, 2)])
    def test_clamped(self, target, expected):
        s, _ = _scrubber(n=5, autoplay=False)
        s.seek(target)
        assert s.index == expected


# ── Notifications ─────────────────────────────────────────────────────

class TestNotifications:
    def test_label_before_value(self):
        s, sched = _scrubber(format=lambda v: f"#{v}")
        events = []
        s.subscribe(lambda v: events.append(("value", v)))
        s.on_label(lambda text: events.append(("label", text)))
        sched.fire()
        assert events == [("label", "#1"), ("value", 1)]
        assert s.label == "#1"

    def test_every_subscriber_called(self):
        s, sched = _scrubber()
        a, b = [], []
        s.subscribe(a.append)
        s.subscribe(b.append)
        sched.fire()
        sched.fire()
        assert a == b == [1, 2]

    def test_state_listener(self):
        s, sched = _scrubber()
        states = []
        s.on_state(states.append)
        s.toggle()
        s.toggle()
        assert states == [False, True]

    def test_state_listener_on_edge_stop(self):
        s, sched = _scrubber(n=2, loop=False)
        states = []
        s.on_state(states.append)
        sched.fire()
        sched.fire()
        assert states == [False]


# ── Schedulers ────────────────────────────────────────────────────────

class TestManualScheduler:
    def test_fire_runs_and_clears(self):
        sched = ManualScheduler()
        calls = []
        sched.schedule(lambda: calls.append(1))
        assert sched.fire() == 1
        assert calls == [1]
        assert sched.fire() == 0

    def test_cancel(self):
        sched = ManualScheduler()
        calls = []
        handle = sched.schedule(lambda: calls.append(1))
        sched.cancel(handle)
        sched.cancel(handle)
        assert sched.fire() == 0
        assert calls == []


class TestIntervalScheduler:
    def test_one_shot_timer(self):
        canvas = FakeCanvas()
        sched = IntervalScheduler(canvas, 250)
        cb = lambda: None  # noqa: E731
        timer = sched.schedule(cb)
        assert timer.interval == 250
        assert timer.single_shot is True
        assert timer.callbacks == [cb]
        assert timer.started

    def test_cancel_stops_timer(self):
        canvas = FakeCanvas()
        sched = IntervalScheduler(canvas, 100)
        timer = sched.schedule(lambda: None)
        sched.cancel(timer)
        assert timer.stopped

    def test_drives_scrubber(self):
        canvas = FakeCanvas()
        s = Scrubber([0, 1, 2], scheduler=IntervalScheduler(canvas, 100))
        canvas.timers[-1].callbacks[0]()
        assert s.index == 1
        assert len(canvas.timers) == 2
        s.toggle()
        assert canvas.timers[-1].stopped


class TestRepaintScheduler:
    def test_runs_on_next_draw(self):
        canvas = FakeCanvas()
        sched = RepaintScheduler(canvas)
        calls = []
        sched.schedule(lambda: calls.append(1))
        assert canvas.draw_requests == 1
        canvas.repaint()
        canvas.repaint()
        assert calls == [1]
        assert canvas.handlers == {}

    def test_cancel_disconnects(self):
        canvas = FakeCanvas()
        sched = RepaintScheduler(canvas)
        handle = sched.schedule(lambda: None)
        sched.cancel(handle)
        assert canvas.handlers == {}

    def test_drives_scrubber(self):
        canvas = FakeCanvas()
        s = Scrubber([0, 1, 2], scheduler=RepaintScheduler(canvas))
        canvas.repaint()
        canvas.repaint()
        assert s.index == 2
        assert len(canvas.handlers) == 1


class TestMakeScheduler:
    def test_no_canvas(self):
        assert isinstance(make_scheduler(250), ManualScheduler)

    def test_interval(self):
        sched = make_scheduler(250, FakeCanvas())
        assert isinstance(sched, IntervalScheduler)
        assert sched.delay_ms == 250

    def test_repaint(self):
        assert isinstance(make_scheduler(None, FakeCanvas()), RepaintScheduler)
