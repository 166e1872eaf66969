"""
DisplaySession runs with a high rate so that dwell times of a few seconds
take a fraction of a second of real time.
"""

import asyncio

import pytest

from signage.errors import MediaPlaybackError
from signage.scheduling.display_session import DisplaySession
from signage.scheduling.playback_scheduler import PlaybackState

from test_playback_scheduler import display_ad

RATE = 20.0
NO_POLL = 3600


class FakeSource:
    def __init__(self, queue=None):
        self.queue = list(queue or [])
        self.fail = False
        self.calls = 0

    async def __call__(self, tv_id):
        self.calls += 1
        if self.fail:
            raise ConnectionError("backend unreachable")
        return list(self.queue)


class Recorder:
    def __init__(self, broken=()):
        self.shown = []
        self.broken = set(broken)

    def __call__(self, ad):
        self.shown.append(ad.name if ad else None)
        if ad is not None and ad.name in self.broken:
            raise MediaPlaybackError(ad.id, "decode error")


@pytest.mark.asyncio
async def test_rotation_over_three_ads_wraps_to_first():
    source = FakeSource([display_ad("a", 5), display_ad("b", 10), display_ad("c", 5)])
    recorder = Recorder()
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=NO_POLL, rate=RATE)

    async with session:
        # a: 0.00s, b: 0.25s, c: 0.75s, a again: 1.00s, b again: 1.25s
        await asyncio.sleep(1.1)

    assert recorder.shown == ["a", "b", "c", "a"]


@pytest.mark.asyncio
async def test_empty_queue_idles_then_shows_when_ads_appear():
    source = FakeSource([])
    recorder = Recorder()
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=NO_POLL, rate=RATE)

    async with session:
        assert session.scheduler.state == PlaybackState.IDLE
        assert recorder.shown == [None]

        source.queue = [display_ad("a")]
        await session.refresh()
        assert session.scheduler.state == PlaybackState.SHOWING
        assert recorder.shown == [None, "a"]

        source.queue = []
        await session.refresh()
        assert session.scheduler.state == PlaybackState.IDLE
        assert recorder.shown == [None, "a", None]


@pytest.mark.asyncio
async def test_resolve_failure_falls_back_to_idle():
    source = FakeSource([display_ad("a")])
    recorder = Recorder()
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=NO_POLL, rate=RATE)

    async with session:
        source.fail = True
        await session.refresh()
        assert session.scheduler.state == PlaybackState.IDLE
        assert recorder.shown == ["a", None]


@pytest.mark.asyncio
async def test_broken_media_still_advances_on_its_timer():
    source = FakeSource([display_ad("a", 2), display_ad("b", 2)])
    recorder = Recorder(broken={"a"})
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=NO_POLL, rate=RATE)

    async with session:
        # a: 0.0s, b: 0.1s, a: 0.2s
        await asyncio.sleep(0.25)

    assert recorder.shown[:3] == ["a", "b", "a"]


@pytest.mark.asyncio
async def test_refresh_does_not_restart_running_dwell():
    queue = [display_ad("a", 5), display_ad("b", 5)]
    source = FakeSource(queue)
    recorder = Recorder()
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=NO_POLL, rate=RATE)

    async with session:
        dwell = session._dwell_task
        await session.refresh()
        assert session._dwell_task is dwell
        assert recorder.shown == ["a"]


@pytest.mark.asyncio
async def test_poll_loop_picks_up_schedule_changes():
    source = FakeSource([])
    recorder = Recorder()
    # poll every 2s of station time = 0.1s real time
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=2, rate=RATE)

    async with session:
        source.queue = [display_ad("a", 60)]
        await asyncio.sleep(0.25)
        assert source.calls >= 2
        assert recorder.shown == [None, "a"]


@pytest.mark.asyncio
async def test_stop_cancels_both_timers():
    source = FakeSource([display_ad("a", 1), display_ad("b", 1)])
    recorder = Recorder()
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=1, rate=RATE)

    await session.start()
    assert session.running
    await session.stop()
    shown = list(recorder.shown)
    calls = source.calls

    await asyncio.sleep(0.2)
    assert recorder.shown == shown
    assert source.calls == calls
    assert not session.running


class SlowRecorder(Recorder):
    """Async renderer that takes real time to draw each ad."""

    def __init__(self, delay):
        super().__init__()
        self.delay = delay

    async def __call__(self, ad):
        super().__call__(ad)
        await asyncio.sleep(self.delay)


@pytest.mark.asyncio
async def test_unreachable_backend_shows_idle_once_on_start():
    source = FakeSource()
    source.fail = True
    recorder = Recorder()
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=NO_POLL, rate=RATE)

    async with session:
        await session.refresh()
        assert session.scheduler.state == PlaybackState.IDLE
        assert recorder.shown == [None]


@pytest.mark.asyncio
async def test_stop_while_dwell_is_rendering_next_ad():
    # 1s dwell = 0.05s real time, each render takes 0.1s
    source = FakeSource([display_ad("a", 1), display_ad("b", 1)])
    recorder = SlowRecorder(0.1)
    session = DisplaySession("tv-1", source, recorder, resolve_interval_seconds=NO_POLL, rate=RATE)

    # a is drawn during start(), its dwell fires 0.05s later and draws b until 0.15s
    await session.start()
    await asyncio.sleep(0.1)
    assert recorder.shown == ["a", "b"]
    await session.stop()

    await asyncio.sleep(0.5)
    assert recorder.shown == ["a", "b"]
    assert session._dwell_task is None
