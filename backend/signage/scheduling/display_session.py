# backend/signage/scheduling/display_session.py

"""
Async driver of one TV display: a poll loop that re-resolves the queue and
a one-shot dwell timer for the ad on screen.

The dwell timer decides *when* to advance, re-resolution decides *what* is
eligible. A refresh only (re)starts the dwell timer when the ad on screen
actually changes.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextlib import suppress
from typing import Awaitable, Callable, List, Optional, Union

from signage import config
from signage.errors import MediaPlaybackError
from signage.models.advertisement import DisplayAd
from signage.scheduling.playback_scheduler import PlaybackScheduler

logger = logging.getLogger(__name__)

QueueSource = Callable[[str], Awaitable[List[DisplayAd]]]
Renderer = Callable[[Optional[DisplayAd]], Union[None, Awaitable[None]]]


class DisplaySession:
    """
    Parameters
    ----------
    tv_id:
        TV this session plays for.
    source:
        Coroutine returning the active-ad queue for a TV.
    renderer:
        Draws an ad, or the idle visual when given None. May be sync or async.
        Raising MediaPlaybackError marks the ad as broken for this round.
    rate:
        Time scale for dwell and poll intervals; 2.0 runs twice as fast.
    """

    def __init__(
        self,
        tv_id: str,
        source: QueueSource,
        renderer: Renderer,
        scheduler: PlaybackScheduler | None = None,
        resolve_interval_seconds: float = config.RESOLVE_INTERVAL_SECONDS,
        rate: float = 1.0,
    ) -> None:
        if rate <= 0.0:
            raise ValueError("rate must be greater than zero")
        self.tv_id = tv_id
        self.scheduler = scheduler or PlaybackScheduler()
        self._source = source
        self._renderer = renderer
        self._resolve_interval = resolve_interval_seconds
        self._rate = rate
        self._poll_task: asyncio.Task | None = None
        self._dwell_task: asyncio.Task | None = None
        self._stopped = False
        self._idle_rendered = False

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def start(self) -> None:
        self._stopped = False
        await self.refresh()
        self._poll_task = asyncio.create_task(self._poll_loop(), name=f"poll-{self.tv_id}")

    async def stop(self) -> None:
        """Cancels both timers so nothing advances after the display is gone."""
        self._stopped = True
        await self._cancel_and_wait(self._poll_task)
        self._poll_task = None
        # read after the poll task is gone, a refresh may have replaced it
        await self._cancel_and_wait(self._dwell_task)
        self._dwell_task = None

    @staticmethod
    async def _cancel_and_wait(task: asyncio.Task | None) -> None:
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> "DisplaySession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def refresh(self) -> None:
        try:
            queue = await self._source(self.tv_id)
        except Exception as exc:
            # the next poll is the retry
            logger.warning("resolving ads for TV %s failed: %s", self.tv_id, exc)
            queue = []

        before = self.scheduler.current
        after = self.scheduler.apply_queue(queue)

        if after is None:
            self._cancel_dwell()
            # also covers a first resolution that is empty or failed
            if not self._idle_rendered:
                self._idle_rendered = True
                await self._render(None)
            return

        if before is None or before.id != after.id:
            await self._show()

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._resolve_interval / self._rate)
            await self.refresh()

    def _cancel_dwell(self) -> None:
        # a dwell task that is advancing keeps its reference so stop() can reach it
        if self._dwell_task is None or self._dwell_task is asyncio.current_task():
            return
        self._dwell_task.cancel()
        self._dwell_task = None

    async def _show(self) -> None:
        ad = self.scheduler.current
        if ad is None:
            return
        self._cancel_dwell()
        self._idle_rendered = False
        await self._render(ad)

        current = self.scheduler.current
        if current is None or current.id != ad.id:
            # a refresh replaced the ad while it was being rendered
            return
        if self._stopped:
            return
        self._cancel_dwell()
        seconds = self.scheduler.dwell_seconds(ad) / self._rate
        self._dwell_task = asyncio.create_task(self._dwell(seconds), name=f"dwell-{self.tv_id}")

    async def _dwell(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
        self.scheduler.advance()
        await self._show()

    async def _render(self, ad: Optional[DisplayAd]) -> None:
        try:
            result = self._renderer(ad)
            if inspect.isawaitable(result):
                await result
        except MediaPlaybackError as exc:
            if ad is not None:
                self.scheduler.report_media_failure(ad, exc)
        except Exception as exc:
            if ad is None:
                logger.exception("idle visual failed to render on TV %s", self.tv_id)
            else:
                self.scheduler.report_media_failure(ad, MediaPlaybackError(ad.id, str(exc)))
