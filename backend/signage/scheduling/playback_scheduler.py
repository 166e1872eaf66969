# backend/signage/scheduling/playback_scheduler.py

"""
Rotation state machine for one TV display.

IDLE --(non-empty queue)--> SHOWING(queue[0], 0)
SHOWING(ad, i) --(dwell elapsed)--> ADVANCING --> SHOWING(next, (i + 1) % len)
SHOWING --(re-resolution returns [])--> IDLE

Re-resolution never restarts the rotation: the index is kept and taken
modulo the new queue length.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Sequence

from signage import config
from signage.models.advertisement import AdKind, DisplayAd

logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    IDLE = "idle"
    SHOWING = "showing"
    ADVANCING = "advancing"


class PlaybackScheduler:
    def __init__(
        self,
        video_fallback_seconds: int = config.VIDEO_FALLBACK_SECONDS,
        default_dwell_seconds: int = config.DEFAULT_DWELL_SECONDS,
    ) -> None:
        self.video_fallback_seconds = video_fallback_seconds
        self.default_dwell_seconds = default_dwell_seconds
        self.state = PlaybackState.IDLE
        self.index = 0
        self._queue: List[DisplayAd] = []

    @property
    def queue(self) -> List[DisplayAd]:
        return list(self._queue)

    @property
    def current(self) -> Optional[DisplayAd]:
        if self.state == PlaybackState.IDLE or not self._queue:
            return None
        return self._queue[self.index]

    def apply_queue(self, queue: Sequence[DisplayAd]) -> Optional[DisplayAd]:
        """
        Absorbs a fresh resolver answer and returns the ad that should be on
        screen now (None when idle).
        """
        self._queue = list(queue)

        if not self._queue:
            if self.state != PlaybackState.IDLE:
                logger.info("queue empty, going idle")
            self.state = PlaybackState.IDLE
            return None

        if self.state == PlaybackState.IDLE:
            self.index = 0
            self.state = PlaybackState.SHOWING
            logger.info("queue of %d ads, starting with %s", len(self._queue), self._queue[0].id)
        else:
            self.index %= len(self._queue)
        return self.current

    def advance(self) -> Optional[DisplayAd]:
        """Called when the dwell timer of the current ad fires."""
        if self.state == PlaybackState.IDLE or not self._queue:
            return None
        self.state = PlaybackState.ADVANCING
        self.index = (self.index + 1) % len(self._queue)
        self.state = PlaybackState.SHOWING
        return self.current

    def dwell_seconds(self, ad: DisplayAd) -> int:
        if ad.kind == AdKind.VIDEO:
            return self.video_fallback_seconds
        return ad.display_seconds or self.default_dwell_seconds

    def report_media_failure(self, ad: DisplayAd, error: Exception) -> None:
        """
        A broken ad stays blank for its dwell time and keeps its place in
        the rotation; the content store may serve it fine next time.
        """
        logger.warning("media for ad %s (%s) failed: %s", ad.id, ad.media_url, error)
