# backend/signage/models/advertisement.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from signage.models.interval import Interval


class AdKind(str, Enum):
    IMAGE = "image"
    GIF = "gif"
    VIDEO = "video"


class AdMedia(BaseModel):
    """
    One ad inside a campaign, as it is stored:
    id, name, kind, media_url and optional display time / own window.

    display_seconds is required for image and gif ads and ignored for video.
    start/end are optional; without them the ad lives for the whole
    campaign window.
    """

    id: str
    name: str
    kind: AdKind
    media_url: str
    file_name: str | None = None
    display_seconds: int | None = None
    start: datetime | None = None
    end: datetime | None = None

    @property
    def window(self) -> Interval | None:
        if self.start is None or self.end is None:
            return None
        return Interval(self.start, self.end)


class ActiveAd(BaseModel):
    """An ad that is eligible right now, tagged with its campaign's name."""

    ad: AdMedia
    campaign_name: str

    def to_display(self) -> "DisplayAd":
        return DisplayAd(
            id=self.ad.id,
            name=self.ad.name,
            kind=self.ad.kind,
            media_url=self.ad.media_url,
            display_seconds=self.ad.display_seconds,
            campaign_name=self.campaign_name,
        )


class DisplayAd(BaseModel):
    """
    What the display client receives per ad on every poll.
    The player only needs to know what to draw and for how long.
    """

    id: str
    name: str
    kind: AdKind
    media_url: str
    display_seconds: int | None = None
    campaign_name: str | None = None
