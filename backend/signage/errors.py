# backend/signage/errors.py

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from signage.models.interval import Interval


class SignageError(Exception):
    """Base class for every business error the backend raises on purpose."""


class ValidationError(SignageError):
    """
    Malformed input: an interval with start >= end, a missing display time
    for an image ad, an ad window outside its campaign, and so on.
    """


class NotFound(SignageError):
    """A referenced TV / campaign / ad / assignment does not exist."""

    def __init__(self, kind: str, ident: str) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} '{ident}' not found")


class SchedulingConflict(SignageError):
    """
    Another campaign already holds the TV for an overlapping window.

    This is an expected business outcome, not a defect. It carries enough
    detail (name + window of the other campaign) for the operator to fix
    one of the two windows.
    """

    def __init__(
        self,
        campaign_name: str,
        conflicting_campaign_id: str,
        conflicting_campaign_name: str,
        conflicting_window: "Interval",
        tv_id: str,
        tv_name: str | None = None,
    ) -> None:
        self.campaign_name = campaign_name
        self.conflicting_campaign_id = conflicting_campaign_id
        self.conflicting_campaign_name = conflicting_campaign_name
        self.conflicting_window = conflicting_window
        self.tv_id = tv_id
        self.tv_name = tv_name
        super().__init__(
            f"Campaign '{campaign_name}' conflicts with campaign "
            f"'{conflicting_campaign_name}' "
            f"({conflicting_window.start.isoformat()} - {conflicting_window.end.isoformat()}) "
            f"on TV '{tv_name or tv_id}'. Adjust the windows or pick another TV."
        )

    def to_payload(self) -> dict:
        return {
            "detail": str(self),
            "conflicting_campaign": {
                "id": self.conflicting_campaign_id,
                "name": self.conflicting_campaign_name,
                "start": self.conflicting_window.start.isoformat(),
                "end": self.conflicting_window.end.isoformat(),
            },
            "tv_id": self.tv_id,
        }


class MediaPlaybackError(SignageError):
    """
    An ad failed to load or render on the display side.
    Recovered locally by the display session, never sent to the admin API.
    """

    def __init__(self, ad_id: str, reason: str) -> None:
        self.ad_id = ad_id
        self.reason = reason
        super().__init__(f"ad '{ad_id}' failed to play: {reason}")
