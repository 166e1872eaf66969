# backend/signage/scheduling/active_ad_resolver.py

"""
Which ads may a TV show right now?

Pure logic: (campaigns, tv_id, now) -> ordered list of ActiveAd.
Campaign and ad windows are checked as closed windows here, unlike the
strict overlap used by the conflict checker.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List

from signage.errors import NotFound
from signage.models.advertisement import ActiveAd
from signage.models.campaign import Campaign
from signage.models.interval import as_utc, clamp_to, covers
from signage.storage.base import SignageStore

logger = logging.getLogger(__name__)


def resolve_active_ads(
    campaigns: Iterable[Campaign],
    tv_id: str,
    now: datetime,
) -> List[ActiveAd]:
    """
    Steps:
    1) keep campaigns assigned to tv_id
    2) keep those whose window contains now (inclusive both ends)
    3) for every ad, clamp its own window (or the campaign window) to the
       campaign window and test now against the result
    4) tag with the campaign name
    5) sort by ad name, stable

    An empty list is a normal answer ("nothing to show").
    """
    now = as_utc(now)
    active: List[ActiveAd] = []

    for campaign in campaigns:
        if tv_id not in campaign.assigned_tv_ids:
            continue

        campaign_window = campaign.window
        if not covers(campaign_window, now):
            continue

        for ad in campaign.ads:
            effective = clamp_to(ad.window or campaign_window, campaign_window)
            if effective is None:
                # ad window lies outside the campaign: never active
                continue
            if covers(effective, now):
                active.append(ActiveAd(ad=ad, campaign_name=campaign.name))

    active.sort(key=lambda item: item.ad.name)
    return active


class ActiveAdResolver:
    """
    Store-backed resolver called on every display poll.
    Re-reads the store on every call, no caching.
    """

    def __init__(self, store: SignageStore) -> None:
        self._store = store

    def resolve(self, tv_id: str, now: datetime | None = None) -> List[ActiveAd]:
        if self._store.get_tv(tv_id) is None:
            raise NotFound("TV", tv_id)

        now = now or datetime.now(timezone.utc)
        ads = resolve_active_ads(self._store.list_campaigns_assigned_to(tv_id), tv_id, now)
        logger.debug("TV %s: %d active ads at %s", tv_id, len(ads), now.isoformat())
        return ads
