# backend/signage/services/campaign_service.py
import logging
from datetime import datetime
from typing import List

from signage.errors import NotFound, ValidationError
from signage.models.advertisement import AdKind, AdMedia
from signage.models.campaign import Campaign
from signage.models.interval import Interval, contains
from signage.schemas.schemas import AdSchema
from signage.services.assignment_service import ensure_no_conflict
from signage.storage.base import SignageStore, new_id

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3


def build_ad(ad_id: str, data: AdSchema, campaign_window: Interval) -> AdMedia:
    """
    Turns a request body into a stored ad, enforcing:
    - image / gif need display_seconds > 0
    - an own window needs both ends, start < end, and must sit inside the
      campaign window
    """
    name = data.name.strip()
    if not name:
        raise ValidationError("ad name is required")

    if data.kind in (AdKind.IMAGE, AdKind.GIF):
        if data.display_seconds is None or data.display_seconds <= 0:
            raise ValidationError(f"display_seconds is required for {data.kind.value} ads")

    if (data.start is None) != (data.end is None):
        raise ValidationError("an ad window needs both start and end, or neither")

    ad = AdMedia(
        id=ad_id,
        name=name,
        kind=data.kind,
        media_url=data.media_url,
        file_name=data.file_name,
        display_seconds=data.display_seconds,
        start=data.start,
        end=data.end,
    )
    window = ad.window  # raises ValidationError when start >= end
    if window is not None and not contains(campaign_window, window):
        raise ValidationError(f"ad '{name}' window must fall inside the campaign window")
    return ad


class CampaignService:
    def __init__(self, store: SignageStore) -> None:
        self.store = store

    def list_all(self) -> List[Campaign]:
        return sorted(self.store.list_all_campaigns(), key=lambda c: (c.start, c.id))

    def get(self, campaign_id: str) -> Campaign:
        campaign = self.store.get_campaign(campaign_id)
        if campaign is None:
            raise NotFound("Campaign", campaign_id)
        return campaign

    @staticmethod
    def _check(name: str, start: datetime, end: datetime) -> tuple[str, Interval]:
        name = (name or "").strip()
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError(f"campaign name must have at least {MIN_NAME_LENGTH} characters")
        return name, Interval(start, end)

    def create(self, name: str, start: datetime, end: datetime) -> Campaign:
        name, window = self._check(name, start, end)
        campaign = Campaign(id=new_id("campaign"), name=name, start=window.start, end=window.end)
        created = self.store.create_campaign(campaign)
        logger.info("campaign %s (%s) created", created.id, created.name)
        return created

    def update(self, campaign_id: str, name: str, start: datetime, end: datetime) -> Campaign:
        """
        Renames and/or moves the campaign window.

        A new window is re-validated before anything is written:
        every ad window must still fit inside it and it must not overlap
        another campaign on any TV this campaign is assigned to.
        """
        existing = self.get(campaign_id)
        name, window = self._check(name, start, end)

        for ad in existing.ads:
            if ad.window is not None and not contains(window, ad.window):
                raise ValidationError(
                    f"ad '{ad.name}' window falls outside the new campaign window"
                )

        candidate = existing.model_copy(update={"name": name, "start": window.start, "end": window.end})
        for tv_id in sorted(existing.assigned_tv_ids):
            ensure_no_conflict(self.store, candidate, window, tv_id)

        updated = self.store.update_campaign(candidate)
        if updated is None:
            raise NotFound("Campaign", campaign_id)
        return updated

    def delete(self, campaign_id: str) -> None:
        """Deletes the campaign with all its ads and TV assignments."""
        if not self.store.delete_campaign(campaign_id):
            raise NotFound("Campaign", campaign_id)
        logger.info("campaign %s deleted", campaign_id)

    # -----------------------------
    #  Ads
    # -----------------------------
    def add_ad(self, campaign_id: str, data: AdSchema) -> AdMedia:
        campaign = self.get(campaign_id)
        ad = build_ad(new_id("ad"), data, campaign.window)
        stored = self.store.add_ad(campaign.id, ad)
        if stored is None:
            raise NotFound("Campaign", campaign_id)
        logger.info("ad %s (%s) added to campaign %s", stored.id, stored.kind.value, campaign.id)
        return stored

    def update_ad(self, campaign_id: str, ad_id: str, data: AdSchema) -> AdMedia:
        campaign = self.get(campaign_id)
        if not any(a.id == ad_id for a in campaign.ads):
            raise NotFound("Ad", ad_id)
        ad = build_ad(ad_id, data, campaign.window)
        stored = self.store.update_ad(campaign.id, ad)
        if stored is None:
            raise NotFound("Ad", ad_id)
        return stored

    def delete_ad(self, campaign_id: str, ad_id: str) -> None:
        if not self.store.delete_ad(campaign_id, ad_id):
            raise NotFound("Ad", ad_id)
