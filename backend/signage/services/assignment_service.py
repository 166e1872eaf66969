# backend/signage/services/assignment_service.py

import logging
from typing import Iterable, List

from signage.errors import NotFound, SchedulingConflict
from signage.models.campaign import Campaign
from signage.models.interval import Interval
from signage.models.placement_models import Assignment, AssignmentResult
from signage.scheduling.conflict_checker import check_conflict
from signage.storage.base import SignageStore

logger = logging.getLogger(__name__)


def ensure_no_conflict(store: SignageStore, campaign: Campaign, window: Interval, tv_id: str) -> None:
    """
    Raises SchedulingConflict if another campaign on tv_id overlaps `window`.
    `window` is passed separately so that an edited window is checked before
    it is written.
    """
    conflicting = check_conflict(store, tv_id, campaign.id, window)
    if conflicting is None:
        return

    tv = store.get_tv(tv_id)
    logger.info(
        "assignment of campaign %s to TV %s rejected: overlaps campaign %s",
        campaign.id,
        tv_id,
        conflicting.id,
    )
    raise SchedulingConflict(
        campaign_name=campaign.name,
        conflicting_campaign_id=conflicting.id,
        conflicting_campaign_name=conflicting.name,
        conflicting_window=conflicting.window,
        tv_id=tv_id,
        tv_name=tv.name if tv else None,
    )


class AssignmentService:
    """
    Campaign -> TV edges.

    Every write is preceded by the conflict check; a failed check leaves
    the assignments untouched. The storage layer's uniqueness on
    (campaign_id, tv_id) covers requests that race past the check.
    """

    def __init__(self, store: SignageStore) -> None:
        self.store = store

    def _campaign(self, campaign_id: str) -> Campaign:
        campaign = self.store.get_campaign(campaign_id)
        if campaign is None:
            raise NotFound("Campaign", campaign_id)
        return campaign

    def _require_tv(self, tv_id: str) -> None:
        if self.store.get_tv(tv_id) is None:
            raise NotFound("TV", tv_id)

    def assign(self, campaign_id: str, tv_id: str) -> AssignmentResult:
        # fresh read: the window may have been edited since the last assignment
        campaign = self._campaign(campaign_id)
        self._require_tv(tv_id)
        ensure_no_conflict(self.store, campaign, campaign.window, tv_id)

        result = self.store.create_assignment(campaign.id, tv_id)
        if result == AssignmentResult.CREATED:
            logger.info("campaign %s assigned to TV %s", campaign.id, tv_id)
        else:
            logger.info("campaign %s was already assigned to TV %s", campaign.id, tv_id)
        return result

    def unassign(self, campaign_id: str, tv_id: str) -> None:
        if not self.store.delete_assignment(campaign_id, tv_id):
            raise NotFound("Assignment", f"{campaign_id}->{tv_id}")
        logger.info("campaign %s unassigned from TV %s", campaign_id, tv_id)

    def sync(self, campaign_id: str, tv_ids: Iterable[str]) -> Campaign:
        """
        Makes the campaign's TV set equal to tv_ids.

        All newly added TVs are checked first; one conflict aborts the
        whole request before anything is written.
        """
        campaign = self._campaign(campaign_id)
        wanted = list(dict.fromkeys(tv_ids))
        current = set(campaign.assigned_tv_ids)

        to_add = [tv_id for tv_id in wanted if tv_id not in current]
        to_remove = [tv_id for tv_id in campaign.assigned_tv_ids if tv_id not in set(wanted)]

        for tv_id in to_add:
            self._require_tv(tv_id)
        for tv_id in to_add:
            ensure_no_conflict(self.store, campaign, campaign.window, tv_id)

        for tv_id in to_add:
            self.store.create_assignment(campaign.id, tv_id)
        for tv_id in to_remove:
            self.store.delete_assignment(campaign.id, tv_id)

        if to_add or to_remove:
            logger.info(
                "campaign %s TVs synced: +%s -%s",
                campaign.id,
                ",".join(to_add) or "none",
                ",".join(to_remove) or "none",
            )
        return self._campaign(campaign.id)

    def campaigns_for_tv(self, tv_id: str) -> List[Campaign]:
        self._require_tv(tv_id)
        return sorted(self.store.list_campaigns_assigned_to(tv_id), key=lambda c: c.start)

    def list_assignments(self, tv_id: str | None = None) -> List[Assignment]:
        return self.store.list_assignments(tv_id)
