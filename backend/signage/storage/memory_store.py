# backend/signage/storage/memory_store.py

import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Tuple

from signage.models.advertisement import AdMedia
from signage.models.campaign import Campaign
from signage.models.models import TV
from signage.models.placement_models import Assignment, AssignmentResult

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Store that lives in process RAM.
    Used by the tests and for local runs without PostgreSQL.

    Same contract as PostgresStore: callers always get copies, so editing a
    returned model never changes stored state behind the services' back.
    The (campaign_id, tv_id) dict key plays the role of the primary key on
    campaign_tvs.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._tvs: Dict[str, TV] = {}
        self._campaigns: Dict[str, Campaign] = {}
        self._assignments: Dict[Tuple[str, str], Assignment] = {}

    # -----------------------------
    #  TVs
    # -----------------------------
    def list_tvs(self) -> List[TV]:
        with self._lock:
            return [tv.model_copy() for tv in self._tvs.values()]

    def get_tv(self, tv_id: str) -> Optional[TV]:
        with self._lock:
            tv = self._tvs.get(tv_id)
            return tv.model_copy() if tv else None

    def create_tv(self, tv: TV) -> TV:
        with self._lock:
            self._tvs[tv.id] = tv.model_copy()
            return tv.model_copy()

    def update_tv(self, tv: TV) -> Optional[TV]:
        with self._lock:
            if tv.id not in self._tvs:
                return None
            self._tvs[tv.id] = tv.model_copy()
            return tv.model_copy()

    def delete_tv(self, tv_id: str) -> bool:
        with self._lock:
            if self._tvs.pop(tv_id, None) is None:
                return False
            dropped = [key for key in self._assignments if key[1] == tv_id]
            for key in dropped:
                del self._assignments[key]
            logger.debug("TV %s deleted with %d assignments", tv_id, len(dropped))
            return True

    # -----------------------------
    #  Campaigns
    # -----------------------------
    def _hydrate(self, campaign: Campaign) -> Campaign:
        copy = campaign.model_copy(deep=True)
        copy.assigned_tv_ids = sorted(
            tv_id for (campaign_id, tv_id) in self._assignments if campaign_id == campaign.id
        )
        return copy

    def list_all_campaigns(self) -> List[Campaign]:
        with self._lock:
            return [self._hydrate(c) for c in self._campaigns.values()]

    def list_campaigns_assigned_to(self, tv_id: str) -> List[Campaign]:
        with self._lock:
            ids = [campaign_id for (campaign_id, assigned_tv) in self._assignments if assigned_tv == tv_id]
            return [self._hydrate(self._campaigns[campaign_id]) for campaign_id in ids]

    def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        with self._lock:
            campaign = self._campaigns.get(campaign_id)
            return self._hydrate(campaign) if campaign else None

    def create_campaign(self, campaign: Campaign) -> Campaign:
        with self._lock:
            stored = campaign.model_copy(deep=True)
            stored.assigned_tv_ids = []
            self._campaigns[campaign.id] = stored
            return self._hydrate(stored)

    def update_campaign(self, campaign: Campaign) -> Optional[Campaign]:
        """Updates name and window only; ads and assignments have their own calls."""
        with self._lock:
            stored = self._campaigns.get(campaign.id)
            if stored is None:
                return None
            stored.name = campaign.name
            stored.start = campaign.start
            stored.end = campaign.end
            return self._hydrate(stored)

    def delete_campaign(self, campaign_id: str) -> bool:
        with self._lock:
            if self._campaigns.pop(campaign_id, None) is None:
                return False
            for key in [k for k in self._assignments if k[0] == campaign_id]:
                del self._assignments[key]
            return True

    # -----------------------------
    #  Ads
    # -----------------------------
    def add_ad(self, campaign_id: str, ad: AdMedia) -> Optional[AdMedia]:
        with self._lock:
            campaign = self._campaigns.get(campaign_id)
            if campaign is None:
                return None
            campaign.ads.append(ad.model_copy())
            return ad.model_copy()

    def update_ad(self, campaign_id: str, ad: AdMedia) -> Optional[AdMedia]:
        with self._lock:
            campaign = self._campaigns.get(campaign_id)
            if campaign is None:
                return None
            for i, existing in enumerate(campaign.ads):
                if existing.id == ad.id:
                    campaign.ads[i] = ad.model_copy()
                    return ad.model_copy()
            return None

    def delete_ad(self, campaign_id: str, ad_id: str) -> bool:
        with self._lock:
            campaign = self._campaigns.get(campaign_id)
            if campaign is None:
                return False
            before = len(campaign.ads)
            campaign.ads = [a for a in campaign.ads if a.id != ad_id]
            return len(campaign.ads) < before

    # -----------------------------
    #  Assignments
    # -----------------------------
    def create_assignment(self, campaign_id: str, tv_id: str) -> AssignmentResult:
        with self._lock:
            key = (campaign_id, tv_id)
            if key in self._assignments:
                return AssignmentResult.ALREADY_EXISTS
            if campaign_id not in self._campaigns or tv_id not in self._tvs:
                # foreign key violation in the relational store
                raise KeyError(key)
            self._assignments[key] = Assignment(
                campaign_id=campaign_id,
                tv_id=tv_id,
                assigned_at=datetime.now(timezone.utc),
            )
            return AssignmentResult.CREATED

    def delete_assignment(self, campaign_id: str, tv_id: str) -> bool:
        with self._lock:
            return self._assignments.pop((campaign_id, tv_id), None) is not None

    def list_assignments(self, tv_id: Optional[str] = None) -> List[Assignment]:
        with self._lock:
            return [
                a.model_copy()
                for a in self._assignments.values()
                if tv_id is None or a.tv_id == tv_id
            ]
