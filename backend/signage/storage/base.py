# backend/signage/storage/base.py

import random
import string
import time
from typing import List, Optional, Protocol, runtime_checkable

from signage.models.advertisement import AdMedia
from signage.models.campaign import Campaign
from signage.models.models import TV
from signage.models.placement_models import Assignment, AssignmentResult

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_id(prefix: str) -> str:
    """e.g. campaign-1718000000000-k3x9a"""
    suffix = "".join(random.choices(_ID_ALPHABET, k=5))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


@runtime_checkable
class SignageStore(Protocol):
    """
    Persistence contract used by the services and the scheduling core.

    Every call reads/writes current state; nothing is cached in process.
    Lookups return None / False for missing rows instead of raising, the
    services turn that into NotFound.
    """

    # TVs
    def list_tvs(self) -> List[TV]: ...

    def get_tv(self, tv_id: str) -> Optional[TV]: ...

    def create_tv(self, tv: TV) -> TV: ...

    def update_tv(self, tv: TV) -> Optional[TV]: ...

    def delete_tv(self, tv_id: str) -> bool: ...

    # Campaigns
    def list_all_campaigns(self) -> List[Campaign]: ...

    def list_campaigns_assigned_to(self, tv_id: str) -> List[Campaign]: ...

    def get_campaign(self, campaign_id: str) -> Optional[Campaign]: ...

    def create_campaign(self, campaign: Campaign) -> Campaign: ...

    def update_campaign(self, campaign: Campaign) -> Optional[Campaign]: ...

    def delete_campaign(self, campaign_id: str) -> bool: ...

    # Ads
    def add_ad(self, campaign_id: str, ad: AdMedia) -> Optional[AdMedia]: ...

    def update_ad(self, campaign_id: str, ad: AdMedia) -> Optional[AdMedia]: ...

    def delete_ad(self, campaign_id: str, ad_id: str) -> bool: ...

    # Assignments
    def create_assignment(self, campaign_id: str, tv_id: str) -> AssignmentResult: ...

    def delete_assignment(self, campaign_id: str, tv_id: str) -> bool: ...

    def list_assignments(self, tv_id: Optional[str] = None) -> List[Assignment]: ...
