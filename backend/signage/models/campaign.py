# backend/signage/models/campaign.py
from datetime import datetime
from typing import List

from pydantic import BaseModel

from signage.models.advertisement import AdMedia
from signage.models.interval import Interval


class Campaign(BaseModel):
    """
    A named bundle of ads with its own active window.

    - ads: owned by the campaign, deleted together with it
    - assigned_tv_ids: derived from the campaign_tvs join table,
      no ordering semantics
    """

    id: str
    name: str
    start: datetime
    end: datetime
    ads: List[AdMedia] = []
    assigned_tv_ids: List[str] = []

    @property
    def window(self) -> Interval:
        return Interval(self.start, self.end)
