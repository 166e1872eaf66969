# backend/signage/models/placement_models.py

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class Assignment(BaseModel):
    """
    An active campaign -> TV edge:
    - which campaign (campaign_id)
    - on which TV (tv_id)
    - when the edge was written (assigned_at)
    """

    campaign_id: str
    tv_id: str
    assigned_at: datetime


class AssignmentResult(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
