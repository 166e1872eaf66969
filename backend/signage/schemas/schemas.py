# backend/signage/schemas/schemas.py
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from signage.models.advertisement import AdKind, DisplayAd
from signage.models.models import TV


class TVSchema(BaseModel):
    name: str = Field(..., min_length=3)
    description: str | None = None


class CampaignSchema(BaseModel):
    name: str = Field(..., min_length=3)
    start: datetime
    end: datetime


class AdSchema(BaseModel):
    """
    Body for creating / replacing an ad.
    display_seconds is checked against kind in the service, not here.
    """
    name: str = Field(..., min_length=1)
    kind: AdKind
    media_url: str = Field(..., min_length=1)
    file_name: str | None = None
    display_seconds: int | None = Field(None, gt=0)
    start: datetime | None = None
    end: datetime | None = None


class AssignmentSyncSchema(BaseModel):
    tv_ids: List[str]


class LoginSchema(BaseModel):
    username: str
    password: str


class ActiveAdsResponse(BaseModel):
    tv: TV
    ads: List[DisplayAd]
    resolved_at: datetime
    refresh_seconds: int
