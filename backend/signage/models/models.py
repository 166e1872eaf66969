# backend/signage/models/models.py
from pydantic import BaseModel


class TV(BaseModel):
    """
    One physical display.
    Owns no campaigns directly; the link lives in the assignments.
    unique_url is the path the display polls (/tv/<id>).
    """

    id: str
    name: str
    description: str | None = None
    unique_url: str | None = None
