# backend/signage/services/tv_service.py
import logging
from typing import List

from signage.errors import NotFound, ValidationError
from signage.models.models import TV
from signage.storage.base import SignageStore, new_id

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3


def _check_name(name: str) -> str:
    name = (name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError(f"TV name must have at least {MIN_NAME_LENGTH} characters")
    return name


class TVService:
    def __init__(self, store: SignageStore) -> None:
        self.store = store

    def list_all(self) -> List[TV]:
        return self.store.list_tvs()

    def get(self, tv_id: str) -> TV:
        tv = self.store.get_tv(tv_id)
        if tv is None:
            raise NotFound("TV", tv_id)
        return tv

    def create(self, name: str, description: str | None = None) -> TV:
        tv_id = new_id("tv")
        tv = TV(
            id=tv_id,
            name=_check_name(name),
            description=description,
            unique_url=f"/tv/{tv_id}",
        )
        created = self.store.create_tv(tv)
        logger.info("TV %s (%s) created", created.id, created.name)
        return created

    def update(self, tv_id: str, name: str, description: str | None = None) -> TV:
        existing = self.get(tv_id)
        updated = self.store.update_tv(
            existing.model_copy(update={"name": _check_name(name), "description": description})
        )
        if updated is None:
            raise NotFound("TV", tv_id)
        return updated

    def delete(self, tv_id: str) -> None:
        """Removes the TV and every campaign assignment pointing at it."""
        if not self.store.delete_tv(tv_id):
            raise NotFound("TV", tv_id)
        logger.info("TV %s deleted", tv_id)
