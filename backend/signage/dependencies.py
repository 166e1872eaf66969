# backend/signage/dependencies.py

import logging

from fastapi import Depends, HTTPException, Request

from signage import config
from signage.scheduling.active_ad_resolver import ActiveAdResolver
from signage.security.session import SessionPayload, verify_token
from signage.services.assignment_service import AssignmentService
from signage.services.campaign_service import CampaignService
from signage.services.tv_service import TVService
from signage.storage.base import SignageStore
from signage.storage.memory_store import InMemoryStore
from signage.storage.postgres_store import PostgresStore

logger = logging.getLogger(__name__)

# SINGLETON (one store for the whole backend)
_STORE: SignageStore | None = None


def build_store(backend: str | None = None) -> SignageStore:
    backend = (backend or config.STORE_BACKEND).lower()
    if backend == "postgres":
        return PostgresStore()
    if backend == "memory":
        return InMemoryStore()
    raise ValueError(f"Unsupported SIGNAGE_STORE: {backend}")


def get_store() -> SignageStore:
    global _STORE
    if _STORE is None:
        _STORE = build_store()
        logger.info("using %s", type(_STORE).__name__)
    return _STORE


def get_tv_service(store: SignageStore = Depends(get_store)) -> TVService:
    return TVService(store)


def get_campaign_service(store: SignageStore = Depends(get_store)) -> CampaignService:
    return CampaignService(store)


def get_assignment_service(store: SignageStore = Depends(get_store)) -> AssignmentService:
    return AssignmentService(store)


def get_resolver(store: SignageStore = Depends(get_store)) -> ActiveAdResolver:
    return ActiveAdResolver(store)


def require_admin(request: Request) -> SessionPayload:
    """Admin routes only need to know that the caller is logged in."""
    session = verify_token(request.cookies.get(config.SESSION_COOKIE_NAME))
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session
