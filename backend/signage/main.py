# backend/signage/main.py

import hmac
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from signage import config
from signage.dependencies import (
    get_assignment_service,
    get_campaign_service,
    get_resolver,
    get_store,
    get_tv_service,
    require_admin,
)
from signage.errors import NotFound, SchedulingConflict, ValidationError

# Models
from signage.models.advertisement import AdMedia
from signage.models.campaign import Campaign
from signage.models.models import TV
from signage.models.placement_models import Assignment, AssignmentResult

# Request / response schemas
from signage.schemas.schemas import (
    ActiveAdsResponse,
    AdSchema,
    AssignmentSyncSchema,
    CampaignSchema,
    LoginSchema,
    TVSchema,
)
from signage.scheduling.active_ad_resolver import ActiveAdResolver
from signage.security.session import SessionPayload, issue_token
from signage.services.assignment_service import AssignmentService
from signage.services.campaign_service import CampaignService
from signage.services.tv_service import TVService
from signage.storage.postgres_store import PostgresStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.configure_logging()
    store = get_store()
    if isinstance(store, PostgresStore):
        store.init_schema()
    yield


app = FastAPI(title="TV Signage Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------
#  ERRORS -> HTTP
# -----------------------------
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(SchedulingConflict)
async def scheduling_conflict_handler(request: Request, exc: SchedulingConflict):
    return JSONResponse(status_code=409, content=exc.to_payload())


@app.api_route("/health", methods=["GET", "HEAD"])
def health():
    return {"status": "ok"}


@app.get("/")
def root():
    return {"message": "TV signage backend is running"}


# -----------------------------
#  AUTH
# -----------------------------
@app.post("/auth/login")
def login(body: LoginSchema, response: Response):
    user_ok = hmac.compare_digest(body.username.encode("utf-8"), config.ADMIN_USERNAME.encode("utf-8"))
    password_ok = hmac.compare_digest(body.password.encode("utf-8"), config.ADMIN_PASSWORD.encode("utf-8"))
    if not (user_ok and password_ok):
        logger.warning("failed login for %r", body.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=issue_token(body.username),
        max_age=config.SESSION_TTL_SECONDS,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return {"username": body.username}


@app.post("/auth/logout")
def logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME, path="/")
    return {"status": "logged_out"}


@app.get("/auth/me")
def me(session: SessionPayload = Depends(require_admin)):
    return {"username": session.username, "expires_at": session.expires_at}


# -----------------------------
#  DISPLAY (public, polled by the TVs)
# -----------------------------
@app.get("/display/{tv_id}/active-ads", response_model=ActiveAdsResponse)
def display_active_ads(
    tv_id: str,
    at: datetime | None = Query(None, description="Resolve for this instant instead of now"),
    tv_service: TVService = Depends(get_tv_service),
    resolver: ActiveAdResolver = Depends(get_resolver),
):
    tv = tv_service.get(tv_id)
    now = at or datetime.now(timezone.utc)
    active = resolver.resolve(tv.id, now)
    return ActiveAdsResponse(
        tv=tv,
        ads=[item.to_display() for item in active],
        resolved_at=now,
        refresh_seconds=config.RESOLVE_INTERVAL_SECONDS,
    )


# Everything below needs a logged-in admin
admin = APIRouter(dependencies=[Depends(require_admin)])


# -----------------------------
#  TVs
# -----------------------------
@admin.get("/tvs", response_model=list[TV])
def list_tvs(tv_service: TVService = Depends(get_tv_service)):
    return tv_service.list_all()


@admin.post("/tvs", response_model=TV, status_code=201)
def create_tv(body: TVSchema, tv_service: TVService = Depends(get_tv_service)):
    return tv_service.create(body.name, body.description)


@admin.get("/tvs/{tv_id}", response_model=TV)
def get_tv(tv_id: str, tv_service: TVService = Depends(get_tv_service)):
    return tv_service.get(tv_id)


@admin.put("/tvs/{tv_id}", response_model=TV)
def update_tv(tv_id: str, body: TVSchema, tv_service: TVService = Depends(get_tv_service)):
    return tv_service.update(tv_id, body.name, body.description)


@admin.delete("/tvs/{tv_id}", status_code=204)
def delete_tv(tv_id: str, tv_service: TVService = Depends(get_tv_service)):
    tv_service.delete(tv_id)
    return Response(status_code=204)


@admin.get("/tvs/{tv_id}/campaigns", response_model=list[Campaign])
def list_campaigns_for_tv(tv_id: str, assignments: AssignmentService = Depends(get_assignment_service)):
    return assignments.campaigns_for_tv(tv_id)


# -----------------------------
#  CAMPAIGNS
# -----------------------------
@admin.get("/campaigns", response_model=list[Campaign])
def list_campaigns(campaigns: CampaignService = Depends(get_campaign_service)):
    return campaigns.list_all()


@admin.post("/campaigns", response_model=Campaign, status_code=201)
def create_campaign(body: CampaignSchema, campaigns: CampaignService = Depends(get_campaign_service)):
    return campaigns.create(body.name, body.start, body.end)


@admin.get("/campaigns/{campaign_id}", response_model=Campaign)
def get_campaign(campaign_id: str, campaigns: CampaignService = Depends(get_campaign_service)):
    return campaigns.get(campaign_id)


@admin.put("/campaigns/{campaign_id}", response_model=Campaign)
def update_campaign(
    campaign_id: str,
    body: CampaignSchema,
    campaigns: CampaignService = Depends(get_campaign_service),
):
    return campaigns.update(campaign_id, body.name, body.start, body.end)


@admin.delete("/campaigns/{campaign_id}", status_code=204)
def delete_campaign(campaign_id: str, campaigns: CampaignService = Depends(get_campaign_service)):
    campaigns.delete(campaign_id)
    return Response(status_code=204)


# -----------------------------
#  ADS
# -----------------------------
@admin.post("/campaigns/{campaign_id}/ads", response_model=AdMedia, status_code=201)
def add_ad(campaign_id: str, body: AdSchema, campaigns: CampaignService = Depends(get_campaign_service)):
    return campaigns.add_ad(campaign_id, body)


@admin.put("/campaigns/{campaign_id}/ads/{ad_id}", response_model=AdMedia)
def update_ad(
    campaign_id: str,
    ad_id: str,
    body: AdSchema,
    campaigns: CampaignService = Depends(get_campaign_service),
):
    return campaigns.update_ad(campaign_id, ad_id, body)


@admin.delete("/campaigns/{campaign_id}/ads/{ad_id}", status_code=204)
def delete_ad(campaign_id: str, ad_id: str, campaigns: CampaignService = Depends(get_campaign_service)):
    campaigns.delete_ad(campaign_id, ad_id)
    return Response(status_code=204)


# -----------------------------
#  ASSIGNMENTS
# -----------------------------
@admin.get("/assignments", response_model=list[Assignment])
def list_assignments(
    tv_id: str | None = Query(None),
    assignments: AssignmentService = Depends(get_assignment_service),
):
    return assignments.list_assignments(tv_id)


@admin.post("/campaigns/{campaign_id}/tvs/{tv_id}")
def assign_campaign(
    campaign_id: str,
    tv_id: str,
    response: Response,
    assignments: AssignmentService = Depends(get_assignment_service),
):
    result = assignments.assign(campaign_id, tv_id)
    response.status_code = 201 if result == AssignmentResult.CREATED else 200
    return {"campaign_id": campaign_id, "tv_id": tv_id, "status": result.value}


@admin.delete("/campaigns/{campaign_id}/tvs/{tv_id}", status_code=204)
def unassign_campaign(
    campaign_id: str,
    tv_id: str,
    assignments: AssignmentService = Depends(get_assignment_service),
):
    assignments.unassign(campaign_id, tv_id)
    return Response(status_code=204)


@admin.put("/campaigns/{campaign_id}/tvs", response_model=Campaign)
def sync_campaign_tvs(
    campaign_id: str,
    body: AssignmentSyncSchema,
    assignments: AssignmentService = Depends(get_assignment_service),
):
    return assignments.sync(campaign_id, body.tv_ids)


app.include_router(admin)
