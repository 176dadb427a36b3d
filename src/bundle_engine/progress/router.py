"""Progress API router."""

from fastapi import APIRouter

from bundle_engine.progress.schemas import (
    ClientOverview,
    OverviewRequest,
    ProgressRequest,
    ProgressResponse,
    SessionStatsRequest,
    SessionStatsResponse,
)

router = APIRouter()


def _get_service():
    from bundle_engine.deps import get_progress_service
    return get_progress_service()


@router.post("/progress", response_model=ProgressResponse)
async def compute_progress(body: ProgressRequest):
    svc = _get_service()
    snapshot = svc.snapshot(body.subscription, body.bundle, body.deliveries)
    return snapshot.to_dict()


@router.post("/progress/overview", response_model=list[ClientOverview])
async def client_overview(body: OverviewRequest):
    svc = _get_service()
    return svc.client_overview(body.subscriptions, body.bundles, body.deliveries)


@router.post("/progress/session-stats", response_model=SessionStatsResponse)
async def get_session_stats(body: SessionStatsRequest):
    svc = _get_service()
    return svc.session_stats(body.subscription)
