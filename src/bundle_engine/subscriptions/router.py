"""Subscription lifecycle API router.

Records travel in the request body; the updated record is returned for the
caller to persist. ``BundleEngineError`` is mapped to 409 by the app.
"""

from fastapi import APIRouter

from bundle_engine.common.schemas import ErrorResponse
from bundle_engine.subscriptions import lifecycle
from bundle_engine.subscriptions.schemas import (
    SessionCompleteRequest,
    SessionCompleteResponse,
    SubscriptionRecord,
    SubscriptionStartRequest,
    SubscriptionTransitionRequest,
)

router = APIRouter()

_CONFLICT = {409: {"model": ErrorResponse}}


@router.post("/subscriptions/start", response_model=SubscriptionRecord, status_code=201, responses=_CONFLICT)
async def start_subscription(body: SubscriptionStartRequest):
    return lifecycle.start_subscription(
        body.client_id,
        body.trainer_id,
        body.bundle,
        body.price,
        sessions_included=body.sessions_included,
        subscription_type=body.subscription_type,
    )


@router.post("/subscriptions/pause", response_model=SubscriptionRecord, responses=_CONFLICT)
async def pause_subscription(body: SubscriptionTransitionRequest):
    return lifecycle.pause(body.subscription)


@router.post("/subscriptions/resume", response_model=SubscriptionRecord, responses=_CONFLICT)
async def resume_subscription(body: SubscriptionTransitionRequest):
    return lifecycle.resume(body.subscription)


@router.post("/subscriptions/cancel", response_model=SubscriptionRecord, responses=_CONFLICT)
async def cancel_subscription(body: SubscriptionTransitionRequest):
    return lifecycle.cancel(body.subscription)


@router.post("/sessions/complete", response_model=SessionCompleteResponse, responses=_CONFLICT)
async def complete_session(body: SessionCompleteRequest):
    session, subscription = lifecycle.complete_session(body.session, body.subscription)
    return SessionCompleteResponse(session=session, subscription=subscription)
