"""Pydantic schemas for subscriptions and training sessions."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from bundle_engine.entitlements.schemas import BundleRecord


class SubscriptionRecord(BaseModel):
    """A client's enrollment in a bundle.

    Session counters are kept loose: stored rows may hold nulls or strings,
    and the progress calculator coerces them itself.
    """

    id: Optional[str] = None
    client_id: Optional[str] = None
    trainer_id: Optional[str] = None
    bundle_draft_id: Optional[str] = None
    status: str = Field(default="active", pattern="^(active|paused|cancelled|expired)$")
    subscription_type: str = Field(default="monthly", pattern="^(weekly|monthly|yearly)$")
    price: Optional[str] = None
    sessions_included: Any = 0
    sessions_used: Any = 0
    start_date: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "coerce_numbers_to_str": True}


class TrainingSessionRecord(BaseModel):
    id: Optional[str] = None
    client_id: Optional[str] = None
    trainer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    session_date: Optional[datetime] = None
    duration_minutes: int = Field(default=60, ge=1)
    session_type: str = Field(default="training", pattern="^(training|check_in|call|plan_review)$")
    status: str = Field(default="scheduled", pattern="^(scheduled|completed|cancelled|no_show)$")
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "coerce_numbers_to_str": True}


# ── Requests ──

class SubscriptionStartRequest(BaseModel):
    client_id: str
    trainer_id: str
    bundle: BundleRecord
    price: str = Field(..., pattern=r"^\d+(\.\d{1,2})?$")
    sessions_included: Optional[int] = Field(default=None, ge=0)
    subscription_type: Optional[str] = Field(default=None, pattern="^(weekly|monthly|yearly)$")

    model_config = {"coerce_numbers_to_str": True}


class SubscriptionTransitionRequest(BaseModel):
    subscription: SubscriptionRecord


class SessionCompleteRequest(BaseModel):
    session: TrainingSessionRecord
    subscription: Optional[SubscriptionRecord] = None


class SessionCompleteResponse(BaseModel):
    session: TrainingSessionRecord
    subscription: Optional[SubscriptionRecord] = None
