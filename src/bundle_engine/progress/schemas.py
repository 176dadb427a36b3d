"""Pydantic schemas for progress endpoints."""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from bundle_engine.entitlements.schemas import BundleRecord
from bundle_engine.subscriptions.schemas import SubscriptionRecord


class DeliveryRecord(BaseModel):
    """A product fulfillment. Status is kept free-form; only consumed ones count."""

    id: Optional[str] = None
    client_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: Any = 1
    status: str = "pending"

    model_config = {"from_attributes": True, "coerce_numbers_to_str": True}


class ProgressRequest(BaseModel):
    subscription: SubscriptionRecord
    bundle: Optional[BundleRecord] = None
    deliveries: list[DeliveryRecord] = Field(default_factory=list)


class ProgressResponse(BaseModel):
    subscription_id: Optional[str] = None
    bundle_draft_id: Optional[str] = None
    bundle_title: str
    status: str
    sessions_used: int
    sessions_included: int
    sessions_remaining: int
    sessions_progress_pct: int = Field(..., ge=0, le=100)
    products_used: Union[int, float]
    products_included: int
    products_remaining: Union[int, float]
    products_progress_pct: int = Field(..., ge=0, le=100)
    alerts: list[str] = Field(default_factory=list)


class OverviewRequest(BaseModel):
    subscriptions: list[SubscriptionRecord]
    bundles: list[BundleRecord] = Field(default_factory=list)
    deliveries: list[DeliveryRecord] = Field(default_factory=list)


class ClientOverview(BaseModel):
    client_id: str
    active_bundles: int
    current_bundle: Optional[ProgressResponse] = None


class SessionStatsRequest(BaseModel):
    subscription: SubscriptionRecord


class SessionStatsResponse(BaseModel):
    included: int
    used: int
    remaining: int
