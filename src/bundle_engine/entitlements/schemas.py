"""Pydantic schemas for bundle definitions and parsed entitlements."""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class BundleRecord(BaseModel):
    """A trainer-authored bundle as stored; the JSON blobs are free-form."""

    id: Optional[str] = None
    title: Optional[str] = None
    cadence: str = Field(default="one_time", pattern="^(one_time|weekly|monthly)$")
    products_json: Any = None
    services_json: Any = None
    goals_json: Any = None

    model_config = {"from_attributes": True, "coerce_numbers_to_str": True}


class PlannedProductResponse(BaseModel):
    id: str
    name: str
    quantity: Union[int, float]
    product_id: Optional[str] = None


class PlannedServiceResponse(BaseModel):
    id: str
    name: str
    sessions: Union[int, float]


class BundleParseResponse(BaseModel):
    products: list[PlannedProductResponse]
    services: list[PlannedServiceResponse]
    goals: list[str]
    products_included: int
    sessions_included: int
