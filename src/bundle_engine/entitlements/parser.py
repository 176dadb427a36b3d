"""
Tolerant parsing of bundle entitlement blobs.

Bundle products, services and goals are stored as free-form JSON authored
through the trainer UI, with no shape enforcement at write time. Every
function here accepts anything and degrades to an empty list or a dropped
entry instead of raising.
"""

import json
import math
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Optional

PRODUCT_NAME_FIELDS = ("name", "title", "productName", "label")
PRODUCT_QUANTITY_FIELDS = ("quantity", "qty")
SERVICE_NAME_FIELDS = ("name", "title", "serviceName")
SERVICE_SESSION_FIELDS = ("sessions", "quantity", "count")
GOAL_NAME_FIELDS = ("name", "title")


@dataclass(frozen=True)
class PlannedProduct:
    """A product line granted by a bundle."""

    id: str
    name: str
    quantity: float
    product_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlannedService:
    """A service line granted by a bundle, counted in sessions."""

    id: str
    name: str
    sessions: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def to_number(value: Any) -> float:
    """Coerce a loosely-typed value to a float, NaN when it is not numeric."""
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float, Decimal)):
        try:
            return float(value)
        except OverflowError:
            return math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def to_list(value: Any) -> list[Any]:
    """
    Extract a list from a stored JSON blob.

    Accepts a list, a JSON string encoding a list, or a mapping with an
    ``items`` list. Anything else yields an empty list.
    """
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, RecursionError):
            return []
        return parsed if isinstance(parsed, list) else []
    if isinstance(value, dict):
        items = value.get("items")
        return items if isinstance(items, list) else []
    return []


def _is_set(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (int, float, Decimal)):
        return value == value and value != 0
    if isinstance(value, str):
        return value != ""
    return True


def _first_name(entry: dict[str, Any], fields: tuple[str, ...]) -> str:
    """Trimmed value of the first field that is set; blank after trimming means no name."""
    for field in fields:
        raw = entry.get(field)
        if _is_set(raw):
            return str(raw).strip()
    return ""


def _first_present(entry: dict[str, Any], fields: tuple[str, ...]) -> Any:
    for field in fields:
        if entry.get(field) is not None:
            return entry[field]
    return None


def _positive_or_one(raw: Any) -> float:
    if raw is None:
        return 1
    number = to_number(raw)
    if not math.isfinite(number) or number <= 0:
        return 1
    return int(number) if number.is_integer() else number


def parse_bundle_products(products_json: Any) -> list[PlannedProduct]:
    """Parse a bundle's products blob into named, quantified product lines."""
    products = []
    for index, entry in enumerate(to_list(products_json)):
        if not isinstance(entry, dict):
            continue
        name = _first_name(entry, PRODUCT_NAME_FIELDS)
        if not name:
            continue
        raw_product_id = entry.get("productId")
        product_id = str(raw_product_id) if raw_product_id else None
        raw_id = entry.get("id")
        if raw_id is None:
            raw_id = product_id if product_id is not None else index
        products.append(PlannedProduct(
            id=str(raw_id),
            name=name,
            quantity=_positive_or_one(_first_present(entry, PRODUCT_QUANTITY_FIELDS)),
            product_id=product_id,
        ))
    return products


def parse_bundle_services(services_json: Any) -> list[PlannedService]:
    """Parse a bundle's services blob into named service lines with session counts."""
    services = []
    for index, entry in enumerate(to_list(services_json)):
        if not isinstance(entry, dict):
            continue
        name = _first_name(entry, SERVICE_NAME_FIELDS)
        if not name:
            continue
        raw_id = entry.get("id")
        services.append(PlannedService(
            id=str(raw_id if raw_id is not None else index),
            name=name,
            sessions=_positive_or_one(_first_present(entry, SERVICE_SESSION_FIELDS)),
        ))
    return services


def parse_bundle_goals(goals_json: Any) -> list[str]:
    """Parse a bundle's goals blob into a list of non-empty goal names."""
    goals = []
    for entry in to_list(goals_json):
        if isinstance(entry, str):
            goal = entry.strip()
        elif isinstance(entry, dict):
            goal = _first_name(entry, GOAL_NAME_FIELDS)
        else:
            goal = ""
        if goal:
            goals.append(goal)
    return goals
