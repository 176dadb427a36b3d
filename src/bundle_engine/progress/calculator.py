"""
Bundle progress calculation.

Derives how much of a subscription's session and product entitlement a
client has consumed. Pure and stateless: callers fetch the subscription,
bundle and delivery rows and pass them in. Records may be mappings or
attribute objects. Nothing here raises; missing or malformed values count
as zero.
"""

import math
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Optional

from bundle_engine.entitlements.parser import (
    parse_bundle_products,
    parse_bundle_services,
    to_number,
)

LOW_BALANCE_RATIO = 0.8
DEFAULT_BUNDLE_TITLE = "Current bundle"
DEFAULT_STATUS = "active"

ALERT_SESSIONS_EXHAUSTED = "Sessions exhausted"
ALERT_SESSIONS_LOW = "Sessions are running low"
ALERT_PRODUCTS_EXHAUSTED = "Products exhausted"
ALERT_PRODUCTS_LOW = "Products are running low"
ALERT_PRODUCTS_OUTPACING = "Product usage is outpacing sessions"

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ProgressSnapshot:
    """Consumption summary for one subscription. Derived, never stored."""

    subscription_id: Optional[str]
    bundle_draft_id: Optional[str]
    bundle_title: str
    status: str
    sessions_used: int
    sessions_included: int
    sessions_remaining: int
    sessions_progress_pct: int
    products_used: float
    products_included: int
    products_remaining: float
    products_progress_pct: int
    alerts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def read_field(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an attribute object."""
    if record is None:
        return default
    if isinstance(record, Mapping):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def normalize_lookup_key(value: Optional[str]) -> str:
    """Normalize a product name for delivery lookups: trim, lowercase, collapse spaces."""
    return _WHITESPACE.sub(" ", str(value or "").strip().lower())


def safe_positive_int(value: Any) -> int:
    """Floor a numeric value, or 0 when it is non-finite or not positive."""
    number = to_number(value)
    if not math.isfinite(number) or number <= 0:
        return 0
    return math.floor(number)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _progress_pct(used: float, included: int) -> int:
    if included <= 0:
        return 0
    return min(100, _round_half_up(used / included * 100))


def _balance_alert(used: float, included: int, exhausted: str, low: str, low_ratio: float) -> Optional[str]:
    if included <= 0:
        return None
    if used >= included:
        return exhausted
    if used / included >= low_ratio:
        return low
    return None


def _sessions_from_goals(goals_json: Any) -> int:
    if not isinstance(goals_json, Mapping):
        return 0
    return safe_positive_int(goals_json.get("sessionCount"))


def _sessions_from_services(services_json: Any) -> int:
    return sum(safe_positive_int(s.sessions) for s in parse_bundle_services(services_json))


def resolve_sessions_included(subscription: Any, bundle: Any = None) -> int:
    """
    Resolve the session entitlement for progress tracking.

    First non-zero of: the subscription's own counter, the bundle's service
    total, the bundle's goal ``sessionCount``.
    """
    return (
        safe_positive_int(read_field(subscription, "sessions_included"))
        or _sessions_from_services(read_field(bundle, "services_json"))
        or _sessions_from_goals(read_field(bundle, "goals_json"))
    )


def initial_sessions_included(bundle: Any) -> float:
    """
    Session entitlement stamped on a new subscription created from a bundle.

    Goal ``sessionCount`` takes precedence over the service total here.
    Service sessions are summed as parsed, without flooring each line.
    """
    from_goals = _sessions_from_goals(read_field(bundle, "goals_json"))
    if from_goals:
        return from_goals
    total = sum(s.sessions for s in parse_bundle_services(read_field(bundle, "services_json")))
    return int(total) if float(total).is_integer() else total


def _delivered_qty(delivered_qty_by_product_name: Optional[Mapping[str, Any]], key: str) -> float:
    if not isinstance(delivered_qty_by_product_name, Mapping):
        return 0
    qty = to_number(delivered_qty_by_product_name.get(key))
    if not math.isfinite(qty) or qty <= 0:
        return 0
    return int(qty) if qty.is_integer() else qty


def compute_bundle_progress(
    subscription: Any,
    bundle: Any = None,
    delivered_qty_by_product_name: Optional[Mapping[str, Any]] = None,
    low_ratio: float = LOW_BALANCE_RATIO,
    default_title: str = DEFAULT_BUNDLE_TITLE,
) -> ProgressSnapshot:
    """
    Compute the progress snapshot for one subscription.

    Args:
        subscription: record with ``sessions_included`` and ``sessions_used``
        bundle: optional bundle record with ``products_json``,
            ``services_json`` and ``goals_json`` blobs
        delivered_qty_by_product_name: cumulative consumed quantity keyed by
            ``normalize_lookup_key(product_name)``

    Product usage is looked up once per planned product line, so two lines
    sharing a normalized name both count the same deliveries.
    """
    sessions_included = resolve_sessions_included(subscription, bundle)
    sessions_used = safe_positive_int(read_field(subscription, "sessions_used"))

    planned_products = parse_bundle_products(read_field(bundle, "products_json"))
    products_included = sum(safe_positive_int(p.quantity or 1) for p in planned_products)
    products_used = sum(
        _delivered_qty(delivered_qty_by_product_name, normalize_lookup_key(p.name))
        for p in planned_products
    )

    alerts = []
    for alert in (
        _balance_alert(
            sessions_used, sessions_included,
            ALERT_SESSIONS_EXHAUSTED, ALERT_SESSIONS_LOW, low_ratio,
        ),
        _balance_alert(
            products_used, products_included,
            ALERT_PRODUCTS_EXHAUSTED, ALERT_PRODUCTS_LOW, low_ratio,
        ),
    ):
        if alert:
            alerts.append(alert)
    if sessions_used > 0 and products_used > sessions_used + 1:
        alerts.append(ALERT_PRODUCTS_OUTPACING)

    subscription_id = read_field(subscription, "id")
    bundle_draft_id = read_field(subscription, "bundle_draft_id")

    return ProgressSnapshot(
        subscription_id=str(subscription_id) if subscription_id is not None else None,
        bundle_draft_id=str(bundle_draft_id) if bundle_draft_id else None,
        bundle_title=str(read_field(bundle, "title") or default_title),
        status=str(read_field(subscription, "status") or DEFAULT_STATUS),
        sessions_used=sessions_used,
        sessions_included=sessions_included,
        sessions_remaining=max(sessions_included - sessions_used, 0),
        sessions_progress_pct=_progress_pct(sessions_used, sessions_included),
        products_used=products_used,
        products_included=products_included,
        products_remaining=max(products_included - products_used, 0),
        products_progress_pct=_progress_pct(products_used, products_included),
        alerts=alerts,
    )


def session_stats(subscription: Any) -> dict[str, int]:
    """Raw session counters of a subscription, without bundle fallbacks."""
    included = safe_positive_int(read_field(subscription, "sessions_included"))
    used = safe_positive_int(read_field(subscription, "sessions_used"))
    return {"included": included, "used": used, "remaining": max(0, included - used)}
