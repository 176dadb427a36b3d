"""Aggregate consumed product deliveries into progress lookup maps."""

import math
from typing import Any, Iterable

from bundle_engine.entitlements.parser import to_number
from bundle_engine.progress.calculator import normalize_lookup_key, read_field

CONSUMED_STATUSES = frozenset({"delivered", "confirmed"})


def is_consumed(delivery: Any) -> bool:
    """True when a delivery's status counts against the client's entitlement."""
    status = str(read_field(delivery, "status", "")).strip().lower()
    return status in CONSUMED_STATUSES


def delivered_quantity(delivery: Any) -> float:
    """Quantity of a delivery record, at least 1. Fractions are kept."""
    qty = to_number(read_field(delivery, "quantity"))
    if not math.isfinite(qty) or qty <= 1:
        return 1
    return int(qty) if qty.is_integer() else qty


def build_delivered_qty_map(deliveries: Iterable[Any]) -> dict[str, float]:
    """
    Sum consumed quantities per normalized product name.

    Only ``delivered`` and ``confirmed`` records count; records without a
    product name are skipped.
    """
    totals: dict[str, float] = {}
    for delivery in deliveries:
        if not is_consumed(delivery):
            continue
        key = normalize_lookup_key(read_field(delivery, "product_name"))
        if not key:
            continue
        totals[key] = totals.get(key, 0) + delivered_quantity(delivery)
    return totals


def group_delivered_qty_by_client(deliveries: Iterable[Any]) -> dict[str, dict[str, float]]:
    """Like :func:`build_delivered_qty_map`, but keyed by client id first."""
    by_client: dict[str, dict[str, float]] = {}
    for delivery in deliveries:
        if not is_consumed(delivery):
            continue
        client_id = read_field(delivery, "client_id")
        key = normalize_lookup_key(read_field(delivery, "product_name"))
        if client_id is None or client_id == "" or not key:
            continue
        per_client = by_client.setdefault(str(client_id), {})
        per_client[key] = per_client.get(key, 0) + delivered_quantity(delivery)
    return by_client
