"""Progress service: feeds fetched records through the progress calculator."""

import logging
from typing import Any, Iterable, Optional

from bundle_engine.common.config import BundleSettings
from bundle_engine.entitlements.parser import (
    parse_bundle_goals,
    parse_bundle_products,
    parse_bundle_services,
)
from bundle_engine.progress.calculator import (
    ProgressSnapshot,
    compute_bundle_progress,
    read_field,
    resolve_sessions_included,
    safe_positive_int,
    session_stats,
)
from bundle_engine.progress.deliveries import (
    build_delivered_qty_map,
    group_delivered_qty_by_client,
)

logger = logging.getLogger(__name__)


class ProgressService:
    """Bundle progress and entitlement read operations."""

    def __init__(self, settings: BundleSettings):
        self.settings = settings

    def describe_bundle(self, bundle: Any) -> dict:
        """Parsed entitlement lines of a bundle with their totals."""
        products = parse_bundle_products(read_field(bundle, "products_json"))
        services = parse_bundle_services(read_field(bundle, "services_json"))
        return {
            "products": [p.to_dict() for p in products],
            "services": [s.to_dict() for s in services],
            "goals": parse_bundle_goals(read_field(bundle, "goals_json")),
            "products_included": sum(safe_positive_int(p.quantity or 1) for p in products),
            "sessions_included": resolve_sessions_included(None, bundle),
        }

    def snapshot(
        self,
        subscription: Any,
        bundle: Any = None,
        deliveries: Iterable[Any] = (),
    ) -> ProgressSnapshot:
        """Progress for one subscription from the client's raw delivery records."""
        return self._compute(subscription, bundle, build_delivered_qty_map(deliveries))

    def client_overview(
        self,
        subscriptions: Iterable[Any],
        bundles: Iterable[Any] = (),
        deliveries: Iterable[Any] = (),
    ) -> list[dict]:
        """
        Per-client progress across a trainer's book.

        The first active subscription of each client is the one reported;
        ``active_bundles`` counts all of the client's active subscriptions.
        Clients are listed in order of first appearance.
        """
        bundle_by_id = {}
        for bundle in bundles:
            bundle_id = read_field(bundle, "id")
            if bundle_id is not None:
                bundle_by_id[str(bundle_id)] = bundle

        delivered_by_client = group_delivered_qty_by_client(deliveries)

        client_ids: list[str] = []
        active_counts: dict[str, int] = {}
        current: dict[str, Any] = {}
        for sub in subscriptions:
            client_id = read_field(sub, "client_id")
            if client_id is None:
                continue
            client_id = str(client_id)
            if client_id not in active_counts:
                client_ids.append(client_id)
                active_counts[client_id] = 0
            if read_field(sub, "status", "active") != "active":
                continue
            active_counts[client_id] += 1
            current.setdefault(client_id, sub)

        overview = []
        for client_id in client_ids:
            snapshot: Optional[ProgressSnapshot] = None
            sub = current.get(client_id)
            if sub is not None:
                bundle_id = read_field(sub, "bundle_draft_id")
                snapshot = self._compute(
                    sub,
                    bundle_by_id.get(str(bundle_id)) if bundle_id else None,
                    delivered_by_client.get(client_id),
                )
            overview.append({
                "client_id": client_id,
                "active_bundles": active_counts[client_id],
                "current_bundle": snapshot.to_dict() if snapshot else None,
            })
        return overview

    def session_stats(self, subscription: Any) -> dict[str, int]:
        return session_stats(subscription)

    def _compute(self, subscription: Any, bundle: Any, delivered: Optional[dict]) -> ProgressSnapshot:
        snapshot = compute_bundle_progress(
            subscription,
            bundle,
            delivered,
            low_ratio=self.settings.low_balance_ratio,
            default_title=self.settings.default_bundle_title,
        )
        if snapshot.alerts:
            logger.info(
                "Subscription %s alerts: %s",
                snapshot.subscription_id, "; ".join(snapshot.alerts),
            )
        return snapshot
