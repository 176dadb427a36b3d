"""Tests for the progress service."""

import logging

import pytest

from bundle_engine.common.config import BundleSettings
from bundle_engine.entitlements.schemas import BundleRecord
from bundle_engine.progress.service import ProgressService
from bundle_engine.subscriptions.schemas import SubscriptionRecord


def make_settings(**overrides) -> BundleSettings:
    return BundleSettings(**overrides)


@pytest.fixture
def svc():
    return ProgressService(make_settings())


class TestSnapshot:
    def test_filters_and_aggregates_deliveries(self, svc, subscription, bundle):
        deliveries = [
            {"product_name": "Whey Protein", "quantity": 1, "status": "delivered"},
            {"product_name": "whey protein", "quantity": 1, "status": "confirmed"},
            {"product_name": "Creatine", "quantity": 1, "status": "pending"},
        ]
        snap = svc.snapshot(subscription, bundle, deliveries)
        assert snap.products_included == 3
        assert snap.products_used == 2
        assert snap.sessions_included == 10
        assert snap.sessions_used == 4
        assert snap.bundle_title == "Strength Starter"

    def test_accepts_schema_records(self, svc, subscription, bundle):
        snap = svc.snapshot(SubscriptionRecord(**subscription), BundleRecord(**bundle))
        assert snap.subscription_id == "s-1"
        assert snap.sessions_progress_pct == 40

    def test_settings_drive_defaults(self, subscription):
        svc = ProgressService(make_settings(low_balance_ratio=0.4, default_bundle_title="Plan"))
        snap = svc.snapshot(subscription)
        assert snap.bundle_title == "Plan"
        assert snap.alerts == ["Sessions are running low"]

    def test_logs_alerts(self, svc, caplog):
        with caplog.at_level(logging.INFO, logger="bundle_engine.progress.service"):
            svc.snapshot({"id": "s-9", "sessions_included": 2, "sessions_used": 2})
        assert "Sessions exhausted" in caplog.text


class TestDescribeBundle:
    def test_describe(self, svc, bundle):
        described = svc.describe_bundle(bundle)
        assert [p["name"] for p in described["products"]] == ["Whey Protein", "Creatine"]
        assert described["products"][0]["product_id"] == "901"
        assert described["products_included"] == 3
        assert described["sessions_included"] == 10
        assert described["goals"] == ["Build strength", "Lose fat"]

    def test_describe_garbage(self, svc):
        described = svc.describe_bundle({"products_json": "oops", "services_json": 5})
        assert described["products"] == []
        assert described["services"] == []
        assert described["products_included"] == 0
        assert described["sessions_included"] == 0


class TestClientOverview:
    def test_first_active_subscription_per_client(self, svc, bundle):
        subscriptions = [
            {"id": "s-old", "client_id": "c-1", "status": "cancelled", "sessions_included": 5},
            {"id": "s-1", "client_id": "c-1", "status": "active", "bundle_draft_id": "b-1",
             "sessions_included": 0, "sessions_used": 9},
            {"id": "s-2", "client_id": "c-1", "status": "active", "sessions_included": 3},
            {"id": "s-3", "client_id": "c-2", "status": "paused", "sessions_included": 3},
        ]
        deliveries = [
            {"client_id": "c-1", "product_name": "Creatine", "quantity": 1, "status": "delivered"},
            {"client_id": "c-2", "product_name": "Creatine", "quantity": 1, "status": "delivered"},
        ]
        overview = svc.client_overview(subscriptions, [bundle], deliveries)

        assert [o["client_id"] for o in overview] == ["c-1", "c-2"]
        c1, c2 = overview
        assert c1["active_bundles"] == 2
        current = c1["current_bundle"]
        assert current["subscription_id"] == "s-1"
        assert current["sessions_included"] == 10
        assert current["products_used"] == 1
        assert current["alerts"] == ["Sessions are running low"]

        assert c2["active_bundles"] == 0
        assert c2["current_bundle"] is None

    def test_unknown_bundle_uses_default_title(self, svc):
        overview = svc.client_overview([
            {"id": "s-1", "client_id": "c-1", "status": "active", "bundle_draft_id": "missing"},
        ])
        assert overview[0]["current_bundle"]["bundle_title"] == "Current bundle"

    def test_empty(self, svc):
        assert svc.client_overview([]) == []


class TestFractionalDeliveries:
    def test_fractional_delivery_counts_in_full(self, svc):
        snap = svc.snapshot(
            {"sessions_included": 0},
            {"products_json": [{"name": "Bar", "quantity": 3}]},
            [{"product_name": "Bar", "quantity": 1.5, "status": "delivered"}],
        )
        assert snap.products_used == 1.5
        assert snap.products_remaining == 1.5
        assert snap.products_progress_pct == 50
