"""Tests for subscription and training-session transitions."""

from datetime import datetime, timezone

import pytest

from bundle_engine.common.exceptions import (
    SessionStateError,
    SubscriptionMismatchError,
    SubscriptionStateError,
)
from bundle_engine.entitlements.schemas import BundleRecord
from bundle_engine.subscriptions import lifecycle
from bundle_engine.subscriptions.schemas import SubscriptionRecord, TrainingSessionRecord

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_subscription(**overrides) -> SubscriptionRecord:
    defaults = {
        "id": "s-1", "client_id": "c-1", "trainer_id": "t-1",
        "sessions_included": 10, "sessions_used": 2,
    }
    defaults.update(overrides)
    return SubscriptionRecord(**defaults)


def make_session(**overrides) -> TrainingSessionRecord:
    defaults = {"id": "ts-1", "client_id": "c-1", "trainer_id": "t-1", "subscription_id": "s-1"}
    defaults.update(overrides)
    return TrainingSessionRecord(**defaults)


class TestStartSubscription:
    def test_sessions_from_goals_first(self):
        bundle = BundleRecord(
            id="b-1", cadence="monthly",
            services_json=[{"name": "PT", "sessions": 4}],
            goals_json={"sessionCount": 12},
        )
        sub = lifecycle.start_subscription("c-1", "t-1", bundle, "99.00", now=NOW)
        assert sub.sessions_included == 12
        assert sub.sessions_used == 0
        assert sub.status == "active"
        assert sub.subscription_type == "monthly"
        assert sub.bundle_draft_id == "b-1"
        assert sub.start_date == NOW
        assert sub.id

    def test_sessions_from_services(self):
        bundle = BundleRecord(id="b-1", cadence="weekly", services_json=[{"name": "PT", "sessions": 4}])
        sub = lifecycle.start_subscription("c-1", "t-1", bundle, "25")
        assert sub.sessions_included == 4
        assert sub.subscription_type == "weekly"

    def test_fractional_service_sessions_not_floored(self):
        bundle = BundleRecord(
            id="b-1", cadence="monthly",
            services_json=[{"name": "PT", "sessions": 1.5}, {"name": "Call", "sessions": 1.5}],
        )
        sub = lifecycle.start_subscription("c-1", "t-1", bundle, "25")
        assert sub.sessions_included == 3

    def test_explicit_sessions(self):
        bundle = BundleRecord(id="b-1", cadence="monthly", goals_json={"sessionCount": 12})
        sub = lifecycle.start_subscription("c-1", "t-1", bundle, "25", sessions_included=3, subscription_type="yearly")
        assert sub.sessions_included == 3
        assert sub.subscription_type == "yearly"

    def test_one_time_bundle_rejected(self):
        with pytest.raises(SubscriptionStateError):
            lifecycle.start_subscription("c-1", "t-1", BundleRecord(cadence="one_time"), "25")


class TestTransitions:
    def test_pause_resume(self):
        sub = make_subscription()
        paused = lifecycle.pause(sub, now=NOW)
        assert paused.status == "paused"
        assert paused.paused_at == NOW
        assert sub.status == "active"

        resumed = lifecycle.resume(paused)
        assert resumed.status == "active"
        assert resumed.paused_at is None

    def test_cancel_from_active_and_paused(self):
        assert lifecycle.cancel(make_subscription(), now=NOW).cancelled_at == NOW
        assert lifecycle.cancel(make_subscription(status="paused")).status == "cancelled"

    def test_invalid_transitions(self):
        with pytest.raises(SubscriptionStateError):
            lifecycle.pause(make_subscription(status="paused"))
        with pytest.raises(SubscriptionStateError):
            lifecycle.resume(make_subscription())
        with pytest.raises(SubscriptionStateError):
            lifecycle.cancel(make_subscription(status="cancelled"))

    def test_error_code(self):
        with pytest.raises(SubscriptionStateError) as exc:
            lifecycle.resume(make_subscription(status="cancelled"))
        assert exc.value.code == "INVALID_TRANSITION"


class TestCompleteSession:
    def test_increments_linked_subscription(self):
        session, sub = lifecycle.complete_session(make_session(), make_subscription(), now=NOW)
        assert session.status == "completed"
        assert session.completed_at == NOW
        assert sub.sessions_used == 3

    def test_without_subscription(self):
        session, sub = lifecycle.complete_session(make_session(subscription_id=None))
        assert session.status == "completed"
        assert sub is None

    def test_malformed_counter_restarts_from_zero(self):
        _, sub = lifecycle.complete_session(make_session(), make_subscription(sessions_used=None))
        assert sub.sessions_used == 1

    def test_cannot_complete_twice(self):
        session, _ = lifecycle.complete_session(make_session())
        with pytest.raises(SessionStateError):
            lifecycle.complete_session(session)

    def test_mismatched_subscription(self):
        with pytest.raises(SubscriptionMismatchError):
            lifecycle.complete_session(make_session(subscription_id="other"), make_subscription())
