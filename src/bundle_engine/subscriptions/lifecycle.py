"""
Subscription and training-session state transitions.

Each transition validates the current status and returns an updated copy;
the input record is left untouched. Persisting the result is up to the
caller. ``sessions_used`` only ever grows.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from bundle_engine.common.exceptions import (
    SessionStateError,
    SubscriptionMismatchError,
    SubscriptionStateError,
)
from bundle_engine.entitlements.schemas import BundleRecord
from bundle_engine.progress.calculator import initial_sessions_included, safe_positive_int
from bundle_engine.subscriptions.schemas import SubscriptionRecord, TrainingSessionRecord

logger = logging.getLogger(__name__)

RECURRING_CADENCES = ("weekly", "monthly")


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def start_subscription(
    client_id: str,
    trainer_id: str,
    bundle: BundleRecord,
    price: str,
    sessions_included: Optional[int] = None,
    subscription_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SubscriptionRecord:
    """Enroll a client in a recurring bundle.

    When ``sessions_included`` is not given it is derived from the bundle's
    goals, then its services.
    """
    if bundle.cadence not in RECURRING_CADENCES:
        raise SubscriptionStateError(
            f"Bundle cadence '{bundle.cadence}' does not create a subscription"
        )
    if sessions_included is None:
        sessions_included = initial_sessions_included(bundle)

    subscription = SubscriptionRecord(
        id=str(uuid.uuid4()),
        client_id=client_id,
        trainer_id=trainer_id,
        bundle_draft_id=bundle.id,
        status="active",
        subscription_type=subscription_type or bundle.cadence,
        price=price,
        sessions_included=sessions_included,
        sessions_used=0,
        start_date=_now(now),
    )
    logger.info(
        "Subscription %s started for client %s (%s sessions)",
        subscription.id, client_id, sessions_included,
    )
    return subscription


def pause(subscription: SubscriptionRecord, now: Optional[datetime] = None) -> SubscriptionRecord:
    if subscription.status != "active":
        raise SubscriptionStateError(f"Cannot pause a {subscription.status} subscription")
    return subscription.model_copy(update={"status": "paused", "paused_at": _now(now)})


def resume(subscription: SubscriptionRecord) -> SubscriptionRecord:
    if subscription.status != "paused":
        raise SubscriptionStateError(f"Cannot resume a {subscription.status} subscription")
    return subscription.model_copy(update={"status": "active", "paused_at": None})


def cancel(subscription: SubscriptionRecord, now: Optional[datetime] = None) -> SubscriptionRecord:
    if subscription.status not in ("active", "paused"):
        raise SubscriptionStateError(f"Cannot cancel a {subscription.status} subscription")
    return subscription.model_copy(update={"status": "cancelled", "cancelled_at": _now(now)})


def complete_session(
    session: TrainingSessionRecord,
    subscription: Optional[SubscriptionRecord] = None,
    now: Optional[datetime] = None,
) -> tuple[TrainingSessionRecord, Optional[SubscriptionRecord]]:
    """
    Mark a scheduled session completed.

    If the session is linked to a subscription and that subscription is
    passed in, its ``sessions_used`` counter is incremented by one.

    Returns:
        (completed session, updated subscription or the one passed in)
    """
    if session.status != "scheduled":
        raise SessionStateError(f"Cannot complete a {session.status} session")

    if subscription is not None and session.subscription_id != subscription.id:
        raise SubscriptionMismatchError()

    completed = session.model_copy(update={"status": "completed", "completed_at": _now(now)})

    if subscription is not None and session.subscription_id:
        used = safe_positive_int(subscription.sessions_used) + 1
        subscription = subscription.model_copy(update={"sessions_used": used})
        logger.info("Subscription %s sessions_used now %d", subscription.id, used)

    return completed, subscription
