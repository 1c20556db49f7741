"""
Tests for the active-days reconciliation job and the conditional store write
it relies on.
"""
from datetime import date

from sqlalchemy.exc import OperationalError

from app.core.errors import PersistenceError
from app.db.models.subscription import Subscription
from app.services.reconciliation_service import ReconciliationResult, reconcile_active_days
from app.services.subscription_store import SubscriptionStore


def _reload(db, subscription_id):
    db.expire_all()
    return db.query(Subscription).filter(Subscription.id == subscription_id).one()


def test_reconcile_advances_active_members(db, store, make_member, make_subscription):
    member = make_member()
    subscription = make_subscription(member)

    result = reconcile_active_days(store, date(2024, 1, 10))

    assert result.scanned == 1
    assert result.updated == 1
    assert result.failed == 0
    assert result.message == "Updated 1 subscriptions"
    stored = _reload(db, subscription.id)
    assert stored.active_days == 9
    assert stored.last_active_date == date(2024, 1, 10)


def test_reconcile_is_idempotent_for_same_day(db, store, make_member, make_subscription):
    member = make_member()
    subscription = make_subscription(member)

    reconcile_active_days(store, date(2024, 1, 10))
    second = reconcile_active_days(store, date(2024, 1, 10))

    assert second.updated == 0
    assert second.skipped == 1
    assert _reload(db, subscription.id).active_days == 9


def test_reconcile_ignores_inactive_members_and_paused_subscriptions(db, store, make_member, make_subscription):
    inactive = make_member("Inactive", status=False)
    inactive_sub = make_subscription(inactive)

    paused = make_member("Paused")
    paused_sub = make_subscription(
        paused,
        active_days=3,
        inactive_start_date=date(2024, 1, 4),
        days_remaining=27,
        last_active_date=date(2024, 1, 4),
    )

    result = reconcile_active_days(store, date(2024, 1, 10))

    assert result.scanned == 0
    assert _reload(db, inactive_sub.id).active_days == 0
    assert _reload(db, paused_sub.id).active_days == 3


def test_reconcile_caps_at_total_days(db, store, make_member, make_subscription):
    member = make_member()
    subscription = make_subscription(member)

    reconcile_active_days(store, date(2024, 3, 1))

    assert _reload(db, subscription.id).active_days == 30


def test_advance_active_days_never_regresses(db, store, make_member, make_subscription):
    member = make_member()
    subscription = make_subscription(member, active_days=9, last_active_date=date(2024, 1, 10))

    assert store.advance_active_days(subscription.id, 5, date(2024, 1, 6)) is False
    assert _reload(db, subscription.id).active_days == 9


def test_advance_active_days_skips_row_paused_after_read(db, store, make_member, make_subscription):
    member = make_member()
    subscription = make_subscription(member)

    # A pause lands between the job reading the row and writing it back
    db.query(Subscription).filter(Subscription.id == subscription.id).update(
        {"active_days": 7, "inactive_start_date": date(2024, 1, 8), "days_remaining": 23}
    )
    db.commit()

    assert store.advance_active_days(subscription.id, 9, date(2024, 1, 10)) is False
    stored = _reload(db, subscription.id)
    assert stored.active_days == 7
    assert stored.days_remaining == 23


class FlakyStore(SubscriptionStore):
    """Store whose conditional write fails for selected subscriptions."""

    def __init__(self, db, failing_ids, error):
        super().__init__(db)
        self.failing_ids = set(failing_ids)
        self.error = error
        self.rollbacks = 0

    def advance_active_days(self, subscription_id, active_days, as_of):
        if subscription_id in self.failing_ids:
            raise self.error
        return super().advance_active_days(subscription_id, active_days, as_of)

    def rollback(self):
        self.rollbacks += 1
        super().rollback()


def test_reconcile_isolates_store_failures(db, make_member, make_subscription):
    subs = [make_subscription(make_member(f"Member {i}")) for i in range(3)]
    store = FlakyStore(db, [subs[1].id], PersistenceError("Failed to update subscription"))

    result = reconcile_active_days(store, date(2024, 1, 10))

    assert result.scanned == 3
    assert result.updated == 2
    assert result.failed == 1
    assert result.errors == [{"subscription_id": subs[1].id, "error": "Failed to update subscription"}]
    assert _reload(db, subs[0].id).active_days == 9
    assert _reload(db, subs[1].id).active_days == 0
    assert _reload(db, subs[2].id).active_days == 9


def test_reconcile_rolls_back_on_database_error(db, make_member, make_subscription):
    subs = [make_subscription(make_member(f"Member {i}")) for i in range(2)]
    error = OperationalError("UPDATE subscriptions", {}, Exception("disk I/O error"))
    store = FlakyStore(db, [subs[0].id], error)

    result = reconcile_active_days(store, date(2024, 1, 10))

    assert result.failed == 1
    assert result.updated == 1
    assert store.rollbacks == 1
    assert result.errors[0] == {"subscription_id": subs[0].id, "error": "database error"}
    assert _reload(db, subs[1].id).active_days == 9


def test_result_as_dict():
    result = ReconciliationResult(scanned=3, updated=2, skipped=1)
    body = result.as_dict()

    assert body["success"] is True
    assert body["message"] == "Updated 2 subscriptions"
    assert body["errors"] == []
