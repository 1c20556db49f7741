"""
Store collaborator for members and subscriptions.

Wraps an injected SQLAlchemy session. Routes build one per request from
``get_db``; the reconciliation job builds one per run; tests pass their own.
Every write either commits as a unit or is rolled back and reported as
``PersistenceError``.
"""
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Any

from sqlalchemy import func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import MemberNotFoundError, PersistenceError
from app.db.models.member import Member
from app.db.models.subscription import Subscription
from app.services.subscription_engine import SubscriptionSnapshot

logger = logging.getLogger(__name__)

# Snapshot fields written back to the subscription row
SUBSCRIPTION_FIELDS = (
    "payment_date",
    "expiration_date",
    "total_days",
    "active_days",
    "inactive_days",
    "inactive_start_date",
    "days_remaining",
    "last_active_date",
)


class SubscriptionStore:
    def __init__(self, db: Session):
        self.db = db

    # --- reads ---

    def get_member(self, member_id: int) -> Member:
        member = self.db.query(Member).filter(Member.id == member_id).first()
        if not member:
            raise MemberNotFoundError(f"Member {member_id} not found")
        return member

    def search_members(self, search: Optional[str] = None, status: Optional[bool] = None) -> List[Member]:
        """Members matching a name/phone/email substring and an optional status."""
        query = self.db.query(Member)
        if search:
            like = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(Member.name).like(like),
                func.lower(Member.phone).like(like),
                func.lower(Member.email).like(like),
            ))
        if status is not None:
            query = query.filter(Member.status == status)
        return query.order_by(Member.id).all()

    def subscriptions_for(self, member_id: int) -> List[Subscription]:
        """All subscriptions of a member, newest first."""
        return (
            self.db.query(Subscription)
            .filter(Subscription.member_id == member_id)
            .order_by(Subscription.payment_date.desc(), Subscription.id.desc())
            .all()
        )

    def latest_subscription(self, member_id: int) -> Optional[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.member_id == member_id)
            .order_by(Subscription.payment_date.desc(), Subscription.id.desc())
            .first()
        )

    def latest_subscriptions(self, member_ids: Iterable[int]) -> Dict[int, Subscription]:
        """Latest subscription per member, in one query."""
        member_ids = list(member_ids)
        if not member_ids:
            return {}
        rows = (
            self.db.query(Subscription)
            .filter(Subscription.member_id.in_(member_ids))
            .order_by(Subscription.payment_date.desc(), Subscription.id.desc())
            .all()
        )
        latest: Dict[int, Subscription] = {}
        for row in rows:
            latest.setdefault(row.member_id, row)
        return latest

    def reconcilable_subscriptions(self) -> List[Subscription]:
        """Subscriptions of active members that are not paused."""
        return (
            self.db.query(Subscription)
            .join(Member, Member.id == Subscription.member_id)
            .filter(
                Member.status.is_(True),
                Subscription.inactive_start_date.is_(None),
                Subscription.days_remaining.is_(None),
            )
            .order_by(Subscription.id)
            .all()
        )

    def next_member_number(self) -> int:
        current = self.db.query(func.max(Member.member_number)).scalar()
        return (current or 0) + 1

    # --- writes ---

    def rollback(self) -> None:
        self.db.rollback()

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store write failed during {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    def add_member(self, **values: Any) -> Member:
        member = Member(member_number=self.next_member_number(), status=True, **values)
        self.db.add(member)
        self._commit("register member")
        self.db.refresh(member)
        return member

    def update_member(self, member: Member, changes: Dict[str, Any]) -> Member:
        for key, value in changes.items():
            setattr(member, key, value)
        self._commit("update member")
        self.db.refresh(member)
        return member

    def set_member_status(self, member: Member, status: bool) -> Member:
        """Status flip with no accounting side effect (member has no subscription)."""
        member.status = status
        self._commit("update member status")
        self.db.refresh(member)
        return member

    def save_transition(
        self,
        member: Member,
        status: bool,
        subscription: Subscription,
        snapshot: SubscriptionSnapshot,
    ) -> None:
        """
        Write the member status and the subscription fields in one transaction.

        If either write fails, both are rolled back.
        """
        member.status = status
        _apply_snapshot(subscription, snapshot)
        self._commit("save status change")
        self.db.refresh(member)
        self.db.refresh(subscription)

    def insert_subscription(self, member: Member, snapshot: SubscriptionSnapshot) -> Subscription:
        """Append a subscription and make sure the member is active, atomically."""
        subscription = Subscription(member_id=member.id)
        _apply_snapshot(subscription, snapshot)
        self.db.add(subscription)
        member.status = True
        self._commit("add subscription")
        self.db.refresh(subscription)
        self.db.refresh(member)
        return subscription

    def advance_active_days(self, subscription_id: int, active_days: int, as_of: date) -> bool:
        """
        Conditionally raise ``active_days``.

        The row is only written if the stored value is lower and the
        subscription is not paused, so a stale tick can neither regress the
        counter nor overwrite a pause that landed after it was computed.

        Returns:
            True if the row was updated
        """
        statement = (
            update(Subscription)
            .where(
                Subscription.id == subscription_id,
                Subscription.active_days < active_days,
                Subscription.inactive_start_date.is_(None),
            )
            .values(active_days=active_days, last_active_date=as_of)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(statement)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Active days update failed: subscription_id={subscription_id}: {e}")
            raise PersistenceError(f"Failed to update subscription {subscription_id}") from e
        return result.rowcount > 0


def _apply_snapshot(subscription: Subscription, snapshot: SubscriptionSnapshot) -> None:
    for name in SUBSCRIPTION_FIELDS:
        setattr(subscription, name, getattr(snapshot, name))
