"""
Subscription day-accounting engine.

Every computation about active days, pausing, resuming, remaining days and
subscription status lives here. The dashboard, the profile view, the status
toggle and the reconciliation job all call these functions instead of doing
their own date math.

All functions are pure: they take a ``SubscriptionSnapshot`` and an explicit
``today`` and return a new snapshot (or a classification). Nothing here reads
the clock or touches the database.

Accounting model:
    - ``active_days`` counts the days of the term consumed so far, capped at
      ``total_days``. It is advanced from ``payment_date`` by ``tick``.
    - Pausing freezes the balance (``days_remaining``) and marks the pause start.
    - Resuming adds the pause length to ``inactive_days``, ``total_days`` and
      ``expiration_date`` so paused time never counts against the entitlement.
    - ``last_active_date`` is the accrual cursor: the date ``active_days`` was
      last accounted up to.
"""
import logging
from dataclasses import dataclass, replace, fields
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Union, Dict, Any

from app.core.config import EXPIRING_SOON_DAYS
from app.core.errors import InvalidDateError, NoSubscriptionError

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


class SubscriptionStatus(str, Enum):
    """Display status, listed in classification priority order."""
    NO_SUBSCRIPTION = "no_subscription"
    PAUSED = "paused"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    ACTIVE = "active"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    SubscriptionStatus.NO_SUBSCRIPTION: "No subscription",
    SubscriptionStatus.PAUSED: "Paused",
    SubscriptionStatus.EXPIRED: "Expired",
    SubscriptionStatus.EXPIRING_SOON: "Expiring soon",
    SubscriptionStatus.ACTIVE: "Active",
}


def parse_date(value: Optional[DateLike], field: str = "date") -> Optional[date]:
    """
    Coerce a stored or submitted value to a ``date``.

    Accepts ``date``, ``datetime`` and ISO-8601 strings (``YYYY-MM-DD`` or a
    full timestamp such as ``2024-01-10T08:30:00Z``). ``None`` passes through.

    Raises:
        InvalidDateError: If the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as e:
            raise InvalidDateError(f"Invalid {field}: {value!r}") from e
    raise InvalidDateError(f"Invalid {field}: {value!r}")


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if ``end`` is earlier)."""
    return (end - start).days


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """Immutable view of the accounting fields of one subscription row."""
    payment_date: date
    expiration_date: date
    total_days: int
    active_days: int = 0
    inactive_days: int = 0
    inactive_start_date: Optional[date] = None
    days_remaining: Optional[int] = None
    last_active_date: Optional[date] = None
    created_at: Optional[date] = None
    id: Optional[int] = None

    @property
    def is_paused(self) -> bool:
        return self.inactive_start_date is not None

    @classmethod
    def from_row(cls, row: Any) -> "SubscriptionSnapshot":
        """Build a snapshot from an ORM row or any object with the same attributes."""
        return cls(
            id=getattr(row, "id", None),
            payment_date=parse_date(row.payment_date, "payment_date"),
            expiration_date=parse_date(row.expiration_date, "expiration_date"),
            total_days=int(row.total_days),
            active_days=int(row.active_days or 0),
            inactive_days=int(row.inactive_days or 0),
            inactive_start_date=parse_date(row.inactive_start_date, "inactive_start_date"),
            days_remaining=row.days_remaining,
            last_active_date=parse_date(getattr(row, "last_active_date", None), "last_active_date"),
            created_at=parse_date(getattr(row, "created_at", None), "created_at"),
        )

    def changes_since(self, before: "SubscriptionSnapshot") -> Dict[str, Any]:
        """Persisted fields that differ from ``before``."""
        changes = {}
        for f in fields(self):
            if f.name in ("id", "created_at"):
                continue
            new_value = getattr(self, f.name)
            if new_value != getattr(before, f.name):
                changes[f.name] = new_value
        return changes


@dataclass(frozen=True)
class Classification:
    status: SubscriptionStatus
    remaining_days: int

    @property
    def label(self) -> str:
        return self.status.label


def _projected_active_days(subscription: SubscriptionSnapshot, today: date) -> int:
    elapsed = days_between(subscription.payment_date, today)
    return min(elapsed, subscription.total_days)


def tick(subscription: SubscriptionSnapshot, is_active: bool, today: date) -> SubscriptionSnapshot:
    """
    Advance ``active_days`` from elapsed calendar time.

    Only applies to an active member whose subscription is not paused. The
    result never lowers ``active_days``; calling it twice with the same
    ``today`` returns the same snapshot.
    """
    if not is_active or subscription.is_paused:
        return subscription

    new_active_days = _projected_active_days(subscription, today)
    if new_active_days <= subscription.active_days:
        return subscription

    return replace(subscription, active_days=new_active_days, last_active_date=today)


def pause(subscription: Optional[SubscriptionSnapshot], today: date) -> SubscriptionSnapshot:
    """
    Freeze the entitlement balance when the member goes inactive.

    Raises:
        NoSubscriptionError: If there is no subscription to pause
        InvalidDateError: If ``today`` is before the accrual cursor of a started term
    """
    if subscription is None:
        raise NoSubscriptionError("Cannot pause: member has no subscription")

    if subscription.is_paused:
        logger.debug(f"Subscription {subscription.id} already paused since {subscription.inactive_start_date}")
        return subscription

    cursor = subscription.last_active_date or subscription.created_at or subscription.payment_date
    if today < subscription.payment_date:
        # Term has not started yet: nothing to accrue
        accrued = 0
        cursor = max(cursor, subscription.payment_date)
    else:
        accrued = days_between(cursor, today)
    if accrued < 0:
        raise InvalidDateError(
            f"Pause date {today.isoformat()} is before last accounted date {cursor.isoformat()}"
        )

    new_active_days = subscription.active_days + accrued
    if new_active_days > subscription.total_days:
        logger.warning(
            f"Active days overflow clamped: subscription_id={subscription.id}, "
            f"computed={new_active_days}, total_days={subscription.total_days}"
        )
        new_active_days = subscription.total_days

    return replace(
        subscription,
        active_days=new_active_days,
        days_remaining=max(subscription.total_days - new_active_days, 0),
        inactive_start_date=today,
        last_active_date=max(today, cursor),
    )


def resume(subscription: Optional[SubscriptionSnapshot], today: date) -> Optional[SubscriptionSnapshot]:
    """
    Unfreeze a paused subscription when the member goes active again.

    The pause length is added to ``inactive_days`` and to ``total_days`` and the
    expiration date moves out by the same amount. Paused days before the term
    starts are not counted. A subscription that is not paused (or is missing)
    is returned unchanged.

    Raises:
        InvalidDateError: If ``today`` is before the pause start
    """
    if subscription is None or not subscription.is_paused:
        return subscription

    if today < subscription.inactive_start_date:
        raise InvalidDateError(
            f"Resume date {today.isoformat()} is before pause start "
            f"{subscription.inactive_start_date.isoformat()}"
        )

    counted_from = max(subscription.inactive_start_date, subscription.payment_date)
    days_inactive = max(days_between(counted_from, today), 0)
    return replace(
        subscription,
        inactive_start_date=None,
        days_remaining=None,
        inactive_days=subscription.inactive_days + days_inactive,
        total_days=subscription.total_days + days_inactive,
        expiration_date=subscription.expiration_date + timedelta(days=days_inactive),
    )


def classify(
    subscription: Optional[SubscriptionSnapshot],
    member_is_active: bool,
    today: date,
    soon_days: int = EXPIRING_SOON_DAYS,
) -> Classification:
    """
    Derive the display status and remaining days of a subscription.

    For an active member the tick projection of ``active_days`` is used, so the
    result is current even if the reconciliation job has not run today.
    """
    if subscription is None:
        return Classification(SubscriptionStatus.NO_SUBSCRIPTION, 0)

    if subscription.days_remaining is not None:
        return Classification(SubscriptionStatus.PAUSED, max(subscription.days_remaining, 0))

    active_days = tick(subscription, member_is_active, today).active_days
    calendar_left = days_between(today, subscription.expiration_date)
    entitlement_left = subscription.total_days - active_days
    remaining = max(min(calendar_left, entitlement_left), 0)

    if today >= subscription.expiration_date or active_days >= subscription.total_days:
        return Classification(SubscriptionStatus.EXPIRED, 0)
    if 1 <= remaining <= soon_days:
        return Classification(SubscriptionStatus.EXPIRING_SOON, remaining)
    return Classification(SubscriptionStatus.ACTIVE, remaining)


def new_subscription(
    payment_date: date,
    total_days: int,
    is_active: bool,
    today: date,
) -> SubscriptionSnapshot:
    """
    Compute the fields of a new (or renewal) subscription term.

    If ``is_active``, days already elapsed since ``payment_date`` are seeded as
    active days and the expiration date is pulled in by the same amount.
    Otherwise the term starts with no active days.

    Raises:
        ValueError: If ``total_days`` is not positive
    """
    if total_days <= 0:
        raise ValueError(f"total_days must be positive, got {total_days}")

    seeded = 0
    if is_active:
        seeded = min(max(days_between(payment_date, today), 0), total_days)

    return SubscriptionSnapshot(
        payment_date=payment_date,
        expiration_date=payment_date + timedelta(days=total_days - seeded),
        total_days=total_days,
        active_days=seeded,
        inactive_days=0,
        # Accounted up to the last seeded day
        last_active_date=payment_date + timedelta(days=seeded),
        created_at=today,
    )
