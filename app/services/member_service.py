"""
Member service: registration, dashboard listing, profile and status changes.

All subscription math goes through ``subscription_engine``; this module only
decides which engine operation applies and hands the result to the store.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from app.core.config import DEFAULT_PAGE_SIZE
from app.core.errors import NoSubscriptionError
from app.db.models.member import Member
from app.db.models.subscription import Subscription
from app.services import subscription_engine as engine
from app.services.subscription_engine import Classification, SubscriptionSnapshot, SubscriptionStatus
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("all", "active", "inactive")
SORT_FIELDS = ("name", "expiration")
SORT_DIRECTIONS = ("asc", "desc")

# Dashboard subscription filter -> statuses it admits
SUBSCRIPTION_FILTERS = {
    "all": None,
    "active": {SubscriptionStatus.ACTIVE, SubscriptionStatus.EXPIRING_SOON},
    "expiring_soon": {SubscriptionStatus.EXPIRING_SOON},
    "paused": {SubscriptionStatus.PAUSED},
    "expired": {SubscriptionStatus.EXPIRED, SubscriptionStatus.NO_SUBSCRIPTION},
}


@dataclass
class DashboardQuery:
    search: Optional[str] = None
    status: str = "all"
    subscription: str = "all"
    sort_field: str = "name"
    sort_direction: str = "asc"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass
class MemberRow:
    member: Member
    subscription: Optional[Subscription]
    classification: Classification


@dataclass
class MemberPage:
    rows: List[MemberRow]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))


@dataclass
class MemberProfile:
    member: Member
    subscriptions: List[MemberRow] = field(default_factory=list)
    classification: Optional[Classification] = None


def _snapshot(subscription: Optional[Subscription]) -> Optional[SubscriptionSnapshot]:
    return SubscriptionSnapshot.from_row(subscription) if subscription is not None else None


def classify_member(member: Member, subscription: Optional[Subscription], today: date) -> Classification:
    return engine.classify(_snapshot(subscription), bool(member.status), today)


def register_member(store: SubscriptionStore, data: Dict[str, Any]) -> Member:
    """Create a member from the public registration form. New members start active."""
    member = store.add_member(**data)
    logger.info(f"Member registered: member_id={member.id}, member_number={member.member_number}")
    return member


def list_members(store: SubscriptionStore, query: DashboardQuery, today: date) -> MemberPage:
    """
    Dashboard listing with search, filters, sorting and pagination.

    Every row is classified by the engine from the member's latest subscription.
    """
    if query.status not in STATUS_FILTERS:
        raise ValueError(f"Invalid status filter: {query.status}")
    if query.subscription not in SUBSCRIPTION_FILTERS:
        raise ValueError(f"Invalid subscription filter: {query.subscription}")
    if query.sort_field not in SORT_FIELDS or query.sort_direction not in SORT_DIRECTIONS:
        raise ValueError(f"Invalid sort: {query.sort_field}-{query.sort_direction}")

    status = None if query.status == "all" else query.status == "active"
    members = store.search_members(query.search, status)
    latest = store.latest_subscriptions(m.id for m in members)

    rows = [
        MemberRow(m, latest.get(m.id), classify_member(m, latest.get(m.id), today))
        for m in members
    ]

    admitted = SUBSCRIPTION_FILTERS[query.subscription]
    if admitted is not None:
        rows = [row for row in rows if row.classification.status in admitted]

    reverse = query.sort_direction == "desc"
    if query.sort_field == "name":
        rows.sort(key=lambda row: row.member.name.lower(), reverse=reverse)
    else:
        # Members without a subscription sort first ascending, last descending
        rows.sort(
            key=lambda row: row.subscription.expiration_date if row.subscription else date.min,
            reverse=reverse,
        )

    page_size = max(1, query.page_size)
    page = max(1, query.page)
    start = (page - 1) * page_size
    return MemberPage(rows=rows[start:start + page_size], total=len(rows), page=page, page_size=page_size)


def get_member_profile(store: SubscriptionStore, member_id: int, today: date) -> MemberProfile:
    member = store.get_member(member_id)
    subscriptions = store.subscriptions_for(member_id)

    profile = MemberProfile(member=member)
    for index, subscription in enumerate(subscriptions):
        if index == 0:
            classification = classify_member(member, subscription, today)
        else:
            # Older terms never accrue; only the latest follows the member's status
            classification = engine.classify(_snapshot(subscription), False, today)
        profile.subscriptions.append(MemberRow(member, subscription, classification))

    profile.classification = (
        profile.subscriptions[0].classification
        if profile.subscriptions
        else engine.classify(None, bool(member.status), today)
    )
    return profile


def update_member_profile(store: SubscriptionStore, member_id: int, changes: Dict[str, Any]) -> Member:
    member = store.get_member(member_id)
    if "status" in changes:
        raise ValueError("Status changes go through the status endpoint")
    if not changes:
        return member
    member = store.update_member(member, changes)
    logger.info(f"Member updated: member_id={member_id}, fields={sorted(changes)}")
    return member


def set_member_status(store: SubscriptionStore, member_id: int, new_status: bool, today: date) -> MemberRow:
    """
    Toggle a member between active and inactive.

    Going inactive pauses the latest subscription; going active resumes it.
    The member row and the subscription row are written in one transaction,
    so a failed write leaves both unchanged.

    Raises:
        MemberNotFoundError: If the member does not exist
        NoSubscriptionError: If activating a member without a usable subscription
        PersistenceError: If the store write fails
    """
    member = store.get_member(member_id)
    subscription = store.latest_subscription(member_id)
    snapshot = _snapshot(subscription)

    if bool(member.status) == new_status:
        return MemberRow(member, subscription, classify_member(member, subscription, today))

    if new_status:
        if snapshot is None:
            raise NoSubscriptionError("Member needs an active subscription to be activated.")
        if not snapshot.is_paused and engine.classify(snapshot, True, today).status == SubscriptionStatus.EXPIRED:
            raise NoSubscriptionError("Member's latest subscription has expired; add a subscription first.")
        updated = engine.resume(snapshot, today)
    else:
        current = engine.classify(snapshot, True, today) if snapshot is not None else None
        if snapshot is None or current.status == SubscriptionStatus.EXPIRED:
            # Nothing left to freeze: plain status flip
            member = store.set_member_status(member, False)
            logger.info(f"Member deactivated without accounting: member_id={member_id}")
            return MemberRow(member, subscription, classify_member(member, subscription, today))
        updated = engine.pause(snapshot, today)

    store.save_transition(member, new_status, subscription, updated)
    logger.info(
        f"Member {'activated' if new_status else 'deactivated'}: member_id={member_id}, "
        f"subscription_id={subscription.id}, changes={updated.changes_since(snapshot)}"
    )
    return MemberRow(member, subscription, classify_member(member, subscription, today))


def add_subscription(
    store: SubscriptionStore,
    member_id: int,
    payment_date: date,
    total_days: int,
    is_active: bool,
    today: date,
) -> MemberRow:
    """Append a new term for a member and activate the member if needed."""
    member = store.get_member(member_id)
    snapshot = engine.new_subscription(payment_date, total_days, is_active, today)
    subscription = store.insert_subscription(member, snapshot)
    logger.info(
        f"Subscription added: member_id={member_id}, subscription_id={subscription.id}, "
        f"payment_date={payment_date.isoformat()}, total_days={snapshot.total_days}, "
        f"active_days={snapshot.active_days}"
    )
    return MemberRow(member, subscription, classify_member(member, subscription, today))
