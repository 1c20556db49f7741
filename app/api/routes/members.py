"""
Admin member endpoints: dashboard list, profile, edits, status toggle and
subscriptions.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_store, get_today, http_error
from app.core.auth_dependency import get_current_admin
from app.core.config import DEFAULT_PAGE_SIZE
from app.core.errors import GymError
from app.schemas.member import (
    MemberListItem,
    MemberListResponse,
    MemberProfileResponse,
    MemberResponse,
    MemberStatusRequest,
    MemberUpdateRequest,
)
from app.schemas.subscription import (
    SubscriptionCreateRequest,
    SubscriptionResponse,
    SubscriptionStatusResponse,
)
from app.services import member_service
from app.services.member_service import DashboardQuery, MemberRow
from app.services.subscription_engine import Classification
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/members",
    tags=["Members"],
    dependencies=[Depends(get_current_admin)],
)


def _status_payload(classification: Classification) -> SubscriptionStatusResponse:
    return SubscriptionStatusResponse(
        status=classification.status,
        label=classification.label,
        remaining_days=classification.remaining_days,
    )


def _subscription_payload(row: MemberRow) -> Optional[SubscriptionResponse]:
    if row.subscription is None:
        return None
    payload = SubscriptionResponse.model_validate(row.subscription)
    payload.status = _status_payload(row.classification)
    return payload


def _list_item(row: MemberRow) -> MemberListItem:
    return MemberListItem(
        **MemberResponse.model_validate(row.member).model_dump(),
        latest_subscription=_subscription_payload(row),
        subscription_status=_status_payload(row.classification),
    )


@router.get("", response_model=MemberListResponse)
def list_members(
    search: Optional[str] = Query(None, description="Name, phone or email substring"),
    status_filter: str = Query("all", alias="status", pattern="^(all|active|inactive)$"),
    subscription: str = Query("all", pattern="^(all|active|expiring_soon|paused|expired)$"),
    sort: str = Query("name-asc", pattern="^(name|expiration)-(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Dashboard list of members with the status of their latest subscription."""
    sort_field, sort_direction = sort.split("-")
    query = DashboardQuery(
        search=search,
        status=status_filter,
        subscription=subscription,
        sort_field=sort_field,
        sort_direction=sort_direction,
        page=page,
        page_size=page_size,
    )
    try:
        result = member_service.list_members(store, query, today)
    except GymError as e:
        raise http_error(e)

    return MemberListResponse(
        items=[_list_item(row) for row in result.rows],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        pages=result.pages,
    )


@router.get("/{member_id}", response_model=MemberProfileResponse)
def get_member(
    member_id: int,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Member profile with every subscription, newest first."""
    try:
        profile = member_service.get_member_profile(store, member_id, today)
    except GymError as e:
        raise http_error(e)

    return MemberProfileResponse(
        **MemberResponse.model_validate(profile.member).model_dump(),
        subscriptions=[_subscription_payload(row) for row in profile.subscriptions],
        subscription_status=_status_payload(profile.classification),
    )


@router.patch("/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: int,
    payload: MemberUpdateRequest,
    store: SubscriptionStore = Depends(get_store),
):
    """Edit profile fields. Use POST /members/{id}/status to change status."""
    try:
        return member_service.update_member_profile(store, member_id, payload.model_dump(exclude_unset=True))
    except GymError as e:
        raise http_error(e)


@router.post("/{member_id}/status", response_model=MemberListItem)
def change_member_status(
    member_id: int,
    payload: MemberStatusRequest,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """
    Activate or deactivate a member.

    Deactivating pauses the latest subscription; activating resumes it. If the
    write fails nothing is changed and the caller should revert its toggle.
    """
    try:
        row = member_service.set_member_status(store, member_id, payload.status, today)
    except GymError as e:
        raise http_error(e)
    return _list_item(row)


@router.post(
    "/{member_id}/subscriptions",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_subscription(
    member_id: int,
    payload: SubscriptionCreateRequest,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Add a subscription term. An inactive member is activated."""
    try:
        row = member_service.add_subscription(
            store,
            member_id,
            payment_date=payload.payment_date,
            total_days=payload.total_days,
            is_active=payload.is_active,
            today=today,
        )
    except GymError as e:
        raise http_error(e)
    except ValueError as e:
        logger.warning(f"Invalid subscription for member {member_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _subscription_payload(row)
