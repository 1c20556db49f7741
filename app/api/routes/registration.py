"""
Public member registration (the sign-up form at the front desk or website).
"""
import logging
from fastapi import APIRouter, Depends, status

from app.api.deps import get_store, http_error
from app.core.errors import GymError
from app.core.logging_config import sanitize_log_data
from app.core.rate_limit import registration_rate_limit
from app.schemas.member import MemberRegisterRequest, MemberResponse
from app.services.member_service import register_member
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Registration"])


@router.post(
    "/register",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(registration_rate_limit)],
)
def register(payload: MemberRegisterRequest, store: SubscriptionStore = Depends(get_store)):
    """
    Register a new member.

    No authentication; throttled per client IP. The member starts active and
    without a subscription until an admin adds one.
    """
    data = payload.model_dump()
    logger.debug(f"Registration received: {sanitize_log_data(data)}")
    try:
        return register_member(store, data)
    except GymError as e:
        raise http_error(e)
