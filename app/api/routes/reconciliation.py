"""
Trigger for the active-days reconciliation job.
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends

from app.api.deps import get_store, get_today
from app.core.auth_dependency import get_current_admin
from app.schemas.reconciliation import ReconciliationResponse
from app.services.reconciliation_service import reconcile_active_days
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reconciliation"], dependencies=[Depends(get_current_admin)])


@router.post("/update-active-days", response_model=ReconciliationResponse)
def update_active_days(
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """
    Advance active days for every active, unpaused subscription.

    Per-subscription failures are reported in the response and do not stop the run.
    """
    result = reconcile_active_days(store, today)
    return result.as_dict()
