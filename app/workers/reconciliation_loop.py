"""
Optional in-process reconciliation loop.

Started with the app when RECONCILE_INTERVAL_SEC > 0. Deployments with an
external scheduler run scripts/run_reconciliation.py instead.
"""
import asyncio
import logging
from datetime import date

from app.db.session import SessionLocal
from app.services.reconciliation_service import reconcile_active_days, ReconciliationResult
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

MIN_INTERVAL_SEC = 60


def run_once(today: date = None) -> ReconciliationResult:
    """One reconciliation run on a fresh session."""
    db = SessionLocal()
    try:
        return reconcile_active_days(SubscriptionStore(db), today or date.today())
    finally:
        db.close()


async def reconciliation_loop(interval_sec: int) -> None:
    """Run reconciliation every ``interval_sec`` seconds until cancelled."""
    sleep_for = max(MIN_INTERVAL_SEC, int(interval_sec))
    logger.info(f"Reconciliation loop started (every {sleep_for}s)")

    while True:
        try:
            result = await asyncio.to_thread(run_once)
            if result.updated or result.failed:
                logger.info(
                    f"Scheduled reconciliation: updated={result.updated}, failed={result.failed}"
                )
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Reconciliation loop iteration failed")
        await asyncio.sleep(sleep_for)
