"""
Active-days reconciliation.

Ticks every subscription of every active member so stored ``active_days`` stay
current without anyone opening the dashboard. Triggered by the
``/update-active-days`` endpoint, ``scripts/run_reconciliation.py`` or the
in-process loop in ``app.workers.reconciliation_loop``.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Dict

from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import GymError
from app.services import subscription_engine as engine
from app.services.subscription_engine import SubscriptionSnapshot
from app.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    scanned: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[Dict] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Updated {self.updated} subscriptions"

    def as_dict(self) -> Dict:
        return {
            "success": True,
            "message": self.message,
            "scanned": self.scanned,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "errors": self.errors,
        }


def reconcile_active_days(store: SubscriptionStore, today: date) -> ReconciliationResult:
    """
    Tick all reconcilable subscriptions.

    A failure on one subscription is logged and counted; the run continues with
    the rest. Writes are conditional (see ``SubscriptionStore.advance_active_days``),
    so running this concurrently with a pause or resume is safe.
    """
    result = ReconciliationResult()
    subscriptions = store.reconcilable_subscriptions()
    # Capture ids up front: a rollback expires every loaded row
    subscription_ids = [s.id for s in subscriptions]

    for subscription_id, subscription in zip(subscription_ids, subscriptions):
        result.scanned += 1
        try:
            snapshot = SubscriptionSnapshot.from_row(subscription)
            ticked = engine.tick(snapshot, True, today)
            if ticked.active_days <= snapshot.active_days:
                result.skipped += 1
                continue

            if store.advance_active_days(subscription_id, ticked.active_days, today):
                result.updated += 1
                logger.debug(
                    f"Active days advanced: subscription_id={subscription_id}, "
                    f"{snapshot.active_days} -> {ticked.active_days}"
                )
            else:
                # Row changed underneath us (paused or already advanced)
                result.skipped += 1
        except SQLAlchemyError as e:
            store.rollback()
            result.failed += 1
            result.errors.append({"subscription_id": subscription_id, "error": "database error"})
            logger.error(f"Reconciliation failed: subscription_id={subscription_id}: {e}")
        except GymError as e:
            result.failed += 1
            result.errors.append({"subscription_id": subscription_id, "error": str(e)})
            logger.error(f"Reconciliation failed: subscription_id={subscription_id}: {e}")

    logger.info(
        f"Reconciliation complete: as_of={today.isoformat()}, scanned={result.scanned}, "
        f"updated={result.updated}, skipped={result.skipped}, failed={result.failed}"
    )
    return result
