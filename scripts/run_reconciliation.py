"""
Cron entry point for the active-days reconciliation job.
Run daily: python -m scripts.run_reconciliation [YYYY-MM-DD]

Exits 0 when every subscription was processed, 2 when some failed.
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date
import logging

from app.core import config
from app.core.errors import InvalidDateError
from app.core.logging_config import setup_logging
from app.services.subscription_engine import parse_date
from app.workers.reconciliation_loop import run_once

logger = logging.getLogger(__name__)


def main(argv) -> int:
    setup_logging(config.LOG_LEVEL, config.LOG_DIR)

    try:
        today = parse_date(argv[1], "as-of date") if len(argv) > 1 else date.today()
    except InvalidDateError as e:
        logger.error(str(e))
        return 1

    result = run_once(today)
    logger.info(result.message)
    for error in result.errors:
        logger.warning(f"Subscription {error['subscription_id']} failed: {error['error']}")

    return 2 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
