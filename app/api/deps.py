"""
Shared route dependencies and error translation.
"""
from datetime import date

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.errors import (
    GymError,
    InvalidDateError,
    MemberNotFoundError,
    NoSubscriptionError,
    PersistenceError,
)
from app.db.session import get_db
from app.services.subscription_store import SubscriptionStore


def get_store(db: Session = Depends(get_db)) -> SubscriptionStore:
    return SubscriptionStore(db)


def get_today() -> date:
    """The accounting date for a request. Overridden in tests."""
    return date.today()


_STATUS_BY_ERROR = {
    MemberNotFoundError: status.HTTP_404_NOT_FOUND,
    NoSubscriptionError: status.HTTP_409_CONFLICT,
    InvalidDateError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(error: GymError) -> HTTPException:
    """Map a domain error to the HTTPException the route should raise."""
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
