"""
Pydantic schemas for subscription endpoints.
"""
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from app.services.subscription_engine import SubscriptionStatus


class SubscriptionCreateRequest(BaseModel):
    """Request schema for adding a subscription (new term or renewal)."""
    payment_date: date = Field(..., description="Date the term was paid and starts")
    total_days: int = Field(..., gt=0, le=3650, description="Length of the term in days")
    is_active: bool = Field(
        default=True,
        description="Count days already elapsed since payment_date as used",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "payment_date": "2024-01-01",
                "total_days": 30,
                "is_active": True
            }
        }


class SubscriptionStatusResponse(BaseModel):
    status: SubscriptionStatus
    label: str = Field(..., description="Human-readable status")
    remaining_days: int = Field(..., ge=0)


class SubscriptionResponse(BaseModel):
    id: int
    member_id: int
    payment_date: date
    expiration_date: date
    total_days: int
    active_days: int
    inactive_days: int
    inactive_start_date: Optional[date] = None
    days_remaining: Optional[int] = None
    last_active_date: Optional[date] = None
    status: Optional[SubscriptionStatusResponse] = None

    class Config:
        from_attributes = True
