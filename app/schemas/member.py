"""
Pydantic schemas for member endpoints.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.subscription import SubscriptionResponse, SubscriptionStatusResponse


class MemberRegisterRequest(BaseModel):
    """Request schema for the public registration form."""
    name: str = Field(..., min_length=2, max_length=200, description="Member's full name")
    phone: str = Field(..., min_length=10, max_length=30, description="Member's phone number")
    email: Optional[EmailStr] = Field(default=None, description="Member's email address (optional)")
    address: Optional[str] = Field(default=None, max_length=500)
    gender: Optional[str] = Field(default=None, max_length=50)
    image_url: Optional[str] = Field(default=None, description="Public URL of the profile image")

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        """The form submits an empty string when email is left blank."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "name": "John Doe",
                "phone": "01000000001",
                "email": "john.doe@example.com",
                "gender": "male"
            }
        }


class MemberUpdateRequest(BaseModel):
    """
    Request schema for profile edits.

    Status is deliberately absent: it changes only through the status endpoint
    so that pausing and resuming always run the accounting.
    """
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    phone: Optional[str] = Field(default=None, min_length=10, max_length=30)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, max_length=500)
    gender: Optional[str] = Field(default=None, max_length=50)
    image_url: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class MemberStatusRequest(BaseModel):
    """Request schema for the active/inactive toggle."""
    status: bool = Field(..., description="True to activate (resume), False to deactivate (pause)")


class MemberResponse(BaseModel):
    id: int
    member_number: int
    name: str
    phone: str
    email: Optional[str] = None
    image_url: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    status: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberListItem(MemberResponse):
    """Dashboard row: member plus the status of their latest subscription."""
    latest_subscription: Optional[SubscriptionResponse] = None
    subscription_status: SubscriptionStatusResponse


class MemberListResponse(BaseModel):
    items: List[MemberListItem]
    total: int = Field(..., description="Members matching the filters, before pagination")
    page: int
    page_size: int
    pages: int


class MemberProfileResponse(MemberResponse):
    subscriptions: List[SubscriptionResponse] = Field(default_factory=list, description="Newest first")
    subscription_status: SubscriptionStatusResponse = Field(..., description="Status of the latest subscription")
