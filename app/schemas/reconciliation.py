"""
Pydantic schemas for the active-days reconciliation trigger.
"""
from typing import List
from pydantic import BaseModel, Field


class ReconciliationErrorItem(BaseModel):
    subscription_id: int
    error: str


class ReconciliationResponse(BaseModel):
    success: bool
    message: str = Field(..., description="e.g. 'Updated 3 subscriptions'")
    scanned: int
    updated: int
    skipped: int
    failed: int
    errors: List[ReconciliationErrorItem] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "Updated 3 subscriptions",
                "scanned": 10,
                "updated": 3,
                "skipped": 7,
                "failed": 0,
                "errors": []
            }
        }
