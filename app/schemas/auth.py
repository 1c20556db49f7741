"""
Pydantic schemas for admin authentication.
"""
from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Response schema for a successful admin login."""
    access_token: str = Field(..., description="JWT bearer token")
    token_type: str = Field("bearer", description="Token type")

    class Config:
        json_schema_extra = {
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer"
            }
        }
