"""Pydantic schemas for auth API endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class OAuthLoginResponse(BaseModel):
    """Authorization URL to send the user to."""

    authorization_url: str
    bank_id: str = Field(description="Bank id sent to Tosan")


class ErrorResponse(BaseModel):
    """Authentication failure."""

    outcome: str = Field(description="fail, denied or error")
    error: Optional[str] = Field(default=None, description="Error class name")
    message: Optional[str] = None
    code: Optional[Any] = None
    type: Optional[Any] = None
    subcode: Optional[Any] = None

    class Config:
        json_schema_extra = {
            "example": {
                "outcome": "denied",
                "error": "TosanTokenError",
                "message": "Invalid authorization code",
                "code": 190,
                "type": "OAuthException",
                "subcode": 460,
            }
        }
