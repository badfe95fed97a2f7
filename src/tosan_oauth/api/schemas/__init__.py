"""Pydantic schemas for API request/response validation."""

from tosan_oauth.api.schemas.auth import ErrorResponse, OAuthLoginResponse

__all__ = [
    "ErrorResponse",
    "OAuthLoginResponse",
]
