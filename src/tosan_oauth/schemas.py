"""Pydantic schemas for the Tosan OAuth flow."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Token fields only present in token_params mode
_TOKEN_KEYS = ("accessToken", "refreshToken", "expiresIn", "scopes")
_SECRET_TOKEN_KEYS = ("accessToken", "refreshToken")


class TokenResponse(BaseModel):
    """Parsed token endpoint response.

    Unknown parameters are kept so they reach the profile builder. Values
    other than the access and refresh tokens are passed through untyped.
    """

    model_config = ConfigDict(extra="allow")

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Any = None
    expires_in: Any = None
    scope: Any = None


class AuthContext(BaseModel):
    """Values scoped to a single authenticate() call."""

    model_config = ConfigDict(frozen=True)

    bank_id: str


class TosanProfile(BaseModel):
    """Normalized Tosan user profile.

    Holds every field of the source document plus the provider tag and the
    display bank id. Document keys, token parameters included, are kept as
    extra fields. Serialize with ``by_alias=True`` for the wire shape.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "provider": "tosan",
                "bankId": "ANSBIR",
                "accounts": [{"number": "1234-56-789", "currency": "IRR"}],
            }
        },
    )

    provider: str = "tosan"
    bank_id: str = Field(alias="bankId")

    def to_dict(self, include_tokens: bool = True) -> dict[str, Any]:
        """
        Profile in its wire shape.

        Args:
            include_tokens: Keep ``accessToken`` and ``refreshToken``. Pass
                False for anything sent back to the browser.
        """
        data = self.model_dump(by_alias=True)
        for key in _TOKEN_KEYS:
            if key in data and data[key] is None:
                del data[key]
        if not include_tokens:
            for key in _SECRET_TOKEN_KEYS:
                data.pop(key, None)
        return data
