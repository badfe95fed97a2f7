"""Configuration management for tosan-oauth."""

import base64
from enum import Enum
from functools import lru_cache
from typing import Any, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

# Tosan OAuth endpoints
TOSAN_AUTH_URL = "https://app.tosanboom.com:4433/oauth/authorize"
TOSAN_TOKEN_URL = "https://app.tosanboom.com:4433/oauth/token"
TOSAN_PROFILE_URL = "https://app.tosanboom.com:4432/v1/accounts"

# Bank identifiers
DEFAULT_BANK_ID = "ANSBIR"
PRODUCTION_BANK_ID = "BOOMIR"


def resolve_bank_id(bank_id: str, sandbox: bool) -> str:
    """Return the bank id used on the wire.

    Outside sandbox mode the public ``ANSBIR`` id is sent as ``BOOMIR``.
    """
    if not sandbox and bank_id == DEFAULT_BANK_ID:
        return PRODUCTION_BANK_ID
    return bank_id


def display_bank_id(bank_id: str) -> str:
    """Return the bank id reported to applications."""
    if bank_id == PRODUCTION_BANK_ID:
        return DEFAULT_BANK_ID
    return bank_id


class ProfileMode(str, Enum):
    """How the user profile is built after token exchange."""

    FETCH = "fetch"  # GET the accounts endpoint with the access token
    TOKEN_PARAMS = "token_params"  # Use token response parameters only


def _option(default: Any, *aliases: str, **kwargs: Any) -> Any:
    return Field(default=default, validation_alias=AliasChoices(*aliases), **kwargs)


class TosanConfig(BaseModel):
    """Normalized Tosan strategy options.

    Accepts both snake_case names and the camelCase option names used by
    existing Tosan integrations (``clientID``, ``bankId``, ``callbackURL``...).
    Missing, ``None`` and empty values fall back to the documented defaults.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    # sandbox is declared first so bank_id validation can see it
    sandbox: bool = _option(False, "sandbox")
    bank_id: str = _option(DEFAULT_BANK_ID, "bank_id", "bankId", validate_default=True)
    boom_token: str = _option("", "boom_token", "boomToken")
    device_id: str = _option("", "device_id", "deviceId")
    state: str = _option("1", "state")
    client_id: str = _option("", "client_id", "clientID", "clientId")
    client_secret: str = _option("", "client_secret", "clientSecret")
    authorization_url: str = _option(TOSAN_AUTH_URL, "authorization_url", "authorizationURL")
    token_url: str = _option(TOSAN_TOKEN_URL, "token_url", "tokenURL")
    scope: Union[str, list[str]] = _option("", "scope")
    scope_separator: str = _option(",", "scope_separator", "scopeSeparator")
    callback_url: str = _option("", "callback_url", "callbackURL")
    profile_url: str = _option(TOSAN_PROFILE_URL, "profile_url", "profileURL")
    profile_mode: ProfileMode = _option(ProfileMode.FETCH, "profile_mode", "profileMode")
    timeout: float = _option(10.0, "timeout")

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_options(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data

    @field_validator("bank_id")
    @classmethod
    def _remap_bank_id(cls, value: str, info: ValidationInfo) -> str:
        return resolve_bank_id(value, info.data.get("sandbox", False))

    @property
    def basic_auth(self) -> str:
        """Base64 of ``<client_id>:<client_secret>``."""
        raw = f"{self.client_id}:{self.client_secret}".encode("utf-8")
        return base64.b64encode(raw).decode("ascii")

    @property
    def custom_headers(self) -> dict[str, str]:
        """Headers sent with every token exchange request."""
        return {"Authorization": f"Basic {self.basic_auth}"}

    @property
    def display_bank_id(self) -> str:
        return display_bank_id(self.bank_id)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Tosan OAuth (unset values use TosanConfig defaults)
    tosan_client_id: Optional[str] = None
    tosan_client_secret: Optional[str] = None
    tosan_callback_url: Optional[str] = None
    tosan_scope: Optional[str] = None
    tosan_scope_separator: Optional[str] = None
    tosan_sandbox: bool = False
    tosan_bank_id: Optional[str] = None
    tosan_boom_token: Optional[str] = None
    tosan_device_id: Optional[str] = None
    tosan_state: Optional[str] = None
    tosan_authorization_url: Optional[str] = None
    tosan_token_url: Optional[str] = None
    tosan_profile_url: Optional[str] = None
    tosan_profile_mode: Optional[ProfileMode] = None
    tosan_timeout: Optional[float] = None

    # Logging
    log_level: str = "WARNING"
    log_format: str = "standard"  # "standard" or "json"
    log_file: Optional[str] = None

    # Debug mode
    debug: bool = False

    def tosan_config(self, **overrides: Any) -> TosanConfig:
        """Build the strategy configuration from these settings.

        Args:
            **overrides: Option values taking precedence over the environment

        Returns:
            Normalized TosanConfig
        """
        prefix = "tosan_"
        options = {
            name[len(prefix):]: value
            for name, value in self.model_dump().items()
            if name.startswith(prefix) and value is not None
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return TosanConfig.model_validate(options)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
