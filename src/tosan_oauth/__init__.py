"""tosan-oauth - Tosan (Boom) bank OAuth 2.0 authentication strategy."""

__version__ = "0.1.0"

from tosan_oauth.config import Settings, TosanConfig, get_settings
from tosan_oauth.exceptions import (
    InternalOAuthError,
    OAuthError,
    ProviderDenialError,
    TosanAuthorizationError,
    TosanTokenError,
)
from tosan_oauth.providers import AuthOutcome, OutcomeKind, TosanStrategy
from tosan_oauth.schemas import TosanProfile

__all__ = [
    # Configuration
    "Settings",
    "TosanConfig",
    "get_settings",
    # Strategy
    "TosanStrategy",
    "AuthOutcome",
    "OutcomeKind",
    "TosanProfile",
    # Exceptions
    "OAuthError",
    "ProviderDenialError",
    "TosanAuthorizationError",
    "TosanTokenError",
    "InternalOAuthError",
]
