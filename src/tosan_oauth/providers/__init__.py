"""OAuth providers for tosan-oauth."""

from tosan_oauth.providers.base import AuthOutcome, OAuth2Client, OAuth2Hooks, OutcomeKind
from tosan_oauth.providers.tosan import TosanHooks, TosanStrategy

__all__ = [
    "AuthOutcome",
    "OAuth2Client",
    "OAuth2Hooks",
    "OutcomeKind",
    "TosanHooks",
    "TosanStrategy",
]
