"""Tosan OAuth 2.0 provider implementation.

Tosan departs from OAuth 2.0 in three places handled here:

- the authorization redirect needs device, bank and sandbox parameters,
- some authorization failures come back as ``error_code``/``error_message``
  instead of ``error``,
- token endpoint errors carry an object in ``error`` instead of a string.
"""

import json
import re
from typing import Any, Mapping, Optional

import httpx
from pydantic import ValidationError

from tosan_oauth.config import ProfileMode, TosanConfig, display_bank_id
from tosan_oauth.exceptions import InternalOAuthError, TosanAuthorizationError, TosanTokenError
from tosan_oauth.logging import get_logger, log_warning
from tosan_oauth.providers.base import (
    AuthOutcome,
    OAuth2Client,
    OAuth2Hooks,
    VerifyCallback,
)
from tosan_oauth.schemas import AuthContext, TokenResponse, TosanProfile

logger = get_logger("providers.tosan")

PROVIDER_NAME = "tosan"

# Fixed query sent to the accounts endpoint
PROFILE_QUERY = {"has_address": "true", "length": "2", "offset": "0"}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of a query value, None if there is none."""
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def authorization_params(config: TosanConfig, bank_id: Optional[str] = None) -> dict[str, str]:
    """
    Extra query parameters for the Tosan authorization redirect.

    Args:
        config: Strategy configuration
        bank_id: Request-scoped bank id, defaults to the configured one

    Returns:
        Parameters merged into the authorization URL
    """
    return {
        "device_id": config.device_id,
        "state": config.state,
        "sandbox": "true" if config.sandbox else "false",
        "bank_id": bank_id or config.bank_id,
        "boom_token": config.boom_token,
        "response_type": "code",
        "client_id": config.client_id,
    }


def check_authorize_callback(query: Mapping[str, Any]) -> Optional[TosanAuthorizationError]:
    """Return the error Tosan reported through ``error_code``, if any.

    A standard ``error`` parameter takes precedence and is left to the
    generic flow.
    """
    if query.get("error_code") and not query.get("error"):
        return TosanAuthorizationError(
            query.get("error_message"), _parse_int(query.get("error_code"))
        )
    return None


def request_context(config: TosanConfig, query: Mapping[str, Any]) -> AuthContext:
    """Build the per-request context; a ``bank_id`` query value wins."""
    return AuthContext(bank_id=query.get("bank_id") or config.bank_id)


def parse_token_error(body: str, status: int) -> Optional[TosanTokenError]:
    """
    Parse a Tosan token endpoint error body.

    Args:
        body: Raw response body
        status: HTTP status code

    Returns:
        TosanTokenError when ``error`` is an object, None otherwise

    Raises:
        ValueError: If the body is not JSON
    """
    data = json.loads(body)
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        subcode = error.get("error_subcode", error.get("subcode"))
        return TosanTokenError(error.get("message"), error.get("type"), error.get("code"), subcode)
    return None


def normalize_profile(document: Mapping[str, Any], bank_id: str) -> dict[str, Any]:
    """Tag a profile document with the provider and display bank id."""
    profile = dict(document)
    profile["provider"] = PROVIDER_NAME
    profile["bankId"] = display_bank_id(bank_id)
    return profile


def token_params_profile(token: TokenResponse) -> dict[str, Any]:
    """Profile document built from token response parameters."""
    return {
        "accessToken": token.access_token,
        "refreshToken": token.refresh_token,
        "expiresIn": token.expires_in,
        "scopes": token.scope,
    }


class TosanHooks(OAuth2Hooks):
    """Tosan behaviour plugged into the generic OAuth 2.0 flow."""

    name = PROVIDER_NAME

    def __init__(self, config: TosanConfig):
        self.config = config

    def _bank_id(self, context: Optional[AuthContext]) -> str:
        return context.bank_id if context is not None else self.config.bank_id

    def authorization_params(self, context: Optional[AuthContext]) -> dict[str, Any]:
        return authorization_params(self.config, self._bank_id(context))

    def parse_error_response(self, body: str, status: int) -> Optional[Exception]:
        return parse_token_error(body, status)

    async def user_profile(
        self, client: OAuth2Client, token: TokenResponse, context: Optional[AuthContext]
    ) -> TosanProfile:
        if self.config.profile_mode == ProfileMode.TOKEN_PARAMS:
            document = token_params_profile(token)
        else:
            document = await self.fetch_profile(client, token.access_token)
        try:
            return TosanProfile.model_validate(normalize_profile(document, self._bank_id(context)))
        except ValidationError as e:
            raise InternalOAuthError("Failed to parse user profile", cause=e) from e

    async def fetch_profile(self, client: OAuth2Client, access_token: str) -> dict[str, Any]:
        """
        Fetch the accounts document used as the user profile.

        Args:
            client: OAuth client used for the request
            access_token: OAuth access token

        Returns:
            Parsed profile document

        Raises:
            TosanTokenError: If Tosan answers with an error object
            InternalOAuthError: If the request fails or the body is not JSON
        """
        try:
            body = await client.fetch(self.config.profile_url, access_token, params=PROFILE_QUERY)
        except InternalOAuthError as e:
            if e.body:
                try:
                    error = parse_token_error(e.body, e.status_code or 500)
                except ValueError:
                    error = None
                if error is not None:
                    raise error from e
            raise InternalOAuthError("Failed to fetch user profile", cause=e) from e

        try:
            document = json.loads(body)
        except ValueError as e:
            raise InternalOAuthError("Failed to parse user profile", cause=e) from e

        if not isinstance(document, dict):
            document = {"data": document}
        return document


class TosanStrategy:
    """
    Tosan authentication strategy.

    Wraps the generic OAuth 2.0 flow with Tosan's configuration, redirect
    parameters and error conventions.

    Example:
        strategy = TosanStrategy(
            TosanConfig(client_id="123-456-789", client_secret="shhh",
                        callback_url="https://www.example.net/auth/tosan/callback"),
            verify=lambda access_token, refresh_token, profile: find_user(profile),
        )
        outcome = await strategy.authenticate(request.query_params)
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        config: Optional[TosanConfig] = None,
        verify: Optional[VerifyCallback] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or TosanConfig()
        self.hooks = TosanHooks(self.config)
        self.client = OAuth2Client(
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            authorization_url=self.config.authorization_url,
            token_url=self.config.token_url,
            hooks=self.hooks,
            callback_url=self.config.callback_url,
            scope=self.config.scope,
            scope_separator=self.config.scope_separator,
            custom_headers=self.config.custom_headers,
            verify=verify,
            timeout=self.config.timeout,
            transport=transport,
        )

    def authorization_url(self, bank_id: Optional[str] = None) -> str:
        """Authorization redirect URL, optionally for another bank."""
        return self.client.authorization_redirect_url(
            AuthContext(bank_id=bank_id or self.config.bank_id)
        )

    async def authenticate(self, query: Mapping[str, Any]) -> AuthOutcome:
        """
        Authenticate a request by delegating to Tosan.

        Args:
            query: Query parameters of the incoming request

        Returns:
            AuthOutcome for the application to act on
        """
        # Tosan reports some redirect errors outside the OAuth 2.0 `error`
        # parameter; stop before any token exchange.
        error = check_authorize_callback(query)
        if error is not None:
            log_warning(
                logger,
                "Tosan authorization",
                f"error_code reported on redirect: {error.message}",
                {"error_code": error.code},
            )
            return AuthOutcome.from_error(error)

        context = request_context(self.config, query)
        outcome = await self.client.authenticate(query, context)
        logger.info(f"Tosan authenticate | outcome={outcome.kind.value} bank_id={context.bank_id}")
        return outcome
