"""Generic OAuth 2.0 authorization code flow.

Handles the redirect, the code-for-token exchange and bearer-authenticated
resource requests. Provider specifics are supplied through an
:class:`OAuth2Hooks` instance passed to :class:`OAuth2Client`.
"""

import inspect
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode

import httpx
from pydantic import ValidationError

from tosan_oauth.exceptions import (
    AuthorizationError,
    InternalOAuthError,
    OAuthError,
    ProviderDenialError,
    TokenError,
)
from tosan_oauth.logging import get_logger, log_failure
from tosan_oauth.schemas import TokenResponse

logger = get_logger("providers.base")

# verify(access_token, refresh_token, profile) -> user, sync or async
VerifyCallback = Callable[[str, Optional[str], Any], Union[Any, Awaitable[Any]]]


class OutcomeKind(str, Enum):
    """Result of an authenticate() call."""

    REDIRECT = "redirect"  # Send the browser to the provider
    SUCCESS = "success"  # User authenticated
    FAIL = "fail"  # User denied consent or verify rejected the user
    DENIED = "denied"  # Provider reported an error
    ERROR = "error"  # Transport, parsing or application fault


@dataclass(frozen=True)
class AuthOutcome:
    """What the application should do after an authenticate() call."""

    kind: OutcomeKind
    redirect_url: Optional[str] = None
    user: Any = None
    profile: Any = None
    error: Optional[Exception] = None
    message: Optional[str] = None

    @classmethod
    def redirect(cls, url: str) -> "AuthOutcome":
        return cls(OutcomeKind.REDIRECT, redirect_url=url)

    @classmethod
    def success(cls, user: Any, profile: Any = None) -> "AuthOutcome":
        return cls(OutcomeKind.SUCCESS, user=user, profile=profile)

    @classmethod
    def fail(cls, message: Optional[str] = None) -> "AuthOutcome":
        return cls(OutcomeKind.FAIL, message=message)

    @classmethod
    def from_error(cls, error: Exception) -> "AuthOutcome":
        """Route provider denials apart from faults."""
        kind = OutcomeKind.DENIED if isinstance(error, ProviderDenialError) else OutcomeKind.ERROR
        return cls(kind, error=error, message=str(error))

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.REDIRECT, OutcomeKind.SUCCESS)


class OAuth2Hooks(ABC):
    """Provider-specific extension points of the OAuth 2.0 flow."""

    name: str = "oauth2"

    @abstractmethod
    def authorization_params(self, context: Any) -> dict[str, Any]:
        """
        Extra query parameters for the authorization redirect.

        Args:
            context: Request-scoped values passed to authenticate()

        Returns:
            Parameters merged over the standard ones
        """
        pass

    def parse_error_response(self, body: str, status: int) -> Optional[Exception]:
        """
        Build an error from a failed token endpoint response.

        Returns None to fall back to standard OAuth 2.0 parsing. A
        ValueError (malformed body) is reported as an internal error.
        """
        return None

    async def user_profile(
        self, client: "OAuth2Client", token: TokenResponse, context: Any
    ) -> Any:
        """Load the user profile after a successful token exchange."""
        return {}


class OAuth2Client:
    """OAuth 2.0 authorization code flow driven by a set of hooks."""

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        authorization_url: str,
        token_url: str,
        hooks: OAuth2Hooks,
        callback_url: str = "",
        scope: Union[str, list[str]] = "",
        scope_separator: str = " ",
        custom_headers: Optional[dict[str, str]] = None,
        verify: Optional[VerifyCallback] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.hooks = hooks
        self.callback_url = callback_url
        self.scope = scope
        self.scope_separator = scope_separator
        self.custom_headers = custom_headers or {}
        self.verify = verify
        self.timeout = timeout
        self._transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def authorization_redirect_url(self, context: Any = None) -> str:
        """
        Build the URL the user is redirected to for consent.

        Args:
            context: Request-scoped values handed to the hooks

        Returns:
            Full authorization URL with query parameters
        """
        params: dict[str, Any] = {"response_type": "code"}
        if self.callback_url:
            params["redirect_uri"] = self.callback_url

        scope = self.scope
        if isinstance(scope, list):
            scope = self.scope_separator.join(scope)
        if scope:
            params["scope"] = scope

        params.update(self.hooks.authorization_params(context))

        separator = "&" if "?" in self.authorization_url else "?"
        return f"{self.authorization_url}{separator}{urlencode(params)}"

    @staticmethod
    def parse_error_response(body: str, status: int) -> Optional[TokenError]:
        """Parse a standard OAuth 2.0 token endpoint error body."""
        data = json.loads(body)
        if isinstance(data, dict) and isinstance(data.get("error"), str):
            return TokenError(data.get("error_description"), data["error"], data.get("error_uri"))
        return None

    def _token_error(self, body: str, status: int) -> Exception:
        try:
            error = self.hooks.parse_error_response(body, status)
            if error is None:
                error = self.parse_error_response(body, status)
        except ValueError as e:
            return InternalOAuthError(
                "Failed to obtain access token", cause=e, status_code=status, body=body
            )
        if error is None:
            return InternalOAuthError("Failed to obtain access token", status_code=status, body=body)
        return error

    @staticmethod
    def _parse_token_body(body: str) -> dict[str, Any]:
        # Some servers answer with form-encoding instead of JSON
        try:
            data = json.loads(body)
        except ValueError:
            return dict(parse_qsl(body))
        if not isinstance(data, dict):
            raise InternalOAuthError("Failed to parse access token response")
        return data

    async def exchange_code(self, code: str) -> TokenResponse:
        """
        Exchange authorization code for access token.

        Args:
            code: Authorization code from OAuth callback

        Returns:
            Parsed token response

        Raises:
            ProviderDenialError: If the token endpoint reports an error
            InternalOAuthError: If the request or response handling fails
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if self.callback_url:
            data["redirect_uri"] = self.callback_url

        headers = {"Accept": "application/json", **self.custom_headers}

        logger.info(
            f"Token exchange attempt | provider={self.hooks.name} client_id={self.client_id}"
        )

        async with self._http_client() as client:
            try:
                response = await client.post(self.token_url, data=data, headers=headers)
            except httpx.RequestError as e:
                raise InternalOAuthError("Failed to obtain access token", cause=e) from e

        if not response.is_success:
            raise self._token_error(response.text, response.status_code)

        try:
            token = TokenResponse.model_validate(self._parse_token_body(response.text))
        except ValidationError as e:
            raise InternalOAuthError("Failed to parse access token response", cause=e) from e
        if not token.access_token:
            raise InternalOAuthError("Failed to obtain access token")

        logger.info(f"Token exchange SUCCESS | provider={self.hooks.name}")
        return token

    async def fetch(
        self, url: str, access_token: str, params: Optional[Mapping[str, Any]] = None
    ) -> str:
        """
        GET a protected resource with bearer authentication.

        Args:
            url: Resource URL
            access_token: OAuth access token, sent in the Authorization header
            params: Optional query parameters

        Returns:
            Response body text

        Raises:
            InternalOAuthError: On transport failure or a non-2xx status. The
                status code and body are kept on the error.
        """
        headers = {"Authorization": f"Bearer {access_token}"}

        async with self._http_client() as client:
            try:
                response = await client.get(url, params=params, headers=headers)
            except httpx.RequestError as e:
                raise InternalOAuthError("Failed to fetch resource", cause=e) from e

        if not response.is_success:
            raise InternalOAuthError(
                "Failed to fetch resource",
                status_code=response.status_code,
                body=response.text,
            )
        return response.text

    async def _verify(self, token: TokenResponse, profile: Any) -> Any:
        if self.verify is None:
            return profile
        result = self.verify(token.access_token, token.refresh_token, profile)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def authenticate(self, query: Mapping[str, Any], context: Any = None) -> AuthOutcome:
        """
        Run one step of the authorization code flow.

        Without a ``code`` the user is sent to the provider. With a ``code``
        it is exchanged, the profile loaded and handed to the verify callback.

        Args:
            query: Callback query parameters
            context: Request-scoped values handed to the hooks

        Returns:
            AuthOutcome describing the result
        """
        error = query.get("error")
        if error:
            if error == "access_denied":
                return AuthOutcome.fail(query.get("error_description"))
            return AuthOutcome.from_error(
                AuthorizationError(query.get("error_description"), error, query.get("error_uri"))
            )

        code = query.get("code")
        if not code:
            return AuthOutcome.redirect(self.authorization_redirect_url(context))

        try:
            token = await self.exchange_code(code)
            profile = await self.hooks.user_profile(self, token, context)
        except OAuthError as e:
            log_failure(logger, "OAuth callback", e, {"provider": self.hooks.name})
            return AuthOutcome.from_error(e)

        try:
            user = await self._verify(token, profile)
        except Exception as e:
            log_failure(logger, "Verify callback", e, {"provider": self.hooks.name})
            return AuthOutcome.from_error(e)

        if not user:
            return AuthOutcome.fail()
        return AuthOutcome.success(user, profile)
