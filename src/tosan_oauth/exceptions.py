"""OAuth exceptions for tosan-oauth.

Two families exist. ``ProviderDenialError`` subclasses mean the provider
refused the request (the redirect or the token endpoint reported an error);
applications route these into their denial handling. ``InternalOAuthError``
wraps transport and parsing faults.
"""

from typing import Any, Optional


class OAuthError(Exception):
    """Base OAuth error."""

    def __init__(self, message: Optional[str] = None, status: int = 500):
        self.message = message or ""
        self.status = status
        super().__init__(self.message)


class ProviderDenialError(OAuthError):
    """Raised when the provider reports an error for the current attempt."""


class AuthorizationError(ProviderDenialError):
    """Standard OAuth 2.0 error received on the authorization redirect.

    Carries the ``error_description``, ``error`` and ``error_uri`` parameters.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        uri: Optional[str] = None,
        status: int = 500,
    ):
        self.code = code or "server_error"
        self.uri = uri
        if status == 500:
            if self.code == "access_denied":
                status = 403
            elif self.code == "server_error":
                status = 502
            elif self.code == "temporarily_unavailable":
                status = 503
        super().__init__(message, status)


class TokenError(ProviderDenialError):
    """Standard OAuth 2.0 error received from the token endpoint."""

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        uri: Optional[str] = None,
        status: int = 500,
    ):
        self.code = code or "invalid_request"
        self.uri = uri
        super().__init__(message, status)


class TosanAuthorizationError(ProviderDenialError):
    """Error reported by Tosan on the authorization redirect.

    Tosan signals some failures with ``error_code`` and ``error_message``
    query parameters instead of the OAuth 2.0 ``error`` parameter.
    """

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        self.code = code
        super().__init__(message)


class TosanTokenError(ProviderDenialError):
    """Error object returned by the Tosan token endpoint.

    Tosan returns ``{"error": {"message", "type", "code", "error_subcode"}}``
    where OAuth 2.0 expects a plain string ``error``.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        error_type: Any = None,
        code: Any = None,
        subcode: Any = None,
    ):
        self.type = error_type
        self.code = code
        self.subcode = subcode
        super().__init__(message)


class InternalOAuthError(OAuthError):
    """Raised when talking to the provider fails for a non-protocol reason."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.cause = cause
        self.status_code = status_code
        self.body = body
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status {self.status_code})"
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message
