"""Tosan OAuth authentication endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse

from tosan_oauth.api.dependencies import get_strategy
from tosan_oauth.api.schemas.auth import ErrorResponse, OAuthLoginResponse
from tosan_oauth.providers.base import AuthOutcome, OutcomeKind
from tosan_oauth.providers.tosan import TosanStrategy
from tosan_oauth.schemas import TosanProfile

router = APIRouter(prefix="/api/auth", tags=["authentication"])

_ERROR_STATUS = {
    OutcomeKind.FAIL: status.HTTP_401_UNAUTHORIZED,
    OutcomeKind.DENIED: status.HTTP_400_BAD_REQUEST,
    OutcomeKind.ERROR: status.HTTP_502_BAD_GATEWAY,
}


def _error_response(outcome: AuthOutcome) -> JSONResponse:
    """Render a failed outcome."""
    error = outcome.error
    body = ErrorResponse(
        outcome=outcome.kind.value,
        error=type(error).__name__ if error is not None else None,
        message=outcome.message,
        code=getattr(error, "code", None),
        type=getattr(error, "type", None),
        subcode=getattr(error, "subcode", None),
    )
    return JSONResponse(
        status_code=_ERROR_STATUS[outcome.kind],
        content=jsonable_encoder(body, exclude_none=True),
    )


@router.get("/tosan/login", response_model=OAuthLoginResponse)
async def tosan_login(
    bank_id: Optional[str] = None,
    strategy: TosanStrategy = Depends(get_strategy),
):
    """
    Initiate Tosan OAuth login.

    Returns the authorization URL to redirect the user to. The optional
    bank_id parameter selects another bank for this login only.
    """
    effective_bank_id = bank_id or strategy.config.bank_id
    return OAuthLoginResponse(
        authorization_url=strategy.authorization_url(effective_bank_id),
        bank_id=effective_bank_id,
    )


@router.get("/tosan/callback")
async def tosan_callback(
    request: Request,
    strategy: TosanStrategy = Depends(get_strategy),
):
    """
    Handle Tosan OAuth callback.

    Exchanges the authorization code and returns the normalized profile.
    Without a code the user is redirected to Tosan.
    """
    outcome = await strategy.authenticate(request.query_params)

    if outcome.kind == OutcomeKind.REDIRECT:
        return RedirectResponse(outcome.redirect_url, status_code=status.HTTP_302_FOUND)

    if outcome.kind == OutcomeKind.SUCCESS:
        user = outcome.user
        if isinstance(user, TosanProfile):
            return JSONResponse(content=jsonable_encoder(user.to_dict(include_tokens=False)))
        return JSONResponse(content=jsonable_encoder(user))

    return _error_response(outcome)
