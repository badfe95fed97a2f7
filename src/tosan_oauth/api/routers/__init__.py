"""API routers."""

from tosan_oauth.api.routers import auth

__all__ = ["auth"]
