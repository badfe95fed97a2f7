"""FastAPI dependencies."""

from functools import lru_cache

from tosan_oauth.config import get_settings
from tosan_oauth.providers.tosan import TosanStrategy


@lru_cache
def get_strategy() -> TosanStrategy:
    """
    Dependency for the configured Tosan strategy.

    Built once from settings; the strategy holds no per-request state.

    Usage:
        @router.get("/callback")
        async def callback(strategy: TosanStrategy = Depends(get_strategy)):
            ...
    """
    return TosanStrategy(get_settings().tosan_config())
