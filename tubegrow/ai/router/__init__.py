"""
AI Router Module - Provider selection and fallback.

The router reads the key registry, orders the capable providers for a
request and returns the first successful, normalized result.
"""

from tubegrow.ai.router.orchestrator import (
    CAPABILITY_FIRST_ORDER,
    DEFAULT_PRIORITIES,
    FallbackRouter,
    RouteResult,
    fallback_router,
    to_data_uri,
)

__all__ = [
    "CAPABILITY_FIRST_ORDER",
    "DEFAULT_PRIORITIES",
    "FallbackRouter",
    "RouteResult",
    "fallback_router",
    "to_data_uri",
]
