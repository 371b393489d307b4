"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Services are provided through small getter functions so tests can swap
them with app.dependency_overrides. The error helpers turn router and
environment exceptions into HTTPExceptions with a structured detail.
"""

import base64

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tubegrow.ai.errors import NoProviderConfiguredError, RouterError
from tubegrow.ai.monitoring import AIMonitor, ai_monitor
from tubegrow.ai.registry import KeyRegistry, key_registry
from tubegrow.environments.base import (
    APIError,
    AuthenticationError,
    EnvironmentError,
    ScopeNotGrantedError,
)
from tubegrow.environments.google.youtube import YouTubeClient
from tubegrow.services.chat_service import ChatService, chat_service
from tubegrow.services.growth_service import GrowthService, growth_service

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# The dashboard forwards the Google OAuth access token as a bearer token
security = HTTPBearer()


# ---------------------------------------------------------------------------
# SERVICE PROVIDERS
# ---------------------------------------------------------------------------

def get_growth_service() -> GrowthService:
    return growth_service


def get_chat_service() -> ChatService:
    return chat_service


def get_key_registry() -> KeyRegistry:
    return key_registry


def get_ai_monitor() -> AIMonitor:
    return ai_monitor


def get_youtube_client(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> YouTubeClient:
    """Build a YouTube client from the "Authorization: Bearer <token>" header."""
    return YouTubeClient(access_token=credentials.credentials)


# ---------------------------------------------------------------------------
# ERROR TRANSLATION
# ---------------------------------------------------------------------------

def router_error_to_http(error: RouterError) -> HTTPException:
    """
    503 when no provider is configured, 502 when every provider failed.

    The detail carries the error code, the combined message verbatim and
    one entry per failed attempt.
    """
    if isinstance(error, NoProviderConfiguredError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(
        status_code=status_code,
        detail={
            "code": error.code,
            "message": error.message,
            "failures": [f.to_dict() for f in error.failures],
        },
    )


def environment_error_to_http(error: EnvironmentError) -> HTTPException:
    if isinstance(error, AuthenticationError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "youtube_unauthorized", "message": str(error)},
        )
    if isinstance(error, ScopeNotGrantedError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "youtube_scope_missing", "message": str(error)},
        )
    status_code = status.HTTP_502_BAD_GATEWAY
    if isinstance(error, APIError) and error.status_code == 404:
        status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(
        status_code=status_code,
        detail={"code": "youtube_api_error", "message": str(error)},
    )


def validation_error_to_http(error: ValueError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"code": "invalid_input", "message": str(error)},
    )


def decode_base64(data: str, field_name: str) -> bytes:
    """Decode a base64 upload, accepting an optional data URI prefix."""
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except ValueError:
        raise ValueError(f"{field_name} is not valid base64")
