"""
Base classes and interfaces for external API integrations.

Each service client (YouTube today) subclasses EnvironmentService and raises
the exceptions below, so the HTTP routers can map failures to status codes
without knowing which API produced them.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class EnvironmentError(Exception):
    """Base exception for all environment-related errors."""
    pass


class AuthenticationError(EnvironmentError):
    """Raised when the OAuth token is missing, invalid or expired."""
    pass


class ScopeNotGrantedError(EnvironmentError):
    """Raised when trying to access an API without the required scope."""
    pass


class APIError(EnvironmentError):
    """Raised when an API call to the provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class EnvironmentService(ABC):
    """
    Abstract base class for an authenticated API service.

    Example Implementation:
        class YouTubeClient(EnvironmentService):
            service_name = "youtube"
            required_scopes = ["https://www.googleapis.com/auth/youtube.readonly"]
    """

    # Unique identifier for this service
    service_name: str = ""

    # OAuth scopes required for this service to function
    required_scopes: List[str] = []

    @abstractmethod
    async def validate_access(self) -> bool:
        """True if the client's token can call this service."""
        pass
