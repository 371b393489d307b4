"""
Environments Module - External Service Integrations

environments/
├── base.py               # Exceptions and the EnvironmentService contract
└── google/
    └── youtube/          # YouTube Data API v3 (read only)
        ├── client.py     # httpx client
        └── schemas.py    # ChannelStats, YouTubeVideo

OAuth itself happens in the dashboard; clients here only receive the
resulting access token.
"""

from tubegrow.environments.base import (
    APIError,
    AuthenticationError,
    EnvironmentError,
    EnvironmentService,
    ScopeNotGrantedError,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "EnvironmentError",
    "EnvironmentService",
    "ScopeNotGrantedError",
]
