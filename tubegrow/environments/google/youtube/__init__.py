"""
YouTube Data API v3 - channel statistics and recent uploads.
"""

from tubegrow.environments.google.youtube.client import YOUTUBE_SCOPES, YouTubeClient
from tubegrow.environments.google.youtube.schemas import ChannelStats, YouTubeVideo

__all__ = [
    "YOUTUBE_SCOPES",
    "YouTubeClient",
    "ChannelStats",
    "YouTubeVideo",
]
