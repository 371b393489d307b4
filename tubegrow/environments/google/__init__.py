"""
Google Environment Module - YouTube Data API integration.

Usage:
======
    from tubegrow.environments.google import YouTubeClient

    youtube = YouTubeClient(access_token="ya29.xxx")
    channel = await youtube.get_my_channel()
    videos = await youtube.list_recent_videos(max_results=4)
"""

from tubegrow.environments.google.youtube import ChannelStats, YouTubeClient, YouTubeVideo

__all__ = [
    "ChannelStats",
    "YouTubeClient",
    "YouTubeVideo",
]
