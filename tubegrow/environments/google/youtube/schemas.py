"""
YouTube Schemas - Channel and video data for the dashboard.

These Pydantic models flatten the nested YouTube Data API resources
(snippet / statistics / contentDetails) into the shape the dashboard
renders. Field aliases match the dashboard's camelCase keys.

Reference: https://developers.google.com/youtube/v3/docs
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def _count(statistics: Dict[str, Any], key: str) -> int:
    """Statistics arrive as strings ("1204500"); hidden counts are absent."""
    try:
        return int(statistics.get(key, 0))
    except (TypeError, ValueError):
        return 0


def _best_thumbnail(snippet: Dict[str, Any]) -> Optional[str]:
    thumbnails = snippet.get("thumbnails") or {}
    for size in ("maxres", "high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


class ChannelStats(BaseModel):
    """
    The authenticated user's channel.

    Built from a channels.list item with part=snippet,statistics,contentDetails.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    subscriber_count: int = Field(0, alias="subscriberCount")
    view_count: int = Field(0, alias="viewCount")
    video_count: int = Field(0, alias="videoCount")
    avatar: Optional[str] = None
    uploads_playlist_id: Optional[str] = Field(None, alias="uploadsPlaylistId")

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "ChannelStats":
        snippet = item.get("snippet") or {}
        statistics = item.get("statistics") or {}
        related = (item.get("contentDetails") or {}).get("relatedPlaylists") or {}
        return cls(
            id=item.get("id", ""),
            name=snippet.get("title", ""),
            subscriber_count=_count(statistics, "subscriberCount"),
            view_count=_count(statistics, "viewCount"),
            video_count=_count(statistics, "videoCount"),
            avatar=_best_thumbnail(snippet),
            uploads_playlist_id=related.get("uploads"),
        )


class YouTubeVideo(BaseModel):
    """One uploaded video with its public counters."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    thumbnail: Optional[str] = None
    views: int = 0
    likes: int = 0
    published_at: Optional[datetime] = Field(None, alias="publishedAt")
    url: str

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "YouTubeVideo":
        """Build from a videos.list item with part=snippet,statistics."""
        snippet = item.get("snippet") or {}
        statistics = item.get("statistics") or {}
        video_id = item.get("id", "")
        return cls(
            id=video_id,
            title=snippet.get("title", ""),
            thumbnail=_best_thumbnail(snippet),
            views=_count(statistics, "viewCount"),
            likes=_count(statistics, "likeCount"),
            published_at=snippet.get("publishedAt"),
            url=WATCH_URL.format(video_id=video_id),
        )
