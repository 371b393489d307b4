"""
YouTube Data API Client - Read the creator's channel and recent uploads.

Key Features:
=============
1. Channel statistics for the token's own channel (mine=true)
2. Most recent uploads via the channel's uploads playlist
3. 401 / 403 mapped to AuthenticationError / ScopeNotGrantedError

API Reference:
==============
- Channels: https://developers.google.com/youtube/v3/docs/channels/list
- PlaylistItems: https://developers.google.com/youtube/v3/docs/playlistItems/list
- Videos: https://developers.google.com/youtube/v3/docs/videos/list

Usage Example:
==============
    client = YouTubeClient(access_token="ya29.xxx")

    channel = await client.get_my_channel()
    print(channel.name, channel.subscriber_count)

    for video in await client.list_recent_videos(max_results=4):
        print(video.title, video.views, video.url)
"""

import logging
from typing import List, Optional

import httpx

from tubegrow.core.config import settings
from tubegrow.environments.base import (
    APIError,
    AuthenticationError,
    EnvironmentService,
    ScopeNotGrantedError,
)
from tubegrow.environments.google.youtube.schemas import ChannelStats, YouTubeVideo


logger = logging.getLogger("tubegrow.environments.google.youtube")

YOUTUBE_SCOPES = ["https://www.googleapis.com/auth/youtube.readonly"]


class YouTubeClient(EnvironmentService):
    """
    YouTube Data API v3 client (read only).

    Attributes:
        access_token: Google OAuth access token with youtube.readonly scope
        base_url: API root (settings.YOUTUBE_API_BASE_URL)
        transport: Optional httpx transport, used by tests
    """

    service_name = "youtube"
    required_scopes = YOUTUBE_SCOPES

    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.base_url = (base_url or settings.YOUTUBE_API_BASE_URL).rstrip("/")
        self._transport = transport

    # -------------------------------------------------------------------------
    # HTTP CLIENT MANAGEMENT
    # -------------------------------------------------------------------------

    def _get_headers(self) -> dict:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    async def _make_request(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """
        GET an API endpoint and return the parsed JSON body.

        Raises:
            AuthenticationError: 401, token invalid or expired
            ScopeNotGrantedError: 403, youtube.readonly not granted
            APIError: Any other non-200 status or a network failure
        """
        url = f"{self.base_url}{endpoint}"

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.get(
                    url,
                    headers=self._get_headers(),
                    params=params,
                    timeout=30.0,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error in YouTube API: {e}")
                raise APIError(f"Network error: {e}")

        if response.status_code == 401:
            logger.error("YouTube API: Unauthorized (token may be expired)")
            raise AuthenticationError("Unauthorized - access token may be expired")

        if response.status_code == 403:
            logger.error("YouTube API: Forbidden (scope may be missing)")
            raise ScopeNotGrantedError("Forbidden - youtube.readonly scope may not be granted")

        if response.status_code != 200:
            error_detail = response.text
            logger.error(f"YouTube API error: {response.status_code} - {error_detail}")
            raise APIError(
                f"API request failed: {error_detail}",
                status_code=response.status_code,
                response=error_detail,
            )

        return response.json()

    # -------------------------------------------------------------------------
    # CHANNEL
    # -------------------------------------------------------------------------

    async def get_my_channel(self) -> ChannelStats:
        """
        Statistics for the channel owned by the token's account.

        Raises:
            APIError: If the account has no YouTube channel
        """
        data = await self._make_request(
            "/channels",
            params={"part": "snippet,statistics,contentDetails", "mine": "true"},
        )
        items = data.get("items") or []
        if not items:
            raise APIError("No YouTube channel found for this account", status_code=404)

        channel = ChannelStats.from_api(items[0])
        logger.info(f"Fetched channel {channel.id} ({channel.video_count} videos)")
        return channel

    # -------------------------------------------------------------------------
    # VIDEOS
    # -------------------------------------------------------------------------

    async def list_recent_videos(self, max_results: int = 4) -> List[YouTubeVideo]:
        """
        Most recent uploads, newest first, with view and like counts.

        Args:
            max_results: Number of videos (1-50)
        """
        max_results = max(1, min(max_results, 50))
        channel = await self.get_my_channel()
        if not channel.uploads_playlist_id:
            return []

        playlist = await self._make_request(
            "/playlistItems",
            params={
                "part": "contentDetails",
                "playlistId": channel.uploads_playlist_id,
                "maxResults": max_results,
            },
        )
        video_ids = [
            item["contentDetails"]["videoId"]
            for item in playlist.get("items") or []
            if (item.get("contentDetails") or {}).get("videoId")
        ]
        if not video_ids:
            return []

        data = await self._make_request(
            "/videos",
            params={"part": "snippet,statistics", "id": ",".join(video_ids)},
        )
        by_id = {item.get("id"): item for item in data.get("items") or []}

        # videos.list does not guarantee order; keep the playlist's order
        return [YouTubeVideo.from_api(by_id[vid]) for vid in video_ids if vid in by_id]

    async def validate_access(self) -> bool:
        try:
            await self.get_my_channel()
            return True
        except (AuthenticationError, ScopeNotGrantedError):
            return False
