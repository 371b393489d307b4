"""
Tests for the YouTube Data API client.

Uses httpx.MockTransport so no request leaves the process.
"""

import httpx
import pytest

from tubegrow.environments import APIError, AuthenticationError, ScopeNotGrantedError
from tubegrow.environments.google.youtube import ChannelStats, YouTubeClient


CHANNEL_ITEM = {
    "id": "UC123",
    "snippet": {
        "title": "Sourdough Sam",
        "thumbnails": {
            "default": {"url": "https://img.example/default.jpg"},
            "high": {"url": "https://img.example/high.jpg"},
        },
    },
    "statistics": {"subscriberCount": "12500", "viewCount": "990000", "videoCount": "42"},
    "contentDetails": {"relatedPlaylists": {"uploads": "UU123"}},
}

PLAYLIST = {
    "items": [
        {"contentDetails": {"videoId": "v2"}},
        {"contentDetails": {"videoId": "v1"}},
    ]
}

VIDEOS = {
    "items": [
        {
            "id": "v1",
            "snippet": {"title": "Older", "publishedAt": "2026-01-01T10:00:00Z"},
            "statistics": {"viewCount": "100", "likeCount": "5"},
        },
        {
            "id": "v2",
            "snippet": {"title": "Newest", "publishedAt": "2026-02-01T10:00:00Z"},
            "statistics": {"viewCount": "300"},
        },
    ]
}


def _client(handler) -> YouTubeClient:
    return YouTubeClient(
        access_token="ya29.test",
        base_url="https://yt.example/v3",
        transport=httpx.MockTransport(handler),
    )


def _api(requests):
    """Serve the canned channel / playlist / videos payloads."""
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path.endswith("/channels"):
            return httpx.Response(200, json={"items": [CHANNEL_ITEM]})
        if path.endswith("/playlistItems"):
            return httpx.Response(200, json=PLAYLIST)
        if path.endswith("/videos"):
            return httpx.Response(200, json=VIDEOS)
        return httpx.Response(404, text="not found")
    return handler


class TestGetMyChannel:
    @pytest.mark.asyncio
    async def test_parses_channel(self):
        requests = []
        channel = await _client(_api(requests)).get_my_channel()

        assert channel.id == "UC123"
        assert channel.name == "Sourdough Sam"
        assert channel.subscriber_count == 12500
        assert channel.video_count == 42
        assert channel.avatar == "https://img.example/high.jpg"
        assert channel.uploads_playlist_id == "UU123"

        request = requests[0]
        assert request.headers["Authorization"] == "Bearer ya29.test"
        assert request.url.params["mine"] == "true"

    @pytest.mark.asyncio
    async def test_no_channel_is_404(self):
        client = _client(lambda request: httpx.Response(200, json={"items": []}))

        with pytest.raises(APIError) as exc_info:
            await client.get_my_channel()

        assert exc_info.value.status_code == 404

    def test_aliases_for_dashboard(self):
        data = ChannelStats.from_api(CHANNEL_ITEM).model_dump(by_alias=True)

        assert data["subscriberCount"] == 12500
        assert data["uploadsPlaylistId"] == "UU123"


class TestListRecentVideos:
    @pytest.mark.asyncio
    async def test_keeps_playlist_order(self):
        requests = []
        videos = await _client(_api(requests)).list_recent_videos(max_results=2)

        assert [v.id for v in videos] == ["v2", "v1"]
        assert videos[0].views == 300
        assert videos[0].likes == 0
        assert videos[1].url == "https://www.youtube.com/watch?v=v1"

        videos_request = requests[-1]
        assert videos_request.url.params["id"] == "v2,v1"

    @pytest.mark.asyncio
    async def test_max_results_is_clamped(self):
        requests = []
        await _client(_api(requests)).list_recent_videos(max_results=500)

        playlist_request = requests[1]
        assert playlist_request.url.params["maxResults"] == "50"

    @pytest.mark.asyncio
    async def test_empty_playlist(self):
        def handler(request):
            if request.url.path.endswith("/channels"):
                return httpx.Response(200, json={"items": [CHANNEL_ITEM]})
            return httpx.Response(200, json={"items": []})

        assert await _client(handler).list_recent_videos() == []


class TestErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,error_type", [
        (401, AuthenticationError),
        (403, ScopeNotGrantedError),
        (500, APIError),
    ])
    async def test_status_mapping(self, status_code, error_type):
        client = _client(lambda request: httpx.Response(status_code, text="boom"))

        with pytest.raises(error_type):
            await client.get_my_channel()

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(APIError):
            await _client(handler).get_my_channel()

    @pytest.mark.asyncio
    async def test_validate_access(self):
        assert await _client(_api([])).validate_access() is True

        denied = _client(lambda request: httpx.Response(401))
        assert await denied.validate_access() is False
