"""
Channel Router - The connected creator's own channel (YouTube Data API).

The dashboard runs the Google OAuth popup and forwards the access token
as "Authorization: Bearer <token>".
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from tubegrow.deps import environment_error_to_http, get_youtube_client
from tubegrow.environments.base import EnvironmentError
from tubegrow.environments.google.youtube import ChannelStats, YouTubeClient, YouTubeVideo


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/channel", tags=["channel"])


@router.get("", response_model=ChannelStats, response_model_by_alias=True)
async def get_channel(youtube: YouTubeClient = Depends(get_youtube_client)):
    try:
        return await youtube.get_my_channel()
    except EnvironmentError as e:
        raise environment_error_to_http(e)


@router.get("/videos", response_model=List[YouTubeVideo], response_model_by_alias=True)
async def get_recent_videos(
    max_results: int = Query(default=4, ge=1, le=50),
    youtube: YouTubeClient = Depends(get_youtube_client),
):
    """Latest uploads, newest first."""
    try:
        return await youtube.list_recent_videos(max_results=max_results)
    except EnvironmentError as e:
        raise environment_error_to_http(e)
