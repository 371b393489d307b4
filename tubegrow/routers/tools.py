"""
Tools Router - One endpoint per growth tool on the dashboard.

HTTP handling only: every handler validates the body, calls GrowthService
and translates router errors (502/503) and input errors (422).
Binary uploads (thumbnail, video clip) arrive base64 encoded in JSON.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tubegrow.ai.errors import RouterError
from tubegrow.ai.schemas.request import Language
from tubegrow.deps import (
    decode_base64,
    get_growth_service,
    router_error_to_http,
    validation_error_to_http,
)
from tubegrow.services.growth_service import GroundedResult, GrowthService


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/tools", tags=["tools"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class MetadataRequest(BaseModel):
    """
    Example:
    {"topic": "sourdough for beginners", "tone": "friendly", "language": "en"}
    """
    topic: str = Field(..., min_length=1, max_length=500)
    tone: str = Field(default="engaging", max_length=100)
    language: Language = Language.EN


class ScriptRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    points: str = Field(default="", max_length=4000)
    language: Language = Language.EN


class NicheRequest(BaseModel):
    niche: str = Field(..., min_length=1, max_length=300)
    language: Language = Language.EN


class ThumbnailRateRequest(BaseModel):
    image_base64: str = Field(..., min_length=1, description="Image bytes, base64 or data URI")
    mime_type: str = Field(default="image/png")
    context: str = Field(default="", max_length=1000)
    language: Language = Language.EN


class ThumbnailGenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=2000)
    aspect_ratio: str = Field(default="16:9")


class AuditRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=500)
    language: Language = Language.EN


class ViralStrategyRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=1000, description="Topic or YouTube URL")
    language: Language = Language.EN


class ChannelInfoRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=300, description="Channel name, handle or URL")
    language: Language = Language.EN


class VideoAnalyzeRequest(BaseModel):
    video_base64: str = Field(..., min_length=1)
    mime_type: str = Field(default="video/mp4")
    context: str = Field(default="", max_length=1000)
    language: Language = Language.EN


class TextResponse(BaseModel):
    text: str


class JsonResponse(BaseModel):
    data: Any


class GroundedResponse(BaseModel):
    """Grounded tool output; sources is null when the answer was not searched."""
    data: Any
    provider: str
    grounded: bool
    sources: Optional[List[Dict[str, Optional[str]]]] = None


class ImageResponse(BaseModel):
    image: str = Field(description="data:<mime>;base64,<bytes>")


def _grounded(result: GroundedResult) -> GroundedResponse:
    return GroundedResponse(
        data=result.value,
        provider=result.provider,
        grounded=result.grounded,
        sources=result.sources,
    )


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/metadata", response_model=JsonResponse)
async def generate_metadata(
    request: MetadataRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """Titles, description and tags for a video idea."""
    try:
        data = await service.generate_video_metadata(request.topic, request.tone, request.language)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return JsonResponse(data=data)


@router.post("/script", response_model=TextResponse)
async def generate_script(
    request: ScriptRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """Full Markdown script for a title and key points."""
    try:
        text = await service.generate_script(request.title, request.points, request.language)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return TextResponse(text=text)


@router.post("/trends", response_model=GroundedResponse)
async def find_trends(
    request: NicheRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """Breakout trends for a niche, grounded with Google Search when available."""
    try:
        result = await service.find_trends(request.niche, request.language)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return _grounded(result)


@router.post("/thumbnail/rate", response_model=TextResponse)
async def rate_thumbnail(
    request: ThumbnailRateRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """CTR score, strengths, weaknesses and advice for a thumbnail."""
    try:
        image = decode_base64(request.image_base64, "image_base64")
        text = await service.analyze_thumbnail(
            image, request.mime_type, request.context, request.language
        )
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return TextResponse(text=text)


@router.post("/thumbnail/generate", response_model=ImageResponse)
async def generate_thumbnail(
    request: ThumbnailGenerateRequest,
    service: GrowthService = Depends(get_growth_service),
):
    try:
        image = await service.generate_thumbnail_image(request.prompt, request.aspect_ratio)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return ImageResponse(image=image)


@router.post("/audit", response_model=GroundedResponse)
async def audit_video(
    request: AuditRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """Audit a published YouTube video by URL."""
    try:
        result = await service.audit_video(request.url, request.language)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return _grounded(result)


@router.post("/viral-strategy", response_model=JsonResponse)
async def viral_strategy(
    request: ViralStrategyRequest,
    service: GrowthService = Depends(get_growth_service),
):
    try:
        data = await service.generate_viral_strategy(request.topic, request.language)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return JsonResponse(data=data)


@router.post("/channel-info", response_model=GroundedResponse)
async def channel_info(
    request: ChannelInfoRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """Public stats for any channel (no OAuth needed)."""
    try:
        result = await service.get_public_channel_info(request.query, request.language)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return _grounded(result)


@router.post("/video/analyze", response_model=TextResponse)
async def analyze_video(
    request: VideoAnalyzeRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """Feedback on an uploaded clip (Gemini only)."""
    try:
        video = decode_base64(request.video_base64, "video_base64")
        text = await service.analyze_uploaded_video(
            video, request.mime_type, request.context, request.language
        )
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return TextResponse(text=text)
