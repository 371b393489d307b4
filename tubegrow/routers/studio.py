"""
Studio Router - Speech, transcription and video generation (AI Studio panel).

All three tasks are Gemini only. Speech comes back as raw base64 PCM with
its sample format; the dashboard adds a WAV header for playback.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tubegrow.ai.errors import RouterError
from tubegrow.deps import (
    decode_base64,
    get_growth_service,
    router_error_to_http,
    validation_error_to_http,
)
from tubegrow.services.growth_service import GrowthService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/studio", tags=["studio"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class SpeechRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    voice: str = Field(default="Kore", max_length=50)


class SpeechResponse(BaseModel):
    data: str = Field(description="Base64 PCM, no container header")
    mime_type: str
    sample_rate_hz: int
    sample_width_bytes: int
    channels: int
    voice: str


class TranscribeRequest(BaseModel):
    audio_base64: str = Field(..., min_length=1)
    mime_type: str = Field(default="audio/webm")


class TranscribeResponse(BaseModel):
    text: str


class VideoRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=2000)
    aspect_ratio: str = Field(default="16:9")


class VideoResponse(BaseModel):
    uri: str


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/speech", response_model=SpeechResponse)
async def generate_speech(
    request: SpeechRequest,
    service: GrowthService = Depends(get_growth_service),
):
    try:
        audio = await service.generate_speech(request.text, request.voice)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return SpeechResponse(**audio.to_dict())


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe(
    request: TranscribeRequest,
    service: GrowthService = Depends(get_growth_service),
):
    try:
        audio = decode_base64(request.audio_base64, "audio_base64")
        text = await service.transcribe_audio(audio, request.mime_type)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return TranscribeResponse(text=text)


@router.post("/video", response_model=VideoResponse)
async def generate_video(
    request: VideoRequest,
    service: GrowthService = Depends(get_growth_service),
):
    """
    Generate a Veo clip. This call blocks while the operation is polled,
    which can take minutes.
    """
    try:
        uri = await service.generate_video(request.prompt, request.aspect_ratio)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    logger.info("Studio video generated")
    return VideoResponse(uri=uri)
