"""
Growth Service - One operation per TubeGrow dashboard tool.

Every operation builds a CanonicalRequest from a growth prompt and hands it
to the fallback router. The router picks the provider; this service only
decides the task type, response shape and attachments.

Degraded mode:
==============
Grounded tools (trends, audit, channel info) need Google Search, which only
Gemini offers. When no search-capable provider answers, the tool is reissued
as an ungrounded brainstorm or inference so the user still gets something:

    find_trends            SEARCH_GENERATE → TEXT_GENERATE (evergreen topics)
    audit_video            SEARCH_GENERATE → JSON_GENERATE (inferred audit)
    get_public_channel_info SEARCH_GENERATE → JSON_GENERATE (template)

Degraded results carry sources=None and grounded=False.

Usage:
======
    from tubegrow.services.growth_service import growth_service

    metadata = await growth_service.generate_video_metadata(
        topic="sourdough for beginners", tone="friendly", language=Language.EN,
    )
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from tubegrow.ai.errors import AllProvidersFailedError, NoProviderConfiguredError, RouterError
from tubegrow.ai.prompts import growth_prompts as prompts
from tubegrow.ai.router import FallbackRouter, RouteResult, fallback_router
from tubegrow.ai.schemas.request import (
    Attachment,
    CanonicalRequest,
    Language,
    ResponseShape,
    TaskType,
)


logger = logging.getLogger("tubegrow.services.growth")


THUMBNAIL_ASPECT_RATIOS = ("16:9", "9:16", "1:1")
VIDEO_ASPECT_RATIOS = ("16:9", "9:16")
YOUTUBE_HOSTS = ("youtube.com", "youtu.be")


# ---------------------------------------------------------------------------
# RESULT DATACLASSES
# ---------------------------------------------------------------------------

@dataclass
class GroundedResult:
    """Output of a tool that prefers web-search grounding."""
    value: Any
    provider: str
    sources: Optional[List[Dict[str, str]]] = None
    grounded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "provider": self.provider,
            "sources": self.sources,
            "grounded": self.grounded,
        }


@dataclass
class SpeechAudio:
    """Raw PCM speech; the caller wraps it in a container if needed."""
    data: str  # base64
    mime_type: str
    sample_rate_hz: int
    sample_width_bytes: int
    channels: int
    voice: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "mime_type": self.mime_type,
            "sample_rate_hz": self.sample_rate_hz,
            "sample_width_bytes": self.sample_width_bytes,
            "channels": self.channels,
            "voice": self.voice,
        }


# ---------------------------------------------------------------------------
# VALIDATION HELPERS
# ---------------------------------------------------------------------------

def is_youtube_url(value: str) -> bool:
    """True for youtube.com / youtu.be links (any subdomain, scheme optional)."""
    candidate = value.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    host = (urlparse(candidate).hostname or "").lower()
    return any(host == h or host.endswith(f".{h}") for h in YOUTUBE_HOSTS)


def _require_text(value: str, field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field_name} must not be empty")
    return value


def _require_media(data: bytes, mime_type: str, kind: str) -> Attachment:
    if not data:
        raise ValueError(f"Uploaded {kind} is empty")
    attachment = Attachment(mime_type=mime_type, data=data)
    if attachment.kind != kind:
        raise ValueError(f"Expected a {kind} file, got {mime_type}")
    return attachment


def _require_choice(value: str, choices: tuple, field_name: str) -> str:
    if value not in choices:
        raise ValueError(f"{field_name} must be one of {', '.join(choices)}")
    return value


# ---------------------------------------------------------------------------
# SERVICE
# ---------------------------------------------------------------------------

class GrowthService:
    """
    Growth tools backed by the fallback router.

    Args:
        router: Router to send requests through (default: shared router)
    """

    def __init__(self, router: Optional[FallbackRouter] = None):
        self.router = router or fallback_router

    async def _grounded_or_degraded(
        self,
        primary: CanonicalRequest,
        fallback: CanonicalRequest,
        tool: str,
    ) -> GroundedResult:
        """Run a grounded request; if no search provider succeeds, run the fallback."""
        try:
            result = await self.router.route(primary)
            return GroundedResult(
                value=result.value,
                provider=result.provider.value,
                sources=result.sources,
                grounded=bool(result.metadata.get("grounded")),
            )
        except (NoProviderConfiguredError, AllProvidersFailedError) as e:
            logger.warning(f"{tool}: grounded search unavailable, degrading ({e.code})")

        result = await self.router.route(fallback)
        return GroundedResult(value=result.value, provider=result.provider.value)

    # -------------------------------------------------------------------------
    # OPTIMIZER / SCRIPT WRITER
    # -------------------------------------------------------------------------

    async def generate_video_metadata(
        self, topic: str, tone: str, language: Language
    ) -> Dict[str, Any]:
        """Titles, description and tags as JSON: {titles, description, tags}."""
        topic = _require_text(topic, "topic")
        result = await self.router.route(CanonicalRequest(
            task=TaskType.JSON_GENERATE,
            user_prompt=prompts.build_metadata_prompt(topic, tone or "engaging", language),
            response_shape=ResponseShape.JSON,
            language=language,
        ))
        return result.value

    async def generate_script(self, title: str, points: str, language: Language) -> str:
        """Full Markdown script: hook, intro, body, CTA, outro."""
        title = _require_text(title, "title")
        result = await self.router.route(CanonicalRequest(
            task=TaskType.TEXT_GENERATE,
            user_prompt=prompts.build_script_prompt(title, points or "", language),
            language=language,
            options={"model_tier": "pro"},
        ))
        return result.value

    # -------------------------------------------------------------------------
    # GROUNDED TOOLS
    # -------------------------------------------------------------------------

    async def find_trends(self, niche: str, language: Language) -> GroundedResult:
        """Five breakout trends with sources, or evergreen topics when ungrounded."""
        niche = _require_text(niche, "niche")
        return await self._grounded_or_degraded(
            CanonicalRequest(
                task=TaskType.SEARCH_GENERATE,
                user_prompt=prompts.build_trends_prompt(niche, language),
                language=language,
                options={"model_tier": "pro"},
            ),
            CanonicalRequest(
                task=TaskType.TEXT_GENERATE,
                user_prompt=prompts.build_evergreen_trends_prompt(niche, language),
                language=language,
            ),
            tool="find_trends",
        )

    async def audit_video(self, url: str, language: Language) -> GroundedResult:
        """
        Score a published video and list positives, negatives and suggestions.

        Raises:
            ValueError: If url is not a YouTube link
        """
        url = _require_text(url, "url")
        if not is_youtube_url(url):
            raise ValueError(f"Not a YouTube URL: {url}")

        return await self._grounded_or_degraded(
            CanonicalRequest(
                task=TaskType.SEARCH_GENERATE,
                user_prompt=prompts.build_audit_prompt(url, language),
                response_shape=ResponseShape.JSON,
                language=language,
                options={"model_tier": "pro"},
            ),
            CanonicalRequest(
                task=TaskType.JSON_GENERATE,
                user_prompt=prompts.build_audit_inference_prompt(url, language),
                response_shape=ResponseShape.JSON,
                language=language,
            ),
            tool="audit_video",
        )

    async def get_public_channel_info(self, query: str, language: Language) -> GroundedResult:
        """Public stats and recent videos for any channel, found by search."""
        query = _require_text(query, "query")
        return await self._grounded_or_degraded(
            CanonicalRequest(
                task=TaskType.SEARCH_GENERATE,
                user_prompt=prompts.build_channel_info_prompt(query, language),
                response_shape=ResponseShape.JSON,
                language=language,
                options={"model_tier": "pro"},
            ),
            CanonicalRequest(
                task=TaskType.JSON_GENERATE,
                user_prompt=prompts.build_channel_template_prompt(query),
                response_shape=ResponseShape.JSON,
                language=language,
            ),
            tool="get_public_channel_info",
        )

    async def generate_viral_strategy(self, topic: str, language: Language) -> Dict[str, Any]:
        """
        Full viral strategy as JSON.

        When topic is a YouTube link, a grounded research pass runs first and
        its findings are fed into the strategy prompt. A failed research pass
        is logged and the strategy is generated without it.
        """
        topic = _require_text(topic, "topic")

        research = ""
        if is_youtube_url(topic):
            try:
                found = await self.router.route(CanonicalRequest(
                    task=TaskType.SEARCH_GENERATE,
                    user_prompt=prompts.build_viral_research_prompt(topic),
                    language=language,
                    options={"model_tier": "pro"},
                ))
                research = found.value or ""
            except RouterError as e:
                logger.warning(f"Viral strategy research skipped: {e.message}")

        result = await self.router.route(CanonicalRequest(
            task=TaskType.JSON_GENERATE,
            user_prompt=prompts.build_viral_strategy_prompt(topic, language, research),
            response_shape=ResponseShape.JSON,
            language=language,
            options={"model_tier": "pro"},
        ))
        return result.value

    # -------------------------------------------------------------------------
    # THUMBNAILS
    # -------------------------------------------------------------------------

    async def analyze_thumbnail(
        self,
        image: bytes,
        mime_type: str,
        context: str,
        language: Language,
    ) -> str:
        """CTR score, strengths, weaknesses and advice for an uploaded thumbnail."""
        attachment = _require_media(image, mime_type, "image")
        result = await self.router.route(CanonicalRequest(
            task=TaskType.TEXT_GENERATE,
            user_prompt=prompts.build_thumbnail_rating_prompt(context, language),
            attachments=(attachment,),
            language=language,
        ))
        return result.value

    async def generate_thumbnail_image(self, prompt: str, aspect_ratio: str = "16:9") -> str:
        """Generated thumbnail as a data URI."""
        prompt = _require_text(prompt, "prompt")
        aspect_ratio = _require_choice(aspect_ratio, THUMBNAIL_ASPECT_RATIOS, "aspect_ratio")
        result = await self.router.route(CanonicalRequest(
            task=TaskType.IMAGE_GENERATE,
            user_prompt=prompts.build_thumbnail_image_prompt(prompt, aspect_ratio),
            options={"aspect_ratio": aspect_ratio},
        ))
        return result.value

    # -------------------------------------------------------------------------
    # VIDEO ANALYZER
    # -------------------------------------------------------------------------

    async def analyze_uploaded_video(
        self,
        video: bytes,
        mime_type: str,
        context: str,
        language: Language,
    ) -> str:
        """Markdown feedback on an uploaded clip's visuals, audio and pacing."""
        attachment = _require_media(video, mime_type, "video")
        result = await self.router.route(CanonicalRequest(
            task=TaskType.TEXT_GENERATE,
            user_prompt=prompts.build_video_analysis_prompt(context, language),
            attachments=(attachment,),
            language=language,
            options={"model_tier": "pro"},
        ))
        return result.value

    # -------------------------------------------------------------------------
    # AI STUDIO
    # -------------------------------------------------------------------------

    async def generate_speech(self, text: str, voice: str = "Kore") -> SpeechAudio:
        text = _require_text(text, "text")
        result: RouteResult = await self.router.route(CanonicalRequest(
            task=TaskType.SPEECH_SYNTHESIZE,
            user_prompt=text,
            options={"voice_name": voice or "Kore"},
        ))
        meta = result.metadata
        return SpeechAudio(
            data=result.value,
            mime_type=meta.get("mime_type", "audio/pcm"),
            sample_rate_hz=meta.get("sample_rate_hz", 24000),
            sample_width_bytes=meta.get("sample_width_bytes", 2),
            channels=meta.get("channels", 1),
            voice=meta.get("voice", voice),
        )

    async def transcribe_audio(self, audio: bytes, mime_type: str) -> str:
        attachment = _require_media(audio, mime_type, "audio")
        result = await self.router.route(CanonicalRequest(
            task=TaskType.TRANSCRIBE,
            user_prompt=prompts.TRANSCRIBE_PROMPT,
            attachments=(attachment,),
        ))
        return result.value

    async def generate_video(self, prompt: str, aspect_ratio: str = "16:9") -> str:
        """Generate a short clip with Veo and return its URI."""
        prompt = _require_text(prompt, "prompt")
        aspect_ratio = _require_choice(aspect_ratio, VIDEO_ASPECT_RATIOS, "aspect_ratio")
        result = await self.router.route(CanonicalRequest(
            task=TaskType.VIDEO_GENERATE,
            user_prompt=prompt,
            options={"aspect_ratio": aspect_ratio},
        ))
        return result.value


# Shared instance
growth_service = GrowthService()
