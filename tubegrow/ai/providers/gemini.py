"""
Gemini Provider - Google's GenAI SDK.

Gemini is the only provider in TubeGrow with Google Search grounding and
native audio/video understanding, so it serves every task type:

- Text, JSON and chat generation (JSON via response_mime_type)
- Search-grounded generation with source citations
- Multimodal input (thumbnails, uploaded videos, audio for transcription)
- Image generation (inline image parts)
- Speech synthesis (raw 16-bit / 24 kHz / mono PCM, base64)
- Video generation with Veo (long-running operation, polled)
"""

import asyncio
import base64
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from google import genai
from google.genai import types

from tubegrow.core.config import settings
from tubegrow.ai.errors import FailureKind, classify_error, classify_exception
from tubegrow.ai.providers.base import (
    AIProvider,
    ProviderResult,
    ProviderType,
    TaskHandler,
    TokenUsage,
)
from tubegrow.ai.schemas.request import CanonicalRequest, TaskType

logger = logging.getLogger("tubegrow.ai.gemini")

# Finish reasons that mean the output was withheld by safety filters
_BLOCKED_FINISH_REASONS = {
    "SAFETY",
    "PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
    "IMAGE_SAFETY",
    "RECITATION",
}

# Gemini TTS output format
PCM_SAMPLE_RATE_HZ = 24000
PCM_SAMPLE_WIDTH_BYTES = 2
PCM_CHANNELS = 1

DEFAULT_VOICE = "Kore"


class GeminiProvider(AIProvider):
    provider_type = ProviderType.GEMINI
    supported_tasks = frozenset(TaskType)
    attachment_kinds = frozenset({"image", "audio", "video"})
    supports_search = True

    def __init__(
        self,
        client_factory: Optional[Callable[[str], Any]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        poll_interval: Optional[float] = None,
        max_polls: Optional[int] = None,
    ):
        self._client_factory = client_factory or self._default_client
        self._sleep = sleep
        self.poll_interval = (
            settings.VIDEO_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        )
        self.max_polls = settings.VIDEO_MAX_POLLS if max_polls is None else max_polls

    @staticmethod
    def _default_client(credential: str) -> genai.Client:
        return genai.Client(
            api_key=credential,
            http_options=types.HttpOptions(timeout=settings.AI_REQUEST_TIMEOUT * 1000),
        )

    def _get_client(self, credential: str) -> Any:
        return self._client_factory(credential)

    async def _close_client(self, client: Any) -> None:
        await client.aio.aclose()

    def model_for(self, request: CanonicalRequest) -> str:
        if request.task == TaskType.IMAGE_GENERATE:
            return settings.GEMINI_IMAGE_MODEL
        if request.task == TaskType.SPEECH_SYNTHESIZE:
            return settings.GEMINI_TTS_MODEL
        if request.task == TaskType.VIDEO_GENERATE:
            return settings.GEMINI_VIDEO_MODEL
        if request.option("model_tier") == "pro":
            return settings.GEMINI_PRO_MODEL
        return settings.GEMINI_TEXT_MODEL

    def _handlers(self) -> Dict[TaskType, TaskHandler]:
        return {
            TaskType.TEXT_GENERATE: self._generate_text,
            TaskType.JSON_GENERATE: self._generate_text,
            TaskType.CHAT_TURN: self._generate_text,
            TaskType.TRANSCRIBE: self._generate_text,
            TaskType.SEARCH_GENERATE: self._generate_with_grounding,
            TaskType.IMAGE_GENERATE: self._generate_image,
            TaskType.SPEECH_SYNTHESIZE: self._synthesize_speech,
            TaskType.VIDEO_GENERATE: self._generate_video,
        }

    # -----------------------------------------------------------------------
    # TEXT / JSON / CHAT / TRANSCRIPTION
    # -----------------------------------------------------------------------

    async def _generate_text(self, request: CanonicalRequest, client: Any) -> ProviderResult:
        model = self.model_for(request)
        config = types.GenerateContentConfig(
            system_instruction=request.system_prompt,
            response_mime_type="application/json" if request.wants_json else None,
        )
        response = await client.aio.models.generate_content(
            model=model,
            contents=self._build_contents(request),
            config=config,
        )
        return self._text_result(response, model)

    async def _generate_with_grounding(
        self, request: CanonicalRequest, client: Any
    ) -> ProviderResult:
        # Search tool-use cannot be combined with response_mime_type, so JSON
        # requests rely on the normalizer downstream.
        model = self.model_for(request)
        config = types.GenerateContentConfig(
            system_instruction=request.system_prompt,
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        response = await client.aio.models.generate_content(
            model=model,
            contents=self._build_contents(request),
            config=config,
        )
        result = self._text_result(response, model)
        if result.success:
            result.metadata.update(self._extract_grounding_metadata(response))
        return result

    async def stream_chat(
        self,
        request: CanonicalRequest,
        credential: str,
        on_delta: Callable[[str], None],
    ) -> ProviderResult:
        """
        Stream a chat reply, calling on_delta with each incremental chunk.

        Used by the chat panel directly; the fallback router does not stream.
        """
        model = self.model_for(request)
        if not credential:
            return self._create_error_response(
                "gemini API key missing", model, FailureKind.AUTH_INVALID
            )

        chunks: List[str] = []
        try:
            client = await self._client_for(credential)
            stream = await client.aio.models.generate_content_stream(
                model=model,
                contents=self._build_contents(request),
                config=types.GenerateContentConfig(system_instruction=request.system_prompt),
            )
            async for chunk in stream:
                text = chunk.text
                if text:
                    chunks.append(text)
                    on_delta(text)
        except Exception as e:
            logger.error(f"Gemini chat stream failed: {e}")
            return self._create_error_response(str(e), model, classify_exception(e))

        return self._success("".join(chunks), model)

    # -----------------------------------------------------------------------
    # IMAGE GENERATION
    # -----------------------------------------------------------------------

    async def _generate_image(self, request: CanonicalRequest, client: Any) -> ProviderResult:
        model = self.model_for(request)
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            image_config=types.ImageConfig(
                aspect_ratio=request.option("aspect_ratio", "16:9"),
            ),
        )
        response = await client.aio.models.generate_content(
            model=model,
            contents=request.user_prompt,
            config=config,
        )

        blocked = self._blocked_reason(response)
        if blocked:
            return self._create_error_response(blocked, model, FailureKind.CONTENT_BLOCKED)

        inline = self._first_inline_data(response)
        if inline is None:
            return self._create_error_response(
                "Gemini generation successful but no image data found.", model
            )

        return self._success(
            content=self._to_base64(inline.data),
            model=model,
            usage=self._extract_usage(response),
            metadata={"mime_type": inline.mime_type or "image/png"},
        )

    # -----------------------------------------------------------------------
    # SPEECH SYNTHESIS
    # -----------------------------------------------------------------------

    async def _synthesize_speech(self, request: CanonicalRequest, client: Any) -> ProviderResult:
        model = self.model_for(request)
        voice = request.option("voice_name", DEFAULT_VOICE)
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice),
                ),
            ),
        )
        response = await client.aio.models.generate_content(
            model=model,
            contents=request.user_prompt,
            config=config,
        )

        inline = self._first_inline_data(response)
        if inline is None:
            blocked = self._blocked_reason(response)
            if blocked:
                return self._create_error_response(blocked, model, FailureKind.CONTENT_BLOCKED)
            return self._create_error_response("Gemini returned no audio data.", model)

        # Raw PCM, no container header; decoding is left to the caller
        return self._success(
            content=self._to_base64(inline.data),
            model=model,
            usage=self._extract_usage(response),
            metadata={
                "mime_type": "audio/pcm",
                "encoding": "pcm_s16le",
                "sample_rate_hz": PCM_SAMPLE_RATE_HZ,
                "sample_width_bytes": PCM_SAMPLE_WIDTH_BYTES,
                "channels": PCM_CHANNELS,
                "voice": voice,
            },
        )

    # -----------------------------------------------------------------------
    # VIDEO GENERATION (long-running operation)
    # -----------------------------------------------------------------------

    async def _generate_video(self, request: CanonicalRequest, client: Any) -> ProviderResult:
        model = self.model_for(request)
        operation = await client.aio.models.generate_videos(
            model=model,
            prompt=request.user_prompt,
            config=types.GenerateVideosConfig(
                aspect_ratio=request.option("aspect_ratio", "16:9"),
                number_of_videos=1,
            ),
        )

        polls = 0
        while not operation.done:
            if polls >= self.max_polls:
                return self._create_error_response(
                    f"Video generation did not finish after {polls} polls "
                    f"({polls * self.poll_interval:.0f}s); operation timed out",
                    model,
                    FailureKind.SERVICE_UNAVAILABLE,
                )
            await self._sleep(self.poll_interval)
            operation = await client.aio.operations.get(operation)
            polls += 1

        if operation.error:
            error = operation.error if isinstance(operation.error, dict) else {"message": str(operation.error)}
            message = str(error.get("message") or error)
            code = error.get("code")
            if not isinstance(code, int):
                code = None
            return self._create_error_response(message, model, classify_error(code, message))

        videos = getattr(operation.response, "generated_videos", None) or []
        if not videos or not videos[0].video or not videos[0].video.uri:
            return self._create_error_response(
                "Video generation finished but returned no video.", model
            )

        logger.info(f"Veo video ready after {polls} polls")
        return self._success(
            content=videos[0].video.uri,
            model=model,
            metadata={"mime_type": "video/mp4", "polls": polls},
        )

    # -----------------------------------------------------------------------
    # HELPERS
    # -----------------------------------------------------------------------

    def _build_contents(self, request: CanonicalRequest) -> List[types.Content]:
        contents = [
            types.Content(role="model" if turn.role == "model" else "user",
                          parts=[types.Part.from_text(text=turn.text)])
            for turn in request.history
        ]
        parts = [
            types.Part.from_bytes(data=attachment.data, mime_type=attachment.mime_type)
            for attachment in request.attachments
        ]
        parts.append(types.Part.from_text(text=request.user_prompt))
        contents.append(types.Content(role="user", parts=parts))
        return contents

    def _text_result(self, response: Any, model: str) -> ProviderResult:
        blocked = self._blocked_reason(response)
        if blocked:
            return self._create_error_response(blocked, model, FailureKind.CONTENT_BLOCKED)

        text = response.text
        if not text:
            return self._create_error_response("Gemini returned an empty response.", model)

        return self._success(content=text, model=model, usage=self._extract_usage(response))

    def _blocked_reason(self, response: Any) -> Optional[str]:
        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            return f"Prompt blocked by safety filters ({_enum_name(feedback.block_reason)})"

        candidates = getattr(response, "candidates", None) or []
        if candidates:
            reason = _enum_name(getattr(candidates[0], "finish_reason", None))
            if reason in _BLOCKED_FINISH_REASONS:
                return f"Response blocked by safety filters ({reason})"
        return None

    def _first_inline_data(self, response: Any) -> Optional[Any]:
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                if getattr(part, "inline_data", None) is not None and part.inline_data.data:
                    return part.inline_data
        return None

    def _extract_usage(self, response: Any) -> TokenUsage:
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=usage.prompt_token_count or 0,
            completion_tokens=usage.candidates_token_count or 0,
        )

    def _extract_grounding_metadata(self, response: Any) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"grounded": False}
        candidates = getattr(response, "candidates", None) or []
        if not candidates or not getattr(candidates[0], "grounding_metadata", None):
            return metadata

        gm = candidates[0].grounding_metadata
        metadata["grounded"] = True
        metadata["search_queries"] = list(gm.web_search_queries or [])

        sources = []
        for chunk in gm.grounding_chunks or []:
            if chunk.web:
                sources.append({"uri": chunk.web.uri, "title": chunk.web.title})
        if sources:
            metadata["sources"] = sources
        return metadata

    @staticmethod
    def _to_base64(data: Any) -> str:
        if isinstance(data, (bytes, bytearray)):
            return base64.b64encode(data).decode("ascii")
        return str(data)


def _enum_name(value: Any) -> str:
    if value is None:
        return ""
    return getattr(value, "name", str(value))


# Shared instance
gemini_provider = GeminiProvider()
