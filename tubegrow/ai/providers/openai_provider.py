"""
OpenAI Provider - GPT and DALL-E client.

OpenAI is TubeGrow's first choice for plain text, JSON and chat work
(metadata, scripts, viral strategies) and for thumbnail images:

- Chat completions with optional JSON mode (response_format=json_object)
- Vision input for image attachments (thumbnail rating)
- DALL-E 3 image generation returning base64 PNG

It has no web search tool and no audio/video input here, so the router
never sends it grounded or audio/video tasks.

API Documentation: https://platform.openai.com/docs/api-reference
"""

import base64
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from openai import AsyncOpenAI

from tubegrow.core.config import settings
from tubegrow.ai.errors import FailureKind
from tubegrow.ai.providers.base import (
    AIProvider,
    ProviderResult,
    ProviderType,
    TaskHandler,
    TokenUsage,
)
from tubegrow.ai.schemas.request import CanonicalRequest, TaskType

logger = logging.getLogger("tubegrow.ai.openai")

# DALL-E 3 sizes closest to the dashboard's aspect ratios
_IMAGE_SIZES = {
    "16:9": "1792x1024",
    "9:16": "1024x1792",
    "1:1": "1024x1024",
}

JSON_INSTRUCTION = "You must respond with valid JSON only, no explanation."


class OpenAIProvider(AIProvider):
    """
    OpenAI GPT provider implementation.

    Usage:
        provider = OpenAIProvider()
        result = await provider.invoke(
            CanonicalRequest(task=TaskType.JSON_GENERATE, user_prompt="...",
                             response_shape=ResponseShape.JSON),
            credential="sk-...",
        )
    """

    provider_type = ProviderType.OPENAI
    supported_tasks = frozenset({
        TaskType.TEXT_GENERATE,
        TaskType.JSON_GENERATE,
        TaskType.CHAT_TURN,
        TaskType.IMAGE_GENERATE,
    })
    attachment_kinds = frozenset({"image"})

    # Subclasses for OpenAI-compatible APIs override these
    base_url: Optional[str] = None

    def __init__(
        self,
        client_factory: Optional[Callable[[str], Any]] = None,
        model: Optional[str] = None,
        image_model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the OpenAI provider.

        Args:
            client_factory: Builds an AsyncOpenAI-like client from a key
            model: Chat model (default: settings.OPENAI_MODEL)
            image_model: Image model (default: settings.OPENAI_IMAGE_MODEL)
            transport: Optional httpx transport for the default client
        """
        self._client_factory = client_factory or self._default_client
        self._transport = transport
        self.model = model or settings.OPENAI_MODEL
        self.image_model = image_model or settings.OPENAI_IMAGE_MODEL

    def _default_client(self, credential: str) -> AsyncOpenAI:
        # The router owns fallback: one HTTP request per attempt, no SDK retries
        http_client = None
        if self._transport is not None:
            http_client = httpx.AsyncClient(
                transport=self._transport,
                timeout=settings.AI_REQUEST_TIMEOUT,
            )
        return AsyncOpenAI(
            api_key=credential,
            base_url=self.base_url,
            timeout=settings.AI_REQUEST_TIMEOUT,
            max_retries=0,
            http_client=http_client,
        )

    def _get_client(self, credential: str) -> Any:
        return self._client_factory(credential)

    async def _close_client(self, client: Any) -> None:
        await client.close()

    def model_for(self, request: CanonicalRequest) -> str:
        if request.task == TaskType.IMAGE_GENERATE:
            return self.image_model
        return self.model

    def _handlers(self) -> Dict[TaskType, TaskHandler]:
        handlers: Dict[TaskType, TaskHandler] = {
            TaskType.TEXT_GENERATE: self._chat_completion,
            TaskType.JSON_GENERATE: self._chat_completion,
            TaskType.CHAT_TURN: self._chat_completion,
            TaskType.IMAGE_GENERATE: self._generate_image,
        }
        return {task: h for task, h in handlers.items() if task in self.supported_tasks}

    # -----------------------------------------------------------------------
    # CHAT COMPLETIONS
    # -----------------------------------------------------------------------

    async def _chat_completion(self, request: CanonicalRequest, client: Any) -> ProviderResult:
        model = self.model_for(request)
        kwargs: Dict[str, Any] = {}
        if request.wants_json:
            kwargs["response_format"] = {"type": "json_object"}

        response = await client.chat.completions.create(
            model=model,
            messages=self._build_messages(request),
            **kwargs,
        )

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            return self._create_error_response(
                "Response blocked by content filter", model, FailureKind.CONTENT_BLOCKED
            )

        content = choice.message.content or ""
        if not content:
            return self._create_error_response(
                f"{self.provider_type.value} returned an empty response.", model
            )

        usage = TokenUsage(
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=response.usage.completion_tokens if response.usage else 0,
        )
        return self._success(content=content, model=model, usage=usage)

    def _build_messages(self, request: CanonicalRequest) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = []

        system_content = request.system_prompt or ""
        if request.wants_json:
            # JSON mode requires the word "JSON" somewhere in the messages
            system_content = f"{system_content}\n\n{JSON_INSTRUCTION}".strip()
        if system_content:
            messages.append({"role": "system", "content": system_content})

        for turn in request.history:
            role = "assistant" if turn.role == "model" else "user"
            messages.append({"role": role, "content": turn.text})

        if request.attachments:
            content: Any = [{"type": "text", "text": request.user_prompt}]
            for attachment in request.attachments:
                encoded = base64.b64encode(attachment.data).decode("ascii")
                content.append({
                    "type": "image_url",
                    "image_url": {"url": f"data:{attachment.mime_type};base64,{encoded}"},
                })
        else:
            content = request.user_prompt
        messages.append({"role": "user", "content": content})
        return messages

    # -----------------------------------------------------------------------
    # IMAGE GENERATION
    # -----------------------------------------------------------------------

    async def _generate_image(self, request: CanonicalRequest, client: Any) -> ProviderResult:
        model = self.model_for(request)
        size = _IMAGE_SIZES.get(request.option("aspect_ratio", "16:9"), "1024x1024")
        response = await client.images.generate(
            model=model,
            prompt=request.user_prompt,
            n=1,
            size=size,
            response_format="b64_json",
        )

        data = response.data[0].b64_json if response.data else None
        if not data:
            return self._create_error_response("OpenAI returned no image data.", model)

        return self._success(content=data, model=model, metadata={"mime_type": "image/png"})


# Shared instance
openai_provider = OpenAIProvider()
