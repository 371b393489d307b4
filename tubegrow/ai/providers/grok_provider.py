"""
Grok Provider - xAI's Grok through its OpenAI-compatible API.

xAI serves the chat completions wire format at https://api.x.ai/v1, so this
adapter reuses the OpenAI adapter with a different base URL and model. It is
the last text fallback: no image generation, no vision, no search.
"""

from typing import Any, Callable, Optional

import httpx

from tubegrow.core.config import settings
from tubegrow.ai.providers.base import ProviderType
from tubegrow.ai.providers.openai_provider import OpenAIProvider
from tubegrow.ai.schemas.request import TaskType


class GrokProvider(OpenAIProvider):
    provider_type = ProviderType.GROK
    supported_tasks = frozenset({
        TaskType.TEXT_GENERATE,
        TaskType.JSON_GENERATE,
        TaskType.CHAT_TURN,
    })
    attachment_kinds = frozenset()

    def __init__(
        self,
        client_factory: Optional[Callable[[str], Any]] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.GROK_BASE_URL
        super().__init__(
            client_factory=client_factory,
            model=model or settings.GROK_MODEL,
            transport=transport,
        )


# Shared instance
grok_provider = GrokProvider()
