"""
Chat Service - The TubeGrow Assistant panel.

reply() sends one CHAT_TURN through the fallback router with the prior
turns attached. stream_reply() talks to Gemini directly so the panel can
render tokens as they arrive; it does not fall back.
"""

import logging
from typing import Callable, Optional, Sequence

from tubegrow.ai.errors import (
    AllProvidersFailedError,
    FailureKind,
    NoProviderConfiguredError,
    ProviderFailure,
)
from tubegrow.ai.prompts import build_chat_system_prompt
from tubegrow.ai.providers import GeminiProvider, ProviderType, gemini_provider
from tubegrow.ai.registry import KeyRegistry, key_registry
from tubegrow.ai.router import FallbackRouter, fallback_router
from tubegrow.ai.schemas.request import CanonicalRequest, ChatMessage, Language, TaskType

logger = logging.getLogger("tubegrow.services.chat")

CHAT_ROLES = ("user", "model")


class ChatService:
    def __init__(
        self,
        router: Optional[FallbackRouter] = None,
        registry: Optional[KeyRegistry] = None,
        streamer: Optional[GeminiProvider] = None,
    ):
        self.router = router or fallback_router
        self.registry = registry or key_registry
        self.streamer = streamer or gemini_provider

    def _build_request(
        self,
        message: str,
        history: Sequence[ChatMessage],
        language: Language,
    ) -> CanonicalRequest:
        message = (message or "").strip()
        if not message:
            raise ValueError("message must not be empty")
        for turn in history:
            if turn.role not in CHAT_ROLES:
                raise ValueError(f"Unknown chat role: {turn.role}")

        return CanonicalRequest(
            task=TaskType.CHAT_TURN,
            user_prompt=message,
            system_prompt=build_chat_system_prompt(language),
            history=tuple(history),
            language=language,
            options={"model_tier": "pro"},
        )

    async def reply(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        language: Language = Language.EN,
    ) -> str:
        """Answer one message given the previous turns."""
        result = await self.router.route(self._build_request(message, history, language))
        return result.value

    async def stream_reply(
        self,
        message: str,
        history: Sequence[ChatMessage],
        language: Language,
        on_delta: Callable[[str], None],
    ) -> str:
        """
        Stream the answer from Gemini, calling on_delta per chunk.

        Returns:
            The full answer text

        Raises:
            NoProviderConfiguredError: No Gemini key is configured
            AllProvidersFailedError: The stream failed
        """
        request = self._build_request(message, history, language)
        credential = self.registry.get(ProviderType.GEMINI)
        if not credential:
            raise NoProviderConfiguredError(
                "Streaming chat needs a Gemini API key. Add one in Settings."
            )

        logger.info(f"Streaming chat reply ({len(request.history)} prior turns)")
        result = await self.streamer.stream_chat(request, credential, on_delta)
        if not result.success:
            raise AllProvidersFailedError([
                ProviderFailure(
                    ProviderType.GEMINI,
                    result.error_kind or FailureKind.UNKNOWN,
                    result.error or "Unknown error",
                )
            ])
        return result.content


# Shared instance
chat_service = ChatService()
