"""
Tests for the Chat Service (assistant panel).
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tubegrow.ai.errors import AllProvidersFailedError, FailureKind, NoProviderConfiguredError
from tubegrow.ai.providers.base import ProviderResult, ProviderType
from tubegrow.ai.schemas.request import ChatMessage, Language, TaskType
from tubegrow.services.chat_service import ChatService

from conftest import make_registry


def _streamer(result: ProviderResult, deltas=("Hel", "lo")) -> MagicMock:
    async def stream_chat(request, credential, on_delta):
        for delta in deltas:
            on_delta(delta)
        return result

    streamer = MagicMock()
    streamer.stream_chat = AsyncMock(side_effect=stream_chat)
    return streamer


class TestReply:
    """Non-streaming replies through the router."""

    @pytest.mark.asyncio
    async def test_reply_uses_chat_turn(self, router, registry, fake_openai):
        fake_openai.outcomes = ["Try a stronger hook."]
        service = ChatService(router=router, registry=registry)

        answer = await service.reply(
            "How do I grow?",
            history=[ChatMessage("user", "Hi"), ChatMessage("model", "Hello!")],
            language=Language.JA,
        )

        assert answer == "Try a stronger hook."
        request = fake_openai.calls[0]
        assert request.task == TaskType.CHAT_TURN
        assert len(request.history) == 2
        assert "Japanese" in request.system_prompt

    @pytest.mark.asyncio
    async def test_empty_message_is_rejected(self, router, registry):
        service = ChatService(router=router, registry=registry)

        with pytest.raises(ValueError):
            await service.reply("  ")

    @pytest.mark.asyncio
    async def test_unknown_role_is_rejected(self, router, registry):
        service = ChatService(router=router, registry=registry)

        with pytest.raises(ValueError):
            await service.reply("Hi", history=[ChatMessage("assistant", "Hello")])


class TestStreamReply:
    """Streaming straight from Gemini."""

    @pytest.mark.asyncio
    async def test_deltas_are_forwarded(self, router, registry):
        result = ProviderResult(content="Hello", provider=ProviderType.GEMINI, model="m")
        streamer = _streamer(result)
        service = ChatService(router=router, registry=registry, streamer=streamer)
        deltas = []

        answer = await service.stream_reply("Hi", [], Language.EN, deltas.append)

        assert answer == "Hello"
        assert deltas == ["Hel", "lo"]
        assert streamer.stream_chat.call_args.args[1] == "gemini-key"

    @pytest.mark.asyncio
    async def test_requires_gemini_key(self, router):
        streamer = _streamer(ProviderResult(content="", provider=ProviderType.GEMINI, model="m"))
        service = ChatService(router=router, registry=make_registry(openai="sk"), streamer=streamer)

        with pytest.raises(NoProviderConfiguredError):
            await service.stream_reply("Hi", [], Language.EN, lambda _: None)

        streamer.stream_chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_stream_failure_is_reported(self, router, registry):
        failed = ProviderResult(
            content="",
            provider=ProviderType.GEMINI,
            model="m",
            success=False,
            error="quota",
            error_kind=FailureKind.QUOTA_EXCEEDED,
        )
        service = ChatService(router=router, registry=registry, streamer=_streamer(failed, ()))

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await service.stream_reply("Hi", [], Language.EN, lambda _: None)

        assert exc_info.value.failures[0].kind == FailureKind.QUOTA_EXCEEDED
        assert "gemini: [quota_exceeded] quota" in exc_info.value.message
