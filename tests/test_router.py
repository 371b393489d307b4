"""
Tests for the Fallback Router.

This module tests:
- Candidate ordering per task and the capability-first order
- Zero network calls when nothing is configured
- Fallback on quota / auth / service failures
- JSON normalization and image data URIs on success
- The combined AllProvidersFailed message
- Monitoring counters
"""

import pytest

from tubegrow.ai.errors import (
    AllProvidersFailedError,
    FailureKind,
    NoProviderConfiguredError,
)
from tubegrow.ai.providers.base import ProviderType
from tubegrow.ai.router import CAPABILITY_FIRST_ORDER, FallbackRouter
from tubegrow.ai.schemas.request import (
    Attachment,
    CanonicalRequest,
    ResponseShape,
    TaskType,
)

from conftest import FakeAPIError, make_gemini, make_grok, make_openai, make_registry


def _text_request(**kwargs) -> CanonicalRequest:
    return CanonicalRequest(task=TaskType.TEXT_GENERATE, user_prompt="Hook ideas", **kwargs)


def _router(registry, *providers, monitor=None) -> FallbackRouter:
    return FallbackRouter(
        registry=registry,
        providers={p.provider_type: p for p in providers},
        monitor=monitor,
    )


class TestCandidates:
    """Tests for candidate ordering."""

    def test_text_prefers_openai_then_gemini_then_grok(self, router, registry):
        """Text tasks follow the OpenAI → Gemini → Grok priority."""
        order = router.candidates(_text_request(), registry.snapshot())

        assert order == [ProviderType.OPENAI, ProviderType.GEMINI, ProviderType.GROK]

    def test_image_excludes_grok(self, router, registry):
        """Grok cannot generate images, so it is never a candidate."""
        request = CanonicalRequest(task=TaskType.IMAGE_GENERATE, user_prompt="A red arrow")

        order = router.candidates(request, registry.snapshot())

        assert order == [ProviderType.OPENAI, ProviderType.GEMINI]

    def test_search_is_gemini_only(self, router, registry):
        """Only Gemini supports search grounding."""
        request = CanonicalRequest(task=TaskType.SEARCH_GENERATE, user_prompt="Trends")

        assert router.candidates(request, registry.snapshot()) == [ProviderType.GEMINI]

    def test_attachments_use_capability_first_order(self, router, registry):
        """An image attachment puts Gemini first and drops Grok (no vision)."""
        request = _text_request(attachments=(Attachment("image/png", b"\x89PNG"),))

        order = router.candidates(request, registry.snapshot())

        assert order == [ProviderType.GEMINI, ProviderType.OPENAI]
        assert order[0] == CAPABILITY_FIRST_ORDER[0]

    def test_video_attachment_is_gemini_only(self, router, registry):
        """OpenAI accepts images only, so a video upload skips it."""
        request = _text_request(attachments=(Attachment("video/mp4", b"\x00\x00"),))

        assert router.candidates(request, registry.snapshot()) == [ProviderType.GEMINI]

    def test_unconfigured_providers_are_skipped(self, fake_gemini, fake_openai, fake_grok):
        """Only providers with a key are candidates."""
        router = _router(make_registry(grok="g"), fake_gemini, fake_openai, fake_grok)

        order = router.candidates(_text_request(), router.registry.snapshot())

        assert order == [ProviderType.GROK]

    def test_priorities_can_be_overridden(self, registry, fake_gemini, fake_openai, fake_grok):
        """Custom priorities replace the default order for that task."""
        router = FallbackRouter(
            registry=registry,
            providers={p.provider_type: p for p in (fake_gemini, fake_openai, fake_grok)},
            priorities={TaskType.TEXT_GENERATE: (ProviderType.GROK, ProviderType.GEMINI)},
        )

        order = router.candidates(_text_request(), registry.snapshot())

        assert order == [ProviderType.GROK, ProviderType.GEMINI]


class TestRouteNoProviders:
    """Tests for the empty-candidate case."""

    @pytest.mark.asyncio
    async def test_no_keys_raises_without_calls(self, monitor):
        """With no keys configured, no adapter is ever invoked."""
        gemini, openai, grok = make_gemini(), make_openai(), make_grok()
        router = _router(make_registry(), gemini, openai, grok, monitor=monitor)

        with pytest.raises(NoProviderConfiguredError) as exc_info:
            await router.route(_text_request())

        assert exc_info.value.code == "no_provider_configured"
        assert gemini.calls == openai.calls == grok.calls == []
        assert monitor.get_stats().total_attempts == 0
        assert monitor.get_stats().failed_routes == 1

    @pytest.mark.asyncio
    async def test_search_with_only_openai_key_raises(self):
        """A search request cannot use OpenAI even when it is configured."""
        openai = make_openai()
        router = _router(make_registry(openai="sk"), make_gemini(), openai)

        with pytest.raises(NoProviderConfiguredError):
            await router.route(CanonicalRequest(task=TaskType.SEARCH_GENERATE, user_prompt="x"))

        assert openai.calls == []


class TestRouteFallback:
    """Tests for fallback across providers."""

    @pytest.mark.asyncio
    async def test_first_success_wins(self, router, fake_openai, fake_gemini):
        """The first candidate's success is returned; later ones are untouched."""
        fake_openai.outcomes = ["OpenAI answer"]

        result = await router.route(_text_request())

        assert result.value == "OpenAI answer"
        assert result.provider == ProviderType.OPENAI
        assert result.failures == []
        assert fake_gemini.calls == []

    @pytest.mark.asyncio
    async def test_quota_falls_back_to_next_provider(self, router, fake_openai, fake_gemini):
        """A 429 on OpenAI is recorded and Gemini answers."""
        fake_openai.outcomes = [FakeAPIError(429, "You exceeded your current quota")]
        fake_gemini.outcomes = ["Gemini answer"]

        result = await router.route(_text_request())

        assert result.value == "Gemini answer"
        assert result.provider == ProviderType.GEMINI
        assert len(result.failures) == 1
        assert result.failures[0].provider == ProviderType.OPENAI
        assert result.failures[0].kind == FailureKind.QUOTA_EXCEEDED

    @pytest.mark.asyncio
    async def test_each_provider_attempted_once(self, router, fake_openai, fake_gemini, fake_grok):
        """No provider is retried within one route call."""
        fake_openai.outcomes = [FakeAPIError(503, "overloaded")]
        fake_gemini.outcomes = [FakeAPIError(503, "overloaded")]
        fake_grok.outcomes = ["Grok answer"]

        result = await router.route(_text_request())

        assert result.provider == ProviderType.GROK
        assert len(fake_openai.calls) == len(fake_gemini.calls) == len(fake_grok.calls) == 1

    @pytest.mark.asyncio
    async def test_all_failed_message_names_every_reason(self, fake_gemini, fake_openai):
        """The combined message carries each provider's kind and message."""
        fake_openai.outcomes = [FakeAPIError(429, "insufficient_quota")]
        fake_gemini.outcomes = [FakeAPIError(401, "API key not valid")]
        router = _router(make_registry(openai="sk", gemini="g"), fake_gemini, fake_openai)

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await router.route(_text_request())

        error = exc_info.value
        assert error.code == "all_providers_failed"
        assert "openai: [quota_exceeded] insufficient_quota" in error.message
        assert "gemini: [auth_invalid] API key not valid" in error.message
        assert [f.provider for f in error.failures] == [ProviderType.OPENAI, ProviderType.GEMINI]

    @pytest.mark.asyncio
    async def test_auth_and_quota_are_distinguished(self, fake_gemini, fake_openai):
        """401 and 429 produce different failure kinds."""
        fake_openai.outcomes = [FakeAPIError(401, "Incorrect API key provided")]
        fake_gemini.outcomes = [FakeAPIError(429, "RESOURCE_EXHAUSTED")]
        router = _router(make_registry(openai="sk", gemini="g"), fake_gemini, fake_openai)

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await router.route(_text_request())

        kinds = [f.kind for f in exc_info.value.failures]
        assert kinds == [FailureKind.AUTH_INVALID, FailureKind.QUOTA_EXCEEDED]
        assert not kinds[0].is_transient
        assert kinds[1].is_transient

    @pytest.mark.asyncio
    async def test_credentials_come_from_registry(self, router, fake_openai):
        """Each adapter receives its own key from the snapshot."""
        await router.route(_text_request())

        assert fake_openai.credentials == ["openai-key"]

    @pytest.mark.asyncio
    async def test_key_change_applies_to_next_call(self, router, registry, fake_openai, fake_gemini):
        """Clearing a key removes that provider from the next route call."""
        registry.set(ProviderType.OPENAI, "")

        result = await router.route(_text_request())

        assert result.provider == ProviderType.GEMINI
        assert fake_openai.calls == []


class TestRouteNormalization:
    """Tests for JSON normalization and image canonicalization."""

    @pytest.mark.asyncio
    async def test_fenced_json_is_parsed(self, router, fake_openai):
        """JSON wrapped in a Markdown fence is recovered."""
        fake_openai.outcomes = ['Here you go:\n```json\n{"titles": ["A", "B"]}\n```']
        request = CanonicalRequest(
            task=TaskType.JSON_GENERATE,
            user_prompt="Titles",
            response_shape=ResponseShape.JSON,
        )

        result = await router.route(request)

        assert result.value == {"titles": ["A", "B"]}
        assert result.raw_text.startswith("Here you go")

    @pytest.mark.asyncio
    async def test_unparseable_json_moves_to_next_provider(self, router, fake_openai, fake_gemini):
        """Prose instead of JSON counts as an UNKNOWN failure."""
        fake_openai.outcomes = ["Sorry, I cannot produce that."]
        fake_gemini.outcomes = ['{"score": 80}']
        request = CanonicalRequest(
            task=TaskType.JSON_GENERATE,
            user_prompt="Audit",
            response_shape=ResponseShape.JSON,
        )

        result = await router.route(request)

        assert result.value == {"score": 80}
        assert result.failures[0].kind == FailureKind.UNKNOWN

    @pytest.mark.asyncio
    async def test_json_null_is_a_valid_answer(self, router, fake_openai, fake_gemini):
        """A literal null parses, so the first provider wins with value None."""
        fake_openai.outcomes = ["null"]
        request = CanonicalRequest(
            task=TaskType.JSON_GENERATE,
            user_prompt="Lookup",
            response_shape=ResponseShape.JSON,
        )

        result = await router.route(request)

        assert result.value is None
        assert result.provider == ProviderType.OPENAI
        assert result.failures == []
        assert fake_gemini.calls == []

    @pytest.mark.asyncio
    async def test_image_becomes_data_uri(self, router, fake_openai):
        """Base64 image content is wrapped with its mime type."""
        fake_openai.outcomes = ["aGVsbG8="]
        fake_openai.metadata = {"mime_type": "image/png"}

        result = await router.route(
            CanonicalRequest(task=TaskType.IMAGE_GENERATE, user_prompt="Thumbnail")
        )

        assert result.value == "data:image/png;base64,aGVsbG8="

    @pytest.mark.asyncio
    async def test_search_sources_are_exposed(self, router, fake_gemini):
        """Grounding metadata is passed through on the result."""
        fake_gemini.outcomes = ["Trend list"]
        fake_gemini.metadata = {
            "grounded": True,
            "sources": [{"uri": "https://example.com", "title": "Example"}],
        }

        result = await router.route(
            CanonicalRequest(task=TaskType.SEARCH_GENERATE, user_prompt="Trends")
        )

        assert result.sources == [{"uri": "https://example.com", "title": "Example"}]


class TestRouteMonitoring:
    """Tests for monitor counters fed by the router."""

    @pytest.mark.asyncio
    async def test_counts_attempts_and_failures(self, router, fake_openai, monitor):
        fake_openai.outcomes = [FakeAPIError(429, "rate limit")]

        await router.route(_text_request())

        stats = monitor.get_stats().to_dict()
        assert stats["total_routes"] == 1
        assert stats["successful_routes"] == 1
        assert stats["total_attempts"] == 2
        assert stats["failures_by_provider"] == {"openai": 1}
        assert stats["failures_by_kind"] == {"quota_exceeded": 1}
        assert stats["wins_by_provider"] == {"gemini": 1}
