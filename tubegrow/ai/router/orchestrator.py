"""
Fallback Router - Picks a provider, calls it, and falls back on failure.

Routing Logic:
=============

┌──────────────────────────────────────────────────────────────────┐
│                     CanonicalRequest                              │
│          task=JSON_GENERATE, "Titles for a sourdough video"       │
└───────────────────────────┬──────────────────────────────────────┘
                            │
                            ▼
┌──────────────────────────────────────────────────────────────────┐
│                 Key snapshot + candidate order                    │
│    - Task priority: OpenAI → Gemini → Grok                        │
│    - Search / attachments: Gemini → OpenAI → Grok                 │
│    - Drop providers without a key or the needed capability        │
└───────────────────────────┬──────────────────────────────────────┘
                            │
                            ▼
┌──────────────────────────────────────────────────────────────────┐
│               Attempt each candidate exactly once                 │
│    success → normalize JSON / build image data URI → return       │
│    failure → record (provider, kind, message) → next candidate    │
└──────────────────────────────────────────────────────────────────┘

Terminal outcomes:
- No candidate at all → NoProviderConfiguredError (no network call made)
- Every candidate failed → AllProvidersFailedError (one combined message)

The router never retries a provider within a call and keeps no state
between calls apart from monitoring counters.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from tubegrow.ai.errors import (
    AllProvidersFailedError,
    FailureKind,
    NoProviderConfiguredError,
    ProviderFailure,
)
from tubegrow.ai.monitoring import AIMonitor, ai_monitor
from tubegrow.ai.normalizer import NOT_JSON, normalize
from tubegrow.ai.providers import (
    AIProvider,
    ProviderResult,
    ProviderType,
    gemini_provider,
    grok_provider,
    openai_provider,
)
from tubegrow.ai.registry import KeyRegistry, key_registry
from tubegrow.ai.schemas.request import CanonicalRequest, TaskType

logger = logging.getLogger("tubegrow.ai.router")


_TEXT_ORDER = (ProviderType.OPENAI, ProviderType.GEMINI, ProviderType.GROK)

DEFAULT_PRIORITIES: Dict[TaskType, Sequence[ProviderType]] = {
    TaskType.TEXT_GENERATE: _TEXT_ORDER,
    TaskType.JSON_GENERATE: _TEXT_ORDER,
    TaskType.CHAT_TURN: _TEXT_ORDER,
    TaskType.IMAGE_GENERATE: (ProviderType.OPENAI, ProviderType.GEMINI),
    TaskType.SEARCH_GENERATE: (ProviderType.GEMINI,),
    TaskType.SPEECH_SYNTHESIZE: (ProviderType.GEMINI,),
    TaskType.TRANSCRIBE: (ProviderType.GEMINI,),
    TaskType.VIDEO_GENERATE: (ProviderType.GEMINI,),
}

# Used whenever a request needs search grounding or carries attachments
CAPABILITY_FIRST_ORDER = (ProviderType.GEMINI, ProviderType.OPENAI, ProviderType.GROK)

DEFAULT_IMAGE_MIME = "image/png"


@dataclass
class RouteResult:
    """
    Successful outcome of route().

    Attributes:
        value: Plain text, parsed JSON, image data URI, base64 audio or video URI
        provider: The provider that produced it
        model: Model used by that provider
        metadata: Provider metadata (grounding sources, audio format, ...)
        failures: Failed attempts made before the winning one, in order
        raw_text: Unparsed provider output
    """
    value: Any
    provider: ProviderType
    model: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    failures: List[ProviderFailure] = field(default_factory=list)
    raw_text: str = ""

    @property
    def sources(self) -> Optional[List[Dict[str, str]]]:
        return self.metadata.get("sources")


class FallbackRouter:
    """
    Routes a CanonicalRequest across the configured providers.

    Usage:
        router = FallbackRouter(registry, {ProviderType.GEMINI: GeminiProvider()})
        result = await router.route(CanonicalRequest(
            task=TaskType.TEXT_GENERATE, user_prompt="Hook ideas for a vlog"
        ))
        print(result.provider, result.value)

    Args:
        registry: Source of provider credentials (read once per route call)
        providers: Adapter per provider
        priorities: Per-task provider order (defaults to DEFAULT_PRIORITIES)
        monitor: Structured logging and counters
    """

    def __init__(
        self,
        registry: KeyRegistry,
        providers: Mapping[ProviderType, AIProvider],
        priorities: Optional[Mapping[TaskType, Sequence[ProviderType]]] = None,
        monitor: Optional[AIMonitor] = None,
    ):
        self.registry = registry
        self.providers = dict(providers)
        self.priorities = dict(DEFAULT_PRIORITIES)
        if priorities:
            self.priorities.update(priorities)
        self.monitor = monitor or ai_monitor

    def candidates(
        self,
        request: CanonicalRequest,
        keys: Mapping[ProviderType, str],
    ) -> List[ProviderType]:
        """
        Ordered providers that will be attempted for this request.

        A provider qualifies when it appears in the task's priority list,
        has a non-empty key, has an adapter, and that adapter supports the
        request's search and attachment needs.
        """
        priority = list(self.priorities.get(request.task, ()))
        if request.requires_search or request.is_multimodal:
            priority = [p for p in CAPABILITY_FIRST_ORDER if p in priority]

        ordered = []
        for provider_type in priority:
            adapter = self.providers.get(provider_type)
            if adapter is None or not keys.get(provider_type):
                continue
            if not adapter.supports(request):
                logger.debug(
                    f"Skipping {provider_type.value}: cannot serve {request.task.value}"
                )
                continue
            ordered.append(provider_type)
        return ordered

    async def route(self, request: CanonicalRequest) -> RouteResult:
        """
        Attempt each eligible provider once, in order, until one succeeds.

        Raises:
            NoProviderConfiguredError: No eligible provider has a key
            AllProvidersFailedError: Every eligible provider failed
        """
        request_id = uuid.uuid4().hex[:12]
        keys = self.registry.snapshot()
        order = self.candidates(request, keys)
        self.monitor.track_route_start(request_id, request, order)

        if not order:
            error = NoProviderConfiguredError(
                f"No AI provider configured for {request.task.value}. "
                "Add an API key in Settings."
            )
            self.monitor.track_route_failure(request_id, error)
            raise error

        failures: List[ProviderFailure] = []
        for provider_type in order:
            adapter = self.providers[provider_type]
            result = await adapter.invoke(request, keys[provider_type])
            self.monitor.track_attempt(request_id, result)

            if not result.success:
                failures.append(ProviderFailure(
                    provider=provider_type,
                    kind=result.error_kind or FailureKind.UNKNOWN,
                    message=result.error or "Unknown error",
                ))
                continue

            try:
                value = self._finalize(request, result)
            except ValueError as e:
                logger.warning(f"{provider_type.value} output rejected: {e}")
                failures.append(ProviderFailure(
                    provider=provider_type, kind=FailureKind.UNKNOWN, message=str(e)
                ))
                continue

            self.monitor.track_route_success(request_id, provider_type, len(failures))
            return RouteResult(
                value=value,
                provider=provider_type,
                model=result.model,
                metadata=dict(result.metadata),
                failures=failures,
                raw_text=result.content,
            )

        failed = AllProvidersFailedError(failures)
        self.monitor.track_route_failure(request_id, failed)
        raise failed

    def _finalize(self, request: CanonicalRequest, result: ProviderResult) -> Any:
        """Turn raw adapter content into the value handed back to callers."""
        if request.wants_json:
            parsed = normalize(result.content, default=NOT_JSON)
            if parsed is NOT_JSON:
                raise ValueError("Response was not valid JSON")
            return parsed

        if request.task == TaskType.IMAGE_GENERATE:
            return to_data_uri(result.content, result.metadata.get("mime_type"))

        return result.content


def to_data_uri(content: str, mime_type: Optional[str] = None) -> str:
    """Wrap base64 image bytes as a data URI (already-wrapped input is kept)."""
    if content.startswith("data:"):
        return content
    return f"data:{mime_type or DEFAULT_IMAGE_MIME};base64,{content}"


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
fallback_router = FallbackRouter(
    registry=key_registry,
    providers={
        ProviderType.GEMINI: gemini_provider,
        ProviderType.OPENAI: openai_provider,
        ProviderType.GROK: grok_provider,
    },
)
