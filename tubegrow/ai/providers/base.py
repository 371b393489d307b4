"""
Base AI Provider - Abstract interface for all provider adapters.

This module defines the contract that every adapter (Gemini, OpenAI, Grok)
follows, so the fallback router can treat them interchangeably.

Design Pattern: Strategy Pattern
================================
The base class owns the invoke() template: credential check, latency
measurement, dispatch by task, and conversion of any SDK exception into a
failed ProviderResult. Subclasses only implement the per-task handlers and
declare their capabilities.

Example:
    provider = GeminiProvider()
    result = await provider.invoke(request, credential="AIza...")
    if result.success:
        print(result.content)
    else:
        print(result.error_kind, result.error)
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Optional, Tuple
import logging

from tubegrow.ai.errors import FailureKind, classify_exception
from tubegrow.ai.schemas.request import CanonicalRequest, TaskType

logger = logging.getLogger("tubegrow.ai")


class ProviderType(str, Enum):
    """Enum of supported AI providers."""
    GEMINI = "gemini"
    OPENAI = "openai"
    GROK = "grok"


@dataclass
class TokenUsage:
    """Token usage statistics for a provider attempt."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        """Calculate total if not provided."""
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class ProviderResult:
    """
    Outcome of one adapter invocation.

    A success carries the raw content (text, base64 image/audio, or a video
    URI) and optional metadata such as grounding sources. A failure carries
    error_kind and a human-readable error message.

    Attributes:
        content: Raw provider output
        provider: Which provider produced this result
        model: The specific model used
        usage: Token usage statistics
        latency_ms: How long the attempt took
        success: Whether the attempt succeeded
        error: Error message if failed
        error_kind: Classified failure reason if failed
        metadata: Grounding sources, mime types, audio format, ...
        created_at: Timestamp of the result
    """
    content: str
    provider: ProviderType
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None
    error_kind: Optional[FailureKind] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": {
                "prompt": self.usage.prompt_tokens,
                "completion": self.usage.completion_tokens,
                "total": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "success": self.success,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "created_at": self.created_at.isoformat(),
        }


TaskHandler = Callable[[CanonicalRequest, Any], Awaitable[ProviderResult]]


class AIProvider(ABC):
    """
    Abstract base class for provider adapters.

    Capabilities are declared as class attributes and checked by the router
    before an adapter is ever invoked:

    - supported_tasks: TaskTypes this adapter can serve
    - attachment_kinds: major MIME types accepted as input ("image", ...)
    - supports_search: whether web-search grounding is available
    """

    provider_type: ProviderType
    supported_tasks: FrozenSet[TaskType] = frozenset()
    attachment_kinds: FrozenSet[str] = frozenset()
    supports_search: bool = False

    def supports(self, request: CanonicalRequest) -> bool:
        """True if this adapter can honour every requirement of the request."""
        if request.task not in self.supported_tasks:
            return False
        if request.requires_search and not self.supports_search:
            return False
        return request.attachment_kinds <= self.attachment_kinds

    async def invoke(self, request: CanonicalRequest, credential: str) -> ProviderResult:
        """
        Run one attempt of the request against this provider.

        Never raises: every SDK or network exception is classified and
        returned as a failed ProviderResult.
        """
        start_time = time.time()
        model = self.model_for(request)

        if not credential:
            return self._create_error_response(
                error=f"{self.provider_type.value} API key missing",
                model=model,
                kind=FailureKind.AUTH_INVALID,
                latency_ms=self._measure_latency(start_time),
            )

        handler = self._handlers().get(request.task)
        if handler is None:
            return self._create_error_response(
                error=f"{self.provider_type.value} does not support {request.task.value}",
                model=model,
                kind=FailureKind.UNKNOWN,
                latency_ms=self._measure_latency(start_time),
            )

        try:
            client = await self._client_for(credential)
            result = await handler(request, client)
        except Exception as e:
            return self._create_error_response(
                error=str(e) or e.__class__.__name__,
                model=model,
                kind=classify_exception(e),
                latency_ms=self._measure_latency(start_time),
            )

        result.latency_ms = self._measure_latency(start_time)
        if result.success:
            logger.info(
                f"{self.provider_type.value} {request.task.value} completed in "
                f"{result.latency_ms:.0f}ms, tokens: {result.usage.total_tokens}"
            )
        return result

    @abstractmethod
    def model_for(self, request: CanonicalRequest) -> str:
        """Model name used for this request."""

    @abstractmethod
    def _get_client(self, credential: str) -> Any:
        """Build an SDK client for the given credential."""

    # (credential, client) of the last key this adapter was invoked with
    _client_cache: Optional[Tuple[str, Any]] = None

    async def _client_for(self, credential: str) -> Any:
        """
        Return the SDK client for a credential, building it once.

        A different key replaces the cached client and the old one is
        closed, so at most one connection pool per adapter stays open.
        """
        cached = self._client_cache
        if cached is not None and cached[0] == credential:
            return cached[1]

        client = self._get_client(credential)
        self._client_cache = (credential, client)
        if cached is not None:
            await self._release(cached[1])
        return client

    async def _close_client(self, client: Any) -> None:
        """Release an SDK client's connections. Nothing to release by default."""

    async def _release(self, client: Any) -> None:
        try:
            await self._close_client(client)
        except Exception as e:
            logger.warning(f"{self.provider_type.value} client close failed: {e}")

    async def aclose(self) -> None:
        """Close the cached SDK client, if any."""
        cached = self._client_cache
        self._client_cache = None
        if cached is not None:
            await self._release(cached[1])

    @abstractmethod
    def _handlers(self) -> Dict[TaskType, TaskHandler]:
        """Map each supported TaskType to its coroutine handler."""

    def _measure_latency(self, start_time: float) -> float:
        """Calculate latency in milliseconds."""
        return (time.time() - start_time) * 1000

    def _success(
        self,
        content: str,
        model: str,
        usage: Optional[TokenUsage] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ProviderResult:
        return ProviderResult(
            content=content,
            provider=self.provider_type,
            model=model,
            usage=usage or TokenUsage(),
            metadata=metadata or {},
        )

    def _create_error_response(
        self,
        error: str,
        model: str,
        kind: FailureKind = FailureKind.UNKNOWN,
        latency_ms: float = 0.0,
    ) -> ProviderResult:
        """
        Create a standardized failed result.

        Used for every adapter failure so the router sees one shape.
        """
        logger.warning(f"AI Provider Error [{self.provider_type.value}] ({kind.value}): {error}")
        return ProviderResult(
            content="",
            provider=self.provider_type,
            model=model,
            latency_ms=latency_ms,
            success=False,
            error=error,
            error_kind=kind,
        )
