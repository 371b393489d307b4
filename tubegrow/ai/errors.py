"""
AI Errors - Failure taxonomy, provider error classification and router errors.

Providers do not share an error vocabulary: OpenAI raises APIStatusError with
an HTTP status, google-genai raises APIError with a numeric code and a gRPC
status string, and some failures only show up as text ("The model is
overloaded"). classify_error() maps all of them onto FailureKind using the
ERROR_MATCHERS table below.

Classification is two-pass:
1. HTTP status codes, checked against every matcher in table order
2. Lower-cased message phrases, checked against every matcher in table order

Anything left over is FailureKind.UNKNOWN. To recognise a new provider
message, add a phrase to the table; the router does not change.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Tuple

if TYPE_CHECKING:
    from tubegrow.ai.providers.base import ProviderType


class FailureKind(str, Enum):
    """Why a single provider attempt failed."""
    AUTH_INVALID = "auth_invalid"
    QUOTA_EXCEEDED = "quota_exceeded"
    SERVICE_UNAVAILABLE = "service_unavailable"
    CONTENT_BLOCKED = "content_blocked"
    UNKNOWN = "unknown"

    @property
    def is_transient(self) -> bool:
        """Transient failures may succeed later without user action."""
        return self in (FailureKind.QUOTA_EXCEEDED, FailureKind.SERVICE_UNAVAILABLE)


# ---------------------------------------------------------------------------
# CLASSIFICATION TABLE
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorMatcher:
    """One row of the classification table."""
    kind: FailureKind
    status_codes: FrozenSet[int] = frozenset()
    status_range: Optional[Tuple[int, int]] = None  # inclusive
    phrases: Tuple[str, ...] = ()

    def matches_status(self, status_code: Optional[int]) -> bool:
        if status_code is None:
            return False
        if status_code in self.status_codes:
            return True
        if self.status_range is not None:
            low, high = self.status_range
            return low <= status_code <= high
        return False

    def matches_text(self, text: str) -> bool:
        return any(phrase in text for phrase in self.phrases)


ERROR_MATCHERS: List[ErrorMatcher] = [
    ErrorMatcher(
        kind=FailureKind.AUTH_INVALID,
        status_codes=frozenset({401, 403}),
        phrases=(
            "api key not valid",
            "invalid api key",
            "incorrect api key",
            "invalid_api_key",
            "api_key_invalid",
            "unauthenticated",
            "unauthorized",
            "permission_denied",
            "api key missing",
            "api key not configured",
        ),
    ),
    ErrorMatcher(
        kind=FailureKind.QUOTA_EXCEEDED,
        status_codes=frozenset({429}),
        phrases=(
            "quota",
            "billing",
            "rate limit",
            "rate_limit",
            "resource_exhausted",
            "too many requests",
        ),
    ),
    ErrorMatcher(
        kind=FailureKind.SERVICE_UNAVAILABLE,
        status_range=(500, 599),
        phrases=(
            "overloaded",
            "unavailable",
            "timed out",
            "timeout",
            "connection error",
            "internal error",
            "deadline_exceeded",
        ),
    ),
    ErrorMatcher(
        kind=FailureKind.CONTENT_BLOCKED,
        phrases=(
            "safety",
            "content_policy",
            "content policy",
            "blocked",
            "prohibited_content",
            "responsible ai",
        ),
    ),
]


def classify_error(
    status_code: Optional[int] = None,
    message: str = "",
    matchers: Optional[List[ErrorMatcher]] = None,
) -> FailureKind:
    """
    Map an HTTP status and/or provider error text to a FailureKind.

    Args:
        status_code: HTTP status if the provider reported one
        message: Provider error message (any case)
        matchers: Override table (defaults to ERROR_MATCHERS)

    Returns:
        The first matching FailureKind, or FailureKind.UNKNOWN
    """
    table = matchers if matchers is not None else ERROR_MATCHERS

    for matcher in table:
        if matcher.matches_status(status_code):
            return matcher.kind

    text = (message or "").lower()
    for matcher in table:
        if matcher.matches_text(text):
            return matcher.kind

    return FailureKind.UNKNOWN


def status_code_of(exc: BaseException) -> Optional[int]:
    """
    Pull an HTTP status out of an SDK exception.

    openai exceptions expose .status_code; google-genai exposes a numeric
    .code. String codes such as "insufficient_quota" are ignored here and
    picked up by the phrase pass instead.
    """
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def classify_exception(exc: BaseException) -> FailureKind:
    """Classify an exception raised by a provider SDK."""
    parts = [str(exc)]
    for attr in ("status", "code", "message"):
        value = getattr(exc, attr, None)
        if isinstance(value, str):
            parts.append(value)
    return classify_error(status_code_of(exc), " ".join(parts))


# ---------------------------------------------------------------------------
# ROUTER-LEVEL ERRORS
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProviderFailure:
    """A failed attempt recorded by the router."""
    provider: "ProviderType"
    kind: FailureKind
    message: str

    def describe(self) -> str:
        return f"{self.provider.value}: [{self.kind.value}] {self.message}"

    def to_dict(self) -> dict:
        return {
            "provider": self.provider.value,
            "kind": self.kind.value,
            "transient": self.kind.is_transient,
            "message": self.message,
        }


class RouterError(Exception):
    """Base class for terminal routing failures surfaced to the caller."""
    code: str = "router_error"

    def __init__(self, message: str, failures: Optional[List[ProviderFailure]] = None):
        super().__init__(message)
        self.message = message
        self.failures: List[ProviderFailure] = list(failures or [])


class NoProviderConfiguredError(RouterError):
    """No eligible provider has a credential; no network call was made."""
    code = "no_provider_configured"


class AllProvidersFailedError(RouterError):
    """Every eligible provider was attempted once and failed."""
    code = "all_providers_failed"

    def __init__(self, failures: List[ProviderFailure]):
        details = " | ".join(f.describe() for f in failures)
        super().__init__(f"All AI providers failed. {details}", failures)
