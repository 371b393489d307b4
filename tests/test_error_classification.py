"""
Tests for provider error classification and router error types.
"""

import pytest

from tubegrow.ai.errors import (
    ERROR_MATCHERS,
    AllProvidersFailedError,
    ErrorMatcher,
    FailureKind,
    ProviderFailure,
    classify_error,
    classify_exception,
    status_code_of,
)
from tubegrow.ai.providers.base import ProviderType


class TestClassifyError:
    """Status and phrase based classification."""

    @pytest.mark.parametrize("status_code,expected", [
        (401, FailureKind.AUTH_INVALID),
        (403, FailureKind.AUTH_INVALID),
        (429, FailureKind.QUOTA_EXCEEDED),
        (500, FailureKind.SERVICE_UNAVAILABLE),
        (503, FailureKind.SERVICE_UNAVAILABLE),
        (400, FailureKind.UNKNOWN),
    ])
    def test_status_codes(self, status_code, expected):
        assert classify_error(status_code=status_code) == expected

    @pytest.mark.parametrize("message,expected", [
        ("API key not valid. Please pass a valid API key.", FailureKind.AUTH_INVALID),
        ("You exceeded your current quota, please check your plan and billing details",
         FailureKind.QUOTA_EXCEEDED),
        ("Rate limit reached for gpt-4o", FailureKind.QUOTA_EXCEEDED),
        ("The model is overloaded. Please try again later.", FailureKind.SERVICE_UNAVAILABLE),
        ("Your request was rejected as a result of our safety system",
         FailureKind.CONTENT_BLOCKED),
        ("Something odd happened", FailureKind.UNKNOWN),
    ])
    def test_phrases(self, message, expected):
        assert classify_error(message=message) == expected

    def test_status_wins_over_phrase(self):
        """A 429 whose text mentions 'unavailable' is still a quota failure."""
        assert classify_error(429, "Service unavailable") == FailureKind.QUOTA_EXCEEDED

    def test_custom_table(self):
        """The matcher table is data and can be replaced."""
        table = [ErrorMatcher(kind=FailureKind.CONTENT_BLOCKED, phrases=("nope",))]
        assert classify_error(message="nope, not today", matchers=table) == FailureKind.CONTENT_BLOCKED
        assert classify_error(status_code=429, matchers=table) == FailureKind.UNKNOWN

    def test_default_table_priority_order(self):
        kinds = [m.kind for m in ERROR_MATCHERS]
        assert kinds.index(FailureKind.AUTH_INVALID) < kinds.index(FailureKind.QUOTA_EXCEEDED)
        assert kinds.index(FailureKind.QUOTA_EXCEEDED) < kinds.index(FailureKind.SERVICE_UNAVAILABLE)


class TestClassifyException:
    """SDK exception handling."""

    def test_status_code_attribute(self):
        class OpenAIStyle(Exception):
            status_code = 429

        assert status_code_of(OpenAIStyle("x")) == 429
        assert classify_exception(OpenAIStyle("x")) == FailureKind.QUOTA_EXCEEDED

    def test_numeric_code_attribute(self):
        class GenAIStyle(Exception):
            code = 503
            status = "UNAVAILABLE"

        assert classify_exception(GenAIStyle("x")) == FailureKind.SERVICE_UNAVAILABLE

    def test_string_code_uses_phrase_pass(self):
        class StringCode(Exception):
            code = "insufficient_quota"

        assert status_code_of(StringCode("x")) is None
        assert classify_exception(StringCode("billing hard limit")) == FailureKind.QUOTA_EXCEEDED

    def test_timeout_text(self):
        assert classify_exception(TimeoutError("Request timed out.")) == FailureKind.SERVICE_UNAVAILABLE


class TestRouterErrors:
    """Failure records and the combined error."""

    def test_failure_to_dict(self):
        failure = ProviderFailure(ProviderType.OPENAI, FailureKind.QUOTA_EXCEEDED, "quota")

        assert failure.to_dict() == {
            "provider": "openai",
            "kind": "quota_exceeded",
            "transient": True,
            "message": "quota",
        }

    def test_all_providers_failed_message(self):
        error = AllProvidersFailedError([
            ProviderFailure(ProviderType.OPENAI, FailureKind.QUOTA_EXCEEDED, "quota"),
            ProviderFailure(ProviderType.GEMINI, FailureKind.SERVICE_UNAVAILABLE, "overloaded"),
        ])

        assert error.message == (
            "All AI providers failed. openai: [quota_exceeded] quota | "
            "gemini: [service_unavailable] overloaded"
        )
        assert str(error) == error.message
