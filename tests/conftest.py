"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- FakeProvider: a scripted AIProvider (no SDK, no network)
- In-memory key registry and a fresh monitor per test
- A FallbackRouter wired to the fakes
- FastAPI TestClient with services overridden to use that router
"""

from typing import Generator, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from tubegrow.ai.monitoring import AIMonitor
from tubegrow.ai.providers.base import AIProvider, ProviderResult, ProviderType
from tubegrow.ai.registry import InMemoryCredentialStore, KeyRegistry
from tubegrow.ai.router import FallbackRouter
from tubegrow.ai.schemas.request import CanonicalRequest, TaskType
from tubegrow.deps import get_ai_monitor, get_chat_service, get_growth_service, get_key_registry
from tubegrow.main import app
from tubegrow.services.chat_service import ChatService
from tubegrow.services.growth_service import GrowthService


# ---------------------------------------------------------------------------
# FAKE PROVIDER
# ---------------------------------------------------------------------------

class FakeAPIError(Exception):
    """Mimics an SDK error carrying an HTTP status."""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code


class FakeProvider(AIProvider):
    """
    Scripted adapter.

    Each attempt pops the next outcome from `outcomes`:
    - str: success with that content
    - Exception: raised inside the handler (classified by the base class)
    - ProviderResult: returned as-is
    When the script runs out every attempt succeeds with "ok".
    """

    def __init__(
        self,
        provider_type: ProviderType,
        outcomes: Optional[Iterable] = None,
        tasks: Optional[Iterable[TaskType]] = None,
        attachment_kinds: Iterable[str] = (),
        supports_search: bool = False,
        metadata: Optional[dict] = None,
    ):
        self.provider_type = provider_type
        self.supported_tasks = frozenset(tasks if tasks is not None else TaskType)
        self.attachment_kinds = frozenset(attachment_kinds)
        self.supports_search = supports_search
        self.outcomes: List = list(outcomes or [])
        self.metadata = metadata or {}
        self.calls: List[CanonicalRequest] = []
        self.credentials: List[str] = []

    def model_for(self, request: CanonicalRequest) -> str:
        return f"{self.provider_type.value}-test-model"

    def _get_client(self, credential: str):
        self.credentials.append(credential)
        return None

    def _handlers(self):
        return {task: self._respond for task in self.supported_tasks}

    async def _respond(self, request: CanonicalRequest, client) -> ProviderResult:
        self.calls.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else "ok"
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, ProviderResult):
            return outcome
        return self._success(outcome, self.model_for(request), metadata=dict(self.metadata))


def make_gemini(outcomes=None, **kwargs) -> FakeProvider:
    """Fake with Gemini's capabilities."""
    return FakeProvider(
        ProviderType.GEMINI,
        outcomes,
        attachment_kinds=("image", "audio", "video"),
        supports_search=True,
        **kwargs,
    )


def make_openai(outcomes=None, **kwargs) -> FakeProvider:
    """Fake with OpenAI's capabilities."""
    return FakeProvider(
        ProviderType.OPENAI,
        outcomes,
        tasks=(
            TaskType.TEXT_GENERATE,
            TaskType.JSON_GENERATE,
            TaskType.CHAT_TURN,
            TaskType.IMAGE_GENERATE,
        ),
        attachment_kinds=("image",),
        **kwargs,
    )


def make_grok(outcomes=None, **kwargs) -> FakeProvider:
    """Fake with Grok's capabilities."""
    return FakeProvider(
        ProviderType.GROK,
        outcomes,
        tasks=(TaskType.TEXT_GENERATE, TaskType.JSON_GENERATE, TaskType.CHAT_TURN),
        **kwargs,
    )


def make_registry(**keys: str) -> KeyRegistry:
    """Registry with no environment defaults, e.g. make_registry(gemini="g-key")."""
    return KeyRegistry(InMemoryCredentialStore(keys), defaults={})


# ---------------------------------------------------------------------------
# ROUTER FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def monitor() -> AIMonitor:
    return AIMonitor()


@pytest.fixture
def fake_gemini() -> FakeProvider:
    return make_gemini()


@pytest.fixture
def fake_openai() -> FakeProvider:
    return make_openai()


@pytest.fixture
def fake_grok() -> FakeProvider:
    return make_grok()


@pytest.fixture
def registry() -> KeyRegistry:
    return make_registry(gemini="gemini-key", openai="openai-key", grok="grok-key")


@pytest.fixture
def router(registry, fake_gemini, fake_openai, fake_grok, monitor) -> FallbackRouter:
    return FallbackRouter(
        registry=registry,
        providers={
            ProviderType.GEMINI: fake_gemini,
            ProviderType.OPENAI: fake_openai,
            ProviderType.GROK: fake_grok,
        },
        monitor=monitor,
    )


# ---------------------------------------------------------------------------
# API FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def client(router, registry, fake_gemini, monitor) -> Generator[TestClient, None, None]:
    """
    Test client whose services route through the fake providers.

    Overrides the service dependencies so no real SDK client is built.
    """
    growth = GrowthService(router=router)
    chat = ChatService(router=router, registry=registry, streamer=fake_gemini)

    app.dependency_overrides[get_growth_service] = lambda: growth
    app.dependency_overrides[get_chat_service] = lambda: chat
    app.dependency_overrides[get_key_registry] = lambda: registry
    app.dependency_overrides[get_ai_monitor] = lambda: monitor

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
