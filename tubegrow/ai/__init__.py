"""
AI Module - Multi-provider generation for TubeGrow.

Architecture Overview:
=====================

┌─────────────────────────────────────────────────────────────────────────┐
│                           Fallback Router                                │
│        key snapshot → capable providers in priority order → attempt      │
└───────────────────────────────┬─────────────────────────────────────────┘
                                │
        ┌───────────────────────┼───────────────────────┐
        │                       │                       │
        ▼                       ▼                       ▼
┌───────────────┐     ┌───────────────┐     ┌───────────────┐
│    Gemini     │     │    OpenAI     │     │     Grok      │
│ search, TTS,  │     │ text, JSON,   │     │ text, JSON,   │
│ video, vision │     │ vision, DALL-E│     │ chat          │
└───────────────┘     └───────────────┘     └───────────────┘

Module Structure:
================
- schemas/: CanonicalRequest and its enums
- providers/: one adapter per backend
- router/: fallback routing
- registry.py: which providers have a key
- normalizer.py: JSON recovery from loose model output
- errors.py: failure taxonomy and router errors
- prompts/: prompt templates per growth tool
- monitoring/: structured logs and usage counters
"""

__version__ = "0.1.0"

from tubegrow.ai.errors import (
    AllProvidersFailedError,
    FailureKind,
    NoProviderConfiguredError,
    RouterError,
)
from tubegrow.ai.router.orchestrator import FallbackRouter, RouteResult, fallback_router
from tubegrow.ai.schemas.request import CanonicalRequest, Language, ResponseShape, TaskType

__all__ = [
    "AllProvidersFailedError",
    "FailureKind",
    "NoProviderConfiguredError",
    "RouterError",
    "FallbackRouter",
    "RouteResult",
    "fallback_router",
    "CanonicalRequest",
    "Language",
    "ResponseShape",
    "TaskType",
]
