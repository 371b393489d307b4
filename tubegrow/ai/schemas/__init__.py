"""
AI Schemas - Shared request structures for the provider router.
"""

from tubegrow.ai.schemas.request import (
    Attachment,
    CanonicalRequest,
    ChatMessage,
    Language,
    ResponseShape,
    TaskType,
)

__all__ = [
    "Attachment",
    "CanonicalRequest",
    "ChatMessage",
    "Language",
    "ResponseShape",
    "TaskType",
]
