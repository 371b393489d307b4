"""
Prompts Module - Prompt templates for the growth tools and chat.
"""

from tubegrow.ai.prompts.growth_prompts import (
    build_chat_system_prompt,
    language_directive,
)

__all__ = [
    "build_chat_system_prompt",
    "language_directive",
]
