"""
Canonical Request - Provider-agnostic description of one AI task.

Every dashboard action is turned into exactly one CanonicalRequest. The
router and the provider adapters only ever see this structure; translating
it into Gemini, OpenAI or Grok wire formats is the adapters' job.

Example:
    request = CanonicalRequest(
        task=TaskType.JSON_GENERATE,
        user_prompt="Generate metadata for a video about sourdough",
        response_shape=ResponseShape.JSON,
        language=Language.VI,
    )
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional, Tuple


class TaskType(str, Enum):
    """Kinds of work the router can dispatch to a provider."""
    TEXT_GENERATE = "text_generate"
    JSON_GENERATE = "json_generate"
    IMAGE_GENERATE = "image_generate"
    SEARCH_GENERATE = "search_generate"
    SPEECH_SYNTHESIZE = "speech_synthesize"
    TRANSCRIBE = "transcribe"
    VIDEO_GENERATE = "video_generate"
    CHAT_TURN = "chat_turn"


class ResponseShape(str, Enum):
    """Whether the caller expects free text or a JSON value back."""
    PLAIN_TEXT = "plain_text"
    JSON = "json"


class Language(str, Enum):
    """Output languages supported by the dashboard."""
    EN = "en"
    VI = "vi"
    ZH = "zh"
    JA = "ja"

    @property
    def display_name(self) -> str:
        """Human-readable name used inside prompts."""
        return _LANGUAGE_NAMES[self]


_LANGUAGE_NAMES = {
    Language.EN: "English",
    Language.VI: "Vietnamese",
    Language.ZH: "Chinese (Simplified)",
    Language.JA: "Japanese",
}


@dataclass(frozen=True)
class Attachment:
    """Binary input sent alongside the prompt (thumbnail, audio clip, video)."""
    mime_type: str
    data: bytes

    @property
    def kind(self) -> str:
        """Major MIME type: "image", "audio", "video", ..."""
        return self.mime_type.split("/", 1)[0].lower()


@dataclass(frozen=True)
class ChatMessage:
    """One prior turn of a chat conversation."""
    role: str  # "user" or "model"
    text: str


@dataclass(frozen=True)
class CanonicalRequest:
    """
    Immutable, provider-agnostic request.

    Attributes:
        task: What kind of generation is wanted
        user_prompt: The main prompt text
        system_prompt: Optional system instructions
        attachments: Binary inputs (images, audio, video)
        response_shape: PLAIN_TEXT or JSON
        language: Output language requested by the user
        history: Prior chat turns (CHAT_TURN only)
        options: Task options such as aspect_ratio or voice_name
    """
    task: TaskType
    user_prompt: str
    system_prompt: Optional[str] = None
    attachments: Tuple[Attachment, ...] = ()
    response_shape: ResponseShape = ResponseShape.PLAIN_TEXT
    language: Language = Language.EN
    history: Tuple[ChatMessage, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attachments", tuple(self.attachments))
        object.__setattr__(self, "history", tuple(self.history))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @property
    def wants_json(self) -> bool:
        return self.response_shape == ResponseShape.JSON

    @property
    def requires_search(self) -> bool:
        return self.task == TaskType.SEARCH_GENERATE

    @property
    def attachment_kinds(self) -> FrozenSet[str]:
        return frozenset(a.kind for a in self.attachments)

    @property
    def is_multimodal(self) -> bool:
        return bool(self.attachments)

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)
