"""Domain models for sdk-flow."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class MessageKind(str, Enum):
    """Semantic category of an SDK message."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL_PROGRESS = "tool_progress"
    RESULT = "result"
    SYSTEM_INIT = "system_init"
    SYSTEM_OTHER = "system_other"
    AUTH_STATUS = "auth_status"
    STREAM_INTERNAL = "stream_internal"


class BlockType(str, Enum):
    """Types of content blocks carried by user and assistant messages."""

    TEXT = "text"
    TOOL_USE = "tool_use"
    THINKING = "thinking"
    TOOL_RESULT = "tool_result"
    IMAGE = "image"
    UNKNOWN = "unknown"


class ContentBlock(BaseModel):
    """A content block in a user or assistant message."""

    model_config = ConfigDict(frozen=True)

    type: BlockType
    raw_type: str | None = None  # wire name, kept for unknown blocks
    text: str | None = None  # for text
    thinking: str | None = None  # for thinking
    tool_use_id: str | None = None  # for tool_use and tool_result
    tool_name: str | None = None  # for tool_use
    tool_input: Any = None  # for tool_use
    content: Any = None  # for tool_result
    is_error: bool = False  # for tool_result


class Message(BaseModel):
    """One SDK message, immutable once parsed."""

    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    raw_type: str | None = None
    subtype: str | None = None
    uuid: str | None = None
    parent_invocation_id: str | None = None
    session_id: str | None = None
    is_synthetic: bool = False
    is_replay: bool = False
    blocks: list[ContentBlock] = []
    tool_use_id: str | None = None  # tool_progress and tool-bound result
    tool_name: str | None = None  # tool_progress
    elapsed_seconds: float | None = None  # tool_progress
    result: Any = None  # result
    is_error: bool = False  # result
    usage: dict[str, Any] | None = None  # result
    total_cost_usd: float | None = None  # result
    timestamp: Any = None
    raw: dict[str, Any] = {}


class Classification(BaseModel):
    """Classifier output for a single message."""

    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    is_user_visible: bool


class InvocationRecord(BaseModel):
    """Everything known so far about one tool invocation."""

    invocation_id: str
    tool_name: str | None = None
    input: Any = None
    result: Any = None
    has_result: bool = False
    is_error: bool = False
    output_removed: bool = False  # result payload elided upstream
    elapsed_seconds: float | None = None  # latest progress tick


class QuestionOption(BaseModel):
    """A selectable answer for an interactive question."""

    label: str
    description: str | None = None


class Question(BaseModel):
    """One question of an interactive question set."""

    question: str
    header: str | None = None
    options: list[QuestionOption] = []
    multi_select: bool = False


class QuestionResponse(BaseModel):
    """The answer given to one question of a set."""

    question_index: int
    selected_labels: list[str] = []
    custom_text: str | None = None


class QuestionState(str, Enum):
    """Resolution state of an interactive question."""

    PENDING = "pending"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"


class QuestionRecord(BaseModel):
    """Tracking state of a question-asking tool invocation."""

    invocation_id: str
    state: QuestionState
    questions: list[Question] = []
    responses: list[QuestionResponse] = []
    draft_responses: list[QuestionResponse] = []
    asked_at: Any = None
    resolved_at: Any = None
    skipped: bool = False  # derived from tool input, never tracked live

    @property
    def is_resolved(self) -> bool:
        return self.state != QuestionState.PENDING


class RewindMode(str, Enum):
    """What a rewind restores."""

    FILES = "files"
    CONVERSATION = "conversation"
    BOTH = "both"

    @property
    def needs_confirmation(self) -> bool:
        """Modes that delete conversation history are destructive."""
        return self in (RewindMode.CONVERSATION, RewindMode.BOTH)


class RewindPoint(BaseModel):
    """A user turn that can be used as a rewind checkpoint."""

    uuid: str
    timestamp: Any = None
    content: str
    turn_number: int  # 1-indexed among eligible user turns


class SelectiveRewindPlan(BaseModel):
    """Outcome of planning a batch rewind over a selection."""

    can_rewind: bool
    error: str | None = None
    earliest_message_id: str | None = None
    messages_to_delete: int = 0


class SessionStats(BaseModel):
    """Usage accumulated from successful result messages."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_cost_usd: float = 0.0
