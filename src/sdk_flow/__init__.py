"""sdk-flow: Reconstruct the structure of agent SDK message streams."""

from .classifier import classify
from .correlation import ToolCorrelationIndex
from .models import (
    BlockType,
    Classification,
    ContentBlock,
    InvocationRecord,
    Message,
    MessageKind,
    QuestionRecord,
    QuestionResponse,
    QuestionState,
    RewindMode,
    RewindPoint,
)
from .parser import parse_message
from .questions import QuestionResolutionTracker
from .rewind import is_eligible, toggle
from .session import ReconstructionSession
from .subagents import SubagentTreeBuilder

__all__ = [
    "BlockType",
    "Classification",
    "ContentBlock",
    "InvocationRecord",
    "Message",
    "MessageKind",
    "QuestionRecord",
    "QuestionResolutionTracker",
    "QuestionResponse",
    "QuestionState",
    "ReconstructionSession",
    "RewindMode",
    "RewindPoint",
    "SubagentTreeBuilder",
    "ToolCorrelationIndex",
    "classify",
    "is_eligible",
    "parse_message",
    "toggle",
]
