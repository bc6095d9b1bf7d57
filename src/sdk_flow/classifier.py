"""Message classification: one semantic category and a visibility flag per message."""

import logging
from typing import Any

from .models import Classification, Message, MessageKind

logger = logging.getLogger("sdk_flow.classifier")

_KIND_BY_TYPE = {
    "user": MessageKind.USER,
    "assistant": MessageKind.ASSISTANT,
    "tool_progress": MessageKind.TOOL_PROGRESS,
    "result": MessageKind.RESULT,
    "auth_status": MessageKind.AUTH_STATUS,
    "stream_event": MessageKind.STREAM_INTERNAL,
}


def message_kind(raw: dict[str, Any]) -> MessageKind:
    """Map a wire message's type/subtype to a MessageKind.

    Unknown types fall back to SYSTEM_OTHER so the renderer always has
    something to show.
    """
    msg_type = raw.get("type")
    if msg_type == "system":
        if raw.get("subtype") == "init":
            return MessageKind.SYSTEM_INIT
        return MessageKind.SYSTEM_OTHER
    kind = _KIND_BY_TYPE.get(msg_type) if isinstance(msg_type, str) else None
    if kind is None:
        logger.debug("Unrecognized message type %r, classifying as system_other", msg_type)
        return MessageKind.SYSTEM_OTHER
    return kind


def classify(message: Message | dict[str, Any]) -> Classification:
    """Classify a parsed message or a raw wire dict.

    Rules, in priority order:
    1. partial-token stream events are never user-visible
    2. system init is surfaced through the session-info side channel
    3. sub-agent output belongs to its invoking tool call, not the top level
    4. everything else is user-visible
    """
    if isinstance(message, Message):
        kind = message.kind
        parent = message.parent_invocation_id
    else:
        kind = message_kind(message)
        parent = message.get("parent_tool_use_id") or None

    match kind:
        case MessageKind.STREAM_INTERNAL:
            visible = False
        case MessageKind.SYSTEM_INIT:
            visible = False
        case (
            MessageKind.USER
            | MessageKind.ASSISTANT
            | MessageKind.TOOL_PROGRESS
            | MessageKind.RESULT
            | MessageKind.SYSTEM_OTHER
            | MessageKind.AUTH_STATUS
        ):
            visible = not parent

    return Classification(kind=kind, is_user_visible=visible)
