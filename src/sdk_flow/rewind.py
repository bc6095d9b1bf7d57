"""Rewind checkpoint eligibility and batch selection."""

from collections.abc import Iterable, Sequence

from . import config
from .models import Message, MessageKind, RewindPoint, SelectiveRewindPlan
from .parser import is_tool_result_only, text_content, truncate


def is_eligible(message: Message, selection_mode: bool = False) -> bool:
    """Whether a message can be a rewind checkpoint.

    Progress ticks are transient state of an in-flight tool call and never
    qualify. Outside batch selection only user turns mark a safe replay
    boundary; user messages that only carry tool results are not turns.
    """
    if not message.uuid or message.is_synthetic:
        return False
    if message.kind == MessageKind.TOOL_PROGRESS:
        return False
    if not selection_mode:
        return message.kind == MessageKind.USER and not is_tool_result_only(message)
    return True


def toggle(selection: frozenset[str], message_id: str, checked: bool) -> frozenset[str]:
    """Return a new selection with ``message_id`` added or removed.

    No-op toggles return the selection unchanged.
    """
    if checked:
        if message_id in selection:
            return selection
        return selection | {message_id}
    if message_id not in selection:
        return selection
    return selection - {message_id}


def rewind_points(
    messages: Iterable[Message], preview_chars: int | None = None
) -> list[RewindPoint]:
    """Eligible user turns as rewind points, newest first.

    Turn numbers are 1-indexed in stream order.
    """
    limit = config.PREVIEW_CHARS if preview_chars is None else preview_chars
    points = []
    for message in messages:
        if not is_eligible(message):
            continue
        points.append(
            RewindPoint(
                uuid=message.uuid,
                timestamp=message.timestamp,
                content=truncate(text_content(message), limit),
                turn_number=len(points) + 1,
            )
        )
    points.reverse()
    return points


def plan_selective_rewind(
    messages: Sequence[Message], selection: Iterable[str]
) -> SelectiveRewindPlan:
    """Work out what a batch rewind over ``selection`` would remove.

    Everything after the earliest selected message (by stream position) is
    deleted. Ids that are not eligible in selection mode are ignored.
    """
    selected = set(selection)
    for position, message in enumerate(messages):
        if message.uuid in selected and is_eligible(message, selection_mode=True):
            return SelectiveRewindPlan(
                can_rewind=True,
                earliest_message_id=message.uuid,
                messages_to_delete=len(messages) - position - 1,
            )
    return SelectiveRewindPlan(can_rewind=False, error="No valid messages found")
