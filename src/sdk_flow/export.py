"""JSON export of a reconstructed session for downstream renderers."""

import json
from pathlib import Path
from typing import Any

from .models import BlockType, ContentBlock, Message
from .parser import is_tool_result_only
from .session import ReconstructionSession


def block_to_dict(block: ContentBlock) -> dict:
    """Convert a content block to a dict, keeping only fields set for its type."""
    data: dict[str, Any] = {"type": block.type.value}
    if block.type == BlockType.TEXT:
        data["text"] = block.text
    elif block.type == BlockType.THINKING:
        data["thinking"] = block.thinking
    elif block.type == BlockType.TOOL_USE:
        data["tool_use_id"] = block.tool_use_id
        data["tool_name"] = block.tool_name
        data["tool_input"] = block.tool_input
    elif block.type == BlockType.TOOL_RESULT:
        data["tool_use_id"] = block.tool_use_id
        data["is_error"] = block.is_error
    elif block.type == BlockType.UNKNOWN:
        data["raw_type"] = block.raw_type
    return data


def message_to_dict(
    message: Message,
    session: ReconstructionSession,
    expanded: frozenset[str] = frozenset(),
) -> dict:
    """Convert one message with everything the indices know about it.

    Sub-agent children are expanded recursively; an invocation already being
    expanded higher up is not expanded again.
    """
    classification = session.classification_of(message)
    data: dict[str, Any] = {
        "kind": classification.kind.value,
        "is_user_visible": classification.is_user_visible,
        "uuid": message.uuid,
        "subtype": message.subtype,
        "timestamp": message.timestamp,
        "parent_invocation_id": message.parent_invocation_id,
        "is_synthetic": message.is_synthetic,
        "is_tool_result_only": is_tool_result_only(message),
        "rewind_eligible": session.is_rewind_eligible(message),
        "blocks": [block_to_dict(b) for b in message.blocks],
    }
    if message.tool_use_id:
        data["tool_use_id"] = message.tool_use_id
    if message.tool_name:
        data["tool_name"] = message.tool_name

    invocations = []
    for block in message.blocks:
        if block.type != BlockType.TOOL_USE or not block.tool_use_id:
            continue
        invocation_id = block.tool_use_id
        record = session.invocation(invocation_id)
        question = None
        if block.tool_name in session.question_tools:
            question = session.question(invocation_id)
        children = []
        if invocation_id not in expanded:
            children = [
                message_to_dict(child, session, expanded | {invocation_id})
                for child in session.children_of(invocation_id)
            ]
        invocations.append(
            {
                "invocation": record.model_dump(mode="json") if record else None,
                "spawns_subagent": session.spawns_subagent(invocation_id),
                "children": children,
                "question": question.model_dump(mode="json") if question else None,
            }
        )
    if invocations:
        data["invocations"] = invocations

    if message.uuid:
        info = session.session_info_for(message.uuid)
        if info is not None:
            data["session_info"] = info.raw
    return data


def session_to_dict(session: ReconstructionSession) -> dict:
    """Convert a reconstructed session to a dict for JSON serialization."""
    return {
        "messages": [message_to_dict(m, session) for m in session.top_level],
        "rewind_points": [p.model_dump(mode="json") for p in session.rewind_points()],
    }


def compute_metadata(session: ReconstructionSession, jsonl_path: Path) -> dict:
    """Compute summary metadata for the session."""
    messages = session.top_level
    stats = session.stats
    return {
        "session_id": session.session_id or jsonl_path.stem,
        "total_messages": len(messages),
        "user_turns": len(session.rewind_points()),
        "subagent_invocations": len(session.subagents.parents()),
        "input_tokens": stats.input_tokens,
        "output_tokens": stats.output_tokens,
        "total_cost_usd": stats.total_cost_usd,
    }


def render_json(session: ReconstructionSession, jsonl_path: Path, compact: bool = False) -> str:
    """Render session as JSON string."""
    data = session_to_dict(session)
    metadata = compute_metadata(session, jsonl_path)

    # Put metadata first in output
    ordered = {"metadata": metadata, **data}

    return json.dumps(ordered, indent=None if compact else 2, default=str)
