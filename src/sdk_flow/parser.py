"""Wire parsing: raw SDK message dicts and JSONL dumps into Message models."""

import json
import logging
from pathlib import Path
from typing import Any

from .classifier import message_kind
from .models import BlockType, ContentBlock, Message, MessageKind

logger = logging.getLogger("sdk_flow.parser")


def load_records(path: Path) -> list[dict]:
    """Load JSONL, skip blank lines and lines that are not JSON objects."""
    records = []
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                rec = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Skipping malformed JSON at line %d: %s", line_num, e)
                continue
            if not isinstance(rec, dict):
                logger.warning("Skipping non-object record at line %d", line_num)
                continue
            records.append(rec)
    return records


def get_content_blocks(message: dict) -> list[dict]:
    """Extract content blocks from the API message payload."""
    content = message.get("content", [])
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    if not isinstance(content, list):
        return []
    return [b for b in content if isinstance(b, dict)]


def truncate(text: str, max_len: int = 300) -> str:
    """Truncate text with ellipsis."""
    text = str(text)
    if len(text) > max_len:
        return text[:max_len] + "..."
    return text


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _float_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_block(block: dict) -> ContentBlock:
    """Convert one wire content block; missing fields stay None."""
    raw_type = block.get("type")
    try:
        block_type = BlockType(raw_type)
    except ValueError:
        block_type = BlockType.UNKNOWN

    if block_type == BlockType.TEXT:
        return ContentBlock(
            type=block_type, raw_type=raw_type, text=_str_or_none(block.get("text"))
        )
    if block_type == BlockType.THINKING:
        return ContentBlock(
            type=block_type, raw_type=raw_type, thinking=_str_or_none(block.get("thinking"))
        )
    if block_type == BlockType.TOOL_USE:
        return ContentBlock(
            type=block_type,
            raw_type=raw_type,
            tool_use_id=_str_or_none(block.get("id")),
            tool_name=_str_or_none(block.get("name")),
            tool_input=block.get("input"),
        )
    if block_type == BlockType.TOOL_RESULT:
        return ContentBlock(
            type=block_type,
            raw_type=raw_type,
            tool_use_id=_str_or_none(block.get("tool_use_id")),
            content=block.get("content"),
            is_error=bool(block.get("is_error", False)),
        )
    return ContentBlock(type=block_type, raw_type=_str_or_none(raw_type))


def parse_message(raw: dict[str, Any]) -> Message:
    """Build an immutable Message from a raw SDK message dict."""
    api_message = raw.get("message")
    blocks: list[ContentBlock] = []
    if isinstance(api_message, dict):
        blocks = [parse_block(b) for b in get_content_blocks(api_message)]

    usage = raw.get("usage")
    result = raw.get("result")
    if result is None:
        result = raw.get("output")

    return Message(
        kind=message_kind(raw),
        raw_type=_str_or_none(raw.get("type")),
        subtype=_str_or_none(raw.get("subtype")),
        uuid=_str_or_none(raw.get("uuid")) or None,
        parent_invocation_id=_str_or_none(raw.get("parent_tool_use_id")) or None,
        session_id=_str_or_none(raw.get("session_id")),
        is_synthetic=bool(raw.get("isSynthetic", False)),
        is_replay=bool(raw.get("isReplay", False)),
        blocks=blocks,
        tool_use_id=_str_or_none(raw.get("tool_use_id")),
        tool_name=_str_or_none(raw.get("tool_name")),
        elapsed_seconds=_float_or_none(raw.get("elapsed_time_seconds")),
        result=result,
        is_error=bool(raw.get("is_error", False)),
        usage=usage if isinstance(usage, dict) else None,
        total_cost_usd=_float_or_none(raw.get("total_cost_usd")),
        timestamp=raw.get("timestamp"),
        raw=raw,
    )


def is_tool_result_only(message: Message) -> bool:
    """True for user messages that carry nothing but tool_result blocks.

    Their content is shown with the paired tool invocation instead.
    """
    if message.kind != MessageKind.USER or not message.blocks:
        return False
    return all(b.type == BlockType.TOOL_RESULT for b in message.blocks)


def text_content(message: Message) -> str:
    """Join the text blocks of a message."""
    return "\n".join(b.text for b in message.blocks if b.type == BlockType.TEXT and b.text)
