"""Tool invocation / result correlation keyed by invocation id."""

import logging
from collections.abc import Collection
from typing import Any

from .models import BlockType, InvocationRecord, Message, MessageKind

logger = logging.getLogger("sdk_flow.correlation")


class ToolCorrelationIndex:
    """Pairs tool invocations with their results, whatever order they arrive in.

    ``input`` and ``tool_name`` are first-write-wins; ``result`` and its flags
    are last-write-wins, since duplicate results come from a retrying
    transport and the latest delivery is authoritative.
    """

    def __init__(self) -> None:
        self._records: dict[str, InvocationRecord] = {}
        self._invoked: set[str] = set()

    def __contains__(self, invocation_id: object) -> bool:
        return invocation_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def _get_or_create(self, invocation_id: str) -> InvocationRecord:
        record = self._records.get(invocation_id)
        if record is None:
            record = InvocationRecord(invocation_id=invocation_id)
            self._records[invocation_id] = record
        return record

    def record_invocation(self, invocation_id: str, tool_name: str | None, input: Any) -> None:
        record = self._get_or_create(invocation_id)
        if invocation_id in self._invoked:
            return
        self._invoked.add(invocation_id)
        if tool_name is not None:
            record.tool_name = tool_name
        record.input = input

    def record_result(
        self,
        invocation_id: str,
        result: Any,
        is_error: bool = False,
        output_removed: bool = False,
    ) -> None:
        record = self._get_or_create(invocation_id)
        if record.has_result:
            logger.debug("Overwriting result for invocation %s", invocation_id)
        record.result = result
        record.has_result = True
        record.is_error = is_error
        record.output_removed = output_removed

    def record_progress(
        self, invocation_id: str, tool_name: str | None, elapsed_seconds: float | None
    ) -> None:
        record = self._get_or_create(invocation_id)
        if record.tool_name is None:
            record.tool_name = tool_name
        if elapsed_seconds is not None:
            record.elapsed_seconds = elapsed_seconds

    def lookup(self, invocation_id: str) -> InvocationRecord | None:
        return self._records.get(invocation_id)

    def ingest(self, message: Message, removed_outputs: Collection[str] = ()) -> None:
        """Extract invocation, result and progress data from one message.

        Args:
            message: Any classified message; kinds without tool data are ignored.
            removed_outputs: uuids of messages whose tool output was elided upstream.
        """
        output_removed = message.uuid is not None and message.uuid in removed_outputs

        for block in message.blocks:
            if block.type == BlockType.TOOL_USE and message.kind == MessageKind.ASSISTANT:
                if block.tool_use_id:
                    self.record_invocation(block.tool_use_id, block.tool_name, block.tool_input)
            elif block.type == BlockType.TOOL_RESULT and block.tool_use_id:
                self.record_result(
                    block.tool_use_id,
                    None if output_removed else block.content,
                    is_error=block.is_error,
                    output_removed=output_removed,
                )

        if message.kind == MessageKind.TOOL_PROGRESS and message.tool_use_id:
            self.record_progress(message.tool_use_id, message.tool_name, message.elapsed_seconds)
        elif message.kind == MessageKind.RESULT and message.tool_use_id:
            self.record_result(
                message.tool_use_id,
                None if output_removed else message.result,
                is_error=message.is_error,
                output_removed=output_removed,
            )
