"""Reconstruction session: owns every index for one conversation."""

import logging
from collections.abc import Collection, Iterable, Sequence
from typing import Any

from . import config
from .classifier import classify
from .correlation import ToolCorrelationIndex
from .models import (
    BlockType,
    Classification,
    InvocationRecord,
    Message,
    MessageKind,
    Question,
    QuestionRecord,
    QuestionResponse,
    QuestionState,
    RewindPoint,
    SelectiveRewindPlan,
    SessionStats,
)
from .parser import parse_message
from .questions import QuestionResolutionTracker, parse_questions
from .rewind import is_eligible, plan_selective_rewind, rewind_points
from .subagents import SubagentTreeBuilder

logger = logging.getLogger("sdk_flow.session")


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


class ReconstructionSession:
    """Rebuilds the logical structure of one conversation's SDK message stream.

    Messages are applied strictly in arrival order. ``ingest`` is for live
    delivery; ``replace`` discards every index and rebuilds from history.
    Not safe for concurrent mutation.
    """

    def __init__(
        self,
        session_id: str | None = None,
        removed_outputs: Collection[str] = (),
        question_tools: Sequence[str] | None = None,
        subagent_tools: Sequence[str] | None = None,
    ) -> None:
        self.session_id = session_id
        self.removed_outputs = set(removed_outputs)
        if question_tools is None:
            question_tools = config.QUESTION_TOOLS
        self.question_tools = tuple(question_tools)
        if subagent_tools is None:
            subagent_tools = config.SUBAGENT_TOOLS
        self.subagent_tools = tuple(subagent_tools)
        self._reset()

    @classmethod
    def from_records(
        cls, records: Iterable[dict[str, Any]], **kwargs: Any
    ) -> "ReconstructionSession":
        session = cls(**kwargs)
        session.replace(records)
        return session

    def _reset(self) -> None:
        self.tools = ToolCorrelationIndex()
        self.subagents = SubagentTreeBuilder()
        self.questions = QuestionResolutionTracker()
        self._top_level: list[Message] = []
        self._positions: dict[str, int] = {}
        self._session_info: dict[str, Message] = {}
        self._unattached_init: Message | None = None
        self._stream_events: list[Message] = []
        self._stats = SessionStats()
        self._last_sdk_cost = 0.0
        self._cost_baseline = 0.0

    def replace(self, records: Iterable[dict[str, Any]]) -> None:
        """Drop all state and rebuild from a full message history.

        Replayed questions are not marked pending; they resolve to the
        skipped view unless resolved again.
        """
        self._reset()
        count = 0
        for raw in records:
            self._apply(raw, live=False)
            count += 1
        logger.debug("Rebuilt session %s from %d messages", self.session_id, count)

    def ingest(self, raw: dict[str, Any]) -> Message:
        """Apply one live message and return its parsed form."""
        return self._apply(raw, live=True)

    def _apply(self, raw: dict[str, Any], live: bool) -> Message:
        message = parse_message(raw)
        classification = classify(message)

        match classification.kind:
            case MessageKind.STREAM_INTERNAL:
                if config.BUFFER_STREAM_EVENTS:
                    self._stream_events.append(message)
                return message
            case MessageKind.SYSTEM_INIT:
                self._attach_init(message)
                return message
            case MessageKind.RESULT:
                if not message.parent_invocation_id:
                    self._record_turn_result(message)
            case (
                MessageKind.USER
                | MessageKind.ASSISTANT
                | MessageKind.TOOL_PROGRESS
                | MessageKind.SYSTEM_OTHER
                | MessageKind.AUTH_STATUS
            ):
                pass

        self.tools.ingest(message, self.removed_outputs)
        self.subagents.ingest(message)
        if live:
            self._track_questions(message)
        if classification.is_user_visible:
            self._append_top_level(message)
        return message

    def _append_top_level(self, message: Message) -> None:
        if message.uuid and message.uuid in self._positions:
            # Re-delivery of a confirmed copy replaces the earlier one in place
            self._top_level[self._positions[message.uuid]] = message
            return
        if message.uuid:
            self._positions[message.uuid] = len(self._top_level)
            if message.kind == MessageKind.USER and self._unattached_init is not None:
                self._session_info[message.uuid] = self._unattached_init
                self._unattached_init = None
        self._top_level.append(message)

    def _attach_init(self, message: Message) -> None:
        for previous in reversed(self._top_level):
            if previous.kind == MessageKind.USER and previous.uuid:
                self._session_info[previous.uuid] = message
                return
        self._unattached_init = message

    def _record_turn_result(self, message: Message) -> None:
        if message.subtype != "success":
            return
        usage = message.usage or {}
        self._stats.input_tokens += _as_int(usage.get("input_tokens"))
        self._stats.output_tokens += _as_int(usage.get("output_tokens"))
        self._record_cost(message.total_cost_usd or 0.0)
        self._stream_events.clear()

    def _record_cost(self, sdk_cost: float) -> None:
        # total_cost_usd is cumulative within one SDK run; a drop means the run restarted
        if sdk_cost < self._last_sdk_cost and self._last_sdk_cost > 0:
            self._cost_baseline += self._last_sdk_cost
        self._last_sdk_cost = sdk_cost
        self._stats.total_cost_usd = self._cost_baseline + sdk_cost

    def _track_questions(self, message: Message) -> None:
        if message.kind != MessageKind.ASSISTANT:
            return
        for block in message.blocks:
            if block.type != BlockType.TOOL_USE or not block.tool_use_id:
                continue
            if block.tool_name in self.question_tools and block.tool_use_id not in self.questions:
                self.questions.mark_pending(
                    block.tool_use_id, parse_questions(block.tool_input), asked_at=message.timestamp
                )

    @property
    def top_level(self) -> list[Message]:
        return list(self._top_level)

    @property
    def streaming_events(self) -> list[Message]:
        return list(self._stream_events)

    @property
    def stats(self) -> SessionStats:
        return self._stats.model_copy()

    def classification_of(self, message: Message) -> Classification:
        return classify(message)

    def invocation(self, invocation_id: str) -> InvocationRecord | None:
        return self.tools.lookup(invocation_id)

    def invocations_in(self, message: Message) -> list[InvocationRecord]:
        """Correlated records for each tool_use block of a message, in block order."""
        records = []
        for block in message.blocks:
            if block.type == BlockType.TOOL_USE and block.tool_use_id:
                record = self.tools.lookup(block.tool_use_id)
                if record is not None:
                    records.append(record)
        return records

    def children_of(self, invocation_id: str) -> list[Message]:
        return self.subagents.children_of(invocation_id)

    def spawns_subagent(self, invocation_id: str) -> bool:
        """Whether an invocation starts a sub-agent, known from its tool or its children."""
        record = self.tools.lookup(invocation_id)
        if record is not None and record.tool_name in self.subagent_tools:
            return True
        return bool(self.subagents.children_of(invocation_id, include_tool_results=True))

    def question(self, invocation_id: str) -> QuestionRecord | None:
        """Tracked question state, or the skipped view for an untracked question tool call.

        Invocations of tools outside ``question_tools`` never have a question record.
        """
        if invocation_id in self.questions:
            return self.questions.status_of(invocation_id)
        record = self.tools.lookup(invocation_id)
        if record is None or record.tool_name not in self.question_tools:
            return None
        return self.questions.status_of(invocation_id, fallback_input=record.input)

    def answer_question(
        self, invocation_id: str, responses: list[QuestionResponse]
    ) -> QuestionRecord:
        """Submit answers; the returned record carries the payload to forward."""
        return self.questions.resolve(
            invocation_id,
            QuestionState.SUBMITTED,
            responses,
            questions=self._questions_from_input(invocation_id),
        )

    def cancel_question(self, invocation_id: str) -> QuestionRecord:
        return self.questions.resolve(
            invocation_id,
            QuestionState.CANCELLED,
            questions=self._questions_from_input(invocation_id),
        )

    def _questions_from_input(self, invocation_id: str) -> list[Question]:
        record = self.tools.lookup(invocation_id)
        return parse_questions(record.input) if record is not None else []

    def session_info_for(self, message_uuid: str) -> Message | None:
        """The system init message attached to a user turn, if any."""
        return self._session_info.get(message_uuid)

    def is_rewind_eligible(self, message: Message, selection_mode: bool = False) -> bool:
        return is_eligible(message, selection_mode=selection_mode)

    def rewind_points(self) -> list[RewindPoint]:
        return rewind_points(self._top_level)

    def plan_rewind(self, selection: Iterable[str]) -> SelectiveRewindPlan:
        return plan_selective_rewind(self._top_level, selection)
