"""Resolution state for interactive question tool invocations."""

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

from .errors import InvalidQuestionStateError
from .models import Question, QuestionOption, QuestionRecord, QuestionResponse, QuestionState

logger = logging.getLogger("sdk_flow.questions")


def parse_questions(tool_input: Any) -> list[Question]:
    """Read the question set out of a question tool's input payload.

    Entries that are not objects or carry no question text are dropped;
    options without a label are dropped.
    """
    if not isinstance(tool_input, dict):
        return []
    raw_questions = tool_input.get("questions")
    if not isinstance(raw_questions, list):
        return []

    questions = []
    for raw in raw_questions:
        if not isinstance(raw, dict) or not raw.get("question"):
            continue
        options = []
        for opt in raw.get("options") or []:
            if isinstance(opt, dict) and opt.get("label"):
                options.append(
                    QuestionOption(label=str(opt["label"]), description=opt.get("description"))
                )
        questions.append(
            Question(
                question=str(raw["question"]),
                header=raw.get("header"),
                options=options,
                multi_select=bool(raw.get("multiSelect", False)),
            )
        )
    return questions


def build_responses(
    questions: list[Question],
    selections: Mapping[int, Iterable[str]],
    custom_texts: Mapping[int, str] | None = None,
) -> list[QuestionResponse]:
    """Assemble the finalized answer payload for a question set.

    Questions with neither a selected label nor custom text are left out.
    """
    custom_texts = custom_texts or {}
    responses = []
    for index in range(len(questions)):
        labels = list(selections.get(index, []))
        custom = custom_texts.get(index) or None
        if labels or custom:
            responses.append(
                QuestionResponse(question_index=index, selected_labels=labels, custom_text=custom)
            )
    return responses


class QuestionResolutionTracker:
    """Per-invocation question state: pending, then submitted or cancelled.

    Transitions only move forward. The first resolution wins; a later one is
    a no-op that returns the existing record.
    """

    def __init__(self) -> None:
        self._records: dict[str, QuestionRecord] = {}

    def __contains__(self, invocation_id: object) -> bool:
        return invocation_id in self._records

    def mark_pending(
        self,
        invocation_id: str,
        questions: list[Question],
        asked_at: Any = None,
    ) -> QuestionRecord:
        existing = self._records.get(invocation_id)
        if existing is not None:
            return existing
        record = QuestionRecord(
            invocation_id=invocation_id,
            state=QuestionState.PENDING,
            questions=list(questions),
            asked_at=asked_at if asked_at is not None else time.time(),
        )
        self._records[invocation_id] = record
        return record

    def resolve(
        self,
        invocation_id: str,
        state: QuestionState | str,
        responses: list[QuestionResponse] | None = None,
        questions: list[Question] | None = None,
    ) -> QuestionRecord:
        """Move a question to a terminal state.

        Args:
            invocation_id: Id of the question tool invocation.
            state: SUBMITTED or CANCELLED.
            responses: Final answers; dropped for cancellations.
            questions: Question set to record if the question was never marked pending.

        Raises:
            InvalidQuestionStateError: If ``state`` is not terminal.
        """
        try:
            target = QuestionState(state)
        except ValueError:
            raise InvalidQuestionStateError(invocation_id, str(state)) from None
        if target == QuestionState.PENDING:
            raise InvalidQuestionStateError(invocation_id, target.value)

        record = self._records.get(invocation_id)
        if record is not None and record.is_resolved:
            logger.debug("Question %s already %s, ignoring", invocation_id, record.state.value)
            return record

        if record is None:
            logger.debug("Resolving untracked question %s", invocation_id)
            record = QuestionRecord(
                invocation_id=invocation_id,
                state=QuestionState.PENDING,
                questions=list(questions or []),
            )
            self._records[invocation_id] = record

        record.state = target
        record.responses = list(responses or []) if target == QuestionState.SUBMITTED else []
        record.resolved_at = time.time()
        return record

    def save_draft(self, invocation_id: str, responses: list[QuestionResponse]) -> bool:
        """Store in-progress answers; only pending questions accept drafts."""
        record = self._records.get(invocation_id)
        if record is None or record.is_resolved:
            return False
        record.draft_responses = list(responses)
        return True

    def status_of(self, invocation_id: str, fallback_input: Any = None) -> QuestionRecord | None:
        """Current record, or a derived "skipped" view built from the tool input.

        A question replayed from history has no live tracking state; as long as
        its invocation input carries a question list the caller still gets a record.
        """
        record = self._records.get(invocation_id)
        if record is not None:
            return record
        if not isinstance(fallback_input, dict) or not isinstance(
            fallback_input.get("questions"), list
        ):
            return None
        return QuestionRecord(
            invocation_id=invocation_id,
            state=QuestionState.CANCELLED,
            questions=parse_questions(fallback_input),
            skipped=True,
        )
