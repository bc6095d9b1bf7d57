"""Property-based tests using Hypothesis."""

from hypothesis import given
from hypothesis import strategies as st

from sdk_flow.classifier import classify
from sdk_flow.correlation import ToolCorrelationIndex
from sdk_flow.models import MessageKind
from sdk_flow.parser import is_tool_result_only, parse_message
from sdk_flow.questions import QuestionResolutionTracker
from sdk_flow.rewind import toggle
from sdk_flow.session import ReconstructionSession

ids = st.text(alphabet="abcdef0123456789", min_size=1, max_size=6)
payloads = st.one_of(st.none(), st.integers(), st.text(max_size=20))

# Kinds that are routed to side channels before sub-agent grouping
HIDDEN_KINDS = (MessageKind.STREAM_INTERNAL, MessageKind.SYSTEM_INIT)


# Custom strategies
@st.composite
def raw_message(draw: st.DrawFn) -> dict:
    """Generate an SDK message of any kind, possibly parented."""
    msg_type = draw(
        st.sampled_from(
            [
                "user",
                "assistant",
                "tool_progress",
                "result",
                "system",
                "auth_status",
                "stream_event",
                "mystery",
            ]
        )
    )
    raw: dict = {"type": msg_type, "uuid": draw(ids)}
    if msg_type == "system":
        raw["subtype"] = draw(st.sampled_from(["init", "compact_boundary"]))
    if draw(st.booleans()):
        raw["parent_tool_use_id"] = draw(ids)
    if msg_type in ("user", "assistant"):
        raw["message"] = {"content": draw(st.text(max_size=10))}
    return raw


@st.composite
def tool_question_input(draw: st.DrawFn) -> dict:
    """Generate a question tool input payload."""
    questions = draw(
        st.lists(
            st.fixed_dictionaries(
                {
                    "question": st.text(min_size=1, max_size=20),
                    "options": st.lists(
                        st.fixed_dictionaries({"label": st.text(min_size=1, max_size=8)}),
                        max_size=3,
                    ),
                }
            ),
            max_size=3,
        )
    )
    return {"questions": questions}


@given(st.lists(payloads, min_size=1, max_size=10))
def test_result_last_write_wins(results: list) -> None:
    """The final recorded result is always the last one delivered."""
    index = ToolCorrelationIndex()
    for result in results:
        index.record_result("t1", result)
    assert index.lookup("t1").result == results[-1]


@given(st.lists(payloads, min_size=1, max_size=10), st.booleans())
def test_input_first_write_wins(inputs: list, result_first: bool) -> None:
    """The recorded input is the first one delivered, whatever else arrives."""
    index = ToolCorrelationIndex()
    if result_first:
        index.record_result("t1", "r")
    for tool_input in inputs:
        index.record_invocation("t1", "Bash", tool_input)
    assert index.lookup("t1").input == inputs[0]


@given(st.lists(raw_message(), max_size=30))
def test_parented_messages_never_top_level(records: list[dict]) -> None:
    """No message with a parent invocation ever appears in the top-level stream."""
    session = ReconstructionSession.from_records(records)
    assert all(m.parent_invocation_id is None for m in session.top_level)


@given(st.lists(raw_message(), max_size=30))
def test_parented_messages_grouped_once(records: list[dict]) -> None:
    """Every parented, non stream message is a child of its parent exactly once."""
    session = ReconstructionSession.from_records(records)
    expected: dict[str, list[str]] = {}
    for raw in records:
        message = parse_message(raw)
        if message.parent_invocation_id is None:
            continue
        if classify(message).kind in HIDDEN_KINDS or is_tool_result_only(message):
            continue
        uuids = expected.setdefault(message.parent_invocation_id, [])
        if message.uuid not in uuids:
            uuids.append(message.uuid)
    for parent, uuids in expected.items():
        assert [m.uuid for m in session.children_of(parent)] == uuids


@given(st.lists(raw_message(), max_size=30))
def test_stream_events_never_visible(records: list[dict]) -> None:
    """Stream events never reach the top level or any child list."""
    session = ReconstructionSession.from_records(records)
    assert all(m.raw_type != "stream_event" for m in session.top_level)
    for parent in session.subagents.parents():
        assert all(m.raw_type != "stream_event" for m in session.children_of(parent))


@given(st.frozensets(ids, max_size=5), ids, st.booleans())
def test_toggle_idempotent(selection: frozenset, message_id: str, checked: bool) -> None:
    """Toggling twice in the same direction equals toggling once."""
    once = toggle(selection, message_id, checked)
    assert toggle(once, message_id, checked) == once
    assert (message_id in once) is checked


@given(st.frozensets(ids, max_size=5), ids, st.booleans())
def test_toggle_pure(selection: frozenset, message_id: str, checked: bool) -> None:
    """Toggling never touches anything but the given id."""
    result = toggle(selection, message_id, checked)
    assert result - {message_id} == selection - {message_id}


@given(ids, tool_question_input())
def test_question_fallback_never_none(invocation_id: str, tool_input: dict) -> None:
    """A question with known input always has a status."""
    tracker = QuestionResolutionTracker()
    record = tracker.status_of(invocation_id, fallback_input=tool_input)
    assert record is not None
    assert record.skipped is True
    assert len(record.questions) == len(tool_input["questions"])
