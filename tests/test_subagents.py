"""Unit tests for sub-agent grouping."""

from sdk_flow.parser import parse_message
from sdk_flow.subagents import SubagentTreeBuilder


def _child(uuid: str, parent: str, text: str = "x", msg_type: str = "assistant") -> dict:
    return {
        "type": msg_type,
        "uuid": uuid,
        "parent_tool_use_id": parent,
        "message": {"content": [{"type": "text", "text": text}]},
    }


class TestSubagentTreeBuilder:
    """Tests for SubagentTreeBuilder."""

    def test_top_level_not_ingested(self) -> None:
        """Messages without a parent are not sub-agent output."""
        tree = SubagentTreeBuilder()
        assert tree.ingest(parse_message({"type": "assistant", "uuid": "a"})) is False
        assert tree.parents() == []

    def test_children_in_arrival_order(self) -> None:
        """Children keep the order they arrived in."""
        tree = SubagentTreeBuilder()
        for uuid in ("c1", "c2", "c3"):
            assert tree.ingest(parse_message(_child(uuid, "task"))) is True
        assert [m.uuid for m in tree.children_of("task")] == ["c1", "c2", "c3"]

    def test_unknown_parent_still_grouped(self) -> None:
        """A child whose parent invocation was never seen is still grouped."""
        tree = SubagentTreeBuilder()
        tree.ingest(parse_message(_child("c1", "ghost")))
        assert len(tree.children_of("ghost")) == 1

    def test_no_children(self) -> None:
        """Unknown invocations have no children."""
        assert SubagentTreeBuilder().children_of("none") == []

    def test_redelivery_replaces_in_place(self) -> None:
        """A re-delivered uuid replaces the earlier copy without reordering."""
        tree = SubagentTreeBuilder()
        tree.ingest(parse_message(_child("c1", "task", "old")))
        tree.ingest(parse_message(_child("c2", "task")))
        tree.ingest(parse_message(_child("c1", "task", "new")))
        children = tree.children_of("task")
        assert [m.uuid for m in children] == ["c1", "c2"]
        assert children[0].blocks[0].text == "new"

    def test_redelivery_tracked_per_parent(self) -> None:
        """The same uuid under different parents is two separate children."""
        tree = SubagentTreeBuilder()
        tree.ingest(parse_message(_child("c1", "task-a", "a")))
        tree.ingest(parse_message(_child("c1", "task-b", "b")))
        tree.ingest(parse_message(_child("c1", "task-a", "a2")))
        assert [m.blocks[0].text for m in tree.children_of("task-a")] == ["a2"]
        assert [m.blocks[0].text for m in tree.children_of("task-b")] == ["b"]

    def test_repeated_redelivery_keeps_positions(self) -> None:
        """Every re-delivery lands on the original slot of its uuid."""
        tree = SubagentTreeBuilder()
        for i in range(50):
            tree.ingest(parse_message(_child(f"c{i}", "task", "old")))
        for i in (49, 0, 25, 0):
            tree.ingest(parse_message(_child(f"c{i}", "task", f"new{i}")))
        children = tree.children_of("task")
        assert [m.uuid for m in children] == [f"c{i}" for i in range(50)]
        assert children[0].blocks[0].text == "new0"
        assert children[25].blocks[0].text == "new25"
        assert children[49].blocks[0].text == "new49"
        assert children[1].blocks[0].text == "old"

    def test_messages_without_uuid_always_appended(self) -> None:
        """Children without an id cannot be de-duplicated."""
        tree = SubagentTreeBuilder()
        tree.ingest(parse_message({"type": "assistant", "parent_tool_use_id": "task"}))
        tree.ingest(parse_message({"type": "assistant", "parent_tool_use_id": "task"}))
        assert len(tree.children_of("task")) == 2

    def test_tool_result_only_children_suppressed(self) -> None:
        """Tool-result carriers are hidden unless explicitly requested."""
        tree = SubagentTreeBuilder()
        tree.ingest(parse_message(_child("c1", "task")))
        tree.ingest(
            parse_message(
                {
                    "type": "user",
                    "uuid": "c2",
                    "parent_tool_use_id": "task",
                    "message": {"content": [{"type": "tool_result", "tool_use_id": "g1"}]},
                }
            )
        )
        assert [m.uuid for m in tree.children_of("task")] == ["c1"]
        assert len(tree.children_of("task", include_tool_results=True)) == 2

    def test_nested_levels_kept_flat(self) -> None:
        """Grandchildren are grouped under their own parent, not the grandparent."""
        tree = SubagentTreeBuilder()
        tree.ingest(parse_message(_child("c1", "outer")))
        tree.ingest(parse_message(_child("g1", "inner")))
        assert [m.uuid for m in tree.children_of("outer")] == ["c1"]
        assert [m.uuid for m in tree.children_of("inner")] == ["g1"]
        assert tree.parents() == ["outer", "inner"]

    def test_children_of_returns_copy(self) -> None:
        """Mutating the returned list does not affect the index."""
        tree = SubagentTreeBuilder()
        tree.ingest(parse_message(_child("c1", "task")))
        tree.children_of("task").clear()
        assert len(tree.children_of("task")) == 1
