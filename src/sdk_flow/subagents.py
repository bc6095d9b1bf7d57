"""Groups sub-agent output under the tool invocation that spawned it."""

import logging
from collections import defaultdict

from .models import Message
from .parser import is_tool_result_only

logger = logging.getLogger("sdk_flow.subagents")


class SubagentTreeBuilder:
    """Flat, keyed grouping of child messages by their immediate parent invocation.

    Nested sub-agents are not folded into their grandparent: a renderer walks
    deeper levels by calling ``children_of`` with a child's own invocation ids.
    """

    def __init__(self) -> None:
        self._children: dict[str, list[Message]] = defaultdict(list)
        self._positions: dict[str, dict[str, int]] = defaultdict(dict)

    def ingest(self, message: Message) -> bool:
        """Append a message under its parent invocation.

        Returns True if the message belonged to a sub-agent stream. The parent
        invocation does not need to be known yet.
        """
        parent = message.parent_invocation_id
        if not parent:
            return False

        children = self._children[parent]
        if message.uuid:
            positions = self._positions[parent]
            if message.uuid in positions:
                logger.debug("Replacing re-delivered message %s under %s", message.uuid, parent)
                children[positions[message.uuid]] = message
                return True
            positions[message.uuid] = len(children)
        children.append(message)
        return True

    def children_of(self, invocation_id: str, include_tool_results: bool = False) -> list[Message]:
        """Ordered child messages of an invocation (empty if none).

        User messages that only carry tool results are left out unless asked
        for; their content is already reachable through the paired invocation.
        """
        children = self._children.get(invocation_id, [])
        if include_tool_results:
            return list(children)
        return [m for m in children if not is_tool_result_only(m)]

    def parents(self) -> list[str]:
        """Invocation ids that have at least one child, in first-seen order."""
        return list(self._children)
