"""Exceptions raised for caller mistakes.

Stream content never raises: unknown or malformed messages degrade to
fallback classifications and partial records instead.
"""


class SdkFlowError(Exception):
    """Base class for sdk-flow errors."""


class InvalidQuestionStateError(SdkFlowError, ValueError):
    """A question was asked to resolve into a non-terminal state."""

    def __init__(self, invocation_id: str, state: str) -> None:
        super().__init__(f"Cannot resolve question {invocation_id} to state {state!r}")
        self.invocation_id = invocation_id
        self.state = state
