"""sdk-flow configuration."""

import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_list(name: str, default: str) -> tuple[str, ...]:
    value = os.getenv(name, default)
    return tuple(item.strip() for item in value.split(",") if item.strip())


# Tools whose invocations ask the user an interactive question
QUESTION_TOOLS = _env_list("SDK_FLOW_QUESTION_TOOLS", "AskUserQuestion")

# Tools whose invocations spawn a sub-agent
SUBAGENT_TOOLS = _env_list("SDK_FLOW_SUBAGENT_TOOLS", "Task,Agent")

# Length of the content preview attached to rewind points
PREVIEW_CHARS = _env_int("SDK_FLOW_PREVIEW_CHARS", 300)

# Keep partial-token stream events until the turn's result arrives
BUFFER_STREAM_EVENTS = _env_bool("SDK_FLOW_BUFFER_STREAM_EVENTS", True)

LOG_LEVEL = os.getenv("SDK_FLOW_LOG_LEVEL", "WARNING").upper()
