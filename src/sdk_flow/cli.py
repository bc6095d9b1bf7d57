"""CLI entry point for sdk-flow."""

import logging
from pathlib import Path

import typer

from . import config

APP_HELP = """
Reconstruct agent SDK message streams.

\b
Input is a JSONL dump of SDK messages, one message object per line, in
the order they were delivered.
"""

TRANSCRIPT_HELP = """
Output the reconstructed stream as JSON for programmatic querying.

Tool invocations are paired with their results, sub-agent output is nested
under the invocation that spawned it, and question state and rewind
eligibility are attached to each top-level message.

\b
Examples:
  # Session metadata
  sdk-flow transcript messages.jsonl | jq '.metadata'

  # All tool invocations still waiting for a result
  sdk-flow transcript messages.jsonl | jq '[.messages[].invocations[]? | .invocation | select(.has_result | not)]'

  # Sub-agent output of a Task call
  sdk-flow transcript messages.jsonl | jq '.messages[].invocations[]? | select(.invocation.tool_name == "Task") | .children'

  # Compact output for piping (no indentation)
  sdk-flow transcript messages.jsonl --compact | jq '.metadata.total_messages'
"""

CHECKPOINTS_HELP = """
List the user turns that can be used as rewind checkpoints, newest first.
"""

app = typer.Typer(add_completion=False, help=APP_HELP)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log debug output to stderr"),
) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_session(jsonl_path: Path, removed_outputs: list[str] | None):
    from .parser import load_records
    from .session import ReconstructionSession

    if not jsonl_path.exists():
        typer.echo(f"Error: File not found: {jsonl_path}", err=True)
        raise typer.Exit(1)

    records = load_records(jsonl_path)
    session_id = next((r["session_id"] for r in records if r.get("session_id")), None)
    return ReconstructionSession.from_records(
        records, session_id=session_id, removed_outputs=removed_outputs or ()
    )


@app.command(help=TRANSCRIPT_HELP)
def transcript(
    jsonl_path: Path = typer.Argument(..., help="Path to JSONL file of SDK messages"),
    output: Path | None = typer.Option(None, "-o", "--output", help="Output JSON file path"),
    compact: bool = typer.Option(False, "--compact", help="No indentation (for piping)"),
    removed_output: list[str] | None = typer.Option(
        None, "--removed-output", help="uuid of a message whose tool output was removed"
    ),
) -> None:
    from .export import render_json

    session = _load_session(jsonl_path, removed_output)
    json_str = render_json(session, jsonl_path, compact=compact)

    if output is None:
        typer.echo(json_str)
    else:
        output.write_text(json_str)
        typer.echo(f"Written to {output}", err=True)


@app.command(help=CHECKPOINTS_HELP)
def checkpoints(
    jsonl_path: Path = typer.Argument(..., help="Path to JSONL file of SDK messages"),
) -> None:
    session = _load_session(jsonl_path, None)
    points = session.rewind_points()
    if not points:
        typer.echo("No rewind checkpoints", err=True)
        return
    for point in points:
        preview = point.content.replace("\n", " ")
        typer.echo(f"{point.turn_number:>4}  {point.uuid}  {preview}")


if __name__ == "__main__":
    app()
