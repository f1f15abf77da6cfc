"""Structured JSON output for the imaginarium CLI."""

from __future__ import annotations

import json
import logging
import sys

from imaginarium.session import CommandResult

logger = logging.getLogger(__name__)


def emit_json(data: dict) -> None:
    """Print compact single-line JSON to stdout."""
    print(json.dumps(data, separators=(",", ":")))


def tell_response(statement: str, result: CommandResult, definitions_file: str | None) -> dict:
    """Build a tell response dict."""
    d: dict = {
        "action": "told",
        "statement": statement,
        "response": result.text,
    }
    if definitions_file is not None:
        d["definitions_file"] = definitions_file
    return d


def imagine_response(command: str, result: CommandResult) -> dict:
    """Build an imagine response dict."""
    d: dict = {
        "status": "UNSATISFIABLE" if result.unsatisfiable else "OK",
        "command": command,
    }
    d.update(result.to_dict())
    return d


def error_response(message: str, hints: list[str] | None = None) -> dict:
    """Build an error response dict."""
    d: dict = {"error": message}
    if hints:
        d["hints"] = hints
    return d


def emit_error(
    message: str,
    *,
    hints: list[str] | None = None,
    json_mode: bool = False,
    quiet: bool = False,
) -> None:
    """Print an error message to stderr, or as JSON to stdout."""
    if quiet:
        return
    if json_mode:
        emit_json(error_response(message, hints))
    else:
        print(f"Error: {message}", file=sys.stderr)
        if hints:
            print("Did you mean one of:", file=sys.stderr)
            for hint in hints:
                print(f"  {hint}", file=sys.stderr)


def print_result(result: CommandResult) -> None:
    """Print a successful result as plain text."""
    if result.text:
        print(result.text)
    for line in result.descriptions:
        print(line)
    for verb, subject, obj in result.relationships:
        print(f"{subject} {verb} {obj}.")
