"""``imaginarium tell`` subcommand: add statements to a definitions file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from imaginarium.cli.exitcodes import EXIT_ERROR, EXIT_SUCCESS
from imaginarium.cli.loading import open_session
from imaginarium.cli.output import emit_error, emit_json, tell_response
from imaginarium.session import Session

logger = logging.getLogger(__name__)


def _process_tell_statement(
    statement: str,
    session: Session,
    path: Path,
    *,
    json_mode: bool = False,
    quiet: bool = False,
) -> int:
    """Run a single statement. Returns exit code."""
    result = session.user_command(statement)
    if result.error is not None:
        emit_error(result.error, hints=[r.doc for r in result.hints], json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR
    if not result.ontology_changed:
        emit_error(
            f"Not a definition: {statement!r}. Use 'imaginarium imagine' for commands.",
            json_mode=json_mode, quiet=quiet,
        )
        return EXIT_ERROR
    if json_mode:
        emit_json(tell_response(statement, result, str(path)))
    elif not quiet:
        print(result.text)
    return EXIT_SUCCESS


def run_tell(args: argparse.Namespace) -> int:
    """Execute the ``tell`` subcommand."""
    path = Path(args.file)
    json_mode = getattr(args, "json", False)
    quiet = getattr(args, "quiet", False)
    batch = getattr(args, "batch", None)

    session = open_session(args, json_mode=json_mode, quiet=quiet)
    if session is None:
        return EXIT_ERROR

    # --- Batch mode ---
    if batch is not None:
        return _run_tell_batch(batch, session, path, json_mode=json_mode, quiet=quiet)

    # --- Single statement ---
    statement = args.statement
    if statement is None:
        emit_error("No statement provided.", json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR
    if statement == "-":
        statement = sys.stdin.readline().rstrip("\n")

    rc = _process_tell_statement(statement, session, path, json_mode=json_mode, quiet=quiet)
    if rc == EXIT_SUCCESS:
        session.save_history(path)
    return rc


def _run_tell_batch(
    batch_source: str,
    session: Session,
    path: Path,
    *,
    json_mode: bool = False,
    quiet: bool = False,
) -> int:
    """Run a batch file of statements, saving those that succeed."""
    if batch_source == "-":
        lines = sys.stdin.read().splitlines()
    else:
        try:
            with open(batch_source, encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            emit_error(str(e), json_mode=json_mode, quiet=quiet)
            return EXIT_ERROR

    had_error = False
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        rc = _process_tell_statement(line, session, path, json_mode=json_mode, quiet=quiet)
        if rc != EXIT_SUCCESS:
            had_error = True

    session.save_history(path)
    logger.info("Saved definitions to %s (batch)", path)
    return EXIT_ERROR if had_error else EXIT_SUCCESS
