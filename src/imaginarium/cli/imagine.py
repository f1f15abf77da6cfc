"""``imaginarium imagine`` subcommand: run a generation command."""

from __future__ import annotations

import argparse
import logging

from imaginarium.cli.exitcodes import EXIT_ERROR, EXIT_SUCCESS, EXIT_UNSATISFIABLE
from imaginarium.cli.loading import open_session
from imaginarium.cli.output import emit_error, emit_json, imagine_response, print_result

logger = logging.getLogger(__name__)


def run_imagine(args: argparse.Namespace) -> int:
    """Execute the ``imagine`` subcommand."""
    json_mode = getattr(args, "json", False)
    quiet = getattr(args, "quiet", False)

    session = open_session(args, json_mode=json_mode, quiet=quiet)
    if session is None:
        return EXIT_ERROR

    query = args.query
    if not query.lower().lstrip().startswith(("imagine", "how many", "what")):
        query = f"imagine {query}"
    result = session.user_command(query)

    if result.error is not None:
        emit_error(result.error, hints=[r.doc for r in result.hints], json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR

    if json_mode:
        emit_json(imagine_response(query, result))
    elif not quiet:
        print_result(result)

    logger.info(
        "imagine: %s -> %s (%d individuals)",
        query, "unsat" if result.unsatisfiable else "ok", len(result.descriptions),
    )
    return EXIT_UNSATISFIABLE if result.unsatisfiable else EXIT_SUCCESS
