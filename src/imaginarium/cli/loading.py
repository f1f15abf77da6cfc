"""Building a session from command-line arguments."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from imaginarium.cli.output import emit_error
from imaginarium.errors import ImaginariumError
from imaginarium.session import Session

logger = logging.getLogger(__name__)


def open_session(args: argparse.Namespace, *, json_mode: bool = False, quiet: bool = False) -> Session | None:
    """A session with the ``--file`` definitions loaded, or None on error.

    A missing file is an error unless ``--create`` was given.
    """
    session = Session(
        getattr(args, "dir", None),
        seed=getattr(args, "seed", None),
        solver_timeout_ms=getattr(args, "timeout", None),
    )
    path = getattr(args, "file", None)
    if path is None:
        return session
    if not Path(path).exists():
        if getattr(args, "create", False):
            return session
        emit_error(
            f"Definitions file {path} does not exist. Use --create to create it.",
            json_mode=json_mode, quiet=quiet,
        )
        return None
    try:
        session.load_definitions(path)
    except (ImaginariumError, OSError) as e:
        emit_error(str(e), json_mode=json_mode, quiet=quiet)
        return None
    # The file's own sentences are the starting history, so saving rewrites it whole.
    session.history = [
        line.strip() for line in Path(path).read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    return session
