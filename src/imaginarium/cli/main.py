"""CLI entry point for imaginarium.

Usage::

    imaginarium tell    -f cats.txt --create "cats are a kind of animal"
    imaginarium imagine -f cats.txt "imagine 3 cats"
    imaginarium repl    [-f cats.txt]
"""

from __future__ import annotations

import argparse
import logging
import sys

from imaginarium._version import __version__


def _add_session_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("-d", "--dir", default=None, help="Directory of definitions files (<noun>.txt)")
    p.add_argument("--seed", type=int, default=None, help="Random seed for generation")
    p.add_argument("--timeout", type=int, default=10_000, help="Solver timeout in ms (default: 10000)")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the ``imaginarium`` CLI."""
    parser = argparse.ArgumentParser(
        prog="imaginarium",
        description="imaginarium: generate consistent worlds from English descriptions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (-vv for debug)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- tell ---
    tell_parser = subparsers.add_parser("tell", help="Add statements to a definitions file")
    tell_parser.add_argument("-f", "--file", required=True, help="Path to definitions file")
    tell_parser.add_argument("--create", action="store_true", help="Create the file if it doesn't exist")
    tell_parser.add_argument("--json", action="store_true", help="JSON output")
    tell_parser.add_argument("-q", "--quiet", action="store_true", help="No output, exit code only")
    tell_parser.add_argument("--batch", default=None, help="File of statements, one per line ('-' for stdin)")
    tell_parser.add_argument("statement", nargs="?", default=None, help='Statement, e.g. "cats are a kind of animal"')
    _add_session_arguments(tell_parser)

    # --- imagine ---
    imagine_parser = subparsers.add_parser("imagine", help="Generate individuals from definitions")
    imagine_parser.add_argument("-f", "--file", default=None, help="Path to definitions file")
    imagine_parser.add_argument("--json", action="store_true", help="JSON output")
    imagine_parser.add_argument("-q", "--quiet", action="store_true", help="No output, exit code only")
    imagine_parser.add_argument("query", help='Command, e.g. "imagine 3 cats" or "how many dogs are there"')
    _add_session_arguments(imagine_parser)

    # --- repl ---
    repl_parser = subparsers.add_parser("repl", help="Interactive REPL")
    repl_parser.add_argument("-f", "--file", default=None, help="Path to definitions file to load")
    _add_session_arguments(repl_parser)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "tell":
        from imaginarium.cli.tell import run_tell
        return run_tell(args)
    elif args.command == "imagine":
        from imaginarium.cli.imagine import run_imagine
        return run_imagine(args)
    elif args.command == "repl":
        from imaginarium.cli.repl import run_repl
        return run_repl(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
