"""``imaginarium repl`` subcommand: interactive REPL."""

from __future__ import annotations

import argparse
import logging

from imaginarium.cli.loading import open_session
from imaginarium.cli.output import print_result
from imaginarium.errors import ImaginariumError
from imaginarium.session import Session
from imaginarium.tokens import untokenize

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Type English sentences to describe a world, for example:
  cats are a kind of animal
  cats can be black, white or grey
  cats have an age between 1 and 20
  cats can chase many mice
  imagine 3 cats
  how many cats are there
Press return on an empty line to imagine again.

Commands:
  show                Display what is known (kinds, adjectives, verbs, names)
  show history        Display the definitions entered so far
  rules               List the sentence forms
  save <file>         Save the definitions entered so far
  load <file>         Load a definitions file
  help                Show this help
  quit                Exit the REPL
"""


def _show(session: Session) -> None:
    ontology = session.ontology
    nouns = ontology.common_nouns
    print(f"Kinds ({len(nouns)}):")
    for noun in nouns:
        supers = ", ".join(s.text for s in noun.superkinds)
        print(f"  {noun.text}" + (f" < {supers}" if supers else ""))
    adjectives = ontology.adjectives
    print(f"Adjectives ({len(adjectives)}):")
    for adj in adjectives:
        print(f"  {adj.text}")
    verbs = ontology.verbs
    print(f"Verbs ({len(verbs)}):")
    for verb in verbs:
        subject = verb.subject_kind.text if verb.subject_kind else "?"
        obj = verb.object_kind.text if verb.object_kind else "?"
        print(f"  {subject} {untokenize(verb.singular)} {obj}")
    names = ontology.proper_nouns
    print(f"Individuals ({len(names)}):")
    for name in names:
        kinds = ", ".join(k.text for k in name.kinds) or "?"
        print(f"  {name.text}: {kinds}")


def run_repl(args: argparse.Namespace) -> int:
    """Execute the ``repl`` subcommand."""
    session = open_session(args)
    if session is None:
        session = Session(getattr(args, "dir", None), seed=getattr(args, "seed", None))
        print("Starting with empty definitions.")
    elif getattr(args, "file", None):
        print(f"Loaded definitions from {args.file}")
    else:
        print("Starting with empty definitions.")

    print("imaginarium REPL. Type 'help' for commands.\n")

    try:
        while True:
            try:
                line = input("imaginarium> ").strip()
            except EOFError:
                print()
                break

            if line in ("quit", "exit"):
                break

            if line == "help":
                print(HELP_TEXT)
                continue

            if line == "rules":
                for rule in session.parser.rules:
                    print(f"  {rule.doc}")
                continue

            if line == "show":
                _show(session)
                continue

            if line == "show history":
                for entry in session.history:
                    print(f"  {entry}")
                continue

            if line.startswith("save "):
                filepath = line[5:].strip()
                try:
                    session.save_history(filepath)
                    print(f"Saved to {filepath}")
                except OSError as e:
                    print(f"Error saving: {e}")
                continue

            if line.startswith("load "):
                filepath = line[5:].strip()
                try:
                    session.load_definitions(filepath)
                    session.history.append(f"load {filepath}")
                    print(f"Loaded from {filepath}")
                except (OSError, ImaginariumError) as e:
                    print(f"Error loading: {e}")
                continue

            result = session.user_command(line)
            if result.error is not None:
                print(f"Error: {result.error}")
                if result.hints:
                    print("Did you mean one of:")
                    for rule in result.hints:
                        print(f"  {rule.doc}")
                continue
            print_result(result)
    except KeyboardInterrupt:
        print()

    return 0
