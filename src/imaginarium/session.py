"""The command-dispatch boundary.

A ``Session`` owns the ontology, the parser and the most recent generation.
``user_command`` is the single entry point for text from a user: it parses
the sentence, carries out the command, and reports the outcome (including
any error) as a ``CommandResult``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path

from imaginarium import commands
from imaginarium.errors import DefinitionError, GrammaticalError, ImaginariumError
from imaginarium.generator import Generator
from imaginarium.invention import Invention
from imaginarium.ontology import CommonNoun, Ontology
from imaginarium.parsing.parser import Parser
from imaginarium.parsing.rules import Rule
from imaginarium.tokens import tokenize, untokenize

logger = logging.getLogger(__name__)

UNSATISFIABLE = "No consistent individuals found."
DEFINITION_SUFFIX = ".txt"


@dataclass
class CommandResult:
    """What happened when a command was run.

    Attributes:
        text: The response to show the user.
        descriptions: One sentence per generated individual.
        relationships: (verb, subject, object) name triples that hold.
        ontology_changed: True if the command added to the ontology.
        unsatisfiable: True if a generation found no consistent population.
        error: Error message, if the command failed.
        hints: Rules that share words with a sentence that didn't parse.
        invention: The generation result, for generating commands.
    """

    text: str = ""
    descriptions: list[str] = field(default_factory=list)
    relationships: list[tuple[str, str, str]] = field(default_factory=list)
    ontology_changed: bool = False
    unsatisfiable: bool = False
    error: str | None = None
    hints: list[Rule] = field(default_factory=list)
    invention: Invention | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        d: dict = {
            "text": self.text,
            "ontology_changed": self.ontology_changed,
        }
        if self.descriptions:
            d["descriptions"] = list(self.descriptions)
        if self.relationships:
            d["relationships"] = [
                {"verb": v, "subject": s, "object": o} for v, s, o in self.relationships
            ]
        if self.unsatisfiable:
            d["unsatisfiable"] = True
        if self.error is not None:
            d["error"] = self.error
        if self.hints:
            d["hints"] = [r.doc for r in self.hints]
        return d


class Session:
    """One user's ontology and generation state.

    Parameters:
        definitions_directory: Where ``load`` looks for files, and where
            ``<noun>.txt`` is looked up when a noun is first mentioned.
        seed: Seed for generation; None for a different result each time.
        solver_timeout_ms: Give up (SolverError) after this long.
    """

    def __init__(
        self,
        definitions_directory: str | Path | None = None,
        *,
        seed: int | None = None,
        solver_timeout_ms: int | None = 10_000,
    ) -> None:
        self.definitions_directory = Path(definitions_directory) if definitions_directory else None
        self.seed = seed
        self.solver_timeout_ms = solver_timeout_ms
        self.ontology = Ontology()
        self.parser = Parser()
        self.generator: Generator | None = None
        self.invention: Invention | None = None
        self.history: list[str] = []
        self._rng = random.Random(seed)
        logger.debug(
            "Session created: definitions=%s seed=%s timeout=%s",
            self.definitions_directory, seed, solver_timeout_ms,
        )

    # --- Entry point ---

    def user_command(self, text: str) -> CommandResult:
        """Run one line of user input, never raising for user errors."""
        try:
            result = self.parse_and_execute(text)
        except GrammaticalError as e:
            logger.debug("Grammatical error: %s", e)
            hints = self.parser.rules_matching_keywords(tokenize(e.sentence))
            return CommandResult(error=str(e), hints=hints)
        except ImaginariumError as e:
            logger.debug("Command failed: %s", e)
            return CommandResult(error=str(e))
        if result.ontology_changed:
            self.history.append(text.strip())
        return result

    def parse_and_execute(self, text: str) -> CommandResult:
        """Parse and run *text*; errors propagate to the caller."""
        if not text.strip():
            return self.regenerate()
        parsed = self.parser.parse(text, self.ontology)
        result = self.execute(parsed.command)
        self._load_new_noun_definitions()
        return result

    def execute(self, command: commands.Command) -> CommandResult:
        """Carry out an already-parsed command."""
        if isinstance(command, commands.Mutation):
            return CommandResult(text=command.apply(self.ontology), ontology_changed=True)
        if isinstance(command, commands.Reset):
            self.reset()
            return CommandResult(text="Okay, I've forgotten everything.")
        if isinstance(command, commands.Load):
            path = self.load_definitions(command.path)
            return CommandResult(text=f"Loaded {path.name}.", ontology_changed=True)
        if isinstance(command, commands.Imagine):
            kind = commands.known_kind(self.ontology, command.kind)
            return self._generate(Generator(self.ontology, kind, command.count, seed=self._next_seed()))
        if isinstance(command, commands.CountQuery):
            return self._count(commands.known_kind(self.ontology, command.kind))
        if isinstance(command, commands.DescribeKind):
            return CommandResult(text=command.render(self.ontology))
        raise TypeError(f"Don't know how to execute {command!r}")

    # --- Generation ---

    def _next_seed(self) -> int:
        return self._rng.randrange(2**31)

    def _solve(self, generator: Generator) -> Invention | None:
        self.generator = generator
        self.invention = generator.solve(timeout_ms=self.solver_timeout_ms, seed=self.seed)
        return self.invention

    def _report(self, invention: Invention, individuals=None, text: str = "") -> CommandResult:
        chosen = invention.individuals if individuals is None else individuals
        return CommandResult(
            text=text,
            descriptions=[invention.description(i) + "." for i in chosen],
            relationships=[
                (untokenize(v.singular), invention.name_string(s), invention.name_string(o))
                for v, s, o in invention.relationships()
            ],
            invention=invention,
        )

    def _generate(self, generator: Generator) -> CommandResult:
        invention = self._solve(generator)
        if invention is None:
            logger.debug("No solution for %d individuals", len(generator.individuals))
            return CommandResult(text=UNSATISFIABLE, unsatisfiable=True)
        return self._report(invention)

    def _count(self, kind: CommonNoun) -> CommandResult:
        generator = Generator(self.ontology, individuals=self.ontology.individuals, seed=self._next_seed())
        invention = self._solve(generator)
        if invention is None:
            return CommandResult(text=UNSATISFIABLE, unsatisfiable=True)
        members = [i for i in invention.individuals if invention.is_a(i, kind)]
        n = len(members)
        noun = untokenize(kind.singular if n == 1 else kind.plural)
        text = f"There {'is' if n == 1 else 'are'} {n} {noun}."
        return self._report(invention, members, text)

    def regenerate(self) -> CommandResult:
        """Solve the most recent generation request again."""
        if self.generator is None:
            return CommandResult(text="Nothing to imagine yet.")
        old = self.generator
        generator = Generator(
            self.ontology, old.kind, old.count,
            individuals=[i for i in old.individuals if i.permanent],
            seed=self._next_seed(),
        )
        return self._generate(generator)

    # --- Definitions ---

    def _resolve(self, name: str | Path) -> Path:
        path = Path(name).expanduser()
        candidates = [path]
        if self.definitions_directory is not None and not path.is_absolute():
            candidates.insert(0, self.definitions_directory / path)
        for candidate in list(candidates):
            if candidate.suffix != DEFINITION_SUFFIX:
                candidates.append(candidate.with_name(candidate.name + DEFINITION_SUFFIX))
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        raise DefinitionError(f"Can't find a definitions file called {name}")

    def load_definitions(self, name: str | Path) -> Path:
        """Run every sentence of a definitions file.

        Blank lines and lines starting with ``#`` are skipped. Errors stop
        the load and propagate; sentences before the error stay in effect.
        """
        path = self._resolve(name)
        logger.info("Loading definitions from %s", path)
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise DefinitionError(f"Can't read {path}: {e}") from e
        self.parser.push()
        try:
            for lineno, line in enumerate(lines, 1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                try:
                    self.parse_and_execute(line)
                except ImaginariumError:
                    logger.error("%s:%d: error in %r", path, lineno, line)
                    raise
        finally:
            self.parser.pop()
        return path

    def _load_new_noun_definitions(self) -> None:
        new = self.ontology.drain_new_nouns()
        if self.definitions_directory is None:
            return
        for noun in new:
            path = self.definitions_directory / f"{noun.text}{DEFINITION_SUFFIX}"
            if path.is_file():
                self.load_definitions(path)

    # --- History ---

    def save_history(self, path: str | Path) -> None:
        """Write the ontology-changing commands so far as a definitions file."""
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            for line in self.history:
                f.write(line + "\n")
        logger.info("Saved %d commands to %s", len(self.history), path)

    def reset(self) -> None:
        """Start over with an empty ontology."""
        self.ontology = Ontology()
        self.generator = None
        self.invention = None
        self.history = []
        logger.debug("Session reset")
