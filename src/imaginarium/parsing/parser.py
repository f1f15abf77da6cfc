"""The parser: a rule table plus a stack of parsing contexts.

Loading a definitions file parses sentences while another sentence (the
``load`` command) is still being executed, so each nested load pushes a
fresh context and pops it when the file is done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from imaginarium.errors import GrammaticalError
from imaginarium.ontology import Ontology
from imaginarium.parsing.cursor import Cursor
from imaginarium.parsing.rules import Captures, Rule, default_rules, match_rules
from imaginarium.tokens import tokenize

if TYPE_CHECKING:
    from imaginarium.commands import Command

logger = logging.getLogger(__name__)


@dataclass
class ParserContext:
    """The sentence currently being parsed at one nesting level."""

    text: str = ""
    cursor: Cursor = field(default_factory=lambda: Cursor(()))

    def load(self, text: str) -> None:
        self.text = text
        self.cursor = Cursor(tuple(tokenize(text)))


@dataclass(frozen=True)
class ParseResult:
    rule: Rule
    captures: Captures
    command: Command


class Parser:
    """Turns sentences into command values.

    Parameters:
        rules: The grammar; defaults to ``default_rules()``.
    """

    def __init__(self, rules: list[Rule] | None = None) -> None:
        self.rules = rules if rules is not None else default_rules()
        self._contexts: list[ParserContext] = [ParserContext()]
        logger.debug("Parser created: %d rules", len(self.rules))

    @property
    def current(self) -> ParserContext:
        return self._contexts[-1]

    @property
    def depth(self) -> int:
        return len(self._contexts)

    def push(self) -> None:
        self._contexts.append(ParserContext())

    def pop(self) -> None:
        if len(self._contexts) == 1:
            raise RuntimeError("Parser context stack underflow")
        self._contexts.pop()

    def parse(self, text: str, ontology: Ontology) -> ParseResult:
        """Match *text* against the grammar and build its command.

        Raises GrammaticalError if no rule matches the whole sentence.
        Errors raised while building the command (for instance an invalid
        quantifier) propagate unchanged.
        """
        context = self.current
        context.load(text)
        found = match_rules(self.rules, context.cursor, ontology)
        if found is None:
            raise GrammaticalError("I don't understand", text.strip())
        rule, captures = found
        context.cursor = Cursor(context.cursor.tokens, len(context.cursor.tokens))
        return ParseResult(rule, captures, rule.action(captures))

    def rules_matching_keywords(self, tokens: list[str] | tuple[str, ...]) -> list[Rule]:
        """Rules sharing at least one literal word with *tokens*."""
        words = {t.lower() for t in tokens}
        return [r for r in self.rules if r.keywords & words]
