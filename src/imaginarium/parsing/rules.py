"""Sentence rules and the grammar table.

A ``Rule`` is a pattern of elements plus an action that turns the captured
segments into a command value. Rules are tried in table order and the first
one that consumes the whole sentence (and whose guard accepts the captures)
wins, so more specific forms come before more general ones.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType

from imaginarium import commands
from imaginarium.ontology import DENSITY_WORDS, BooleanDomain, Enumeration, NumericRange, Ontology
from imaginarium.parsing.cursor import Cursor
from imaginarium.parsing.segments import (
    PLURAL,
    SINGULAR,
    AdjectivePhrase,
    Count,
    Element,
    ListOf,
    NounPhrase,
    Number,
    Quantifier,
    Text,
    VerbPhrase,
    Word,
)

logger = logging.getLogger(__name__)

Captures = Mapping[str, object]
Action = Callable[[Captures], commands.Command]
Guard = Callable[[Captures], bool]


class Rule:
    """One sentence form.

    Parameters:
        pattern: Elements to match in order; plain strings become ``Word``\\s.
        action: Builds the command value from the captures.
        guard: Optional extra test of the captures.
        is_command: True for imperative forms (imagine, reset, ...) as
            opposed to declarative statements.
        doc: Human-readable description, shown in help and hints.
    """

    def __init__(
        self,
        *pattern: Element | str,
        action: Action,
        guard: Guard | None = None,
        is_command: bool = False,
        doc: str = "",
    ) -> None:
        self.pattern: tuple[Element, ...] = tuple(
            Word(p) if isinstance(p, str) else p for p in pattern
        )
        self.action = action
        self.guard = guard
        self.is_command = is_command
        self.doc = doc or self.describe()

    def _match(self, i: int, cursor: Cursor, captures: dict[str, object], ontology: Ontology) -> Iterator[tuple[dict[str, object], Cursor]]:
        if i == len(self.pattern):
            yield captures, cursor
            return
        element = self.pattern[i]
        for value, nxt in element.matches(cursor, ontology):
            if element.name is not None:
                bound = {**captures, element.name: value}
            else:
                bound = captures
            yield from self._match(i + 1, nxt, bound, ontology)

    def match(self, cursor: Cursor, ontology: Ontology) -> Captures | None:
        """The captures of the first complete match, or None."""
        for captures, end in self._match(0, cursor, {}, ontology):
            if not end.at_end:
                continue
            frozen = MappingProxyType(captures)
            if self.guard is None or self.guard(frozen):
                return frozen
        return None

    @property
    def keywords(self) -> frozenset[str]:
        return frozenset().union(*(e.keywords for e in self.pattern))

    def describe(self) -> str:
        return " ".join(e.describe() for e in self.pattern)

    def __repr__(self) -> str:
        return f"Rule({self.doc!r})"


def match_rules(rules: list[Rule], cursor: Cursor, ontology: Ontology) -> tuple[Rule, Captures] | None:
    """First rule matching the whole input at *cursor*, with its captures."""
    for rule in rules:
        captures = rule.match(cursor, ontology)
        if captures is not None:
            logger.debug("Matched rule: %s", rule.doc)
            return rule, captures
    return None


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

def _proper(*names: str) -> Guard:
    def guard(captures: Captures) -> bool:
        return all(captures[n].could_be_proper_name for n in names)  # type: ignore[attr-defined]
    return guard


def _not_copula(captures: Captures) -> bool:
    # "can be" alone introduces adjectives, not a verb
    return [t.lower() for t in captures["verb"].tokens] != ["be"]  # type: ignore[attr-defined]


def _known_object(captures: Captures) -> bool:
    return _not_copula(captures) and captures["object"].common_noun is not None  # type: ignore[attr-defined]


def _is_plural_kind(captures: Captures) -> bool:
    np = captures["kind"]
    return np.common_noun is None or np.is_plural  # type: ignore[attr-defined]


# ---------------------------------------------------------------------------
# The grammar
# ---------------------------------------------------------------------------

def _plural_subject() -> NounPhrase:
    return NounPhrase("subject", number=PLURAL, determiner="forbidden")


def _kind_list() -> ListOf:
    return ListOf(NounPhrase("kind", number=PLURAL, determiner="forbidden"), "kinds", conjunctions=("and",))


def _verb_rules(modal: str) -> list[Rule]:
    must = modal == "must"
    return [
        Rule(
            _plural_subject(), modal, VerbPhrase("verb"), Quantifier("quantifier"),
            NounPhrase("object", determiner="forbidden"),
            guard=_known_object,
            action=lambda c: commands.DefineVerb(c["subject"], c["verb"], c["object"], must, c["quantifier"]),
            doc=f"<kinds> {modal} <verb> one/many/other <kind>",
        ),
        Rule(
            _plural_subject(), modal, VerbPhrase("verb"), Quantifier("quantifier"),
            NounPhrase("object", determiner="forbidden"),
            guard=_not_copula,
            action=lambda c: commands.DefineVerb(c["subject"], c["verb"], c["object"], must, c["quantifier"]),
            doc=f"<kinds> {modal} <verb> one/many/other <kind>",
        ),
        Rule(
            _plural_subject(), modal, VerbPhrase("verb"),
            NounPhrase("object", determiner="forbidden"),
            guard=_known_object,
            action=lambda c: commands.DefineVerb(c["subject"], c["verb"], c["object"], must),
            doc=f"<kinds> {modal} <verb> <kind>",
        ),
        Rule(
            _plural_subject(), modal, VerbPhrase("verb"),
            NounPhrase("object", determiner="forbidden"),
            guard=_not_copula,
            action=lambda c: commands.DefineVerb(c["subject"], c["verb"], c["object"], must),
            doc=f"<kinds> {modal} <verb> <kind>",
        ),
    ]


def _list_items(value: object) -> tuple:
    return value.items  # type: ignore[attr-defined]


def default_rules() -> list[Rule]:
    """The sentence forms, most specific first."""
    rules = [
        # --- Commands ---
        Rule(
            Word("reset", "start over"),
            action=lambda c: commands.Reset(),
            is_command=True,
            doc="reset",
        ),
        Rule(
            "load", Text("path"),
            action=lambda c: commands.Load(" ".join(c["path"])),
            is_command=True,
            doc="load <file>",
        ),
        Rule(
            "imagine", Count("count"), NounPhrase("kind", determiner="forbidden"),
            action=lambda c: commands.Imagine(c["kind"], c["count"]),
            is_command=True,
            doc="imagine <count> <kind>",
        ),
        Rule(
            "imagine", NounPhrase("kind"),
            action=lambda c: commands.Imagine(c["kind"], 1),
            is_command=True,
            doc="imagine a <kind>",
        ),
        Rule(
            "how many", NounPhrase("kind", number=PLURAL, determiner="forbidden"), "are there",
            action=lambda c: commands.CountQuery(c["kind"]),
            is_command=True,
            doc="how many <kinds> are there",
        ),
        Rule(
            "what is", NounPhrase("kind", number=SINGULAR, determiner="required"),
            action=lambda c: commands.DescribeKind(c["kind"]),
            is_command=True,
            doc="what is a <kind>",
        ),
        Rule(
            "what are", NounPhrase("kind", number=PLURAL, determiner="forbidden"),
            action=lambda c: commands.DescribeKind(c["kind"]),
            is_command=True,
            doc="what are <kinds>",
        ),
        # --- Kinds ---
        Rule(
            "the plural of", Text("singular", stop_words=("is",)), "is", Text("plural"),
            action=lambda c: commands.DefinePlural(c["singular"], c["plural"]),
            doc="the plural of <noun> is <plural>",
        ),
        Rule(
            NounPhrase("kind", number=SINGULAR, determiner="optional"), "is a kind of",
            NounPhrase("super", number=SINGULAR, determiner="forbidden"),
            action=lambda c: commands.DefineKinds((c["kind"],), c["super"]),
            doc="<kind> is a kind of <kind>",
        ),
        Rule(
            _kind_list(), Word("are a kind of", "are kinds of"),
            NounPhrase("super", number=SINGULAR, determiner="forbidden"),
            action=lambda c: commands.DefineKinds(_list_items(c["kinds"]), c["super"]),
            doc="<kinds> are kinds of <kind>",
        ),
        Rule(
            NounPhrase("kind", number=PLURAL, determiner="forbidden"), "are identified as",
            "\"", Text("template"), "\"",
            action=lambda c: commands.SetNameTemplate(c["kind"], c["template"]),
            doc="<kinds> are identified as \"<template>\"",
        ),
        # --- Properties ---
        Rule(
            NounPhrase("kind", number=PLURAL, determiner="forbidden"), Word("have a", "have an"),
            Text("property", stop_words=("between",)), "between", Number("low"), "and", Number("high"),
            action=lambda c: commands.DefineProperty(c["kind"], c["property"], NumericRange(c["low"], c["high"])),
            doc="<kinds> have a <property> between <number> and <number>",
        ),
        Rule(
            NounPhrase("kind", number=PLURAL, determiner="forbidden"), Word("have a", "have an"),
            Text("property", stop_words=("from",)), "from",
            ListOf(Text("value", stop_words=(",", "and", "or")), "values"),
            action=lambda c: commands.DefineProperty(
                c["kind"], c["property"], Enumeration(tuple(tuple(v) for v in _list_items(c["values"])))
            ),
            doc="<kinds> have a <property> from <value>, <value>, or <value>",
        ),
        Rule(
            NounPhrase("kind", number=PLURAL, determiner="forbidden"), Word("can have a", "can have an"),
            Text("property"),
            action=lambda c: commands.DefineProperty(c["kind"], c["property"], BooleanDomain()),
            doc="<kinds> can have a <property>",
        ),
        Rule(
            NounPhrase("kind", number=PLURAL, determiner="forbidden"), Word("have a", "have an"),
            Text("property"),
            action=lambda c: commands.DefineProperty(c["kind"], c["property"]),
            doc="<kinds> have a <property>",
        ),
        # --- Adjectives ---
        Rule(
            NounPhrase("kind", number=PLURAL, determiner="forbidden"), "can be",
            ListOf(AdjectivePhrase("adjective"), "adjectives"),
            guard=_is_plural_kind,
            action=lambda c: commands.DefineAdjectives(
                c["kind"], _list_items(c["adjectives"]), c["adjectives"].conjunction, always=False
            ),
            doc="<kinds> can be <adjective> or <adjective>",
        ),
        Rule(
            NounPhrase("kind", number=PLURAL, determiner="forbidden"), "are",
            ListOf(AdjectivePhrase("adjective"), "adjectives"),
            guard=_is_plural_kind,
            action=lambda c: commands.DefineAdjectives(
                c["kind"], _list_items(c["adjectives"]), c["adjectives"].conjunction, always=True
            ),
            doc="<kinds> are <adjective> or <adjective>",
        ),
        # --- Verbs ---
        Rule(
            _plural_subject(), "can", VerbPhrase("verb"), "each other",
            action=lambda c: commands.DefineVerb(c["subject"], c["verb"], None),
            doc="<kinds> can <verb> each other",
        ),
        *_verb_rules("can"),
        *_verb_rules("must"),
        # --- Verb properties ---
        Rule(
            VerbPhrase("verb", known_only=True), "is",
            Word(*commands.VERB_FLAGS, name="flag"),
            action=lambda c: commands.SetVerbFlag(c["verb"], c["flag"]),
            doc="<verb> is reflexive/anti-reflexive/symmetric/anti-symmetric",
        ),
        Rule(
            VerbPhrase("verb", known_only=True), "is",
            Word(*DENSITY_WORDS, name="density"),
            action=lambda c: commands.SetVerbDensity(c["verb"], c["density"]),
            doc="<verb> is rare/uncommon/common",
        ),
        Rule(
            VerbPhrase("verb", known_only=True), "implies", VerbPhrase("general", known_only=True),
            action=lambda c: commands.AddGeneralization(c["verb"], c["general"]),
            doc="<verb> implies <verb>",
        ),
        Rule(
            VerbPhrase("first", known_only=True), "and", VerbPhrase("second", known_only=True),
            "are mutually exclusive",
            action=lambda c: commands.AddMutualExclusion(c["first"], c["second"]),
            doc="<verb> and <verb> are mutually exclusive",
        ),
        # --- Individuals ---
        Rule(
            NounPhrase("name", determiner="forbidden"), "is",
            NounPhrase("kind", number=SINGULAR, determiner="required"),
            guard=_proper("name"),
            action=lambda c: commands.DeclareIndividual(c["name"], c["kind"]),
            doc="<Name> is a <kind>",
        ),
        Rule(
            NounPhrase("subject", determiner="forbidden"), VerbPhrase("verb", known_only=True),
            NounPhrase("object", determiner="forbidden"),
            guard=_proper("subject", "object"),
            action=lambda c: commands.AssertRelation(c["subject"], c["verb"], c["object"]),
            doc="<Name> <verb> <Name>",
        ),
        Rule(
            NounPhrase("name", determiner="forbidden"), "is", AdjectivePhrase("adjective"),
            guard=_proper("name"),
            action=lambda c: commands.AssertAdjective(c["name"], c["adjective"]),
            doc="<Name> is <adjective>",
        ),
    ]
    return rules
