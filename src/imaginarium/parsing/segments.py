"""Pattern elements for sentence rules.

An element matches at a cursor in every way it can, yielding
``(value, next_cursor)`` pairs; a rule tries those alternatives depth first,
which gives the parser its backtracking. Lexicon-driven elements yield trie
matches longest first; free-text elements yield spans shortest first and
never swallow the closed-class words that anchor the grammar.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from imaginarium import morphology
from imaginarium.ontology import (
    ADJECTIVE,
    NOUN,
    VERB,
    Adjective,
    CommonNoun,
    Ontology,
    ProperNoun,
    Referent,
    Verb,
)
from imaginarium.parsing.cursor import Cursor
from imaginarium.tokens import untokenize

Match = Iterator[tuple[object, Cursor]]

DETERMINERS = ("a", "an", "the")

# Words that can never be part of a free-form name.
CLOSED_CLASS = frozenset({
    "a", "an", "the", "is", "are", "can", "must", "have", "has", "and", "or",
    "of", "kind", "kinds", "between", "from", "identified", "each", "one",
    "many", "other", "who", "that", "with", "to", "for", "at", "on", "in", "by",
    "about", ",", "\"", "[", "]", "'s", "?",
})

VERB_CLOSED_CLASS = frozenset({
    "a", "an", "the", "and", "or", "each", "one", "many", "other", ",", "\"",
    "can", "must", "?",
})

QUANTIFIERS = ("one", "many", "other")
INVALID_QUANTIFIERS = ("a", "an")

SINGULAR = "singular"
PLURAL = "plural"


def _free_spans(cursor: Cursor, stop_words: frozenset[str]) -> Iterator[tuple[tuple[str, ...], Cursor]]:
    """Every non-empty run of tokens at *cursor* free of *stop_words*, shortest first."""
    n = 0
    while n < cursor.remaining and cursor.tokens[cursor.position + n].lower() not in stop_words:
        n += 1
        yield cursor.peek(n), cursor.advance(n)


# ---------------------------------------------------------------------------
# Segment values
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NP:
    """A matched noun phrase.

    Attributes:
        tokens: The head, without its determiner.
        determiner: "a", "an", "the" or None.
        referent: The noun the head names, if already known.
        is_plural: Whether the head is (or is taken to be) a plural form.
    """

    tokens: tuple[str, ...]
    determiner: str | None = None
    referent: Referent | None = None
    is_plural: bool = False

    @property
    def common_noun(self) -> CommonNoun | None:
        return self.referent if isinstance(self.referent, CommonNoun) else None

    @property
    def proper_noun(self) -> ProperNoun | None:
        return self.referent if isinstance(self.referent, ProperNoun) else None

    @property
    def could_be_proper_name(self) -> bool:
        return self.determiner is None and self.common_noun is None

    @property
    def text(self) -> str:
        return untokenize(self.tokens)


@dataclass(frozen=True, slots=True)
class VP:
    """A matched verb phrase; *verb* is None for a verb not yet defined."""

    tokens: tuple[str, ...]
    verb: Verb | None = None
    is_plural: bool = True

    @property
    def text(self) -> str:
        return untokenize(self.tokens)


@dataclass(frozen=True, slots=True)
class AP:
    """A matched adjective phrase; *adjective* is None for a new one."""

    tokens: tuple[str, ...]
    adjective: Adjective | None = None

    @property
    def text(self) -> str:
        return untokenize(self.tokens)


@dataclass(frozen=True, slots=True)
class ListValue:
    """Items of a conjoined list and the conjunction joining them."""

    items: tuple[object, ...]
    conjunction: str | None = None


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------

class Element:
    """Base class for anything that can appear in a rule pattern.

    Parameters:
        name: Capture name; elements without one match but record nothing.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        raise NotImplementedError

    @property
    def keywords(self) -> frozenset[str]:
        return frozenset()

    def describe(self) -> str:
        return f"<{self.name}>"


class Word(Element):
    """One or more literal alternatives, each possibly several tokens long."""

    def __init__(self, *alternatives: str, name: str | None = None) -> None:
        super().__init__(name)
        self.alternatives = tuple(tuple(a.split()) for a in alternatives)

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        for alt in self.alternatives:
            got = cursor.peek(len(alt))
            if len(got) == len(alt) and all(g.lower() == a for g, a in zip(got, alt)):
                yield " ".join(alt), cursor.advance(len(alt))

    @property
    def keywords(self) -> frozenset[str]:
        return frozenset(t for alt in self.alternatives for t in alt)

    def describe(self) -> str:
        texts = [" ".join(a) for a in self.alternatives]
        return texts[0] if len(texts) == 1 else "/".join(texts)


class NounPhrase(Element):
    """An optional determiner followed by a known or new noun.

    Parameters:
        name: Capture name.
        number: SINGULAR or PLURAL to say how an unknown noun should be read.
        determiner: "optional", "required" or "forbidden".
        known_only: Only match nouns already in the lexicon.
    """

    def __init__(
        self,
        name: str,
        *,
        number: str | None = None,
        determiner: str = "optional",
        known_only: bool = False,
    ) -> None:
        super().__init__(name)
        self.number = number
        self.determiner = determiner
        self.known_only = known_only

    def _heads(self, cursor: Cursor, ontology: Ontology) -> Iterator[tuple[NP, Cursor]]:
        trie = ontology.trie(NOUN)
        known_ends: set[int] = set()
        for m in trie.matches(cursor.tokens, cursor.position):
            known_ends.add(m.end)
            tokens = cursor.tokens[cursor.position:m.end]
            yield NP(tokens, None, m.value, m.is_plural), Cursor(cursor.tokens, m.end)
        if self.known_only:
            return
        for tokens, nxt in _free_spans(cursor, CLOSED_CLASS):
            if nxt.position in known_ends:
                continue
            if self.number is not None:
                plural = self.number == PLURAL
            else:
                plural = morphology.looks_plural(tokens)
            yield NP(tokens, None, None, plural), nxt

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        det = (cursor.current or "").lower()
        if det in DETERMINERS and self.determiner != "forbidden":
            for np, nxt in self._heads(cursor.advance(), ontology):
                plural = np.is_plural if np.referent is not None else False
                yield NP(np.tokens, det, np.referent, plural), nxt
        if det not in DETERMINERS and self.determiner != "required":
            yield from self._heads(cursor, ontology)
        elif cursor.current == "A" and self.determiner == "forbidden":
            # Where no determiner may appear, a capital "A" is a name.
            tokens = (cursor.current,)
            referent = ontology.find_noun(tokens)
            if referent is not None or not self.known_only:
                yield NP(tokens, None, referent, False), cursor.advance()


class VerbPhrase(Element):
    """A known verb (any inflection) or, unless *known_only*, a new one."""

    def __init__(self, name: str, *, known_only: bool = False) -> None:
        super().__init__(name)
        self.known_only = known_only

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        known_ends: set[int] = set()
        for m in ontology.trie(VERB).matches(cursor.tokens, cursor.position):
            known_ends.add(m.end)
            yield VP(cursor.tokens[cursor.position:m.end], m.value, m.is_plural), Cursor(cursor.tokens, m.end)
        if self.known_only:
            return
        for tokens, nxt in _free_spans(cursor, VERB_CLOSED_CLASS):
            if nxt.position not in known_ends:
                yield VP(tokens, None, True), nxt


class AdjectivePhrase(Element):
    """A known adjective or a new one-or-more word adjective."""

    def __init__(self, name: str, *, known_only: bool = False) -> None:
        super().__init__(name)
        self.known_only = known_only

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        known_ends: set[int] = set()
        for m in ontology.trie(ADJECTIVE).matches(cursor.tokens, cursor.position):
            known_ends.add(m.end)
            yield AP(cursor.tokens[cursor.position:m.end], m.value), Cursor(cursor.tokens, m.end)
        if self.known_only:
            return
        for tokens, nxt in _free_spans(cursor, CLOSED_CLASS):
            if nxt.position not in known_ends:
                yield AP(tokens, None), nxt


class ListOf(Element):
    """A list of items separated by commas and a final "and"/"or".

    Parameters:
        item: Element matching a single item (its own name is ignored).
        name: Capture name for the resulting ``ListValue``.
        conjunctions: Allowed conjunctions.
    """

    def __init__(self, item: Element, name: str, *, conjunctions: Sequence[str] = ("and", "or")) -> None:
        super().__init__(name)
        self.item = item
        self.conjunctions = tuple(conjunctions)

    def _rest(self, cursor: Cursor, ontology: Ontology, conj: str | None) -> Iterator[tuple[tuple[object, ...], str | None, Cursor]]:
        for value, nxt in self.item.matches(cursor, ontology):
            # Longer lists first: "black, white or grey" before "black".
            tok = (nxt.current or "").lower()
            if tok == ",":
                after = nxt.advance()
                following = (after.current or "").lower()
                if following in self.conjunctions:
                    if conj is None or conj == following:
                        for items, c, end in self._rest(after.advance(), ontology, following):
                            yield (value, *items), c, end
                else:
                    for items, c, end in self._rest(after, ontology, conj):
                        yield (value, *items), c, end
            elif tok in self.conjunctions and (conj is None or conj == tok):
                for items, c, end in self._rest(nxt.advance(), ontology, tok):
                    yield (value, *items), c, end
            yield (value,), conj, nxt

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        for items, conj, nxt in self._rest(cursor, ontology, None):
            yield ListValue(items, conj), nxt

    def describe(self) -> str:
        return f"<{self.name}, ...>"


class Quantifier(Element):
    """A quantifying determiner: "one", "many" or "other".

    "a"/"an" are matched too so the rule can reject them with a helpful
    message rather than failing to parse.
    """

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        tok = (cursor.current or "").lower()
        if tok in QUANTIFIERS or tok in INVALID_QUANTIFIERS:
            yield tok, cursor.advance()

    def describe(self) -> str:
        return "one/many/other"


class Number(Element):
    """A numeric literal."""

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        tok = cursor.current
        if tok is None:
            return
        try:
            value = float(tok)
        except ValueError:
            return
        yield value, cursor.advance()


class Count(Element):
    """A count: digits, "a"/"an" or a number word ("three", "a few")."""

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        for n in (3, 2, 1):
            tokens = cursor.peek(n)
            if len(tokens) < n:
                continue
            value = morphology.parse_count(tokens)
            if value is not None:
                yield value, cursor.advance(n)


class Text(Element):
    """Free-form text up to whatever the rest of the rule can match."""

    def __init__(self, name: str, *, stop_words: Sequence[str] = ("\"",)) -> None:
        super().__init__(name)
        self.stop_words = frozenset(stop_words)

    def matches(self, cursor: Cursor, ontology: Ontology) -> Match:
        yield from _free_spans(cursor, self.stop_words)
