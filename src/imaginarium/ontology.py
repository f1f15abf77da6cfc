"""The ontology: lexicon tables and the concept graph.

An ``Ontology`` owns every named referent of a session: common nouns,
proper nouns (and their individuals), adjectives and verbs. Names are
indexed by case-insensitive token tries, one per lexical category, and a
name may belong to only one referent at a time. Common nouns form a
directed acyclic kind graph (multiple inheritance allowed) stored in an
arena indexed by stable ids.

Mutating methods validate before they change anything, so a rejected call
leaves the ontology as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import ClassVar

from imaginarium import morphology
from imaginarium.errors import DefinitionError, NameCollisionError
from imaginarium.tokens import TokenString, untokenize
from imaginarium.trie import TokenTrie

logger = logging.getLogger(__name__)

# Lexical categories, one trie each.
NOUN = "noun"
ADJECTIVE = "adjective"
VERB = "verb"
CATEGORIES = (NOUN, ADJECTIVE, VERB)


# ---------------------------------------------------------------------------
# Referents and concepts
# ---------------------------------------------------------------------------

class Referent:
    """Anything that can be named in a sentence."""

    category: ClassVar[str] = ""
    type_name: ClassVar[str] = "referent"

    @property
    def standard_name(self) -> tuple[str, ...]:
        raise NotImplementedError

    @property
    def text(self) -> str:
        return untokenize(self.standard_name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text!r})"


class Concept(Referent):
    """A monadic concept or a binary relation."""

    def __init__(self) -> None:
        self.alternative_sets: list[AlternativeSet] = []


class MonadicConcept(Concept):
    """A concept that is true or false of a single individual."""


@dataclass(frozen=True, eq=False)
class AlternativeSet:
    """Mutually exclusive concepts, e.g. the colors of a cat.

    Attributes:
        members: The alternatives.
        exhaustive: If True exactly one member holds, otherwise at most one.
    """

    members: tuple[MonadicConcept, ...]
    exhaustive: bool = False

    def __contains__(self, concept: object) -> bool:
        return concept in self.members


class Adjective(MonadicConcept):
    category = ADJECTIVE
    type_name = "adjective"

    def __init__(self, name: Sequence[str]) -> None:
        super().__init__()
        self.name = tuple(name)

    @property
    def standard_name(self) -> tuple[str, ...]:
        return self.name


# --- Property domains ---

@dataclass(frozen=True)
class NumericRange:
    low: float
    high: float

    def __str__(self) -> str:
        return f"between {self.low:g} and {self.high:g}"


@dataclass(frozen=True)
class Enumeration:
    values: tuple[tuple[str, ...], ...]

    def __str__(self) -> str:
        words = [untokenize(v) for v in self.values]
        if len(words) < 2:
            return "from " + "".join(words)
        return "from " + ", ".join(words[:-1]) + " or " + words[-1]


@dataclass(frozen=True)
class BooleanDomain:
    def __str__(self) -> str:
        return "yes or no"


PropertyDomain = NumericRange | Enumeration | BooleanDomain


@dataclass(eq=False)
class Property:
    """A named attribute of a kind, inherited by its subkinds.

    Attributes:
        name: The property name.
        owner: The common noun that declared it.
        domain: Its value domain, or None if not yet given.
    """

    name: TokenString
    owner: CommonNoun
    domain: PropertyDomain | None = None

    @property
    def text(self) -> str:
        return str(self.name)

    def __repr__(self) -> str:
        return f"Property({self.text!r} of {self.owner.text!r})"


class CommonNoun(MonadicConcept):
    """A kind of thing: "cat", "house cat"."""

    category = NOUN
    type_name = "common noun"

    def __init__(self, singular: Sequence[str], plural: Sequence[str], graph: KindGraph) -> None:
        super().__init__()
        self.singular = tuple(singular)
        self.plural = tuple(plural)
        self.properties: dict[TokenString, Property] = {}
        self.relevant_adjectives: list[Adjective] = []
        self.implied_adjectives: list[Adjective] = []
        self.name_template: tuple[str, ...] | None = None
        self._graph = graph
        self.kind_id = graph.add(self)

    @property
    def standard_name(self) -> tuple[str, ...]:
        return self.singular

    @property
    def superkinds(self) -> list[CommonNoun]:
        return self._graph.superkinds(self.kind_id)

    @property
    def subkinds(self) -> list[CommonNoun]:
        return self._graph.subkinds(self.kind_id)

    def ancestors(self) -> list[CommonNoun]:
        """Strict superkinds, transitively."""
        return self._graph.ancestors(self.kind_id)

    def is_subkind_of(self, other: CommonNoun) -> bool:
        return other is not self and other in self.ancestors()

    def property_named(self, name: Sequence[str]) -> Property | None:
        """This kind's property with the given name, or an inherited one."""
        key = TokenString(tuple(name))
        if key in self.properties:
            return self.properties[key]
        for sup in self.ancestors():
            if key in sup.properties:
                return sup.properties[key]
        return None


class Individual:
    """An entity to be instantiated by the generator.

    Attributes:
        name: Identifier tokens.
        kinds: Kinds the individual was declared to be.
        adjectives: Adjectives asserted of it.
        permanent: True for individuals named by proper nouns.
        properties: Property -> solver variable, filled in by each compile.
    """

    def __init__(
        self,
        name: Sequence[str],
        kinds: Iterable[CommonNoun] = (),
        *,
        permanent: bool = False,
    ) -> None:
        self.name = tuple(name)
        self.kinds: list[CommonNoun] = list(kinds)
        self.adjectives: list[Adjective] = []
        self.permanent = permanent
        self.properties: dict[Property, object] = {}

    @property
    def text(self) -> str:
        return untokenize(self.name)

    def name_property(self) -> Property | None:
        """The property called "name", if the individual has one."""
        for prop in self.properties:
            if prop.name.key == ("name",):
                return prop
        return None

    def __repr__(self) -> str:
        return f"Individual({self.text!r})"


class ProperNoun(Referent):
    """The name of a single permanent individual."""

    category = NOUN
    type_name = "proper noun"

    def __init__(self, name: Sequence[str]) -> None:
        self.name = tuple(name)
        self.individual = Individual(self.name, permanent=True)

    @property
    def standard_name(self) -> tuple[str, ...]:
        return self.name

    @property
    def kinds(self) -> list[CommonNoun]:
        return self.individual.kinds


# Verb densities named in sentences like "chasing is rare".
DENSITY_WORDS: dict[str, float] = {
    "very rare": 0.05,
    "rare": 0.1,
    "uncommon": 0.3,
    "common": 0.7,
    "very common": 0.9,
}


class Verb(Concept):
    """A binary relation between a subject kind and an object kind.

    The base form ("chase", "be friends with") determines the others:
    plural "chase" / "are friends with", singular "chases" /
    "is friends with" and gerund "chasing" / "being friends with".
    """

    category = VERB
    type_name = "verb"

    def __init__(self, base: Sequence[str]) -> None:
        super().__init__()
        self.base = tuple(base)
        self.plural: tuple[str, ...] = morphology.replace_copula(self.base, "are")  # type: ignore[assignment]
        self.singular = morphology.singular_of_verb(self.plural)
        self.gerunds = morphology.gerunds_of_verb(self.base)
        self.subject_kind: CommonNoun | None = None
        self.object_kind: CommonNoun | None = None
        self.is_function = False
        self.is_total = False
        self.is_reflexive = False
        self.is_anti_reflexive = False
        self.is_symmetric = False
        self.is_anti_symmetric = False
        self.density = 0.5
        self.generalizations: list[Verb] = []
        self.mutual_exclusions: list[Verb] = []

    @property
    def standard_name(self) -> tuple[str, ...]:
        return self.base

    @property
    def gerund(self) -> tuple[str, ...]:
        return self.gerunds[0]

    def forms(self) -> Iterator[tuple[tuple[str, ...], bool]]:
        """Every spelling of the verb, with a flag for plural forms."""
        yield self.base, True
        yield self.plural, True
        yield self.singular, False
        for g in self.gerunds:
            yield g, True


# ---------------------------------------------------------------------------
# Kind graph
# ---------------------------------------------------------------------------

class KindGraph:
    """Arena of common nouns with superkind/subkind edges in both directions."""

    def __init__(self) -> None:
        self._nodes: list[CommonNoun] = []
        self._supers: list[list[int]] = []
        self._subs: list[list[int]] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def add(self, noun: CommonNoun) -> int:
        self._nodes.append(noun)
        self._supers.append([])
        self._subs.append([])
        return len(self._nodes) - 1

    def superkinds(self, kind_id: int) -> list[CommonNoun]:
        return [self._nodes[i] for i in self._supers[kind_id]]

    def subkinds(self, kind_id: int) -> list[CommonNoun]:
        return [self._nodes[i] for i in self._subs[kind_id]]

    def _walk(self, start: int, edges: list[list[int]]) -> list[int]:
        seen: list[int] = []
        stack = list(edges[start])
        while stack:
            i = stack.pop()
            if i not in seen:
                seen.append(i)
                stack.extend(edges[i])
        return seen

    def ancestors(self, kind_id: int) -> list[CommonNoun]:
        return [self._nodes[i] for i in self._walk(kind_id, self._supers)]

    def reaches(self, start: int, target: int) -> bool:
        """True if *target* is *start* or one of its ancestors."""
        return start == target or target in self._walk(start, self._supers)

    def add_edge(self, sub: int, sup: int) -> bool:
        """Record that *sub* is a kind of *sup*; False if already present.

        Raises DefinitionError if the edge would create a cycle.
        """
        if self.reaches(sup, sub):
            raise DefinitionError(
                f"Can't make {self._nodes[sub].text} a kind of {self._nodes[sup].text}: "
                f"{self._nodes[sup].text} is already a kind of {self._nodes[sub].text}"
            )
        if sup in self._supers[sub]:
            return False
        self._supers[sub].append(sup)
        self._subs[sup].append(sub)
        return True


# ---------------------------------------------------------------------------
# The store
# ---------------------------------------------------------------------------

class Ontology:
    """All referents known to a session.

    Parameters:
        None. Use ``reset()`` (or build a new Ontology) to start over.
    """

    def __init__(self) -> None:
        self._tries: dict[str, TokenTrie[Referent]] = {
            c: TokenTrie(f"{c} trie") for c in CATEGORIES
        }
        self._graph = KindGraph()
        self._common_nouns: list[CommonNoun] = []
        self._proper_nouns: list[ProperNoun] = []
        self._adjectives: list[Adjective] = []
        self._verbs: list[Verb] = []
        self._relations: list[tuple[Verb, Individual, Individual]] = []
        self._new_nouns: list[Referent] = []
        logger.debug("Ontology created")

    def reset(self) -> None:
        """Erase every concept."""
        self.__init__()  # type: ignore[misc]
        logger.debug("Ontology reset")

    # --- Read-only views ---

    @property
    def common_nouns(self) -> list[CommonNoun]:
        return list(self._common_nouns)

    @property
    def proper_nouns(self) -> list[ProperNoun]:
        return list(self._proper_nouns)

    @property
    def adjectives(self) -> list[Adjective]:
        return list(self._adjectives)

    @property
    def verbs(self) -> list[Verb]:
        return list(self._verbs)

    @property
    def individuals(self) -> list[Individual]:
        """The permanent individuals, in order of first mention."""
        return [p.individual for p in self._proper_nouns]

    @property
    def relations(self) -> list[tuple[Verb, Individual, Individual]]:
        """Relationships asserted between permanent individuals."""
        return list(self._relations)

    def trie(self, category: str) -> TokenTrie[Referent]:
        return self._tries[category]

    def all_of_category(self, category: str) -> list[Referent]:
        """Every referent in a lexicon table, without duplicates."""
        if category == NOUN:
            return [*self._common_nouns, *self._proper_nouns]
        if category == ADJECTIVE:
            return list(self._adjectives)
        if category == VERB:
            return list(self._verbs)
        raise ValueError(f"Unknown category: {category!r}")

    def sizes(self) -> dict[str, int]:
        """Number of names in each lexicon table."""
        return {c: len(t) for c, t in self._tries.items()}

    def drain_new_nouns(self) -> list[Referent]:
        """Nouns created since the last call."""
        new, self._new_nouns = self._new_nouns, []
        return new

    # --- Lookup ---

    def lookup(self, tokens: Sequence[str]) -> Referent | None:
        """The referent named exactly by *tokens*, in any table."""
        if not tokens:
            return None
        for trie in self._tries.values():
            m = trie.find(tokens)
            if m is not None:
                return m.value
        return None

    def _find(self, category: str, tokens: Sequence[str], cls: type) -> object | None:
        if not tokens:
            return None
        m = self._tries[category].find(tokens)
        return m.value if m is not None and isinstance(m.value, cls) else None

    def find_noun(self, tokens: Sequence[str]) -> CommonNoun | ProperNoun | None:
        return self._find(NOUN, tokens, (CommonNoun, ProperNoun))  # type: ignore[return-value]

    def find_common_noun(self, tokens: Sequence[str]) -> CommonNoun | None:
        return self._find(NOUN, tokens, CommonNoun)  # type: ignore[return-value]

    def find_proper_noun(self, tokens: Sequence[str]) -> ProperNoun | None:
        return self._find(NOUN, tokens, ProperNoun)  # type: ignore[return-value]

    def find_adjective(self, tokens: Sequence[str]) -> Adjective | None:
        return self._find(ADJECTIVE, tokens, Adjective)  # type: ignore[return-value]

    def find_verb(self, tokens: Sequence[str]) -> Verb | None:
        return self._find(VERB, tokens, Verb)  # type: ignore[return-value]

    # --- Registration ---

    def check_definable(self, tokens: Sequence[str] | None, cls: type[Referent]) -> None:
        """Raise NameCollisionError unless *tokens* is free or already a *cls*."""
        if not tokens:
            return
        old = self.lookup(tokens)
        if old is not None and type(old) is not cls:
            raise NameCollisionError(tokens, old.type_name, cls.type_name)

    def register(
        self,
        category: str,
        tokens: Sequence[str],
        referent: Referent,
        *,
        plural: bool = False,
    ) -> None:
        """Bind *tokens* to *referent* in the *category* table."""
        old = self.lookup(tokens)
        if old is referent:
            return
        if old is not None or referent.category != category:
            raise NameCollisionError(
                tokens,
                old.type_name if old is not None else category,
                referent.type_name,
            )
        self._tries[category].store(tuple(tokens), referent, plural=plural)

    # --- Nouns ---

    def common_noun(
        self,
        singular: Sequence[str] | None = None,
        plural: Sequence[str] | None = None,
    ) -> CommonNoun:
        """Find or create the common noun with the given form(s)."""
        existing = self.find_common_noun(singular or ()) or self.find_common_noun(plural or ())
        if existing is not None:
            return existing
        if singular is None and plural is None:
            raise ValueError("common_noun: need a singular or a plural form")
        singular = tuple(singular) if singular else morphology.singular_of_noun(plural)  # type: ignore[arg-type]
        plural = tuple(plural) if plural else morphology.plural_of_noun(singular)
        self.check_definable(singular, CommonNoun)
        self.check_definable(plural, CommonNoun)
        noun = CommonNoun(singular, plural, self._graph)
        self.register(NOUN, singular, noun)
        if TokenString(plural) != TokenString(singular):
            self.register(NOUN, plural, noun, plural=True)
        self._common_nouns.append(noun)
        self._new_nouns.append(noun)
        logger.debug("Added common noun: %s/%s", noun.text, untokenize(plural))
        return noun

    def set_plural(self, noun: CommonNoun, plural: Sequence[str]) -> None:
        """Replace the plural form of *noun*."""
        plural = tuple(plural)
        if TokenString(plural) == TokenString(noun.plural):
            return
        self.check_definable(plural, CommonNoun)
        existing = self.find_common_noun(plural)
        if existing is not None and existing is not noun:
            raise NameCollisionError(plural, "different common noun", CommonNoun.type_name)
        if TokenString(noun.plural) != TokenString(noun.singular):
            self._tries[NOUN].store(noun.plural, None)
        noun.plural = plural
        self.register(NOUN, plural, noun, plural=True)
        logger.debug("Plural of %s is now %s", noun.text, untokenize(plural))

    def proper_noun(self, name: Sequence[str]) -> ProperNoun:
        """Find or create the proper noun (and its individual)."""
        existing = self.find_proper_noun(name)
        if existing is not None:
            return existing
        self.check_definable(name, ProperNoun)
        noun = ProperNoun(name)
        self.register(NOUN, name, noun)
        self._proper_nouns.append(noun)
        self._new_nouns.append(noun)
        logger.debug("Added proper noun: %s", noun.text)
        return noun

    # --- Adjectives ---

    def adjective(self, name: Sequence[str]) -> Adjective:
        """Find or create an adjective."""
        existing = self.find_adjective(name)
        if existing is not None:
            return existing
        self.check_definable(name, Adjective)
        adj = Adjective(name)
        self.register(ADJECTIVE, name, adj)
        self._adjectives.append(adj)
        logger.debug("Added adjective: %s", adj.text)
        return adj

    # --- Verbs ---

    def check_verb_definable(self, verb: Verb) -> None:
        for form, _ in verb.forms():
            self.check_definable(form, Verb)
            existing = self.find_verb(form)
            if existing is not None and existing.base != verb.base:
                raise NameCollisionError(form, "different verb", Verb.type_name)

    def verb(self, base: Sequence[str]) -> Verb:
        """Find or create the verb with the given base form."""
        existing = self.find_verb(base)
        if existing is not None:
            return existing
        verb = Verb(base)
        self.check_verb_definable(verb)
        for form, plural in verb.forms():
            if self.find_verb(form) is None:
                self._tries[VERB].store(form, verb, plural=plural)
        self._verbs.append(verb)
        logger.debug(
            "Added verb: %s (%s, %s)",
            verb.text, untokenize(verb.singular), untokenize(verb.gerund),
        )
        return verb

    # --- Kind graph ---

    def add_subkind(self, sub: CommonNoun, sup: CommonNoun) -> None:
        """Record that *sub* is a kind of *sup*.

        Raises DefinitionError, leaving the graph unchanged, if this would
        make the graph cyclic.
        """
        if self._graph.add_edge(sub.kind_id, sup.kind_id):
            logger.debug("Added kind edge: %s < %s", sub.text, sup.text)

    def add_superkind(self, sup: CommonNoun, sub: CommonNoun) -> None:
        self.add_subkind(sub, sup)

    def check_subkind(self, sub: CommonNoun, sup: CommonNoun) -> None:
        """Raise DefinitionError if ``add_subkind(sub, sup)`` would fail."""
        if self._graph.reaches(sup.kind_id, sub.kind_id):
            raise DefinitionError(
                f"Can't make {sub.text} a kind of {sup.text}: "
                f"{sup.text} is already a kind of {sub.text}"
            )

    # --- Individuals ---

    def assert_relation(self, verb: Verb, subject: Individual, obj: Individual) -> None:
        entry = (verb, subject, obj)
        if entry not in self._relations:
            self._relations.append(entry)
            logger.debug("Asserted %s %s %s", subject.text, untokenize(verb.singular), obj.text)
