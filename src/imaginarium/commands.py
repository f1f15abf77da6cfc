"""Command values built by grammar rules.

A rule's action turns its captures into one of these values; the session
then interprets it. Mutations (``Mutation`` subclasses) change the ontology
through ``apply()``, which validates everything first and only then
mutates, so a rejected sentence leaves the ontology unchanged. The remaining
commands (generation, queries, reset, load) are carried out by the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from imaginarium import morphology
from imaginarium.errors import DefinitionError, NameCollisionError
from imaginarium.ontology import (
    DENSITY_WORDS,
    Adjective,
    AlternativeSet,
    BooleanDomain,
    CommonNoun,
    Enumeration,
    Individual,
    NumericRange,
    Ontology,
    PropertyDomain,
    Property,
    ProperNoun,
    Verb,
)
from imaginarium.parsing.segments import AP, NP, VP
from imaginarium.tokens import TokenString, untokenize

logger = logging.getLogger(__name__)


class Command:
    """Base class of every command value."""

    changes_ontology = False


class Mutation(Command):
    """A command that adds to the ontology."""

    changes_ontology = True

    def apply(self, ontology: Ontology) -> str:
        """Validate, then mutate *ontology*; return an acknowledgement."""
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Resolution helpers
# ---------------------------------------------------------------------------

def _noun_forms(np: NP) -> tuple[tuple[str, ...], tuple[str, ...]]:
    if np.is_plural:
        return morphology.singular_of_noun(np.tokens), np.tokens
    return np.tokens, morphology.plural_of_noun(np.tokens)


def check_kind(ontology: Ontology, np: NP) -> None:
    """Raise unless *np* names, or could become, a common noun."""
    if np.common_noun is not None:
        return
    if np.referent is not None:
        raise NameCollisionError(np.tokens, np.referent.type_name, CommonNoun.type_name)
    singular, plural = _noun_forms(np)
    if ontology.find_common_noun(singular) or ontology.find_common_noun(plural):
        return
    ontology.check_definable(singular, CommonNoun)
    ontology.check_definable(plural, CommonNoun)


def resolve_kind(ontology: Ontology, np: NP) -> CommonNoun:
    """The common noun named by *np*, created if new."""
    if np.common_noun is not None:
        return np.common_noun
    check_kind(ontology, np)
    if np.is_plural:
        return ontology.common_noun(plural=np.tokens)
    return ontology.common_noun(singular=np.tokens)


def _new_noun_forms(ontology: Ontology, np: NP) -> frozenset[tuple[str, ...]]:
    """Keys of the forms ``resolve_kind`` would register for *np*; empty if known."""
    if np.referent is not None:
        return frozenset()
    singular, plural = _noun_forms(np)
    if ontology.find_common_noun(singular) or ontology.find_common_noun(plural):
        return frozenset()
    return frozenset({TokenString(singular).key, TokenString(plural).key})


def _new_name(tokens: tuple[str, ...], referent: object) -> frozenset[tuple[str, ...]]:
    return frozenset() if referent is not None else frozenset({TokenString(tokens).key})


def _check_new_names(*names: tuple[frozenset[tuple[str, ...]], str]) -> None:
    """Raise if two names one statement is about to create would collide.

    Each entry is the set of keys a new referent would register and its
    type name. Identical entries denote the same new referent.
    """
    for i, (forms, type_name) in enumerate(names):
        for other, other_type in names[:i]:
            clash = forms & other
            if clash and (forms != other or type_name != other_type):
                raise NameCollisionError(sorted(clash)[0], other_type, type_name)


def known_kind(ontology: Ontology, np: NP) -> CommonNoun:
    """The common noun named by *np*; DefinitionError if there isn't one."""
    kind = np.common_noun or ontology.find_common_noun(np.tokens)
    if kind is None:
        raise DefinitionError(f"I don't know what {np.text} is")
    return kind


def check_individual(ontology: Ontology, np: NP) -> None:
    if np.proper_noun is not None:
        return
    if np.referent is not None:
        raise NameCollisionError(np.tokens, np.referent.type_name, ProperNoun.type_name)
    ontology.check_definable(np.tokens, ProperNoun)


def resolve_individual(ontology: Ontology, np: NP) -> Individual:
    """The permanent individual named by *np*, created if new."""
    check_individual(ontology, np)
    noun = np.proper_noun or ontology.proper_noun(np.tokens)
    return noun.individual


def _check_adjective(ontology: Ontology, ap: AP) -> None:
    if ap.adjective is None:
        ontology.check_definable(ap.tokens, Adjective)


def _resolve_adjective(ontology: Ontology, ap: AP) -> Adjective:
    return ap.adjective or ontology.adjective(ap.tokens)


def _known_verb(vp: VP) -> Verb:
    if vp.verb is None:
        raise DefinitionError(f"I don't know the verb '{vp.text}'")
    return vp.verb


def _plural_text(kind: CommonNoun) -> str:
    return untokenize(kind.plural)


def _property_sentence(kind: CommonNoun, prop: Property) -> str:
    plural = _plural_text(kind).capitalize()
    article = morphology.indefinite_article(prop.name.tokens[0])
    if isinstance(prop.domain, BooleanDomain):
        return f"{plural} can have {article} {prop.text}."
    domain = "" if prop.domain is None else f" {prop.domain}"
    return f"{plural} have {article} {prop.text}{domain}."


# ---------------------------------------------------------------------------
# Queries and session commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Reset(Command):
    """Forget everything."""


@dataclass(frozen=True)
class Load(Command):
    """Read a definitions file.

    Attributes:
        path: File name as written; resolved against the definitions directory.
    """

    path: str
    changes_ontology = True


@dataclass(frozen=True)
class Imagine(Command):
    """Generate *count* new individuals of a kind."""

    kind: NP
    count: int = 1


@dataclass(frozen=True)
class CountQuery(Command):
    """"How many Xs are there": solve over the permanent individuals."""

    kind: NP


@dataclass(frozen=True)
class DescribeKind(Command):
    """"What is a X": summarize what is known about a kind."""

    kind: NP

    def render(self, ontology: Ontology) -> str:
        kind = known_kind(ontology, self.kind)
        article = morphology.indefinite_article(kind.singular[0])
        lines: list[str] = []
        name = untokenize(kind.singular)
        supers = kind.superkinds
        if supers:
            lines.append(
                f"{article.capitalize()} {name} is a kind of "
                + " and ".join(untokenize(s.singular) for s in supers) + "."
            )
        else:
            lines.append(f"{article.capitalize()} {name} is a basic kind of thing.")
        subs = kind.subkinds
        if subs:
            lines.append(
                f"Kinds of {name}: " + ", ".join(_plural_text(s) for s in subs) + "."
            )
        plural = _plural_text(kind).capitalize()
        for alt in kind.alternative_sets:
            verb = "are" if alt.exhaustive else "can be"
            lines.append(f"{plural} {verb} " + " or ".join(m.text for m in alt.members) + ".")
        in_sets = {m for alt in kind.alternative_sets for m in alt.members}
        for adj in kind.relevant_adjectives:
            if adj not in in_sets:
                lines.append(f"{plural} can be {adj.text}.")
        for adj in kind.implied_adjectives:
            if adj not in in_sets:
                lines.append(f"{plural} are always {adj.text}.")
        for prop in kind.properties.values():
            lines.append(_property_sentence(kind, prop))
        if kind.name_template is not None:
            lines.append(f"{plural} are identified as \"{untokenize(kind.name_template)}\".")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DefinePlural(Mutation):
    """"The plural of X is Y"."""

    singular: tuple[str, ...]
    plural: tuple[str, ...]

    def apply(self, ontology: Ontology) -> str:
        noun = ontology.find_common_noun(self.singular)
        if noun is None:
            ontology.check_definable(self.singular, CommonNoun)
            ontology.check_definable(self.plural, CommonNoun)
            ontology.common_noun(self.singular, self.plural)
        else:
            ontology.set_plural(noun, self.plural)
        return f"The plural of {untokenize(self.singular)} is {untokenize(self.plural)}."


@dataclass(frozen=True)
class DefineKinds(Mutation):
    """One or more kinds become subkinds of another."""

    subkinds: tuple[NP, ...]
    superkind: NP

    def apply(self, ontology: Ontology) -> str:
        for np in (*self.subkinds, self.superkind):
            check_kind(ontology, np)
        new_super = _new_noun_forms(ontology, self.superkind)
        for np in self.subkinds:
            if np.common_noun is not None and self.superkind.common_noun is not None:
                ontology.check_subkind(np.common_noun, self.superkind.common_noun)
            elif new_super and _new_noun_forms(ontology, np) == new_super:
                name = untokenize(_noun_forms(np)[0])
                raise DefinitionError(f"Can't make {name} a kind of itself")
        _check_new_names(
            *((_new_noun_forms(ontology, np), CommonNoun.type_name) for np in (*self.subkinds, self.superkind))
        )
        sup = resolve_kind(ontology, self.superkind)
        subs = [resolve_kind(ontology, np) for np in self.subkinds]
        for sub in subs:
            ontology.add_subkind(sub, sup)
        return (
            " and ".join(_plural_text(s).capitalize() if i == 0 else _plural_text(s) for i, s in enumerate(subs))
            + f" are kinds of {untokenize(sup.singular)}."
        )


@dataclass(frozen=True)
class SetNameTemplate(Mutation):
    """"Xs are identified as "..."": how individuals of a kind are named."""

    kind: NP
    template: tuple[str, ...]

    def apply(self, ontology: Ontology) -> str:
        if not self.template:
            raise DefinitionError("A name template can't be empty")
        kind = resolve_kind(ontology, self.kind)
        kind.name_template = tuple(self.template)
        logger.debug("Name template for %s: %s", kind.text, untokenize(self.template))
        return f"{_plural_text(kind).capitalize()} are identified as \"{untokenize(self.template)}\"."


@dataclass(frozen=True)
class DefineProperty(Mutation):
    """Declare a property of a kind, optionally with its domain."""

    kind: NP
    name: tuple[str, ...]
    domain: PropertyDomain | None = None

    def apply(self, ontology: Ontology) -> str:
        if not self.name:
            raise DefinitionError("A property needs a name")
        if isinstance(self.domain, NumericRange) and self.domain.low > self.domain.high:
            raise DefinitionError(
                f"The range of {untokenize(self.name)} is empty: "
                f"{self.domain.low:g} is more than {self.domain.high:g}"
            )
        if isinstance(self.domain, Enumeration) and not self.domain.values:
            raise DefinitionError(f"{untokenize(self.name)} needs at least one possible value")
        kind = resolve_kind(ontology, self.kind)
        key = TokenString(tuple(self.name))
        prop = kind.properties.get(key)
        if prop is None:
            prop = Property(key, kind, self.domain)
            kind.properties[key] = prop
            logger.debug("Added property %s to %s", prop.text, kind.text)
        elif self.domain is not None:
            prop.domain = self.domain
        return _property_sentence(kind, prop)


@dataclass(frozen=True)
class DefineAdjectives(Mutation):
    """"Xs can be A or B" and "Xs are A or B".

    Attributes:
        kind: The kind described.
        adjectives: The adjectives listed.
        conjunction: "or" makes a list of two or more an alternative set.
        always: True for "are" (implied / exhaustive), False for "can be".
    """

    kind: NP
    adjectives: tuple[AP, ...]
    conjunction: str | None = None
    always: bool = False

    def apply(self, ontology: Ontology) -> str:
        check_kind(ontology, self.kind)
        for ap in self.adjectives:
            _check_adjective(ontology, ap)
        _check_new_names(
            (_new_noun_forms(ontology, self.kind), CommonNoun.type_name),
            *((_new_name(ap.tokens, ap.adjective), Adjective.type_name) for ap in self.adjectives),
        )
        kind = resolve_kind(ontology, self.kind)
        adjectives = [_resolve_adjective(ontology, ap) for ap in self.adjectives]
        for adj in adjectives:
            if adj not in kind.relevant_adjectives:
                kind.relevant_adjectives.append(adj)
        if len(adjectives) > 1 and self.conjunction == "or":
            alt = AlternativeSet(tuple(adjectives), exhaustive=self.always)
            kind.alternative_sets.append(alt)
            logger.debug(
                "Added %s alternative set to %s: %s",
                "exhaustive" if alt.exhaustive else "non-exhaustive",
                kind.text, ", ".join(a.text for a in adjectives),
            )
        elif self.always:
            for adj in adjectives:
                if adj not in kind.implied_adjectives:
                    kind.implied_adjectives.append(adj)
        verb = "are" if self.always else "can be"
        joiner = f" {self.conjunction or 'and'} "
        return f"{_plural_text(kind).capitalize()} {verb} {joiner.join(a.text for a in adjectives)}."


@dataclass(frozen=True)
class DefineVerb(Mutation):
    """"Xs can/must V [one/many/other] Ys" and "Xs can V each other".

    Attributes:
        subject: The subject kind.
        verb: The verb (new or known).
        object: The object kind; None means "each other".
        must: "must" makes the verb total.
        quantifier: "one" (functional), "many", "other" (anti-reflexive) or None.
    """

    subject: NP
    verb: VP
    object: NP | None = None
    must: bool = False
    quantifier: str | None = None

    def apply(self, ontology: Ontology) -> str:
        if self.quantifier in ("a", "an"):
            raise DefinitionError(
                f"Use \"one\" or \"many\" rather than \"{self.quantifier}\" "
                f"to say how many things can be {untokenize(self.verb.tokens)}"
            )
        obj_np = self.object if self.object is not None else self.subject
        check_kind(ontology, self.subject)
        check_kind(ontology, obj_np)
        verb = self.verb.verb
        new_nouns = [(_new_noun_forms(ontology, np), CommonNoun.type_name) for np in (self.subject, obj_np)]
        if verb is None:
            verb = Verb(self.verb.tokens)
            ontology.check_verb_definable(verb)
            verb_forms = frozenset(TokenString(form).key for form, _ in verb.forms())
            _check_new_names(*new_nouns, (verb_forms, Verb.type_name))
        else:
            _check_new_names(*new_nouns)
        pairs = ((verb.subject_kind, self.subject.common_noun, "subject"), (verb.object_kind, obj_np.common_noun, "object"))
        for old, new, role in pairs:
            if old is not None and old is not new:
                raise DefinitionError(
                    f"The {role} of '{verb.text}' is already {_plural_text(old)}"
                )
        subject = resolve_kind(ontology, self.subject)
        obj = resolve_kind(ontology, obj_np)
        verb = ontology.verb(verb.base)
        verb.subject_kind = subject
        verb.object_kind = obj
        if self.must:
            verb.is_total = True
        if self.quantifier == "one":
            verb.is_function = True
        elif self.quantifier == "other":
            verb.is_anti_reflexive = True
        if self.object is None:
            verb.is_symmetric = True
        logger.debug(
            "Verb %s: %s -> %s (function=%s total=%s symmetric=%s)",
            verb.text, subject.text, obj.text, verb.is_function, verb.is_total, verb.is_symmetric,
        )
        modal = "must" if self.must else "can"
        target = "each other" if self.object is None else _plural_text(obj)
        if self.quantifier is not None:
            target = f"{self.quantifier} {target if self.quantifier != 'one' else untokenize(obj.singular)}"
        return f"{_plural_text(subject).capitalize()} {modal} {untokenize(verb.plural)} {target}."


VERB_FLAGS = {
    "reflexive": "is_reflexive",
    "anti-reflexive": "is_anti_reflexive",
    "symmetric": "is_symmetric",
    "anti-symmetric": "is_anti_symmetric",
}


@dataclass(frozen=True)
class SetVerbFlag(Mutation):
    verb: VP
    flag: str

    def apply(self, ontology: Ontology) -> str:
        verb = _known_verb(self.verb)
        attr = VERB_FLAGS[self.flag]
        opposite = {
            "is_reflexive": "is_anti_reflexive",
            "is_anti_reflexive": "is_reflexive",
            "is_symmetric": "is_anti_symmetric",
            "is_anti_symmetric": "is_symmetric",
        }[attr]
        if getattr(verb, opposite):
            raise DefinitionError(f"'{verb.text}' can't be both {self.flag} and not")
        setattr(verb, attr, True)
        return f"{untokenize(verb.gerund).capitalize()} is {self.flag}."


@dataclass(frozen=True)
class SetVerbDensity(Mutation):
    """"Chasing is rare": how often pairs are related by a verb."""

    verb: VP
    density: str

    def apply(self, ontology: Ontology) -> str:
        verb = _known_verb(self.verb)
        verb.density = DENSITY_WORDS[self.density]
        logger.debug("Density of %s: %s", verb.text, verb.density)
        return f"{untokenize(verb.gerund).capitalize()} is {self.density}."


@dataclass(frozen=True)
class AddGeneralization(Mutation):
    """"V implies W": every V relationship is also a W relationship."""

    verb: VP
    general: VP

    def apply(self, ontology: Ontology) -> str:
        verb = _known_verb(self.verb)
        general = _known_verb(self.general)
        if general is verb:
            raise DefinitionError(f"'{verb.text}' can't imply itself")
        if general not in verb.generalizations:
            verb.generalizations.append(general)
        return f"{untokenize(verb.gerund).capitalize()} implies {untokenize(general.gerund)}."


@dataclass(frozen=True)
class AddMutualExclusion(Mutation):
    """"V and W are mutually exclusive"."""

    first: VP
    second: VP

    def apply(self, ontology: Ontology) -> str:
        first = _known_verb(self.first)
        second = _known_verb(self.second)
        if first is second:
            raise DefinitionError(f"'{first.text}' can't exclude itself")
        if second not in first.mutual_exclusions:
            first.mutual_exclusions.append(second)
        return f"{untokenize(first.gerund).capitalize()} and {untokenize(second.gerund)} are mutually exclusive."


# ---------------------------------------------------------------------------
# Facts about named individuals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeclareIndividual(Mutation):
    """"Rex is a dog"."""

    name: NP
    kind: NP

    def apply(self, ontology: Ontology) -> str:
        check_individual(ontology, self.name)
        check_kind(ontology, self.kind)
        _check_new_names(
            (_new_name(self.name.tokens, self.name.referent), ProperNoun.type_name),
            (_new_noun_forms(ontology, self.kind), CommonNoun.type_name),
        )
        kind = resolve_kind(ontology, self.kind)
        individual = resolve_individual(ontology, self.name)
        if kind not in individual.kinds:
            individual.kinds.append(kind)
        article = morphology.indefinite_article(kind.singular[0])
        return f"{individual.text} is {article} {kind.text}."


@dataclass(frozen=True)
class AssertRelation(Mutation):
    """"Rex chases Felix"."""

    subject: NP
    verb: VP
    object: NP

    def apply(self, ontology: Ontology) -> str:
        verb = _known_verb(self.verb)
        check_individual(ontology, self.subject)
        check_individual(ontology, self.object)
        subject = resolve_individual(ontology, self.subject)
        obj = resolve_individual(ontology, self.object)
        ontology.assert_relation(verb, subject, obj)
        return f"{subject.text} {untokenize(verb.singular)} {obj.text}."


@dataclass(frozen=True)
class AssertAdjective(Mutation):
    """"Rex is fluffy"."""

    subject: NP
    adjective: AP

    def apply(self, ontology: Ontology) -> str:
        check_individual(ontology, self.subject)
        _check_adjective(ontology, self.adjective)
        _check_new_names(
            (_new_name(self.subject.tokens, self.subject.referent), ProperNoun.type_name),
            (_new_name(self.adjective.tokens, self.adjective.adjective), Adjective.type_name),
        )
        individual = resolve_individual(ontology, self.subject)
        adj = _resolve_adjective(ontology, self.adjective)
        if adj not in individual.adjectives:
            individual.adjectives.append(adj)
        return f"{individual.text} is {adj.text}."

