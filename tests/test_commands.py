"""Tests for command values: validation before mutation."""

import pytest

from imaginarium.commands import (
    AddGeneralization,
    AddMutualExclusion,
    DefineAdjectives,
    DefineProperty,
    DefineVerb,
    SetVerbFlag,
)
from imaginarium.errors import DefinitionError, NameCollisionError
from imaginarium.ontology import Enumeration, NumericRange
from imaginarium.parsing.segments import AP, NP, VP


def kind(ontology, word, plural=True):
    noun = ontology.find_common_noun((word,))
    return NP((word,), None, noun, plural)


class TestDefineVerb:
    def test_flags_from_quantifier_and_modal(self, ontology):
        ontology.common_noun(("dog",))
        ontology.common_noun(("cat",))
        DefineVerb(kind(ontology, "dogs"), VP(("chase",)), kind(ontology, "cat", False), True, "one").apply(ontology)
        chase = ontology.find_verb(("chase",))
        assert chase.is_function and chase.is_total
        assert not chase.is_symmetric

    def test_each_other_is_symmetric(self, ontology):
        ontology.common_noun(("cat",))
        DefineVerb(kind(ontology, "cats"), VP(("be", "friends", "with"))).apply(ontology)
        verb = ontology.find_verb(("is", "friends", "with"))
        assert verb.is_symmetric
        assert verb.subject_kind is verb.object_kind

    def test_subject_cannot_change(self, ontology):
        ontology.common_noun(("dog",))
        ontology.common_noun(("cat",))
        DefineVerb(kind(ontology, "dogs"), VP(("chase",)), kind(ontology, "cats")).apply(ontology)
        chase = ontology.find_verb(("chase",))
        with pytest.raises(DefinitionError, match="subject"):
            DefineVerb(kind(ontology, "cats"), VP(("chase",), chase), kind(ontology, "cats"), True).apply(ontology)
        assert not chase.is_total

    def test_rejected_verb_is_not_added(self, ontology):
        ontology.common_noun(("fish",))
        before = ontology.sizes()
        with pytest.raises(NameCollisionError):
            DefineVerb(NP(("cats",), is_plural=True), VP(("fish",)), NP(("mice",), is_plural=True)).apply(ontology)
        assert ontology.sizes() == before


class TestVerbFlags:
    def test_opposite_flag_rejected(self, ontology):
        verb = ontology.verb(("love",))
        SetVerbFlag(VP(("love",), verb), "symmetric").apply(ontology)
        with pytest.raises(DefinitionError):
            SetVerbFlag(VP(("love",), verb), "anti-symmetric").apply(ontology)
        assert not verb.is_anti_symmetric

    def test_unknown_verb(self, ontology):
        with pytest.raises(DefinitionError, match="don't know the verb"):
            SetVerbFlag(VP(("zorp",)), "reflexive").apply(ontology)

    def test_self_reference(self, ontology):
        verb = ontology.verb(("love",))
        with pytest.raises(DefinitionError):
            AddGeneralization(VP(("love",), verb), VP(("love",), verb)).apply(ontology)
        with pytest.raises(DefinitionError):
            AddMutualExclusion(VP(("love",), verb), VP(("love",), verb)).apply(ontology)


class TestDefinitions:
    def test_empty_range(self, ontology):
        with pytest.raises(DefinitionError, match="empty"):
            DefineProperty(NP(("cats",), is_plural=True), ("age",), NumericRange(5, 1)).apply(ontology)
        assert ontology.common_nouns == []

    def test_empty_enumeration(self, ontology):
        with pytest.raises(DefinitionError):
            DefineProperty(NP(("cats",), is_plural=True), ("food",), Enumeration(())).apply(ontology)

    def test_domain_given_later(self, ontology):
        cats = NP(("cats",), is_plural=True)
        DefineProperty(cats, ("age",)).apply(ontology)
        cat = ontology.find_common_noun(("cat",))
        DefineProperty(kind(ontology, "cats"), ("age",), NumericRange(1, 9)).apply(ontology)
        assert cat.property_named(("age",)).domain == NumericRange(1, 9)

    def test_and_list_is_not_alternatives(self, ontology):
        DefineAdjectives(NP(("cats",), is_plural=True), (AP(("furry",)), AP(("cute",))), "and", always=True).apply(ontology)
        cat = ontology.find_common_noun(("cat",))
        assert cat.alternative_sets == []
        assert [a.text for a in cat.implied_adjectives] == ["furry", "cute"]

    def test_adjective_collision_leaves_kind_unchanged(self, ontology):
        ontology.common_noun(("dog",))
        before = ontology.sizes()
        with pytest.raises(NameCollisionError):
            DefineAdjectives(NP(("cats",), is_plural=True), (AP(("dog",)),), None).apply(ontology)
        assert ontology.sizes() == before
