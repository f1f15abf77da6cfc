"""Tests for imaginarium.morphology."""

import pytest

from imaginarium import morphology as m


class TestNouns:
    @pytest.mark.parametrize("singular,plural", [
        ("cat", "cats"),
        ("box", "boxes"),
        ("church", "churches"),
        ("pony", "ponies"),
        ("day", "days"),
        ("person", "people"),
        ("mouse", "mice"),
        ("sheep", "sheep"),
    ])
    def test_plural_and_back(self, singular, plural):
        assert m.plural_of_noun((singular,)) == (plural,)
        assert m.singular_of_noun((plural,)) == (singular,)

    def test_multi_word_inflects_head(self):
        assert m.plural_of_noun(("house", "cat")) == ("house", "cats")
        assert m.singular_of_noun(("house", "cats")) == ("house", "cat")

    def test_case_preserved(self):
        assert m.plural_of_noun(("Person",)) == ("People",)

    def test_looks_plural(self):
        assert m.looks_plural(("cats",))
        assert m.looks_plural(("people",))
        assert not m.looks_plural(("cat",))
        assert not m.looks_plural(("grass",))


class TestVerbs:
    @pytest.mark.parametrize("plural,singular", [
        ("chase", "chases"),
        ("kiss", "kisses"),
        ("carry", "carries"),
        ("go", "goes"),
        ("have", "has"),
        ("play", "plays"),
    ])
    def test_singular_and_back(self, plural, singular):
        assert m.singular_of_verb((plural,)) == (singular,)
        assert m.plural_of_verb((singular,)) == (plural,)

    def test_copula_phrase(self):
        assert m.singular_of_verb(("are", "friends", "with")) == ("is", "friends", "with")
        assert m.replace_copula(("be", "friends", "with"), "are") == ("are", "friends", "with")
        assert m.replace_copula(("chase",), "are") == ("chase",)

    @pytest.mark.parametrize("base,gerund", [
        ("chase", "chasing"),
        ("run", "running"),
        ("own", "owning"),
        ("see", "seeing"),
        ("lie", "lying"),
        ("be", "being"),
    ])
    def test_gerunds(self, base, gerund):
        assert m.gerunds_of_verb((base,))[0] == (gerund,)
        assert m.base_form_of_gerund((gerund,)) == (base,)

    def test_gerund_of_phrase(self):
        assert m.gerunds_of_verb(("be", "friends", "with"))[0] == ("being", "friends", "with")


class TestDeterminers:
    def test_indefinite_article(self):
        assert m.indefinite_article("cat") == "a"
        assert m.indefinite_article("animal") == "an"
        assert m.indefinite_article("unicorn") == "a"
        assert m.indefinite_article("hour") == "an"

    @pytest.mark.parametrize("text,count", [
        ("a", 1), ("an", 1), ("three", 3), ("12", 12), ("a few", 3), ("a couple of", 2),
    ])
    def test_parse_count(self, text, count):
        assert m.parse_count(text.split()) == count

    def test_parse_count_rejects_words(self):
        assert m.parse_count(["cats"]) is None
