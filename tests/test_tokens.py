"""Tests for imaginarium.tokens and imaginarium.trie."""

import pytest

from imaginarium.tokens import TokenString, same_tokens, tokenize, untokenize
from imaginarium.trie import TokenTrie


class TestTokenize:
    def test_words(self):
        assert tokenize("cats are a kind of animal") == ["cats", "are", "a", "kind", "of", "animal"]

    def test_trailing_punctuation_dropped(self):
        assert tokenize("how many dogs are there?") == ["how", "many", "dogs", "are", "there"]
        assert tokenize("Rex is a dog.") == ["Rex", "is", "a", "dog"]

    def test_commas_and_quotes_are_tokens(self):
        assert tokenize('black, white or grey') == ["black", ",", "white", "or", "grey"]
        assert tokenize('are identified as "[name]"') == [
            "are", "identified", "as", '"', "[", "name", "]", '"',
        ]

    def test_numbers(self):
        assert tokenize("between 1 and 2.5") == ["between", "1", "and", "2.5"]

    def test_hyphenated_word(self):
        assert tokenize("chasing is anti-reflexive") == ["chasing", "is", "anti-reflexive"]

    def test_file_name_kept_whole(self):
        assert tokenize("load defs/cats.txt") == ["load", "defs/cats.txt"]

    def test_possessive(self):
        assert tokenize("Rex's owner") == ["Rex", "'s", "owner"]


class TestUntokenize:
    def test_spacing(self):
        assert untokenize(["black", ",", "white"]) == "black, white"
        assert untokenize(["[", "name", "]", "the", "cat"]) == "[name] the cat"

    def test_empty(self):
        assert untokenize([]) == ""


class TestTokenString:
    def test_case_insensitive_equality(self):
        assert TokenString(("House", "Cat")) == TokenString(("house", "cat"))
        assert hash(TokenString(("House", "Cat"))) == hash(TokenString(("house", "cat")))

    def test_keeps_original_spelling(self):
        assert str(TokenString(("House", "Cat"))) == "House Cat"

    def test_of_text(self):
        assert TokenString.of("house cat").tokens == ("house", "cat")

    def test_same_tokens(self):
        assert same_tokens(["A", "b"], ["a", "B"])
        assert not same_tokens(["a"], ["a", "b"])


class TestTokenTrie:
    @pytest.fixture
    def trie(self):
        t = TokenTrie("test")
        t.store(("house",), "HOUSE")
        t.store(("house", "cat"), "HOUSE CAT")
        t.store(("house", "cats"), "HOUSE CAT", plural=True)
        return t

    def test_longest_match_first(self, trie):
        m = trie.lookup(["House", "Cat", "sleeps"])
        assert m.value == "HOUSE CAT"
        assert m.end == 2

    def test_matches_all_prefixes(self, trie):
        found = trie.matches(["house", "cat"])
        assert [m.value for m in found] == ["HOUSE CAT", "HOUSE"]

    def test_match_at_offset(self, trie):
        m = trie.lookup(["a", "house"], 1)
        assert m.value == "HOUSE"
        assert m.end == 2

    def test_plural_flag(self, trie):
        assert trie.find(["house", "cats"]).is_plural
        assert not trie.find(["house", "cat"]).is_plural

    def test_find_is_exact(self, trie):
        assert trie.find(["house", "cat", "door"]) is None
        assert trie.find(["house"]).value == "HOUSE"

    def test_no_match(self, trie):
        assert trie.lookup(["dog"]) is None

    def test_len_counts_names(self, trie):
        assert len(trie) == 3

    def test_remove(self, trie):
        trie.store(("house",), None)
        assert trie.find(["house"]) is None
        assert len(trie) == 2

    def test_contents_unique(self, trie):
        assert sorted(trie.contents()) == ["HOUSE", "HOUSE CAT"]

    def test_empty_name_rejected(self, trie):
        with pytest.raises(ValueError):
            trie.store((), "x")
