"""English inflection for nouns and verbs.

All functions work on token tuples and inflect the head word: the last token
of a noun phrase, the first token of a verb phrase ("be friends with" ->
"being friends with"). Regular rules cover most words; the tables below
resolve irregular and ambiguous cases.
"""

from __future__ import annotations

from collections.abc import Sequence

Tokens = tuple[str, ...]

IRREGULAR_PLURALS: dict[str, str] = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "louse": "lice",
    "goose": "geese",
    "foot": "feet",
    "tooth": "teeth",
    "ox": "oxen",
    "die": "dice",
    "cactus": "cacti",
    "fungus": "fungi",
    "knife": "knives",
    "wife": "wives",
    "life": "lives",
    "leaf": "leaves",
    "wolf": "wolves",
    "elf": "elves",
    "dwarf": "dwarves",
    "half": "halves",
    "shelf": "shelves",
    "thief": "thieves",
    "sheep": "sheep",
    "fish": "fish",
    "deer": "deer",
    "moose": "moose",
    "species": "species",
    "series": "series",
}

IRREGULAR_SINGULARS: dict[str, str] = {v: k for k, v in IRREGULAR_PLURALS.items()}

# Third person singular -> plural for verbs that don't follow the rules.
IRREGULAR_VERB_SINGULARS: dict[str, str] = {
    "are": "is",
    "be": "is",
    "have": "has",
    "do": "does",
    "go": "goes",
}

IRREGULAR_VERB_PLURALS: dict[str, str] = {
    "is": "are",
    "has": "have",
    "does": "do",
    "goes": "go",
}

IRREGULAR_GERUNDS: dict[str, str] = {
    "be": "being",
    "see": "seeing",
    "flee": "fleeing",
    "agree": "agreeing",
    "die": "dying",
    "lie": "lying",
    "tie": "tying",
    "dye": "dyeing",
}

# Gerunds whose base form can't be recovered by stripping "ing".
GERUND_BASE_FORMS: dict[str, str] = {
    **{v: k for k, v in IRREGULAR_GERUNDS.items()},
    "liking": "like",
    "loving": "love",
    "hating": "hate",
    "making": "make",
    "taking": "take",
    "giving": "give",
    "having": "have",
    "living": "live",
    "owning": "own",
    "serving": "serve",
    "chasing": "chase",
    "admiring": "admire",
    "despising": "despise",
    "creating": "create",
    "riding": "ride",
    "hiding": "hide",
    "writing": "write",
    "using": "use",
    "trading": "trade",
    "marrying": "marry",
}

COPULAS = {"is", "are", "be"}

_VOWELS = set("aeiou")
_SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")
# Stems that took "es" rather than "s": "kisses", "boxes", but not "chases".
_ES_STEMS = ("ss", "x", "z", "ch", "sh")

NUMBER_WORDS: dict[str, int] = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "a couple of": 2, "a few": 3, "several": 4,
}


def _replace_last(tokens: Sequence[str], word: str) -> Tokens:
    return tuple(tokens[:-1]) + (word,)


def _replace_first(tokens: Sequence[str], word: str) -> Tokens:
    return (word,) + tuple(tokens[1:])


def _match_case(template: str, word: str) -> str:
    return word.capitalize() if template[:1].isupper() else word


def _is_consonant_y(word: str) -> bool:
    return len(word) > 1 and word.endswith("y") and word[-2] not in _VOWELS


# --- Nouns ---

def plural_of_word(word: str) -> str:
    lower = word.lower()
    if lower in IRREGULAR_PLURALS:
        return _match_case(word, IRREGULAR_PLURALS[lower])
    if lower.endswith(_SIBILANT_ENDINGS):
        return word + "es"
    if _is_consonant_y(lower):
        return word[:-1] + "ies"
    return word + "s"


def singular_of_word(word: str) -> str:
    lower = word.lower()
    if lower in IRREGULAR_SINGULARS:
        return _match_case(word, IRREGULAR_SINGULARS[lower])
    if lower.endswith("ies") and len(lower) > 3:
        return word[:-3] + "y"
    if lower.endswith("es") and lower[:-2].endswith(_ES_STEMS):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]
    return word


def plural_of_noun(tokens: Sequence[str]) -> Tokens:
    """Plural of a noun phrase: "house cat" -> "house cats"."""
    if not tokens:
        return ()
    return _replace_last(tokens, plural_of_word(tokens[-1]))


def singular_of_noun(tokens: Sequence[str]) -> Tokens:
    """Singular of a plural noun phrase: "house cats" -> "house cat"."""
    if not tokens:
        return ()
    return _replace_last(tokens, singular_of_word(tokens[-1]))


def looks_plural(tokens: Sequence[str]) -> bool:
    """Guess whether an unknown noun phrase is plural."""
    if not tokens:
        return False
    head = tokens[-1].lower()
    if head in IRREGULAR_SINGULARS:
        return True
    if head in IRREGULAR_PLURALS:
        return False
    return head.endswith("s") and not head.endswith("ss")


# --- Verbs ---

def singular_of_verb(plural: Sequence[str]) -> Tokens:
    """Third person singular from the plural: "chase" -> "chases"."""
    if not plural:
        return ()
    head = plural[0]
    lower = head.lower()
    if lower in IRREGULAR_VERB_SINGULARS:
        return _replace_first(plural, IRREGULAR_VERB_SINGULARS[lower])
    if lower.endswith(_SIBILANT_ENDINGS) or lower.endswith("o"):
        return _replace_first(plural, head + "es")
    if _is_consonant_y(lower):
        return _replace_first(plural, head[:-1] + "ies")
    return _replace_first(plural, head + "s")


def plural_of_verb(singular: Sequence[str]) -> Tokens:
    """Plural from the third person singular: "chases" -> "chase"."""
    if not singular:
        return ()
    head = singular[0]
    lower = head.lower()
    if lower in IRREGULAR_VERB_PLURALS:
        return _replace_first(singular, IRREGULAR_VERB_PLURALS[lower])
    if lower.endswith("ies") and len(lower) > 3:
        return _replace_first(singular, head[:-3] + "y")
    if lower.endswith("es") and lower[:-2].endswith(_ES_STEMS):
        return _replace_first(singular, head[:-2])
    if lower.endswith("s") and not lower.endswith("ss"):
        return _replace_first(singular, head[:-1])
    return tuple(singular)


def _doubles_final_consonant(word: str) -> bool:
    """Short consonant-vowel-consonant words double the final consonant."""
    return (
        len(word) >= 3
        and word[-1] not in _VOWELS | {"w", "x", "y"}
        and word[-2] in _VOWELS
        and word[-3] not in _VOWELS
        and sum(1 for c in word if c in _VOWELS) == 1
    )


def gerunds_of_word(word: str) -> list[str]:
    """Likely spellings of the gerund of *word*, most likely first."""
    lower = word.lower()
    if lower in IRREGULAR_GERUNDS:
        return [IRREGULAR_GERUNDS[lower]]
    if lower.endswith("ie"):
        return [word[:-2] + "ying"]
    if lower.endswith("e") and not lower.endswith(("ee", "ye", "oe")):
        return [word[:-1] + "ing", word + "ing"]
    if _doubles_final_consonant(lower):
        return [word + word[-1] + "ing", word + "ing"]
    return [word + "ing"]


def gerunds_of_verb(base: Sequence[str]) -> list[Tokens]:
    """Candidate gerund forms of a verb phrase in base form."""
    if not base:
        return []
    return [_replace_first(base, g) for g in gerunds_of_word(base[0])]


def base_form_of_gerund(gerund: Sequence[str]) -> Tokens:
    """Invert ``gerunds_of_verb``: "being friends with" -> "be friends with"."""
    if not gerund:
        return ()
    head = gerund[0]
    lower = head.lower()
    if lower in GERUND_BASE_FORMS:
        return _replace_first(gerund, GERUND_BASE_FORMS[lower])
    if not lower.endswith("ing") or len(lower) <= 4:
        return tuple(gerund)
    stem = head[:-3]
    if len(stem) >= 3 and stem[-1] == stem[-2] and stem[-1].lower() in "bdgmnprt":
        stem = stem[:-1]
    return _replace_first(gerund, stem)


def replace_copula(tokens: Sequence[str] | None, replacement: str) -> Tokens | None:
    """Swap a leading form of "be" for *replacement*.

    "is friends with" -> "are friends with"; a phrase without a copula is
    returned unchanged.
    """
    if tokens is None:
        return None
    if tokens and tokens[0].lower() in COPULAS:
        return _replace_first(tokens, replacement)
    return tuple(tokens)


# --- Determiners and numbers ---

def indefinite_article(word: str) -> str:
    """"a" or "an" for the word that follows."""
    lower = word.lower()
    if lower.startswith(("uni", "use", "one", "eu")):
        return "a"
    if lower[:1] in _VOWELS or lower.startswith(("hour", "honest", "heir")):
        return "an"
    return "a"


def parse_count(tokens: Sequence[str]) -> int | None:
    """Integer value of a count phrase ("a", "three", "12"), or None."""
    text = " ".join(tokens).lower()
    if text in NUMBER_WORDS:
        return NUMBER_WORDS[text]
    if text.isdigit():
        return int(text)
    return None
