# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Word-bigram similarity between two free-text labels.

The score is a Dice coefficient over the character bigrams of each word:
``2 * shared / (bigrams_a + bigrams_b)``. Bigrams are pooled per label, so
the score ignores word order, case and runs of whitespace. It is used to
match the lab names of the drug database against company names, e.g.
"LAB. BOIRON" against "LABO. BOIRON" scores about 0.82.
"""
import re
from typing import List, NamedTuple, Tuple

from .text import upper

TOTAL_MATCH = 1.0

_WHITESPACE = re.compile(r"\s+")

Bigram = Tuple[str, str]


class LabelProfile(NamedTuple):
    """A label with its normalized words and pooled bigrams, computed once."""
    text: str
    words: List[str]
    bigrams: List[Bigram]


def _normalized_words(text: str, locale: str) -> List[str]:
    return [word for word in _WHITESPACE.split(upper(text, locale)) if word]


def _bigrams(words: List[str]) -> List[Bigram]:
    # Bigrams never span two words; a one-letter word contributes none.
    return [(word[i], word[i + 1]) for word in words for i in range(len(word) - 1)]


def profile(text: str, locale: str = "fr") -> LabelProfile:
    words = _normalized_words(text, locale)
    return LabelProfile(text=text, words=words, bigrams=_bigrams(words))


def compare(first: LabelProfile, second: LabelProfile) -> float:
    """Scores two profiled labels; see `similarity`."""
    if first.text == second.text or first.words == second.words:
        return TOTAL_MATCH

    total = len(first.bigrams) + len(second.bigrams)
    if total == 0:
        return 0.0

    remaining = list(second.bigrams)
    match_count = 0
    for pair in first.bigrams:
        try:
            remaining.remove(pair)
        except ValueError:
            continue
        match_count += 1
    return 2.0 * match_count / total


def similarity(first: str, second: str, locale: str = "fr") -> float:
    """Returns a score in [0.0, 1.0]; 1.0 means the labels are equivalent."""
    if first == second:
        return TOTAL_MATCH
    return compare(profile(first, locale), profile(second, locale))
