"""Blacklist phrase matching.

A phrase such as "Senior Software" matches a title when every word of the
phrase appears in it as a whole word, case-insensitively, in any order and not
necessarily next to each other. So it matches "Software Engineer (Senior)" but
"Senior Engineer" does not match "Engineering".
"""

from __future__ import annotations

import re
from typing import NamedTuple, Sequence


class CompiledPattern(NamedTuple):
    phrase: str
    regex: re.Pattern[str]


def _word_lookahead(word: str) -> str:
    # (?<!\w)/(?!\w) instead of \b so tokens ending in punctuation ("C++") still anchor
    return rf"(?=.*(?<!\w){re.escape(word)}(?!\w))"


def compile_patterns(phrases: Sequence[str]) -> list[CompiledPattern]:
    """Compile free-text phrases into order-independent all-words patterns.

    Blank phrases are dropped: they would otherwise compile to a pattern that
    matches everything.
    """
    compiled = []
    for phrase in phrases:
        words = phrase.split()
        if not words:
            continue
        pattern = "".join(_word_lookahead(w) for w in words)
        compiled.append(CompiledPattern(phrase, re.compile(pattern, re.IGNORECASE | re.DOTALL)))
    return compiled


def first_match(compiled: Sequence[CompiledPattern], text: str) -> CompiledPattern | None:
    """Return the first pattern that matches text, or None."""
    if not text:
        return None
    for pattern in compiled:
        if pattern.regex.match(text):
            return pattern
    return None


def matches(compiled: Sequence[CompiledPattern], text: str) -> bool:
    return first_match(compiled, text) is not None
