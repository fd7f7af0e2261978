"""
Answer Cleaner.

Turns a raw answer fragment (a respondent's transcript turn, or the
text that follows a question inside a call summary) into a presentable
field value, or rejects it.
"""

from __future__ import annotations

import re

MIN_ANSWER_LENGTH = 4

_LEADING_PUNCTUATION = re.compile(r"^[\s,.\-:?!]+")
_TRAILING_PUNCTUATION = re.compile(r"[\s,.\-:?!]+$")

FILLER_WORDS: tuple[str, ...] = (
    "well", "um", "uh", "so", "like", "you know", "i mean",
    "yeah", "yes", "no", "okay", "ok",
)
_LEADING_FILLER = re.compile(
    r"^(?:" + "|".join(re.escape(w) for w in FILLER_WORDS) + r")[\s,.]+",
    re.IGNORECASE,
)

# Case-sensitive on purpose: a capital letter marks the next sentence.
NATURAL_BREAKS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\.\s+[A-Z]"),
    re.compile(r"\?\s+"),
    re.compile(r"\.\s+(?:The|They|Olivia|Jack)\b"),
)


def clean_answer(raw: str | None) -> str | None:
    """
    Normalize a raw answer fragment.

    Strips leading punctuation and one leading filler word, cuts the
    text right after the first natural sentence or question break, and
    trims punctuation again. A value cut at a break keeps its terminal
    mark (``"San Francisco."``).

    Returns None when what is left is too short (3 characters or fewer
    once punctuation is removed) or has no letters.
    """
    if not raw:
        return None

    text = raw.strip()
    text = _LEADING_PUNCTUATION.sub("", text)
    text = _LEADING_FILLER.sub("", text)

    end = _first_break(text)
    truncated = end < len(text)
    text = _LEADING_PUNCTUATION.sub("", text[:end].strip())

    core = _TRAILING_PUNCTUATION.sub("", text)
    if len(core) < MIN_ANSWER_LENGTH or not any(ch.isalpha() for ch in core):
        return None

    if truncated and text and text[-1] in ".?":
        return core + text[-1]
    return core


def _first_break(text: str) -> int:
    """Index just past the earliest natural break, or len(text) if none."""
    end = len(text)
    for pattern in NATURAL_BREAKS:
        match = pattern.search(text)
        if match and match.start() + 1 < end:
            end = match.start() + 1
    return end
