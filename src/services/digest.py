"""
Derived Field Synthesizer.

Builds the one-line "Voice Memory" digest the assistant reads back on
the next call with this contact.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping

from src.schemas.extraction import ExtractedValue, FieldSource

DIGEST_KEY = "Voice Memory"
DIGEST_CONFIDENCE = 95
MIN_DIGEST_FRAGMENTS = 3

# (field key, label) in digest order
DIGEST_FIELDS: tuple[tuple[str, str], ...] = (
    ("motivation", "Motivation"),
    ("expectations", "Expects"),
    ("timeline", "Timeline"),
    ("concerns", "Concern"),
    ("opennessToRelist", "Agent"),
    ("nextDestination", "Moving"),
)

PLACEHOLDER_VALUES = frozenset({"", "not specified", "n/a", "unknown"})


def format_display_date(day: date) -> str:
    """US locale short date, e.g. 9/16/2025."""
    return f"{day.month}/{day.day}/{day.year}"


def build_digest(field_map: Mapping[str, ExtractedValue], today: date) -> ExtractedValue | None:
    """
    Join the resolved digest fields into ``"[date] Label: value | ..."``.

    Returns None when fewer than three fields carry a real value.
    """
    fragments: list[str] = []
    for key, label in DIGEST_FIELDS:
        extracted = field_map.get(key)
        if extracted is None:
            continue
        value = extracted.value.strip()
        if value.lower() in PLACEHOLDER_VALUES:
            continue
        # Fragments are joined into one sentence
        value = value.rstrip(".")
        fragments.append(f"{label}: {value}")

    if len(fragments) < MIN_DIGEST_FRAGMENTS:
        return None

    return ExtractedValue(
        value=f"[{format_display_date(today)}] {' | '.join(fragments)}.",
        confidence=DIGEST_CONFIDENCE,
        source=FieldSource.DERIVED,
    )
