"""
Transcript Extractor.

Finds each catalog question in the normalized conversation and takes
the respondent's next turn as the answer. Question matching is a plain
case-insensitive substring check: the phrasings come from the
assistant's own script, so they recur (near-)verbatim in transcripts.
"""

from __future__ import annotations

from typing import Sequence

from src.logging_config import get_logger
from src.schemas.extraction import ExtractedValue, FieldDefinition, FieldSource, Turn
from src.services.answer_cleaner import clean_answer
from src.services.field_catalog import FieldCatalog

logger = get_logger(__name__)

TRANSCRIPT_CONFIDENCE = 95
MIN_RESPONSE_LENGTH = 4


def extract_from_turns(
    turns: Sequence[Turn],
    catalog: FieldCatalog,
) -> dict[str, ExtractedValue]:
    """Return one transcript-sourced value per field that has an answered question."""
    if not turns:
        return {}

    lowered = [turn.text.lower() for turn in turns]
    extracted: dict[str, ExtractedValue] = {}

    for definition in catalog.definitions():
        answer = _answer_for_field(definition, turns, lowered)
        if answer is None:
            continue

        extracted[definition.key] = ExtractedValue(
            value=answer,
            confidence=TRANSCRIPT_CONFIDENCE,
            source=FieldSource.TRANSCRIPT,
        )
        logger.debug("transcript_answer_found", field=definition.key, answer=answer)

    return extracted


def _answer_for_field(
    definition: FieldDefinition,
    turns: Sequence[Turn],
    lowered: Sequence[str],
) -> str | None:
    for phrasing in definition.phrasings:
        needle = phrasing.lower()
        for i, text in enumerate(lowered):
            if needle not in text:
                continue
            response = _next_response(turns, i + 1)
            if response is None:
                # No respondent turn follows; try a later occurrence
                continue
            answer = clean_answer(response.text)
            if answer is not None:
                return answer
    return None


def _next_response(turns: Sequence[Turn], start: int) -> Turn | None:
    """First user turn at or after ``start`` with non-trivial text."""
    for turn in turns[start:]:
        if turn.role == "user" and len(turn.text.strip()) >= MIN_RESPONSE_LENGTH:
            return turn
    return None
