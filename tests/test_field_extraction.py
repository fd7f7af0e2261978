"""Tests for the end-to-end resolution pipeline.

Tests cover:
- Source priority and the write-once guarantee
- System fields, digest emission and idempotence
- Graceful degradation on malformed transcripts
- Whole-call failure on internal errors
"""

from __future__ import annotations

import json

import pytest

from src.exceptions import ExtractionError
from src.schemas.extraction import FieldSource
from src.services.field_extraction import (
    CALL_SUMMARY_KEY,
    LAST_CONTACT_KEY,
    FieldExtractor,
    summary_only_fields,
)


def _system_entries(fields):
    return {k: v for k, v in fields.items() if v.source == FieldSource.SYSTEM}


# ── Priority ───────────────────────────────────────────────────────────────


def test_transcript_answer_resolves_next_destination(extractor):
    transcript = {
        "messages": [
            {"role": "assistant", "speaker": "Olivia", "content": "Where are you planning to go after you sell?"},
            {"role": "user", "speaker": "Michael", "content": "San Francisco. Got a great job offer."},
        ]
    }
    fields = extractor.extract("Michael is selling his home on his own.", transcript)

    assert fields["nextDestination"].value == "San Francisco."
    assert fields["nextDestination"].source == FieldSource.TRANSCRIPT
    assert fields["nextDestination"].confidence == 95


def test_transcript_beats_disagreeing_summary(extractor):
    transcript = (
        "Olivia: Where are you planning to go after you sell? "
        "Michael: San Francisco. Got a great job offer."
    )
    fields = extractor.extract("He is moving to Austin, Texas.", transcript)

    assert fields["nextDestination"].value == "San Francisco."
    assert fields["nextDestination"].source == FieldSource.TRANSCRIPT


@pytest.mark.parametrize(
    "transcript",
    [
        "[00:00] Olivia: Where are you planning to go after you sell? "
        "Michael: San Francisco. Got a great job offer.",
        "AI: Where are you planning to go after you sell?\n"
        "User: San Francisco. Got a great job offer.",
    ],
)
def test_flat_transcript_variants_still_beat_the_summary(extractor, transcript):
    fields = extractor.extract("Seller is moving to Austin, Texas.", transcript)

    assert fields["nextDestination"].value == "San Francisco."
    assert fields["nextDestination"].source == FieldSource.TRANSCRIPT


def test_summary_fallback_resolves_motivation(extractor):
    fields = extractor.extract("The seller wants to save commission and get the most money.")

    assert fields["motivation"].value == "Save commission, get the most money"
    assert fields["motivation"].confidence == 85
    assert fields["motivation"].source == FieldSource.SUMMARY_PATTERN


def test_direct_fallback_fills_what_summary_patterns_miss(extractor):
    fields = extractor.extract("They hope to close by year-end and have concerns about buyer quality.")

    assert fields["timeline"].value == "Year-end"
    assert fields["timeline"].source == FieldSource.DIRECT_FALLBACK
    assert fields["concerns"].value == "Buyer quality"
    assert fields["disappointments"].value == "Quality of buyers"


def test_summary_patterns_beat_direct_fallback(extractor):
    # Both tiers have a rule for this summary; the earlier tier wins
    fields = extractor.extract("Seller is frustrated by agent calls.")

    assert fields["disappointments"].source == FieldSource.SUMMARY_PATTERN
    assert fields["concerns"].value == "Agent calls"
    assert fields["concerns"].source == FieldSource.SUMMARY_PATTERN


def test_full_structured_transcript(extractor, json_transcript):
    fields = extractor.extract("", json.dumps(json_transcript))

    assert fields["expectations"].value == "I need to get $1.6 million for the house."
    assert fields["timeline"].value == "By February at the latest."
    assert fields.count_by_source(FieldSource.TRANSCRIPT) == 4
    assert fields["Voice Memory"].value.startswith("[9/16/2025] Motivation: ")
    assert "Moving: San Francisco." in fields["Voice Memory"].value


def test_summary_only_call(extractor, paulina_summary):
    fields = extractor.extract(paulina_summary)

    assert fields["expectations"].value == "$950,000"
    assert fields["askingPrice"].value == "$950,000"
    assert fields["disappointments"].value == "Low foot traffic"
    assert fields["opennessToRelist"].value == "Yes, open to agent"
    assert "motivation" not in fields
    assert "nextDestination" not in fields
    assert fields["Voice Memory"].value == (
        "[9/16/2025] Expects: $950,000 | Timeline: September | Agent: Yes, open to agent."
    )


# ── System fields ──────────────────────────────────────────────────────────


@pytest.mark.parametrize("summary", ["", "The call went to voicemail."])
def test_system_fields_always_present(extractor, summary):
    fields = extractor.extract(summary)
    system = _system_entries(fields)

    assert set(system) == {LAST_CONTACT_KEY, CALL_SUMMARY_KEY}
    assert all(v.confidence == 100 for v in system.values())
    assert fields[LAST_CONTACT_KEY].value == "2025-09-16"
    assert fields[CALL_SUMMARY_KEY].value == summary


def test_empty_summary_without_transcript_yields_only_system_fields(extractor):
    assert set(extractor.extract("")) == {LAST_CONTACT_KEY, CALL_SUMMARY_KEY}


def test_summary_only_fields_helper(frozen_date):
    fields = summary_only_fields("raw text", lambda: frozen_date)
    assert fields.to_dict() == {
        LAST_CONTACT_KEY: {"value": "2025-09-16", "confidence": 100, "source": "system"},
        CALL_SUMMARY_KEY: {"value": "raw text", "confidence": 100, "source": "system"},
    }


# ── Determinism and degradation ────────────────────────────────────────────


def test_idempotent_with_frozen_clock(extractor, json_transcript, paulina_summary):
    first = extractor.extract(paulina_summary, json_transcript)
    second = extractor.extract(paulina_summary, json_transcript)
    assert first == second


def test_malformed_transcript_degrades_to_summary(extractor):
    fields = extractor.extract(
        "The seller wants to save commission and get the most money.",
        '{"messages": [ this is not json',
    )
    assert fields["motivation"].source == FieldSource.SUMMARY_PATTERN
    assert fields.count_by_source(FieldSource.TRANSCRIPT) == 0


def test_internal_failure_fails_the_whole_call(extractor, monkeypatch):
    def boom(summary, keys=None):
        raise RuntimeError("pattern engine exploded")

    monkeypatch.setattr(extractor.direct_fallback, "extract", boom)

    with pytest.raises(ExtractionError, match="pattern engine exploded"):
        extractor.extract("nothing matches here")


def test_none_summary_is_treated_as_empty(extractor):
    fields = extractor.extract(None)
    assert fields[CALL_SUMMARY_KEY].value == ""
