"""Unit tests for question/answer extraction from transcript turns."""

from src.schemas.extraction import FieldSource, Turn
from src.services.field_catalog import DEFAULT_CATALOG
from src.services.transcript_extractor import extract_from_turns
from src.services.transcript_normalizer import normalize_transcript


def _turns(*pairs: tuple[str, str]) -> list[Turn]:
    return [
        Turn(
            speaker="Olivia" if role == "assistant" else "Michael",
            role=role,
            text=text,
            sequence_index=i,
        )
        for i, (role, text) in enumerate(pairs)
    ]


def test_answers_from_structured_transcript(json_transcript):
    turns = normalize_transcript(json_transcript, assistant_names=["Olivia"])
    fields = extract_from_turns(turns, DEFAULT_CATALOG)

    assert {k: v.value for k, v in fields.items()} == {
        "motivation": (
            "honestly I want to save on the commission and get the most money possible."
        ),
        "expectations": "I need to get $1.6 million for the house.",
        "timeline": "By February at the latest.",
        "nextDestination": "San Francisco.",
    }
    assert all(v.confidence == 95 for v in fields.values())
    assert all(v.source == FieldSource.TRANSCRIPT for v in fields.values())


def test_question_match_is_case_insensitive_substring():
    fields = extract_from_turns(
        _turns(
            ("assistant", "Great. So WHERE ARE YOU PLANNING TO GO once it closes?"),
            ("user", "Probably Boise, Idaho."),
        ),
        DEFAULT_CATALOG,
    )
    assert fields["nextDestination"].value == "Probably Boise, Idaho"


def test_skips_assistant_and_trivial_turns_when_looking_for_the_answer():
    fields = extract_from_turns(
        _turns(
            ("assistant", "Where are you planning to go after you sell?"),
            ("assistant", "Take your time."),
            ("user", "Hmm"),
            ("user", "Denver, probably."),
        ),
        DEFAULT_CATALOG,
    )
    assert fields["nextDestination"].value == "Denver, probably"


def test_rejected_answer_falls_through_to_a_later_occurrence():
    fields = extract_from_turns(
        _turns(
            ("assistant", "Where are you planning to go after you sell?"),
            ("user", "um, yes."),
            ("assistant", "Sorry, where are you planning to go after you sell?"),
            ("user", "Phoenix, to be near family."),
        ),
        DEFAULT_CATALOG,
    )
    assert fields["nextDestination"].value == "Phoenix, to be near family"


def test_question_without_any_response_leaves_field_unresolved():
    fields = extract_from_turns(
        _turns(
            ("user", "Hello?"),
            ("assistant", "Where are you planning to go after you sell?"),
        ),
        DEFAULT_CATALOG,
    )
    assert "nextDestination" not in fields


def test_no_turns_no_fields():
    assert extract_from_turns([], DEFAULT_CATALOG) == {}
