"""Unit tests for transcript normalization."""

import json

import pytest

from src.services.transcript_normalizer import normalize_transcript

ASSISTANTS = ["Olivia", "Assistant", "AI Assistant", "Bot"]


def _normalize(payload):
    return normalize_transcript(payload, assistant_names=ASSISTANTS)


def test_structured_payload_keeps_order_and_roles(json_transcript):
    turns = _normalize(json_transcript)

    assert len(turns) == 8
    assert [t.sequence_index for t in turns] == list(range(8))
    assert [t.role for t in turns[:2]] == ["assistant", "user"]
    assert turns[1].speaker == "Michael"
    assert turns[-1].text.startswith("San Francisco.")


def test_json_string_is_parsed_like_the_structure(json_transcript):
    assert _normalize(json.dumps(json_transcript)) == _normalize(json_transcript)


def test_bare_message_list_is_accepted():
    turns = _normalize([
        {"role": "bot", "message": "Where are you moving to?"},
        {"role": "user", "message": "Denver."},
    ])
    assert [(t.role, t.text) for t in turns] == [
        ("assistant", "Where are you moving to?"),
        ("user", "Denver."),
    ]


def test_non_speech_messages_are_skipped():
    turns = _normalize({
        "messages": [
            {"role": "system", "message": "You are Olivia, a real estate assistant."},
            {"role": "bot", "message": "Hi there!"},
            {"role": "tool_call_result", "name": "create_contact", "result": "{}"},
            {"role": "user", "message": "   "},
            {"role": "user", "message": "Hello, who is this?"},
        ]
    })
    assert [(t.role, t.sequence_index) for t in turns] == [("assistant", 0), ("user", 1)]


def test_flat_string_splits_on_speaker_labels():
    turns = _normalize(
        "Olivia: Where are you planning to go after you sell? "
        "Michael: Moving to Denver in the spring."
    )
    assert [(t.speaker, t.role, t.text) for t in turns] == [
        ("Olivia", "assistant", "Where are you planning to go after you sell?"),
        ("Michael", "user", "Moving to Denver in the spring."),
    ]


def test_flat_string_labels_are_case_insensitive_and_longest_first():
    turns = _normalize("AI Assistant: Hello there. user: Hi, who is this? olivia: It's Olivia.")
    assert [(t.speaker, t.role) for t in turns] == [
        ("AI Assistant", "assistant"),
        ("user", "user"),
        ("olivia", "assistant"),
    ]


def test_uppercase_role_prefixed_lines():
    turns = _normalize("ASSISTANT: What's your timeline?\nUSER: End of the year.")
    assert [t.role for t in turns] == ["assistant", "user"]
    assert turns[1].text == "End of the year."


def test_text_before_the_first_label_is_dropped():
    turns = _normalize("[call connected] Michael: I'm frustrated by all these agent calls.")
    assert len(turns) == 1
    assert turns[0].role == "user"


def test_extra_speaker_labels_are_recognised():
    turns = normalize_transcript(
        "Olivia: Any worries? Paulina: Just the foot traffic.",
        assistant_names=ASSISTANTS,
        speaker_labels=["Paulina"],
    )
    assert [(t.speaker, t.role) for t in turns] == [("Olivia", "assistant"), ("Paulina", "user")]


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "",
        "   ",
        "{not valid json",
        "[1, 2",
        {"messages": "not a list"},
        {"no_messages": []},
        b"\xff\xfe\xfd",
        42,
        "no speaker labels anywhere in this text",
    ],
)
def test_unparsable_transcripts_degrade_to_no_turns(payload):
    assert _normalize(payload) == []


def test_bracketed_prefix_is_read_as_flat_text_not_json():
    turns = _normalize(
        "[00:00] Olivia: Where are you planning to go after you sell? "
        "[00:04] Michael: San Francisco. Got a great job offer."
    )
    assert [(t.speaker, t.role) for t in turns] == [("Olivia", "assistant"), ("Michael", "user")]
    assert turns[0].text == "Where are you planning to go after you sell? [00:04]"


def test_platform_flat_transcript_uses_ai_and_user_labels():
    turns = _normalize("AI: Where are you planning to go after you sell?\nUser: San Francisco.")
    assert [(t.speaker, t.role, t.text) for t in turns] == [
        ("AI", "assistant", "Where are you planning to go after you sell?"),
        ("User", "user", "San Francisco."),
    ]


def test_configured_extra_labels_apply_with_explicit_assistant_names(monkeypatch):
    from src.config import get_settings

    monkeypatch.setattr(get_settings(), "extra_speaker_labels", ["Paulina"])

    turns = _normalize("Olivia: Any worries? Paulina: Just the foot traffic.")
    assert [(t.speaker, t.role) for t in turns] == [("Olivia", "assistant"), ("Paulina", "user")]
