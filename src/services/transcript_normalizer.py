"""
Transcript Normalizer.

Converts whatever transcript shape a call report carries into an
ordered list of ``Turn`` objects:

- a structured payload ``{"messages": [{"role", "speaker", "content"}, ...]}``
  (or the bare list, or the same thing serialized as JSON)
- a flat string with speaker labels, e.g.
  ``"Olivia: Where are you planning to go? Michael: San Francisco."``

Parsing is best-effort. Anything unparsable yields an empty list and a
warning, never an exception.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Sequence

from src.config import get_settings
from src.logging_config import get_logger
from src.schemas.extraction import Turn

logger = get_logger(__name__)

DEFAULT_SPEAKER_LABELS: tuple[str, ...] = (
    "AI Assistant",
    "AI",
    "Olivia",
    "Michael",
    "Speaker",
    "User",
    "Assistant",
    "Customer",
    "Bot",
)

_ASSISTANT_ROLES = frozenset({"assistant", "bot", "ai", "agent"})
_USER_ROLES = frozenset({"user", "customer", "human"})


def normalize_transcript(
    payload: Any,
    assistant_names: Sequence[str] | None = None,
    speaker_labels: Sequence[str] | None = None,
) -> list[Turn]:
    """
    Normalize a transcript payload into chronological turns.

    Args:
        payload: None, a structured mapping/list, a JSON string, or a
            flat speaker-tagged string.
        assistant_names: Speaker names that identify the interviewer.
            Defaults to the configured persona names.
        speaker_labels: Labels recognised in flat strings. Assistant
            names are always recognised in addition to these.
    """
    if assistant_names is None:
        assistant_names = get_settings().assistant_names
    if speaker_labels is None:
        speaker_labels = (*DEFAULT_SPEAKER_LABELS, *get_settings().extra_speaker_labels)

    try:
        if payload is None:
            return []

        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8")

        if isinstance(payload, str):
            text = payload.strip()
            if not text:
                return []
            if text[0] in "{[":
                try:
                    data = json.loads(text)
                except json.JSONDecodeError:
                    # "[00:00] Olivia: ..." and similar flat transcripts
                    logger.debug("transcript_not_json", prefix=text[:20])
                else:
                    return _from_messages(data, assistant_names)
            return _from_flat_string(text, assistant_names, speaker_labels)

        return _from_messages(payload, assistant_names)

    except (ValueError, TypeError, AttributeError) as e:
        # UnicodeDecodeError is a ValueError
        logger.warning("transcript_unparsable", error=str(e))
        return []


def _from_messages(data: Any, assistant_names: Sequence[str]) -> list[Turn]:
    if isinstance(data, dict):
        messages = data.get("messages")
    else:
        messages = data

    if not isinstance(messages, list):
        logger.warning("transcript_missing_messages", payload_type=type(data).__name__)
        return []

    turns: list[Turn] = []
    for item in messages:
        if not isinstance(item, dict):
            continue

        text = item.get("content")
        if text is None:
            text = item.get("message")
        if not isinstance(text, str) or not text.strip():
            continue

        speaker = str(item.get("speaker") or item.get("name") or item.get("role") or "")
        role = _role_for_message(str(item.get("role") or ""), speaker, assistant_names)
        if role is None:
            continue

        turns.append(
            Turn(speaker=speaker, role=role, text=text.strip(), sequence_index=len(turns))
        )

    return turns


def _role_for_message(role: str, speaker: str, assistant_names: Sequence[str]) -> str | None:
    """Map a message role to assistant/user. Returns None for non-speech entries."""
    role = role.strip().lower()
    if role in _ASSISTANT_ROLES:
        return "assistant"
    if role in _USER_ROLES:
        return "user"
    if not role and speaker:
        return _role_for_speaker(speaker, assistant_names)
    # system prompts, tool calls and tool results
    return None


def _role_for_speaker(speaker: str, assistant_names: Iterable[str]) -> str:
    lowered = speaker.strip().lower()
    if "assistant" in lowered or lowered in _ASSISTANT_ROLES:
        return "assistant"
    if any(lowered == name.lower() for name in assistant_names):
        return "assistant"
    return "user"


def _speaker_pattern(labels: Iterable[str]) -> re.Pattern[str]:
    # Longest first so "AI Assistant" wins over "Assistant"
    unique = sorted({label.strip() for label in labels if label.strip()}, key=len, reverse=True)
    alternation = "|".join(re.escape(label) for label in unique)
    return re.compile(r"\b(" + alternation + r"):\s*", re.IGNORECASE)


def _from_flat_string(
    text: str,
    assistant_names: Sequence[str],
    speaker_labels: Sequence[str],
) -> list[Turn]:
    pattern = _speaker_pattern([*speaker_labels, *assistant_names])

    # re.split with one capture group alternates content, label, content, ...
    segments = pattern.split(text)

    turns: list[Turn] = []
    current_speaker: str | None = None
    for i, segment in enumerate(segments):
        if i % 2 == 1:
            current_speaker = segment.strip()
            continue

        content = segment.strip()
        if not content or current_speaker is None:
            continue

        turns.append(
            Turn(
                speaker=current_speaker,
                role=_role_for_speaker(current_speaker, assistant_names),
                text=content,
                sequence_index=len(turns),
            )
        )

    if not turns:
        logger.warning("transcript_without_speaker_labels", length=len(text))
    return turns
