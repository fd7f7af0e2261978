"""
Data models for field extraction results.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FieldSource(str, Enum):
    """Provenance tier that produced a field value."""
    TRANSCRIPT = "transcript"
    SUMMARY_PATTERN = "summary_pattern"
    DIRECT_FALLBACK = "direct_fallback"
    SYSTEM = "system"
    DERIVED = "derived"


class ExtractedValue(BaseModel):
    """A single resolved field value with its confidence and provenance."""
    model_config = ConfigDict(frozen=True)

    value: str
    confidence: int = Field(ge=0, le=100)
    source: FieldSource


class FieldDefinition(BaseModel):
    """A catalog entry: the field key, its CRM display name and the question phrasings."""
    model_config = ConfigDict(frozen=True)

    key: str
    display_name: str
    phrasings: tuple[str, ...]


class Turn(BaseModel):
    """One utterance by one speaker, in conversation order."""
    model_config = ConfigDict(frozen=True)

    speaker: str
    role: Literal["assistant", "user"]
    text: str
    sequence_index: int = Field(ge=0)


class FieldMap(dict[str, ExtractedValue]):
    """
    Field key -> ExtractedValue, written at most once per key.

    ``offer`` is the only way extraction tiers add values, so a field
    resolved by a higher-priority tier is never replaced. ``stamp`` is
    reserved for the per-call system fields, which always reflect the
    current call.
    """

    def offer(self, key: str, value: ExtractedValue) -> bool:
        """Insert ``value`` unless ``key`` is already resolved. Returns True on insert."""
        if key in self:
            return False
        self[key] = value
        return True

    def stamp(self, key: str, value: ExtractedValue) -> None:
        """Unconditionally set ``key``."""
        self[key] = value

    def count_by_source(self, source: FieldSource) -> int:
        return sum(1 for v in self.values() if v.source == source)

    def to_dict(self) -> dict[str, dict[str, object]]:
        return {k: v.model_dump(mode="json") for k, v in self.items()}


class ExtractRequest(BaseModel):
    """Body of the synchronous extraction endpoint."""
    summary: str = ""
    transcript: str | dict | list | None = None


class ExtractionResponse(BaseModel):
    """Field map as returned over the API."""
    fields: dict[str, ExtractedValue]
    total: int
