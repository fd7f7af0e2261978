"""
Field Extraction Service.

Resolves one authoritative value per CRM field from a call summary and
an optional transcript. Sources are tried in strict priority order and
a field, once resolved, is never overwritten by a lower tier:

    transcript Q&A (95) > summary patterns (80-95) > direct fallback (85-95)

Two system fields describing this call are then stamped, and the
"Voice Memory" digest is derived from the result.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Sequence

from src.exceptions import ExtractionError
from src.logging_config import get_logger
from src.schemas.extraction import ExtractedValue, FieldMap, FieldSource
from src.services.digest import DIGEST_KEY, build_digest
from src.services.field_catalog import DEFAULT_CATALOG, FieldCatalog
from src.services.summary_extractor import SummaryPatternExtractor
from src.services.summary_rules import DIRECT_FALLBACK_RULES, SUMMARY_PATTERN_RULES
from src.services.transcript_extractor import extract_from_turns
from src.services.transcript_normalizer import normalize_transcript

logger = get_logger(__name__)

LAST_CONTACT_KEY = "Last Contact"
CALL_SUMMARY_KEY = "latest Call Summary"
SYSTEM_CONFIDENCE = 100

SYSTEM_KEYS = (LAST_CONTACT_KEY, CALL_SUMMARY_KEY)


class FieldExtractor:
    """
    Stateless extraction pipeline.

    Holds only read-only configuration (catalog, rule tables, clock), so
    one instance can serve concurrent calls.

    Args:
        catalog: Field definitions to extract, in priority order.
        clock: Returns today's date; inject a fixed one for tests.
        assistant_names: Interviewer persona names for transcript
            parsing. Defaults to the configured names.
    """

    def __init__(
        self,
        catalog: FieldCatalog = DEFAULT_CATALOG,
        clock: Callable[[], date] = date.today,
        assistant_names: Sequence[str] | None = None,
    ) -> None:
        self.catalog = catalog
        self.clock = clock
        self.assistant_names = assistant_names
        self.summary_patterns = SummaryPatternExtractor(
            SUMMARY_PATTERN_RULES, FieldSource.SUMMARY_PATTERN, catalog
        )
        self.direct_fallback = SummaryPatternExtractor(
            DIRECT_FALLBACK_RULES, FieldSource.DIRECT_FALLBACK, catalog
        )

    def extract(self, summary: str, transcript: Any = None) -> FieldMap:
        """
        Extract the field map for one call.

        Args:
            summary: Free-text call summary. May be empty.
            transcript: None, a flat speaker-tagged string, or a
                structured ``{"messages": [...]}`` payload (or its JSON).

        Returns:
            FieldMap that always contains the two system fields.

        Raises:
            ExtractionError: if anything inside the pipeline fails. No
                partial map is returned in that case.
        """
        summary = summary or ""
        try:
            return self._run(summary, transcript)
        except Exception as e:
            logger.error("field_extraction_failed", error=str(e), error_type=type(e).__name__)
            raise ExtractionError(f"Field extraction failed: {e}") from e

    def _run(self, summary: str, transcript: Any) -> FieldMap:
        fields = FieldMap()

        turns = normalize_transcript(transcript, assistant_names=self.assistant_names)
        if turns:
            for key, value in extract_from_turns(turns, self.catalog).items():
                fields.offer(key, value)

        for extractor in (self.summary_patterns, self.direct_fallback):
            missing = self._missing_keys(fields)
            if not missing:
                break
            for key, value in extractor.extract(summary, missing).items():
                fields.offer(key, value)

        today = self.clock()
        fields.stamp(LAST_CONTACT_KEY, _system_value(today.isoformat()))
        fields.stamp(CALL_SUMMARY_KEY, _system_value(summary))

        digest = build_digest(fields, today)
        if digest is not None:
            fields.offer(DIGEST_KEY, digest)

        logger.info(
            "field_extraction_complete",
            total_fields=len(fields),
            transcript_turns=len(turns),
            transcript_fields=fields.count_by_source(FieldSource.TRANSCRIPT),
            summary_pattern_fields=fields.count_by_source(FieldSource.SUMMARY_PATTERN),
            direct_fallback_fields=fields.count_by_source(FieldSource.DIRECT_FALLBACK),
            digest=digest is not None,
        )
        return fields

    def _missing_keys(self, fields: FieldMap) -> list[str]:
        return [key for key in self.catalog.keys() if key not in fields]


def _system_value(value: str) -> ExtractedValue:
    return ExtractedValue(value=value, confidence=SYSTEM_CONFIDENCE, source=FieldSource.SYSTEM)


def summary_only_fields(summary: str, clock: Callable[[], date] = date.today) -> FieldMap:
    """Minimal field map used when extraction failed: just the system fields."""
    fields = FieldMap()
    fields.stamp(LAST_CONTACT_KEY, _system_value(clock().isoformat()))
    fields.stamp(CALL_SUMMARY_KEY, _system_value(summary or ""))
    return fields


_default_extractor: FieldExtractor | None = None


def extract_fields(summary: str, transcript: Any = None) -> FieldMap:
    """Extract with the default catalog and the system clock."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = FieldExtractor()
    return _default_extractor.extract(summary, transcript)
