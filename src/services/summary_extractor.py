"""
Summary Pattern Extractor.

Applies per-field heuristic rules to the free-text call summary. Rules
are plain data (see ``src.services.summary_rules``); this module only
knows how to evaluate the three rule kinds and pick the first match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Protocol, Sequence

from src.logging_config import get_logger
from src.schemas.extraction import ExtractedValue, FieldDefinition, FieldSource
from src.services.answer_cleaner import clean_answer
from src.services.field_catalog import FieldCatalog

logger = get_logger(__name__)


class SummaryRule(Protocol):
    confidence: int

    def evaluate(self, summary: str, lowered: str, definition: FieldDefinition) -> str | None:
        ...


@dataclass(frozen=True)
class PhrasingRule:
    """
    Find one of the field's catalog questions inside the summary and
    take the cleaned text that follows it as the answer.
    """
    confidence: int

    def evaluate(self, summary: str, lowered: str, definition: FieldDefinition) -> str | None:
        for phrasing in definition.phrasings:
            index = lowered.find(phrasing.lower())
            if index == -1:
                continue
            answer = clean_answer(summary[index + len(phrasing):])
            if answer is not None:
                return answer
        return None


@dataclass(frozen=True)
class KeywordRule:
    """
    Fixed value when the summary contains the right keywords.

    ``when`` is a disjunction of clauses; a clause holds when every
    keyword in it occurs in the lower-cased summary.
    """
    value: str
    confidence: int
    when: tuple[tuple[str, ...], ...]

    def evaluate(self, summary: str, lowered: str, definition: FieldDefinition) -> str | None:
        for clause in self.when:
            if all(keyword in lowered for keyword in clause):
                return self.value
        return None


@dataclass(frozen=True)
class RegexRule:
    """
    Capture a value from the summary with a case-insensitive regex.

    ``group`` selects the capture (0 for the whole match); the capture
    is stripped, passed through ``transform`` and formatted into
    ``template``.
    """
    pattern: str
    confidence: int
    group: int = 1
    template: str = "{}"
    transform: Callable[[str], str] | None = None
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern, re.IGNORECASE))

    def evaluate(self, summary: str, lowered: str, definition: FieldDefinition) -> str | None:
        match = self._compiled.search(summary)
        if not match:
            return None
        captured = (match.group(self.group) or "").strip()
        if not captured:
            return None
        if self.transform is not None:
            captured = self.transform(captured)
        return self.template.format(captured)


RuleTable = Mapping[str, Sequence[SummaryRule]]


class SummaryPatternExtractor:
    """Evaluates one rule table against summaries, producing values of one source tier."""

    def __init__(self, rules: RuleTable, source: FieldSource, catalog: FieldCatalog) -> None:
        self.rules = rules
        self.source = source
        self.catalog = catalog

    def extract(
        self,
        summary: str,
        keys: Iterable[str] | None = None,
    ) -> dict[str, ExtractedValue]:
        """
        Return at most one value per requested key.

        Keys without rules, or whose rules all miss, are left out.
        """
        if keys is None:
            keys = self.catalog.keys()

        summary = summary or ""
        lowered = summary.lower()
        extracted: dict[str, ExtractedValue] = {}

        for key in keys:
            definition = self.catalog.lookup(key)
            for rule in self.rules.get(key, ()):
                value = rule.evaluate(summary, lowered, definition)
                if value is None:
                    continue
                extracted[key] = ExtractedValue(
                    value=value,
                    confidence=rule.confidence,
                    source=self.source,
                )
                logger.debug(
                    "summary_rule_matched",
                    field=key,
                    source=self.source.value,
                    rule=type(rule).__name__,
                    confidence=rule.confidence,
                )
                break

        return extracted
