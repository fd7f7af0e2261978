"""
Field Catalog.

The CRM fields this service fills in, each with the questions the
voice assistant asks to elicit it. The first phrasing of every field
is the verbatim question from the assistant's call script; the shorter
fragments after it still match when the assistant paraphrases.
"""

from __future__ import annotations

from typing import Iterable

from src.exceptions import UnknownFieldError
from src.schemas.extraction import FieldDefinition


class FieldCatalog:
    """
    Immutable, ordered registry of field definitions.

    Built once at startup and passed to each extraction call. Catalog
    order is also the order in which fields are extracted.
    """

    def __init__(self, definitions: Iterable[FieldDefinition]) -> None:
        self._definitions: tuple[FieldDefinition, ...] = tuple(definitions)
        self._by_key: dict[str, FieldDefinition] = {}
        for definition in self._definitions:
            if definition.key in self._by_key:
                raise ValueError(f"Duplicate field key in catalog: {definition.key}")
            self._by_key[definition.key] = definition

    def definitions(self) -> tuple[FieldDefinition, ...]:
        return self._definitions

    def keys(self) -> tuple[str, ...]:
        return tuple(d.key for d in self._definitions)

    def lookup(self, key: str) -> FieldDefinition:
        try:
            return self._by_key[key]
        except KeyError:
            raise UnknownFieldError(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._definitions)


# The assistant's scripted seller-interview questions, in call order
_DEFAULT_DEFINITIONS: list[dict[str, object]] = [
    {
        "key": "motivation",
        "display_name": "Motivation",
        "phrasings": (
            "What's got you thinking about selling your home yourself instead of working with an agent?",
            "what's got you thinking about selling",
            "thinking about selling your home yourself",
            "What motivated you to sell FSBO?",
            "Why are you selling by owner?",
        ),
    },
    {
        "key": "expectations",
        "display_name": "Expectations",
        "phrasings": (
            "What's most important to you as you go through this selling process?",
            "what's most important to you",
            "most important to you as you go through this selling process",
            "What are you hoping to achieve?",
            "What's your main goal?",
        ),
    },
    {
        "key": "disappointments",
        "display_name": "Disappointments",
        "phrasings": (
            "What's been the most challenging or disappointing part of selling on your own so far?",
            "most challenging or disappointing part",
            "disappointing part of selling on your own",
            "What has disappointed you?",
            "What's been challenging?",
        ),
    },
    {
        "key": "concerns",
        "display_name": "Concerns",
        "phrasings": (
            "Is there anything you're concerned about as you go through this on your own?",
            "anything you're concerned about",
            "concerned about as you go through this",
            "What concerns do you have?",
            "Any worries?",
        ),
    },
    {
        "key": "nextDestination",
        "display_name": "Next Destination",
        "phrasings": (
            "Where are you planning to go after you sell?",
            "where are you planning to go",
            "planning to go after you sell",
            "Where are you moving to?",
            "What's your next destination?",
        ),
    },
    {
        "key": "timeline",
        "display_name": "Timeline",
        "phrasings": (
            "Ideally, when would you like to have your home sold and be moved out?",
            "when would you like to have your home sold",
            "ideally, when would you like",
            "What's your timeline?",
            "When do you need to sell?",
        ),
    },
    {
        "key": "askingPrice",
        "display_name": "Asking Price",
        "phrasings": (
            "What price are you hoping to get for your home?",
            "what price are you hoping",
            "price are you hoping to get",
            "How much are you asking?",
            "What's your asking price?",
        ),
    },
    {
        "key": "opennessToRelist",
        "display_name": "Openness to Re-list",
        "phrasings": (
            "If a great buyer came along, would you be open to working with an agent",
            "would you be open to working with an agent",
            "great buyer came along",
            "Would you consider working with an agent?",
            "Are you open to using an agent?",
        ),
    },
]

DEFAULT_CATALOG = FieldCatalog(FieldDefinition(**d) for d in _DEFAULT_DEFINITIONS)
