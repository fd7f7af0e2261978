"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest

from src.services.field_extraction import FieldExtractor

FROZEN_DATE = date(2025, 9, 16)


@pytest.fixture
def frozen_date() -> date:
    return FROZEN_DATE


@pytest.fixture
def extractor() -> FieldExtractor:
    """Extractor with a fixed clock and the default persona names."""
    return FieldExtractor(
        clock=lambda: FROZEN_DATE,
        assistant_names=["Olivia", "Assistant", "AI Assistant", "Bot"],
    )


@pytest.fixture
def json_transcript() -> dict:
    """A structured transcript as the voice platform sends it."""
    return {
        "messages": [
            {
                "role": "assistant",
                "speaker": "Olivia",
                "content": (
                    "Hi Michael! This is Olivia from Rich Murren Real Estate. I saw you're "
                    "selling your home yourself. What's got you thinking about selling your "
                    "home yourself instead of working with an agent?"
                ),
            },
            {
                "role": "user",
                "speaker": "Michael",
                "content": (
                    "Well, honestly I want to save on the commission and get the most money "
                    "possible. These agent calls are driving me crazy."
                ),
            },
            {
                "role": "assistant",
                "speaker": "Olivia",
                "content": (
                    "I completely understand that. What's most important to you as you go "
                    "through this selling process?"
                ),
            },
            {
                "role": "user",
                "speaker": "Michael",
                "content": "I need to get $1.6 million for the house. That's my bottom line.",
            },
            {
                "role": "assistant",
                "speaker": "Olivia",
                "content": (
                    "That makes sense. Ideally, when would you like to have your home sold "
                    "and be moved out?"
                ),
            },
            {
                "role": "user",
                "speaker": "Michael",
                "content": (
                    "By February at the latest. I need to be in San Francisco by March for "
                    "my new job."
                ),
            },
            {
                "role": "assistant",
                "speaker": "Olivia",
                "content": "Where are you planning to go after you sell?",
            },
            {
                "role": "user",
                "speaker": "Michael",
                "content": "San Francisco. Got a great job opportunity out there.",
            },
        ]
    }


@pytest.fixture
def paulina_summary() -> str:
    return (
        "Olivia from Signature Premier Properties called Paulina Marin, a homeowner selling "
        "her property for $950,000, to understand her selling process and offer assistance. "
        "Paulina, who is looking to downsize within 3-6 months, expressed openness to working "
        "with an agent despite initially trying to sell on her own due to low foot traffic. "
        "As a result, Paulina scheduled an appointment for Rich from Signature Premier "
        "Properties to conduct a quick preview of her home on Thursday, September 18th at 12 PM."
    )
