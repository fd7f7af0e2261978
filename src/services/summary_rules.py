"""
Summary rule tables.

Each table maps a catalog field key to its rules in priority order; the
first rule that matches decides the value and its confidence. The rules
encode how the call-summary generator tends to phrase each topic, so
they are kept field by field rather than generalised.

``SUMMARY_PATTERN_RULES`` is the primary summary tier. It first looks
for the assistant's question inside the summary, then falls back to
topic keywords. ``DIRECT_FALLBACK_RULES`` is the coarser tier for
whatever is still unresolved: looser keyword combinations, no question
context.

The same "frustrated by agent calls" evidence feeds both
``disappointments`` and ``concerns`` at different confidences.
"""

from __future__ import annotations

from src.services.summary_extractor import KeywordRule, PhrasingRule, RegexRule, RuleTable

MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)
_MONTH_ALTERNATION = "|".join(MONTHS)

# "$950,000", "$1.6 million", "$800k", "1.2 million"
CURRENCY_AMOUNT = (
    r"\$\s?\d+(?:,\d{3})*(?:\.\d+)?(?:\s*(?:million|mil|m|k)\b)?"
    r"|\b\d+(?:\.\d+)?\s*(?:million|mil)\b"
)

_FRUSTRATED_BY_AGENTS = (("frustrated by agent calls",), ("frustrated", "agent"))
_OPEN_TO_AGENT = ("open to working with an agent", "would work with an agent")


SUMMARY_PATTERN_RULES: RuleTable = {
    "motivation": (
        PhrasingRule(confidence=90),
        KeywordRule("Save commission, get the most money", 85, (("commission", "money"),)),
        KeywordRule("Save commission", 90, (("save commission",), ("saving commission",))),
        KeywordRule("Relocation", 85, (("to move to",), ("relocating",))),
    ),
    "expectations": (
        PhrasingRule(confidence=90),
        RegexRule(CURRENCY_AMOUNT, 90, group=0),
        KeywordRule("Get the most money", 80, (("get the most money",), ("maximize",))),
    ),
    "disappointments": (
        PhrasingRule(confidence=90),
        KeywordRule("Frustrated by agent calls", 95, _FRUSTRATED_BY_AGENTS),
        KeywordRule("Agent calls", 85, (("agent calls",),)),
        KeywordRule("Low foot traffic", 90, (("low foot traffic",),)),
    ),
    "concerns": (
        PhrasingRule(confidence=90),
        KeywordRule("Agent calls", 90, _FRUSTRATED_BY_AGENTS),
        KeywordRule("Getting it done in timely manner", 90, (("timely manner",), ("getting it done",))),
    ),
    "nextDestination": (
        PhrasingRule(confidence=90),
        RegexRule(r"(?:moving to|relocating to|going to)\s+([A-Za-z\s]+)(?:[,.]|$)", 90),
    ),
    "timeline": (
        PhrasingRule(confidence=90),
        RegexRule(rf"\b({_MONTH_ALTERNATION})\b", 95, transform=str.capitalize),
        KeywordRule("ASAP", 90, (("asap",), ("as soon as possible",))),
        RegexRule(
            r"\bwithin\s+(\d+(?:\s*(?:-|to)\s*\d+)?\s+(?:days?|weeks?|months?|years?))\b",
            85,
            template="Within {}",
        ),
    ),
    "askingPrice": (
        PhrasingRule(confidence=90),
        RegexRule(
            r"(?:(?:selling|sell|list|listing|listed)\s+(?:(?:her|his|their|the|a|my)\s+)?"
            r"(?:property|home|house|it)\s+(?:for|at)|asking(?:\s+price\s+of)?)\s+"
            rf"({CURRENCY_AMOUNT})",
            90,
        ),
        RegexRule(CURRENCY_AMOUNT, 80, group=0),
    ),
    "opennessToRelist": (
        PhrasingRule(confidence=90),
        KeywordRule(
            "Yes, if buyer pays commission",
            95,
            tuple((phrase, "buyer pays", "commission") for phrase in _OPEN_TO_AGENT),
        ),
        KeywordRule("Yes", 80, tuple((phrase,) for phrase in _OPEN_TO_AGENT)),
        KeywordRule("Yes, open to agent", 85, (("openness to working with an agent",),)),
    ),
}


DIRECT_FALLBACK_RULES: RuleTable = {
    "motivation": (
        KeywordRule("Save commission, get the most money", 85, (("commission", "money"),)),
        KeywordRule("Save commission", 90, (("save commission",), ("saving commission",))),
        KeywordRule("Relocation", 85, (("to move to",),)),
        KeywordRule("Get the most money", 85, (("get the most money",), ("maximize", "money"))),
    ),
    "expectations": (
        RegexRule(r"\$?(\d[\d,]*(?:\.\d+)?)\s*(?:million|mil|m)\b", 90, template="${}M"),
        KeywordRule("Get the most money possible", 85, (("most money",),)),
    ),
    "disappointments": (
        KeywordRule("Frustrated by agent calls", 95, _FRUSTRATED_BY_AGENTS),
        KeywordRule("Quality of buyers", 90, (("concerns about buyer quality",),)),
        KeywordRule("Agent calls", 85, (("agent calls",),)),
    ),
    "concerns": (
        KeywordRule("Buyer quality", 90, (("concerns about buyer quality",),)),
        KeywordRule("Agent calls", 90, _FRUSTRATED_BY_AGENTS),
    ),
    "nextDestination": (
        RegexRule(r"(?:to move to|moving to)\s+([A-Za-z\s]+?)(?:,|\.|$)", 90),
    ),
    "timeline": (
        RegexRule(rf"\bby\s+({_MONTH_ALTERNATION})\b", 90, transform=str.capitalize),
        KeywordRule("Year-end", 90, (("year-end",), ("year end",))),
    ),
    "askingPrice": (
        RegexRule(CURRENCY_AMOUNT, 85, group=0),
    ),
    "opennessToRelist": (
        KeywordRule("Yes, if buyer pays commission", 90, (("open to", "agent", "buyer", "commission"),)),
        KeywordRule("Yes, open to agent", 85, (("open to working with", "agent"),)),
    ),
}
