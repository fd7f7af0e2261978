"""
Standard Contact Fields.

Besides the custom seller fields, an end-of-call report can update the
contact's built-in CRM fields (name, email, phone, ...). The voice
platform's structured analysis is used when present, filtered to the
fields the CRM accepts on a contact. Without it, an email address and a
US phone number are picked out of the transcript text.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

STANDARD_CONTACT_FIELDS: frozenset[str] = frozenset({
    "firstName",
    "lastName",
    "email",
    "phone",
    "companyName",
    "address1",
    "city",
    "state",
    "postalCode",
    "website",
    "timezone",
    "dnd",
    "source",
    "tags",
})

EMAIL_PATTERN = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
PHONE_PATTERN = re.compile(r"\(?(\d{3})\)?[-.\s]?(\d{3})[-.\s]?(\d{4})")


def standard_contact_fields(
    structured_data: Mapping[str, Any] | None,
    transcript_text: str | None = None,
) -> dict[str, Any]:
    """
    Build the built-in contact fields to write for one call.

    Args:
        structured_data: The platform's ``analysis.structuredData``.
            Unknown keys and empty values are dropped.
        transcript_text: Flat transcript, only read when there is no
            structured data.
    """
    if structured_data:
        return {
            key: value
            for key, value in structured_data.items()
            if key in STANDARD_CONTACT_FIELDS and value not in (None, "", [])
        }

    fields: dict[str, Any] = {}
    if not transcript_text:
        return fields

    email = EMAIL_PATTERN.search(transcript_text)
    if email:
        fields["email"] = email.group(0)

    phone = PHONE_PATTERN.search(transcript_text)
    if phone:
        fields["phone"] = "+1" + "".join(phone.groups())

    return fields


def changed_fields(update: Mapping[str, Any], contact: Mapping[str, Any]) -> dict[str, Any]:
    """Drop values the contact record already holds."""
    return {key: value for key, value in update.items() if contact.get(key) != value}
