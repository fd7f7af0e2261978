"""
Call Processing Service.

Post-call pipeline for an end-of-call report: resolve and fetch the CRM
contact, extract fields, write the built-in and custom fields and attach
a call note.

Extraction failure is not fatal here: the contact still gets the raw
summary and the system fields, with no structured values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from src.exceptions import CRMError, ExtractionError
from src.logging_config import get_logger
from src.schemas.extraction import FieldMap
from src.schemas.webhook import CallInfo, ServerMessage
from src.services.contact_fields import changed_fields, standard_contact_fields
from src.services.crm_client import CRMClient, render_call_note
from src.services.field_extraction import FieldExtractor, summary_only_fields

logger = get_logger(__name__)


@dataclass
class ProcessingOutcome:
    """What happened to one call report."""
    contact_id: str
    fields: FieldMap
    extraction_failed: bool = False
    contact_updated: bool = False
    note_created: bool = False
    standard_fields: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


def extract_contact_id(call: CallInfo | None) -> str | None:
    """
    Find the CRM contact ID for a call.

    Checks the assistant override variables first (set when the call is
    started for a known contact), then the result of a ``create_contact``
    tool call made during the conversation.
    """
    if call is None:
        return None

    if call.assistant_overrides is not None:
        contact_id = call.assistant_overrides.variable_values.get("contactId")
        if contact_id:
            return str(contact_id)

    messages = call.artifact.messages if call.artifact else []
    for message in messages:
        if message.get("role") != "tool_call_result" or not message.get("result"):
            continue
        if message.get("name") != "create_contact":
            continue
        result = message["result"]
        if isinstance(result, str):
            try:
                result = json.loads(result)
            except ValueError:
                continue
        if isinstance(result, dict) and result.get("id"):
            return str(result["id"])

    return None


def call_summary(message: ServerMessage) -> str:
    """The generated call summary, wherever the report put it."""
    for analysis in (message.analysis, message.call.analysis if message.call else None):
        if analysis is not None and analysis.summary:
            return analysis.summary
    return message.summary or ""


def call_transcript(message: ServerMessage) -> Any:
    """Structured messages when the report has them, else the flat transcript."""
    artifact = message.artifact or (message.call.artifact if message.call else None)
    if artifact is not None and artifact.messages:
        return {"messages": artifact.messages}
    if message.transcript:
        return message.transcript
    if artifact is not None and artifact.transcript:
        return artifact.transcript
    if message.call is not None:
        return message.call.transcript
    return None


def call_transcript_text(message: ServerMessage) -> str:
    """The flat transcript string only, ignoring structured messages."""
    artifact = message.artifact or (message.call.artifact if message.call else None)
    for text in (
        message.transcript,
        artifact.transcript if artifact else None,
        message.call.transcript if message.call else None,
    ):
        if text:
            return text
    return ""


def call_structured_data(message: ServerMessage) -> dict[str, Any] | None:
    """The platform's structured analysis, from the report or the call."""
    for analysis in (message.analysis, message.call.analysis if message.call else None):
        if analysis is not None and analysis.structured_data:
            return analysis.structured_data
    return None


def call_duration_minutes(message: ServerMessage) -> Optional[int]:
    if message.duration_seconds is not None:
        return round(message.duration_seconds / 60)
    call = message.call
    if call is not None and call.started_at and call.ended_at:
        return round((call.ended_at - call.started_at).total_seconds() / 60)
    return None


async def process_end_of_call_report(
    message: ServerMessage,
    crm: CRMClient,
    extractor: FieldExtractor,
    contact_id: str | None = None,
) -> ProcessingOutcome:
    """
    Run extraction for one call report and push the results to the CRM.

    Raises:
        ValueError: if no contact ID can be resolved for the call.
    """
    contact_id = contact_id or extract_contact_id(message.call)
    if not contact_id:
        raise ValueError("Could not extract contact ID from call data")

    summary = call_summary(message)
    transcript = call_transcript(message)

    logger.info(
        "call_processing_started",
        contact_id=contact_id,
        customer_number=_customer_number(message.call),
        summary_length=len(summary),
        has_transcript=transcript is not None,
    )

    extraction_failed = False
    try:
        fields = extractor.extract(summary, transcript)
    except ExtractionError as e:
        logger.warning("extraction_fallback_to_summary", contact_id=contact_id, error=str(e))
        fields = summary_only_fields(summary, extractor.clock)
        extraction_failed = True

    outcome = ProcessingOutcome(
        contact_id=contact_id,
        fields=fields,
        extraction_failed=extraction_failed,
    )

    contact: dict[str, Any] = {}
    try:
        contact = await crm.get_contact(contact_id)
        logger.info(
            "crm_contact_found",
            contact_id=contact_id,
            name=f"{contact.get('firstName') or ''} {contact.get('lastName') or ''}".strip(),
        )
    except CRMError as e:
        outcome.errors.append(f"contact lookup failed: {e}")

    standard = changed_fields(
        standard_contact_fields(call_structured_data(message), call_transcript_text(message)),
        contact,
    )
    if standard:
        try:
            await crm.update_contact(contact_id, standard)
            outcome.standard_fields = standard
        except CRMError as e:
            outcome.errors.append(f"standard field update failed: {e}")

    try:
        await crm.update_contact_fields(contact_id, fields, extractor.catalog)
        outcome.contact_updated = True
    except CRMError as e:
        outcome.errors.append(f"contact update failed: {e}")

    call_id = message.call.id if message.call else None
    note = render_call_note(fields, call_id, call_duration_minutes(message), extractor.catalog)
    try:
        await crm.create_note(contact_id, note)
        outcome.note_created = True
    except CRMError as e:
        logger.warning("note_creation_failed_trying_fallback", contact_id=contact_id, error=str(e))
        outcome.errors.append(f"note failed: {e}")
        try:
            await crm.create_note(contact_id, _fallback_note(call_id, summary))
            outcome.note_created = True
        except CRMError as fallback_error:
            logger.error(
                "fallback_note_failed",
                contact_id=contact_id,
                error=str(fallback_error),
            )
            outcome.errors.append(f"fallback note failed: {fallback_error}")

    logger.info(
        "call_processed",
        contact_id=contact_id,
        total_fields=len(fields),
        extraction_failed=extraction_failed,
        contact_updated=outcome.contact_updated,
        note_created=outcome.note_created,
    )
    return outcome


def _fallback_note(call_id: str | None, summary: str) -> str:
    return "\n".join([
        "Call Summary",
        f"Call ID: {call_id or 'Unknown'}",
        "",
        summary or "No summary available",
    ])


def _customer_number(call: CallInfo | None) -> str | None:
    if call is None or call.customer is None:
        return None
    return call.customer.number
