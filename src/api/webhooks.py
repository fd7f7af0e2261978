"""
API Router: Voice Platform Webhooks.

Receives end-of-call reports, acknowledges them immediately and runs
field extraction + CRM updates in the background.
"""

from __future__ import annotations

import hmac
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.dependencies import get_crm_client, get_extractor
from src.config import get_settings
from src.logging_config import bind_call_context, get_logger
from src.schemas.webhook import ServerMessage, WebhookPayload
from src.services.call_processing import extract_contact_id, process_end_of_call_report
from src.services.crm_client import CRMClient
from src.services.field_extraction import FieldExtractor

logger = get_logger(__name__)
router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


def verify_webhook_secret(x_vapi_secret: str | None = Header(default=None)) -> None:
    """Reject requests without the shared secret, when one is configured."""
    expected = get_settings().webhook_secret
    if not expected:
        return
    if not x_vapi_secret or not hmac.compare_digest(x_vapi_secret, expected):
        logger.warning("webhook_secret_mismatch")
        raise HTTPException(status_code=401, detail="Invalid webhook secret")


@router.post("/vapi", status_code=202, dependencies=[Depends(verify_webhook_secret)])
async def receive_call_report(
    request: Request,
    background_tasks: BackgroundTasks,
    crm: CRMClient = Depends(get_crm_client),
    extractor: FieldExtractor = Depends(get_extractor),
) -> Any:
    """Accept an end-of-call report and queue it for processing."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON in request body")

    try:
        payload = WebhookPayload.model_validate(body)
    except ValidationError as e:
        logger.warning("webhook_payload_invalid", error=str(e))
        raise HTTPException(status_code=400, detail="Malformed webhook payload")

    message = payload.message
    if not message.is_end_of_call_report:
        logger.info("webhook_ignored", message_type=message.type)
        return JSONResponse(
            status_code=200,
            content={"status": "ignored", "message_type": message.type},
        )

    if message.call is None:
        raise HTTPException(status_code=400, detail="No call data found")

    contact_id = extract_contact_id(message.call)
    if not contact_id:
        logger.error("contact_id_missing", call_id=message.call.id)
        raise HTTPException(status_code=400, detail="Could not extract contact ID")

    background_tasks.add_task(_process_in_background, message, contact_id, crm, extractor)
    logger.info("call_report_accepted", call_id=message.call.id, contact_id=contact_id)

    return {"status": "accepted", "contact_id": contact_id, "call_id": message.call.id}


async def _process_in_background(
    message: ServerMessage,
    contact_id: str,
    crm: CRMClient,
    extractor: FieldExtractor,
) -> None:
    call_id = message.call.id if message.call else None
    with bind_call_context(call_id, contact_id):
        try:
            await process_end_of_call_report(message, crm, extractor, contact_id=contact_id)
        except Exception as e:
            logger.error("call_processing_error", error=str(e), error_type=type(e).__name__)
