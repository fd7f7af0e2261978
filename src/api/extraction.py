"""
API Router: Synchronous Field Extraction.

Runs the extraction engine on a summary/transcript pair and returns
the field map directly. Used for debugging rule changes and for
integration tests; production traffic arrives through the webhook.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_extractor
from src.exceptions import ExtractionError
from src.logging_config import get_logger
from src.schemas.extraction import ExtractionResponse, ExtractRequest
from src.services.field_extraction import FieldExtractor

logger = get_logger(__name__)
router = APIRouter(prefix="/extract", tags=["Extraction"])


@router.post("", response_model=ExtractionResponse)
async def extract(
    body: ExtractRequest,
    extractor: FieldExtractor = Depends(get_extractor),
) -> ExtractionResponse:
    """Extract CRM fields from a call summary and optional transcript."""
    try:
        fields = extractor.extract(body.summary, body.transcript)
    except ExtractionError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ExtractionResponse(fields=dict(fields), total=len(fields))
