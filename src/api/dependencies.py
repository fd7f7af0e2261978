"""
Shared API dependencies.

The extractor and CRM client are created on first use and reused for
every request; tests replace them via ``app.dependency_overrides``.
"""

from __future__ import annotations

from src.services.crm_client import CRMClient
from src.services.field_extraction import FieldExtractor

_extractor: FieldExtractor | None = None
_crm_client: CRMClient | None = None


def get_extractor() -> FieldExtractor:
    global _extractor
    if _extractor is None:
        _extractor = FieldExtractor()
    return _extractor


def get_crm_client() -> CRMClient:
    global _crm_client
    if _crm_client is None:
        _crm_client = CRMClient()
    return _crm_client


async def close_clients() -> None:
    """Release the shared CRM connection pool on shutdown."""
    global _crm_client
    if _crm_client is not None:
        await _crm_client.aclose()
        _crm_client = None
