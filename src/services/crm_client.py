"""
CRM Client.

Thin async wrapper around a LeadConnector-style contacts API: read a
contact, update its built-in fields and its custom fields, and attach a
call note. All requests go through ``_request`` so auth headers, the
API version header, logging and error translation live in one place.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

import httpx

from src.config import get_settings
from src.exceptions import CRMError
from src.logging_config import get_logger
from src.schemas.extraction import ExtractedValue
from src.services.digest import DIGEST_KEY
from src.services.field_catalog import DEFAULT_CATALOG, FieldCatalog
from src.services.field_extraction import CALL_SUMMARY_KEY, LAST_CONTACT_KEY

logger = get_logger(__name__)


class CRMClient:
    """
    Async CRM API client.

    Args:
        base_url / api_token / api_version / timeout: Override settings.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.crm_base_url,
            timeout=timeout or settings.crm_timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_token if api_token is not None else settings.crm_api_token}",
                "Version": api_version or settings.crm_api_version,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_contact(self, contact_id: str) -> dict[str, Any]:
        """Fetch a contact record by ID."""
        data = await self._request("GET", f"/contacts/{contact_id}")
        return data.get("contact", data)

    async def update_contact(self, contact_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """Write built-in contact fields (email, phone, ...)."""
        logger.info("crm_update_contact_standard", contact_id=contact_id, fields=sorted(data))
        return await self._request("PUT", f"/contacts/{contact_id}", json=dict(data))

    async def update_contact_fields(
        self,
        contact_id: str,
        fields: Mapping[str, ExtractedValue],
        catalog: FieldCatalog = DEFAULT_CATALOG,
    ) -> dict[str, Any]:
        """Write extracted values into the contact's custom fields."""
        custom_fields = build_custom_fields(fields, catalog)
        logger.info(
            "crm_update_contact",
            contact_id=contact_id,
            fields=[f["key"] for f in custom_fields],
        )
        return await self._request(
            "PUT", f"/contacts/{contact_id}", json={"customFields": custom_fields}
        )

    async def create_note(self, contact_id: str, body: str) -> dict[str, Any]:
        """Attach a note to the contact."""
        logger.info("crm_create_note", contact_id=contact_id, length=len(body))
        return await self._request("POST", f"/contacts/{contact_id}/notes", json={"body": body})

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "crm_request_failed",
                method=method,
                path=path,
                status=e.response.status_code,
                body=e.response.text[:500],
            )
            raise CRMError(
                f"{method} {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("crm_request_error", method=method, path=path, error=str(e))
            raise CRMError(f"{method} {path} failed: {e}") from e

        if not response.content:
            return {}
        return response.json()


def field_slug(name: str) -> str:
    """``"Openness to Re-list"`` -> ``"openness_to_re_list"``."""
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def build_custom_fields(
    fields: Mapping[str, ExtractedValue],
    catalog: FieldCatalog = DEFAULT_CATALOG,
) -> list[dict[str, str]]:
    """Convert a field map into the CRM's ``customFields`` payload."""
    custom_fields: list[dict[str, str]] = []
    for key, extracted in fields.items():
        name = catalog.lookup(key).display_name if key in catalog else key
        custom_fields.append({"key": field_slug(name), "field_value": extracted.value})
    return custom_fields


def render_call_note(
    fields: Mapping[str, ExtractedValue],
    call_id: str | None = None,
    duration_minutes: int | None = None,
    catalog: FieldCatalog = DEFAULT_CATALOG,
) -> str:
    """Human-readable note body summarising one call."""
    lines = ["Call Summary"]
    if call_id:
        lines.append(f"Call ID: {call_id}")
    lines.append(f"Duration: {duration_minutes if duration_minutes is not None else 'Unknown'} minutes")
    last_contact = fields.get(LAST_CONTACT_KEY)
    if last_contact:
        lines.append(f"Date: {last_contact.value}")

    extracted = [
        f"- {definition.display_name}: {fields[definition.key].value} "
        f"({fields[definition.key].confidence}%, {fields[definition.key].source.value})"
        for definition in catalog.definitions()
        if definition.key in fields
    ]
    if extracted:
        lines += ["", "Key Information Extracted:", *extracted]

    memory = fields.get(DIGEST_KEY)
    if memory:
        lines += ["", f"Voice Memory: {memory.value}"]

    summary = fields.get(CALL_SUMMARY_KEY)
    if summary and summary.value:
        lines += ["", "Summary:", summary.value]

    return "\n".join(lines)
