"""
Data models for voice-platform webhook payloads.

Only the parts of the end-of-call report this service reads are
modelled; everything else is accepted and ignored.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

END_OF_CALL_REPORT = "end-of-call-report"


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CallAnalysis(_Lenient):
    summary: Optional[str] = None
    structured_data: Optional[dict[str, Any]] = Field(default=None, alias="structuredData")


class CallArtifact(_Lenient):
    messages: list[dict[str, Any]] = Field(default_factory=list)
    transcript: Optional[str] = None


class Customer(_Lenient):
    number: Optional[str] = None
    name: Optional[str] = None


class AssistantOverrides(_Lenient):
    variable_values: dict[str, Any] = Field(default_factory=dict, alias="variableValues")


class CallInfo(_Lenient):
    id: Optional[str] = None
    customer: Optional[Customer] = None
    assistant_overrides: Optional[AssistantOverrides] = Field(default=None, alias="assistantOverrides")
    artifact: Optional[CallArtifact] = None
    analysis: Optional[CallAnalysis] = None
    transcript: Optional[str] = None
    started_at: Optional[datetime] = Field(default=None, alias="startedAt")
    ended_at: Optional[datetime] = Field(default=None, alias="endedAt")


class ServerMessage(_Lenient):
    type: str = ""
    call: Optional[CallInfo] = None
    analysis: Optional[CallAnalysis] = None
    artifact: Optional[CallArtifact] = None
    transcript: Optional[str] = None
    summary: Optional[str] = None
    duration_seconds: Optional[float] = Field(default=None, alias="durationSeconds")

    @property
    def is_end_of_call_report(self) -> bool:
        return self.type == END_OF_CALL_REPORT


class WebhookPayload(_Lenient):
    message: ServerMessage = Field(default_factory=ServerMessage)
