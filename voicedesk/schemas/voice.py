"""Voice response and configuration schemas shared by the engine and the webhook."""

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HHMM_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class FailureKind(StrEnum):
    VALIDATION_GAP = "validation_gap"
    AMBIGUOUS_MATCH = "ambiguous_match"
    NOT_FOUND = "not_found"
    OUT_OF_POLICY = "out_of_policy"
    COLLABORATOR_FAILURE = "collaborator_failure"


class VoiceResponse(BaseModel):
    message: str = Field(min_length=1)
    success: bool = False
    end_call: bool = False
    transfer_number: str | None = None
    data: dict[str, Any] | None = None


class BusinessHours(BaseModel):
    """Scheduling window. Days use 0 = Sunday through 6 = Saturday."""

    model_config = ConfigDict(frozen=True)

    start: str = "09:00"
    end: str = "17:00"
    days: frozenset[int] = frozenset({1, 2, 3, 4, 5})

    @field_validator("start", "end")
    @classmethod
    def _check_clock(cls, value: str) -> str:
        if not _HHMM_RE.match(value):
            raise ValueError(f"expected HH:MM, got {value!r}")
        return value

    @field_validator("days")
    @classmethod
    def _check_days(cls, value: frozenset[int]) -> frozenset[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("weekday numbers must be between 0 and 6")
        return value

    @property
    def start_minutes(self) -> int:
        hours, minutes = self.start.split(":")
        return int(hours) * 60 + int(minutes)

    @property
    def end_minutes(self) -> int:
        hours, minutes = self.end.split(":")
        return int(hours) * 60 + int(minutes)


class VoiceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    business_hours: BusinessHours = Field(default_factory=BusinessHours)
    default_practitioner_email: str | None = None
    default_service_id: str | None = None
    default_location_id: str | None = None
    transfer_number: str | None = None


class BlandWebhookRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transcript: str | None = None
    call_id: str | None = None
    from_number: str | None = Field(default=None, alias="from")
    to_number: str | None = Field(default=None, alias="to")
    metadata: dict[str, Any] | None = None


class BlandWebhookResponse(BaseModel):
    message: str
    end_call: bool = False
    transfer_number: str | None = None
    data: dict[str, Any] | None = None


class CommandTestRequest(BaseModel):
    transcript: str | None = None
