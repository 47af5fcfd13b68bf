from enum import StrEnum

from pydantic import BaseModel, Field


class IntentType(StrEnum):
    SCHEDULE_APPOINTMENT = "SCHEDULE_APPOINTMENT"
    CANCEL_APPOINTMENT = "CANCEL_APPOINTMENT"
    RESCHEDULE_APPOINTMENT = "RESCHEDULE_APPOINTMENT"
    FIND_CLIENT = "FIND_CLIENT"
    CHECK_APPOINTMENTS = "CHECK_APPOINTMENTS"
    SEND_INTAKE_FORM = "SEND_INTAKE_FORM"
    CHECK_INTAKE_STATUS = "CHECK_INTAKE_STATUS"
    GET_CLIENT_INFO = "GET_CLIENT_INFO"
    CHECK_AVAILABILITY = "CHECK_AVAILABILITY"
    UNKNOWN = "UNKNOWN"


class IntentParams(BaseModel):
    client_name: str | None = None
    client_email: str | None = None
    appointment_id: str | None = None
    date_time: str | None = None
    date: str | None = None
    service_name: str | None = None
    practitioner_name: str | None = None


class CommandIntent(BaseModel):
    action: IntentType
    params: IntentParams = Field(default_factory=IntentParams)
    confidence: float = Field(ge=0.0, le=1.0)
