"""Client/appointment directory records, mapped from IntakeQ's PascalCase JSON."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class AppointmentStatus(StrEnum):
    CONFIRMED = "Confirmed"
    WAITING_CONFIRMATION = "WaitingConfirmation"
    CANCELED = "Canceled"
    DECLINED = "Declined"
    MISSED = "Missed"


class DirectoryRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class Client(DirectoryRecord):
    client_id: int
    name: str
    email: str | None = None
    phone: str | None = None


class Appointment(DirectoryRecord):
    id: str
    client_id: int | None = None
    client_name: str = ""
    client_email: str | None = None
    practitioner_name: str = ""
    practitioner_email: str | None = None
    service_name: str | None = None
    status: str | None = None
    start_date: int = Field(description="Start time in epoch milliseconds")
    start_date_iso: str | None = None

    @property
    def starts_at(self) -> datetime:
        return datetime.fromtimestamp(self.start_date / 1000)


class Practitioner(DirectoryRecord):
    id: str
    complete_name: str = ""
    email: str | None = None


class Service(DirectoryRecord):
    id: str
    name: str
    duration: int | None = None


class Location(DirectoryRecord):
    id: str
    name: str = ""


class SchedulingSettings(DirectoryRecord):
    practitioners: list[Practitioner] = Field(default_factory=list)
    services: list[Service] = Field(default_factory=list)
    locations: list[Location] = Field(default_factory=list)


class QuestionnaireTemplate(DirectoryRecord):
    id: str
    name: str


class CreateAppointmentRequest(DirectoryRecord):
    client_id: int
    practitioner_id: str
    service_id: str
    location_id: str | None = None
    utc_date_time: int = Field(description="Start time in epoch seconds")
    status: AppointmentStatus = AppointmentStatus.WAITING_CONFIRMATION
    send_client_email_notification: bool = True
    reminder_type: str = "Email"


class SendQuestionnaireRequest(DirectoryRecord):
    client_id: int
    questionnaire_id: str
    practitioner_id: str


class Intake(DirectoryRecord):
    id: str
    client_name: str | None = None
    client_email: str | None = None
    questionnaire_name: str | None = None
    status: str | None = None
