"""Directory workflows behind each voice command.

Every public coroutine returns exactly one VoiceResponse. Lookups that come
back empty or ambiguous turn into a question for the caller, and anything
the directory raises is logged and turned into an apology (with the transfer
number when one is configured) instead of propagating.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Any

from voicedesk.schemas.directory import (
    Appointment,
    AppointmentStatus,
    Client,
    CreateAppointmentRequest,
    Practitioner,
    QuestionnaireTemplate,
    SendQuestionnaireRequest,
    Service,
)
from voicedesk.schemas.voice import FailureKind, VoiceConfig, VoiceResponse
from voicedesk.services.datetimes import (
    business_hours_text,
    is_business_hours,
    resolve_date,
    resolve_date_time,
)
from voicedesk.services.directory import Directory
from voicedesk.services.speech import (
    format_date_for_speech,
    format_day_for_speech,
    format_phone_for_speech,
    format_time_for_speech,
    join_for_speech,
)

logger = logging.getLogger(__name__)

DISAMBIGUATION_LIMIT = 3
SCHEDULE_LISTING_LIMIT = 5
NEXT_APPOINTMENT_LOOKAHEAD = timedelta(days=30)


class VoiceAssistant:
    def __init__(
        self,
        directory: Directory,
        config: VoiceConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.directory = directory
        self.config = config or VoiceConfig()
        self._clock = clock

    def reconfigure(self, **changes: Any) -> "VoiceAssistant":
        """Return a new assistant with an updated configuration; this one is left untouched."""
        return VoiceAssistant(self.directory, self.config.model_copy(update=changes), self._clock)

    def failure(
        self,
        message: str,
        kind: FailureKind,
        transfer: bool = False,
        **data: Any,
    ) -> VoiceResponse:
        return VoiceResponse(
            message=message,
            success=False,
            transfer_number=self.config.transfer_number if transfer else None,
            data={"failure": kind.value, **data},
        )

    # Clients

    async def find_client_by_name(self, name: str) -> VoiceResponse:
        try:
            clients = await self.directory.search_clients(name)

            if not clients:
                return self.failure(
                    f"I couldn't find any clients named {name}. "
                    "Could you please spell the name or provide their email address?",
                    FailureKind.NOT_FOUND,
                    matches=[],
                )

            if len(clients) > 1:
                names = join_for_speech((c.name for c in clients), DISAMBIGUATION_LIMIT)
                return self.failure(
                    f"I found {len(clients)} clients with that name: {names}. "
                    "Could you be more specific or provide their email address?",
                    FailureKind.AMBIGUOUS_MATCH,
                    matches=[c.model_dump() for c in clients],
                )

            return await self._describe_client(clients[0], f"Found {clients[0].name}.")
        except Exception:
            logger.exception("Client search failed for %r", name)
            return self.failure(
                "I'm sorry, I encountered an error while searching for that client. Please try again.",
                FailureKind.COLLABORATOR_FAILURE,
                transfer=True,
            )

    async def find_client_by_email(self, email: str) -> VoiceResponse:
        try:
            client = await self.directory.get_client_by_email(email)
            if client is None:
                return self.failure(
                    f"I couldn't find a client with email {email}. "
                    "Would you like me to create a new client record?",
                    FailureKind.NOT_FOUND,
                )
            return await self._describe_client(client, f"Found {client.name} with email {email}.")
        except Exception:
            logger.exception("Client lookup failed for %s", email)
            return self.failure(
                "I'm sorry, I encountered an error while looking up that email address. Please try again.",
                FailureKind.COLLABORATOR_FAILURE,
                transfer=True,
            )

    async def _describe_client(self, client: Client, opening: str) -> VoiceResponse:
        parts = [opening]
        if client.email and client.email not in opening:
            parts.append(f"Their email is {client.email}.")
        if client.phone:
            parts.append(f"Their phone number is {format_phone_for_speech(client.phone)}.")

        next_appointment = await self._next_client_appointment(client.client_id)
        if next_appointment:
            parts.append(f"Their next appointment is {format_date_for_speech(next_appointment.starts_at)}.")

        return VoiceResponse(
            message=" ".join(parts),
            success=True,
            data={
                "client": client.model_dump(),
                "next_appointment": next_appointment.model_dump() if next_appointment else None,
            },
        )

    async def _next_client_appointment(self, client_id: int) -> Appointment | None:
        """Soonest confirmed appointment for the client within the lookahead window."""
        now = self._clock()
        try:
            appointments = await self.directory.list_appointments(
                now.date(), (now + NEXT_APPOINTMENT_LOOKAHEAD).date()
            )
        except Exception:
            logger.warning("Could not load upcoming appointments for client %s", client_id, exc_info=True)
            return None

        now_ms = now.timestamp() * 1000
        upcoming = [
            apt for apt in appointments
            if apt.client_id == client_id
            and apt.status == AppointmentStatus.CONFIRMED
            and apt.start_date >= now_ms
        ]
        return min(upcoming, key=lambda apt: apt.start_date, default=None)

    # Appointments

    async def schedule_appointment(
        self,
        client_name: str,
        date_time: str,
        service_name: str | None = None,
        practitioner_name: str | None = None,
    ) -> VoiceResponse:
        try:
            clients = await self.directory.search_clients(client_name)

            if not clients:
                return self.failure(
                    f"I couldn't find a client named {client_name}. "
                    "Would you like me to create a new client record first?",
                    FailureKind.NOT_FOUND,
                    matches=[],
                )

            if len(clients) > 1:
                names = join_for_speech((c.name for c in clients), DISAMBIGUATION_LIMIT)
                return self.failure(
                    f"I found multiple clients: {names}. Could you be more specific or provide their email?",
                    FailureKind.AMBIGUOUS_MATCH,
                    matches=[c.model_dump() for c in clients],
                )

            client = clients[0]

            now = self._clock()
            when = resolve_date_time(date_time, now)
            if when is None:
                return self.failure(
                    "I couldn't understand that date and time. Could you please say it in a format like "
                    "'tomorrow at 3 PM' or 'December 15th at 10:30 AM'?",
                    FailureKind.VALIDATION_GAP,
                )

            if when < now:
                return self.failure(
                    f"{format_date_for_speech(when)} has already passed. "
                    "When would you like to schedule the appointment instead?",
                    FailureKind.VALIDATION_GAP,
                    requested=when.isoformat(),
                )

            if not is_business_hours(when, self.config.business_hours):
                return self.failure(
                    "That time is outside our business hours. "
                    f"We're open {business_hours_text(self.config.business_hours)}. "
                    "Please choose a different time.",
                    FailureKind.OUT_OF_POLICY,
                    requested=when.isoformat(),
                )

            settings = await self.directory.get_scheduling_settings()

            practitioner = self._pick_practitioner(settings.practitioners, practitioner_name)
            if practitioner is None:
                return self.failure(
                    "I couldn't find an available practitioner. Please contact our office directly.",
                    FailureKind.NOT_FOUND,
                    transfer=True,
                )

            service = self._pick_service(settings.services, service_name)
            if service is None:
                return self.failure(
                    "I couldn't find that service. Let me transfer you to someone who can help "
                    "schedule that appointment.",
                    FailureKind.NOT_FOUND,
                    transfer=True,
                )

            location_id = self.config.default_location_id
            if location_id is None and settings.locations:
                location_id = settings.locations[0].id

            appointment = await self.directory.create_appointment(
                CreateAppointmentRequest(
                    client_id=client.client_id,
                    practitioner_id=practitioner.id,
                    service_id=service.id,
                    location_id=location_id,
                    utc_date_time=int(when.timestamp()),
                    status=AppointmentStatus.WAITING_CONFIRMATION,
                    send_client_email_notification=True,
                    reminder_type="Email",
                )
            )
        except Exception:
            logger.exception("Scheduling failed for %r at %r", client_name, date_time)
            return self.failure(
                "I'm sorry, I couldn't schedule that appointment. Let me transfer you to someone who can help.",
                FailureKind.COLLABORATOR_FAILURE,
                transfer=True,
            )

        message = (
            f"Great! I've scheduled {client.name} for {service.name} with "
            f"{practitioner.complete_name} on {format_date_for_speech(when)}."
        )
        if client.email:
            message += f" A confirmation email will be sent to {client.email}."

        return VoiceResponse(
            message=message,
            success=True,
            data={
                "appointment": appointment.model_dump(),
                "client": client.model_dump(),
                "practitioner": practitioner.model_dump(),
                "service": service.model_dump(),
            },
        )

    def _pick_practitioner(self, practitioners: list[Practitioner], name: str | None) -> Practitioner | None:
        if name:
            wanted = name.lower()
            return next(
                (
                    p for p in practitioners
                    if wanted in p.complete_name.lower() or (p.email or "").lower() == wanted
                ),
                None,
            )
        return self._default_practitioner(practitioners)

    def _default_practitioner(self, practitioners: list[Practitioner]) -> Practitioner | None:
        default_email = self.config.default_practitioner_email
        if default_email:
            return next(
                (p for p in practitioners if (p.email or "").lower() == default_email.lower()),
                None,
            )
        return practitioners[0] if practitioners else None

    def _pick_service(self, services: list[Service], name: str | None) -> Service | None:
        if name:
            wanted = name.lower()
            return next((s for s in services if wanted in s.name.lower()), None)
        if self.config.default_service_id:
            return next((s for s in services if s.id == self.config.default_service_id), None)
        return services[0] if services else None

    async def get_upcoming_appointments(self, date_phrase: str | None = None) -> VoiceResponse:
        """Confirmed appointments for one day (today unless a day is given)."""
        now = self._clock()
        day = resolve_date(date_phrase, now) if date_phrase else now.date()
        if day is None:
            return self.failure(
                "I couldn't tell which day you meant. Could you say it like 'today', 'Friday' or 'December 15th'?",
                FailureKind.VALIDATION_GAP,
            )

        try:
            appointments = await self.directory.list_appointments(day, day, status=AppointmentStatus.CONFIRMED)
        except Exception:
            logger.exception("Could not list appointments for %s", day)
            return self.failure(
                "I'm sorry, I couldn't retrieve the appointment schedule right now. Please try again.",
                FailureKind.COLLABORATOR_FAILURE,
                transfer=True,
            )

        day_text = self._describe_day(day, now)
        if not appointments:
            return VoiceResponse(
                message=f"There are no confirmed appointments scheduled for {day_text}.",
                success=True,
                data={"appointments": []},
            )

        ordered = sorted(appointments, key=lambda apt: apt.start_date)
        entries = (
            f"{format_time_for_speech(apt.starts_at)} - {apt.client_name} with {apt.practitioner_name}"
            for apt in ordered
        )
        return VoiceResponse(
            message=f"Here are the confirmed appointments for {day_text}: "
            f"{join_for_speech(entries, SCHEDULE_LISTING_LIMIT)}",
            success=True,
            data={"appointments": [apt.model_dump() for apt in ordered]},
        )

    @staticmethod
    def _describe_day(day: date, now: datetime) -> str:
        if day == now.date():
            return "today"
        if day == now.date() + timedelta(days=1):
            return "tomorrow"
        return format_day_for_speech(day)

    async def cancel_appointment(self, appointment_id: str, reason: str | None = None) -> VoiceResponse:
        try:
            appointment = await self.directory.get_appointment(appointment_id)
            if appointment is None:
                return self.failure(
                    f"I couldn't find appointment {appointment_id}. Could you check the appointment ID?",
                    FailureKind.NOT_FOUND,
                )

            await self.directory.cancel_appointment(appointment_id, reason)
        except Exception:
            logger.exception("Cancel failed for appointment %s", appointment_id)
            return self.failure(
                "I'm sorry, I couldn't cancel that appointment. Please try again or contact our office directly.",
                FailureKind.COLLABORATOR_FAILURE,
                transfer=True,
            )

        return VoiceResponse(
            message=f"I've canceled the appointment for {appointment.client_name} on "
            f"{format_date_for_speech(appointment.starts_at)}. The client will be notified.",
            success=True,
            data={"appointment": appointment.model_dump()},
        )

    # Intake forms

    async def send_intake_form(self, client_email: str, questionnaire_name: str | None = None) -> VoiceResponse:
        try:
            client = await self.directory.get_client_by_email(client_email)
            if client is None:
                return self.failure(
                    f"I couldn't find a client with email {client_email}. Please check the email address.",
                    FailureKind.NOT_FOUND,
                )

            questionnaires = await self.directory.list_questionnaire_templates()
            if not questionnaires:
                return self.failure(
                    "There are no intake forms available to send. Please contact our office.",
                    FailureKind.NOT_FOUND,
                    transfer=True,
                )

            questionnaire = self._pick_questionnaire(questionnaires, questionnaire_name)
            if questionnaire is None:
                names = join_for_speech((q.name for q in questionnaires), DISAMBIGUATION_LIMIT)
                return self.failure(
                    f"I couldn't find that intake form. Available forms include: {names}",
                    FailureKind.NOT_FOUND,
                    available=[q.name for q in questionnaires],
                )

            practitioners = await self.directory.list_questionnaire_practitioners()
            practitioner = self._default_practitioner(practitioners)
            if practitioner is None:
                return self.failure(
                    "I couldn't find an available practitioner. Please contact our office.",
                    FailureKind.NOT_FOUND,
                    transfer=True,
                )

            intake = await self.directory.send_questionnaire(
                SendQuestionnaireRequest(
                    client_id=client.client_id,
                    questionnaire_id=questionnaire.id,
                    practitioner_id=practitioner.id,
                )
            )
        except Exception:
            logger.exception("Sending intake form to %s failed", client_email)
            return self.failure(
                "I'm sorry, I couldn't send the intake form. Please try again or contact our office.",
                FailureKind.COLLABORATOR_FAILURE,
                transfer=True,
            )

        return VoiceResponse(
            message=f"I've sent the {questionnaire.name} intake form to {client.name} at {client_email}. "
            "They'll receive an email with instructions to complete it.",
            success=True,
            data={
                "intake": intake.model_dump(),
                "client": client.model_dump(),
                "questionnaire": questionnaire.model_dump(),
            },
        )

    @staticmethod
    def _pick_questionnaire(
        questionnaires: list[QuestionnaireTemplate], name: str | None
    ) -> QuestionnaireTemplate | None:
        if not name:
            return questionnaires[0]
        wanted = name.lower()
        return next((q for q in questionnaires if wanted in q.name.lower()), None)
