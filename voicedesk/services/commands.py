import logging
import re
from typing import Any

from voicedesk.schemas.intent import CommandIntent, IntentType
from voicedesk.schemas.voice import FailureKind, VoiceResponse
from voicedesk.services.intent import extract_intent
from voicedesk.services.workflows import VoiceAssistant

logger = logging.getLogger(__name__)

_GREETING_RE = re.compile(r"\b(?:hello|hi|hey|good morning|good afternoon)\b")
_HELP_RE = re.compile(r"\b(?:help|what can you do|how do you work)\b")

GREETING_MESSAGE = (
    "Hello! I'm here to help with scheduling appointments, finding client information, "
    "and sending intake forms. How can I assist you today?"
)
HELP_MESSAGE = (
    "I can help you schedule appointments, find client information, check today's schedule, "
    "send intake forms, and cancel appointments. What would you like to do?"
)
FALLBACK_MESSAGE = (
    "I'm not sure how to help with that. I can schedule appointments, find clients, "
    "check schedules, or send intake forms. What would you like me to do?"
)
TROUBLE_MESSAGE = (
    "I'm sorry, I'm having trouble processing your request right now. "
    "Let me transfer you to someone who can help."
)


class CommandProcessor:
    """Turns a transcript into exactly one VoiceResponse."""

    def __init__(self, assistant: VoiceAssistant):
        self.assistant = assistant
        self._handlers = {
            IntentType.SCHEDULE_APPOINTMENT: self._schedule_appointment,
            IntentType.CANCEL_APPOINTMENT: self._cancel_appointment,
            IntentType.RESCHEDULE_APPOINTMENT: self._reschedule_appointment,
            IntentType.FIND_CLIENT: self._find_client,
            IntentType.CHECK_APPOINTMENTS: self._check_appointments,
            IntentType.SEND_INTAKE_FORM: self._send_intake_form,
            IntentType.CHECK_INTAKE_STATUS: self._check_intake_status,
            IntentType.GET_CLIENT_INFO: self._get_client_info,
            IntentType.CHECK_AVAILABILITY: self._check_availability,
        }

    def reconfigure(self, **changes: Any) -> "CommandProcessor":
        return CommandProcessor(self.assistant.reconfigure(**changes))

    async def process_command(self, transcript: str) -> VoiceResponse:
        try:
            intent = extract_intent(transcript)
            handler = self._handlers.get(intent.action)
            if handler is None:
                return self._unknown_command(transcript)
            return await handler(intent)
        except Exception:
            logger.exception("Failed to process command %r", transcript)
            return self.assistant.failure(TROUBLE_MESSAGE, FailureKind.COLLABORATOR_FAILURE, transfer=True)

    def _ask(self, message: str) -> VoiceResponse:
        return self.assistant.failure(message, FailureKind.VALIDATION_GAP)

    def _transfer(self, message: str) -> VoiceResponse:
        return self.assistant.failure(message, FailureKind.OUT_OF_POLICY, transfer=True)

    async def _schedule_appointment(self, intent: CommandIntent) -> VoiceResponse:
        params = intent.params
        if not params.client_name:
            return self._ask("I'd be happy to schedule an appointment. What's the client's name?")
        if not params.date_time:
            return self._ask(f"When would you like to schedule the appointment for {params.client_name}?")
        return await self.assistant.schedule_appointment(
            params.client_name, params.date_time, params.service_name, params.practitioner_name
        )

    async def _cancel_appointment(self, intent: CommandIntent) -> VoiceResponse:
        params = intent.params
        if params.appointment_id:
            return await self.assistant.cancel_appointment(params.appointment_id)

        if not params.client_name and not params.date_time:
            return self._ask(
                "Which appointment would you like to cancel? "
                "Please provide the client name or appointment details."
            )

        return self._transfer(
            "I need more specific information to cancel that appointment. Could you provide the "
            "appointment ID, or would you like me to transfer you to our scheduling team?"
        )

    async def _reschedule_appointment(self, intent: CommandIntent) -> VoiceResponse:
        return self._transfer(
            "I can help you reschedule an appointment. Let me transfer you to our scheduling team "
            "who can find the best available time."
        )

    async def _lookup_client(self, intent: CommandIntent, prompt: str) -> VoiceResponse:
        params = intent.params
        if params.client_email:
            return await self.assistant.find_client_by_email(params.client_email)
        if params.client_name:
            return await self.assistant.find_client_by_name(params.client_name)
        return self._ask(prompt)

    async def _find_client(self, intent: CommandIntent) -> VoiceResponse:
        return await self._lookup_client(
            intent, "I'd be happy to find a client for you. What's their name or email address?"
        )

    async def _get_client_info(self, intent: CommandIntent) -> VoiceResponse:
        return await self._lookup_client(
            intent, "Which client would you like information about? Please provide their name or email address."
        )

    async def _check_appointments(self, intent: CommandIntent) -> VoiceResponse:
        return await self.assistant.get_upcoming_appointments(intent.params.date)

    async def _send_intake_form(self, intent: CommandIntent) -> VoiceResponse:
        params = intent.params
        if not params.client_email:
            return self._ask("I'd be happy to send an intake form. What's the client's email address?")
        return await self.assistant.send_intake_form(params.client_email, params.service_name)

    async def _check_intake_status(self, intent: CommandIntent) -> VoiceResponse:
        return self._transfer(
            "I can help you check intake form status. Let me transfer you to someone who can look that up for you."
        )

    async def _check_availability(self, intent: CommandIntent) -> VoiceResponse:
        return self._transfer(
            "I can help you check availability. Let me transfer you to our scheduling team "
            "who can see all available time slots."
        )

    def _unknown_command(self, transcript: str) -> VoiceResponse:
        text = transcript.lower()
        if _GREETING_RE.search(text):
            return VoiceResponse(message=GREETING_MESSAGE, success=True)
        if _HELP_RE.search(text):
            return VoiceResponse(message=HELP_MESSAGE, success=True)
        return VoiceResponse(message=FALLBACK_MESSAGE, success=False)
