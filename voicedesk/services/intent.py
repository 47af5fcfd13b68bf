import logging
from collections.abc import Callable
from dataclasses import dataclass

from voicedesk.schemas.intent import CommandIntent, IntentParams, IntentType
from voicedesk.services.extraction import (
    extract_cancel_params,
    extract_client_params,
    extract_date_params,
    extract_intake_params,
    extract_schedule_params,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentRule:
    action: IntentType
    triggers: tuple[str, ...]
    confidence_keywords: tuple[str, ...]
    extractor: Callable[[str], IntentParams]

    def matches(self, text: str) -> bool:
        return any(trigger in text for trigger in self.triggers)

    def confidence(self, text: str) -> float:
        found = sum(1 for keyword in self.confidence_keywords if keyword in text)
        return min(found / len(self.confidence_keywords), 1.0)


# Priority order matters: the first rule with a matching trigger wins.
INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        IntentType.SCHEDULE_APPOINTMENT,
        ("schedule", "book", "make an appointment", "set up", "arrange"),
        ("schedule", "appointment"),
        extract_schedule_params,
    ),
    IntentRule(
        IntentType.CANCEL_APPOINTMENT,
        ("cancel", "delete", "remove", "cancel appointment"),
        ("cancel",),
        extract_cancel_params,
    ),
    IntentRule(
        IntentType.RESCHEDULE_APPOINTMENT,
        ("reschedule", "move", "change", "reschedule appointment"),
        ("reschedule", "move"),
        extract_cancel_params,
    ),
    IntentRule(
        IntentType.FIND_CLIENT,
        ("find", "look up", "search for", "find client", "look for"),
        ("find", "client"),
        extract_client_params,
    ),
    IntentRule(
        IntentType.CHECK_APPOINTMENTS,
        (
            "check appointments", "show appointments", "list appointments",
            "what appointments", "appointments today", "schedule for",
        ),
        ("appointments", "schedule"),
        extract_date_params,
    ),
    IntentRule(
        IntentType.SEND_INTAKE_FORM,
        ("send form", "intake form", "send intake", "questionnaire"),
        ("intake", "form"),
        extract_intake_params,
    ),
    IntentRule(
        IntentType.CHECK_INTAKE_STATUS,
        ("check intake", "intake status", "form status", "completed form"),
        ("intake", "status"),
        extract_client_params,
    ),
    IntentRule(
        IntentType.GET_CLIENT_INFO,
        ("client info", "client information", "tell me about", "client details"),
        ("client", "info"),
        extract_client_params,
    ),
    IntentRule(
        IntentType.CHECK_AVAILABILITY,
        ("available", "availability", "free time", "open slots"),
        ("available",),
        extract_date_params,
    ),
)


def normalize(transcript: str) -> str:
    return transcript.lower().strip()


def extract_intent(transcript: str, rules: tuple[IntentRule, ...] = INTENT_RULES) -> CommandIntent:
    """Classify a transcript with the ordered rule table and pull its slots."""
    text = normalize(transcript)

    for rule in rules:
        if rule.matches(text):
            result = CommandIntent(
                action=rule.action,
                params=rule.extractor(transcript.strip()),
                confidence=rule.confidence(text),
            )
            break
    else:
        result = CommandIntent(action=IntentType.UNKNOWN, confidence=0.0)

    logger.info(
        "Intent: %s (%.2f) params=%s",
        result.action, result.confidence,
        result.params.model_dump(exclude_none=True),
    )
    return result
