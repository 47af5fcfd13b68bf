"""Slot extraction from voice transcripts.

Every slot is pulled by an ordered list of templates and the first template
that yields a value wins. Extractors run on the original-case transcript so
that names can be recognized by their capitalization; a slot nobody found
evidence for stays None.
"""

import re

from voicedesk.schemas.intent import IntentParams

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_MONTHS = (
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
)

_WEEKDAY = "(?:" + "|".join(_WEEKDAYS) + ")"
_MONTH = "(?:" + "|".join(sorted(_MONTHS, key=len, reverse=True)) + ")"
_TIME_12 = r"\d{1,2}(?::[0-5]\d)?\s*[ap]\.?m\b\.?"
_TIME_ANY = rf"(?:{_TIME_12}|(?:[01]?\d|2[0-3]):[0-5]\d\b)"
_SLASH_DATE = r"\d{1,2}/\d{1,2}(?:/\d{2,4})?"
_MONTH_DAY = rf"{_MONTH}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?\b"
_CALENDAR_DATE = rf"(?:{_WEEKDAY}|{_MONTH_DAY}|{_SLASH_DATE})"

# Checked in order; the raw matched substring is returned unresolved.
DATE_TIME_TEMPLATES = (
    re.compile(
        rf"\b(?:today|tomorrow)\b(?:\s+(?:at\s+)?{_TIME_ANY})?|\b{_TIME_ANY}\s+(?:today|tomorrow)\b",
        re.IGNORECASE,
    ),
    re.compile(
        rf"(?:\b{_CALENDAR_DATE}\s+(?:at\s+)?)?\b{_TIME_12}(?:\s+(?:on\s+)?{_CALENDAR_DATE})?",
        re.IGNORECASE,
    ),
    re.compile(rf"\b{_WEEKDAY}\b", re.IGNORECASE),
    re.compile(rf"\b{_SLASH_DATE}\b"),
    re.compile(rf"\b{_MONTH_DAY}", re.IGNORECASE),
)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

APPOINTMENT_ID_RE = re.compile(
    r"\b(?i:appointment)s?\s+(?:(?i:id|number|no\.?)\s*|#\s*)?"
    rf"(?!(?i:{_TIME_ANY}))(?P<id>(?=[A-Za-z-]*\d)[A-Za-z0-9-]+)"
)

# A capitalized word that is not the start of "December 15".
_MONTH_TITLE = "(?:" + "|".join(m.title() for m in sorted(_MONTHS, key=len, reverse=True)) + ")"
_NAME_WORD = rf"(?!{_MONTH_TITLE}\.?\s+\d)[A-Z][a-zA-Z]*(?:-[A-Za-z]+)*"
_NAME = rf"(?P<name>{_NAME_WORD}(?:\s+{_NAME_WORD})*)"
_NAME_END = (
    r"(?=(?:'s)?(?:\s+(?i:at|on|for|with|to|by|in|from|next|this|tomorrow|today|tonight"
    r"|about|and|appointment|appointments|please)\b|\s+\d|\s*[,.;:?!]|\s*$))"
)
_NAME_LOOSE_END = r"(?:'s)?(?![\w'-])"


def _name_templates(lead: str) -> tuple[re.Pattern[str], ...]:
    return (
        re.compile(rf"\b{lead}\s+{_NAME}{_NAME_END}"),
        re.compile(rf"\b{lead}\s+{_NAME}{_NAME_LOOSE_END}"),
    )


SCHEDULE_NAME_TEMPLATES = _name_templates(r"(?i:for|schedule|book)")
CANCEL_NAME_TEMPLATES = _name_templates(
    r"(?i:cancel|delete|remove|reschedule|move|change)(?:\s+(?i:the|my))?"
    r"(?:\s+(?i:appointments?))?(?:\s+(?i:for|with))?"
) + _name_templates(r"(?i:for)")
CLIENT_NAME_TEMPLATES = _name_templates(
    r"(?i:find|look\s+up|search\s+for|look\s+for|about|for|client)(?:\s+(?i:the\s+)?(?i:client))?"
) + (
    re.compile(
        rf"(?:\b(?i:get|pull\s+up|show\s+me|give\s+me|tell\s+me)\s+)?"
        rf"\b{_NAME}(?:'s)?\s+(?i:client|info|information|details)\b"
    ),
)
PRACTITIONER_NAME_TEMPLATES = (
    re.compile(rf"\b(?i:with)\s+(?:(?i:dr|doctor)\.?\s+)?{_NAME}"),
)

# Capitalized words that end a name rather than belong to it.
_NAME_BREAKERS = frozenset(
    set(_WEEKDAYS)
    | {"today", "tomorrow", "tonight", "next", "this", "i", "id", "am", "pm", "dr", "doctor",
       "client", "appointment", "appointments", "intake", "form", "questionnaire", "please"}
)

_ARTICLES = frozenset({"a", "an", "the", "my", "our", "their", "his", "her"})
_FORM_NOUNS = frozenset({"intake", "form", "forms", "questionnaire", "questionnaires"})
_PHRASE_STOPS = frozenset(
    {"at", "on", "with", "to", "by", "in", "from", "for", "next", "this", "and", "about",
     "please", "today", "tomorrow", "tonight", "am", "pm", "appointment", "appointments",
     "me", "him", "them", "us", "client"}
    | set(_WEEKDAYS)
    | set(_MONTHS)
)
_TOKEN_RE = re.compile(r"[^\s,;:?!]+")

SCHEDULE_SERVICE_TRIGGERS = frozenset({"for"})
INTAKE_FORM_TRIGGERS = frozenset({"intake", "form", "forms", "questionnaire", "for"})


def _clean_name(raw: str) -> str | None:
    words: list[str] = []
    for word in raw.split():
        if word.lower() in _NAME_BREAKERS:
            break
        words.append(word)
    return " ".join(words) or None


def find_name(text: str, templates: tuple[re.Pattern[str], ...]) -> str | None:
    for template in templates:
        for match in template.finditer(text):
            name = _clean_name(match.group("name"))
            if name:
                return name
    return None


def find_email(text: str) -> str | None:
    match = EMAIL_RE.search(text)
    return match.group(0) if match else None


def find_date_time(text: str) -> str | None:
    for template in DATE_TIME_TEMPLATES:
        match = template.search(text)
        if match:
            return match.group(0).strip()
    return None


def find_appointment_id(text: str) -> str | None:
    match = APPOINTMENT_ID_RE.search(text)
    return match.group("id") if match else None


def _is_stop(token: str) -> bool:
    return token in _PHRASE_STOPS or "@" in token or any(ch.isdigit() for ch in token)


def find_phrase_after(
    text: str,
    triggers: frozenset[str],
    exclude: str | None = None,
) -> str | None:
    """Words following a trigger word up to the next preposition, date, number or email.

    Leading articles and form nouns are skipped. A candidate equal to
    ``exclude`` (usually the client name) is not returned.
    """
    tokens = [token.strip(".").lower() for token in _TOKEN_RE.findall(text)]
    excluded = exclude.lower() if exclude else None

    for index, token in enumerate(tokens):
        if token not in triggers:
            continue
        words: list[str] = []
        for follower in tokens[index + 1:]:
            if not words and (follower in _ARTICLES or follower in _FORM_NOUNS):
                continue
            if _is_stop(follower) or follower in _FORM_NOUNS:
                break
            words.append(follower)
        phrase = " ".join(words)
        if phrase and phrase != excluded:
            return phrase
    return None


def extract_schedule_params(text: str) -> IntentParams:
    client_name = find_name(text, SCHEDULE_NAME_TEMPLATES)
    return IntentParams(
        client_name=client_name,
        date_time=find_date_time(text),
        service_name=find_phrase_after(text, SCHEDULE_SERVICE_TRIGGERS, exclude=client_name),
        practitioner_name=find_name(text, PRACTITIONER_NAME_TEMPLATES),
    )


def extract_cancel_params(text: str) -> IntentParams:
    return IntentParams(
        client_name=find_name(text, CANCEL_NAME_TEMPLATES),
        appointment_id=find_appointment_id(text),
        date_time=find_date_time(text),
    )


def extract_client_params(text: str) -> IntentParams:
    return IntentParams(
        client_name=find_name(text, CLIENT_NAME_TEMPLATES),
        client_email=find_email(text),
    )


def extract_date_params(text: str) -> IntentParams:
    return IntentParams(date=find_date_time(text))


def extract_intake_params(text: str) -> IntentParams:
    return IntentParams(
        client_email=find_email(text),
        service_name=find_phrase_after(text, INTAKE_FORM_TRIGGERS),
    )
