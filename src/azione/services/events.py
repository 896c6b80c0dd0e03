"""Calendar event extraction.

A message produces an event only when it is about an appointment: either
the intent detector flags it, or it carries a date together with phrasing
that proposes a meeting or a call.
"""

import logging
import re
from datetime import datetime, timedelta

from azione.schemas import CalendarEvent
from azione.services.dates import ItalianDateParser, get_date_parser
from azione.services.intent import IntentDetector

logger = logging.getLogger(__name__)

DEFAULT_CALL_DURATION_MIN = 30
DEFAULT_MEETING_DURATION_MIN = 60

NOTES_SUMMARY_LENGTH = 200

MEETING_PHRASES = re.compile(
    r"\b(vediamoci|incontriamoci|ci\s+vediamo|passare\s+da|venire\s+da"
    r"|chiamami|chiamarmi|telefonami|telefonarmi|sentiamoci"
    r"|appuntamento|incontro|riunione|meeting)\b",
    re.IGNORECASE,
)

CALL_PATTERN = re.compile(
    r"\b(call|chiamata|telefonata|videochiamata|videocall"
    r"|chiamami|chiamarmi|telefonami|telefonarmi)\b",
    re.IGNORECASE,
)

ONLINE_PATTERN = re.compile(
    r"\b(zoom|teams|meet|skype|videocall|videochiamata|online|call)\b", re.IGNORECASE
)
PLATFORM_PATTERN = re.compile(r"\b(zoom|teams|meet|skype)\b", re.IGNORECASE)

# Capitalised names are matched case-sensitively
LOCATION_PATTERNS = [
    re.compile(
        r"\b(?:a|in|da|presso)\s+([A-Z][a-zA-Zàèéìòù\s]+?)"
        r"(?:\s*[,.]|\s+alle|\s+il|\s+domani|$)"
    ),
    re.compile(
        r"\b((?i:indirizzo|via|piazza|corso)\s+[A-Z][a-zA-Zàèéìòù\s\d]*[a-zA-Zàèéìòù\d])"
    ),
]

LOCATION_STOPLIST = frozenset(["me", "te", "lui", "lei", "noi", "voi", "loro", "casa", "ufficio"])

# (pattern, noun, title with a person); first match wins
TITLE_RULES: list[tuple[re.Pattern[str], str, str]] = [
    (re.compile(r"\bpranzo\b", re.IGNORECASE), "Pranzo", "Pranzo con {person}"),
    (re.compile(r"\bcena\b", re.IGNORECASE), "Cena", "Cena con {person}"),
    (re.compile(r"\baperitivo\b", re.IGNORECASE), "Aperitivo", "Aperitivo con {person}"),
    (re.compile(r"\b(caffè|colazione)\b", re.IGNORECASE), "Caffè", "Caffè con {person}"),
    (re.compile(r"\b(riunione|meeting)\b", re.IGNORECASE), "Riunione", "Riunione con {person}"),
    (re.compile(r"\bvisita\b", re.IGNORECASE), "Visita", "Visita - {person}"),
    (CALL_PATTERN, "Chiamata", "Call con {person}"),
]


def is_call_event(text: str) -> bool:
    return bool(CALL_PATTERN.search(text))


def extract_location(text: str) -> str | None:
    if ONLINE_PATTERN.search(text):
        platform = PLATFORM_PATTERN.search(text)
        if platform:
            return f"Online ({platform.group(1)})"
        return "Online"

    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text)
        if match:
            location = match.group(1).strip()
            if len(location) > 2 and location.lower() not in LOCATION_STOPLIST:
                return location

    return None


def generate_event_title(text: str, person_name: str | None = None) -> str:
    for pattern, noun, with_person in TITLE_RULES:
        if pattern.search(text):
            return with_person.format(person=person_name) if person_name else noun

    return f"Appuntamento con {person_name}" if person_name else "Appuntamento"


def generate_event_notes(text: str) -> str:
    summary = text
    if len(text) > NOTES_SUMMARY_LENGTH:
        summary = text[:NOTES_SUMMARY_LENGTH] + "..."
    return f'Estratto da messaggio:\n"{summary}"'


class EventExtractor:
    def __init__(
        self,
        detector: IntentDetector | None = None,
        date_parser: ItalianDateParser | None = None,
    ):
        self.detector = detector or IntentDetector()
        self.date_parser = date_parser or get_date_parser()

    def extract(
        self,
        text: str,
        person_name: str | None = None,
        call_duration_minutes: int = DEFAULT_CALL_DURATION_MIN,
        meeting_duration_minutes: int = DEFAULT_MEETING_DURATION_MIN,
        now: datetime | None = None,
    ) -> CalendarEvent | None:
        if not self.detector.is_appointment_related(text):
            has_date = self.date_parser.parse_date(text, now) is not None
            if not has_date or not MEETING_PHRASES.search(text):
                logger.debug("No appointment context, skipping event")
                return None

        dates = self.date_parser.extract_all_dates(text, now)
        if not dates:
            logger.debug("Appointment context without a date, skipping event")
            return None

        anchor = dates[0]
        duration = call_duration_minutes if is_call_event(text) else meeting_duration_minutes

        return CalendarEvent(
            title=generate_event_title(text, person_name),
            start_date=anchor.date,
            end_date=anchor.date + timedelta(minutes=duration),
            location=extract_location(text),
            notes=generate_event_notes(text),
            is_confirmed=anchor.is_confirmed and anchor.has_time,
        )


def extract_calendar_event(
    text: str,
    person_name: str | None = None,
    call_duration_minutes: int = DEFAULT_CALL_DURATION_MIN,
    meeting_duration_minutes: int = DEFAULT_MEETING_DURATION_MIN,
    now: datetime | None = None,
) -> CalendarEvent | None:
    return EventExtractor().extract(
        text,
        person_name=person_name,
        call_duration_minutes=call_duration_minutes,
        meeting_duration_minutes=meeting_duration_minutes,
        now=now,
    )
