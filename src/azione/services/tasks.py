"""Task generation from a message.

Titles come from explicit request phrasing ("puoi...", "mi mandi...",
"ho bisogno di...") and fall back to one templated title per detected
intent. Every task gets a priority, a suggested due date with its
rationale, and tags from a fixed keyword map.
"""

import logging
import re
from datetime import UTC, datetime, timedelta

from azione.schemas import ContextType, Priority, SourceType, Task, TaskTag
from azione.services.dates import ItalianDateParser, get_date_parser
from azione.services.intent import DetectedIntent, IntentDetector, IntentType

logger = logging.getLogger(__name__)

TAG_KEYWORDS: dict[TaskTag, re.Pattern[str]] = {
    TaskTag.CALL: re.compile(
        r"\b(chiama|chiamata|telefonata|call|chiamare|telefono"
        r"|chiamami|chiamarmi|telefonami|telefonarmi)\b",
        re.IGNORECASE,
    ),
    TaskTag.EMAIL: re.compile(r"\b(email|e-mail|mail|scrivi|invia|messaggio)\b", re.IGNORECASE),
    TaskTag.DOCUMENTS: re.compile(
        r"\b(documento|documenti|file|allegato|pdf|contratto|modulo|certificato)\b",
        re.IGNORECASE,
    ),
    TaskTag.UNIVERSITY: re.compile(
        r"\b(esame|lezione|tesi|prof|professore|corso|studente|università|facoltà|appello)\b",
        re.IGNORECASE,
    ),
    TaskTag.APPOINTMENT: re.compile(
        r"\b(appuntamento|incontro|visita|meeting|riunione)\b", re.IGNORECASE
    ),
    TaskTag.PAYMENT: re.compile(
        r"\b(pagamento|pagare|bonifico|fattura|quota|rata|importo)\b", re.IGNORECASE
    ),
    TaskTag.REPLY: re.compile(
        r"\b(rispondi|risposta|conferma|confermare|fammi sapere)\b", re.IGNORECASE
    ),
}

REQUEST_PATTERNS = [
    re.compile(r"(?:puoi|potresti|mi\s+puoi)\s+(.+?)(?:\?|$|\.)", re.IGNORECASE),
    re.compile(r"(?:mi\s+mandi|mi\s+invii)\s+(.+?)(?:\?|$|\.)", re.IGNORECASE),
    re.compile(r"(?:serve|servirebbe)\s+(.+?)(?:\?|$|\.)", re.IGNORECASE),
    re.compile(r"(?:ho\s+bisogno\s+di)\s+(.+?)(?:\?|$|\.)", re.IGNORECASE),
    re.compile(r"(?:fammi|fai)\s+(.+?)(?:\?|$|\.)", re.IGNORECASE),
]

INTENT_TITLES: dict[IntentType, str] = {
    IntentType.REQUEST: "Rispondere alla richiesta",
    IntentType.APPOINTMENT: "Organizzare appuntamento",
    IntentType.PAYMENT: "Gestire pagamento",
    IntentType.CONFIRMATION: "Confermare ricezione",
    IntentType.QUESTION: "Rispondere alla domanda",
    IntentType.INFORMATION: "Prendere nota dell'informazione",
}

FOLLOW_UP_PATTERN = re.compile(r"\b(fammi sapere|rispondimi|aspetto|conferma)\b", re.IGNORECASE)
FOLLOW_UP_TITLE = "Inviare risposta"

DEADLINE_PATTERN = re.compile(r"\b(entro|scadenza|deadline)\b", re.IGNORECASE)
SOON_PATTERN = re.compile(r"\b(presto|quando puoi|appena)\b", re.IGNORECASE)

GENERIC_TITLE = "Valutare e rispondere al messaggio"

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 100

CONTEXT_DESCRIPTIONS: dict[ContextType, str] = {
    ContextType.FAMILY: "Ambito familiare",
    ContextType.UNIVERSITY: "Ambito universitario",
    ContextType.WORK: "Ambito lavorativo",
    ContextType.GYM: "Abbonamento/palestra",
    ContextType.SALES: "Ambito commerciale",
    ContextType.OTHER: "",
}

SOURCE_DESCRIPTIONS: dict[SourceType, str] = {
    SourceType.CHAT: "via WhatsApp",
    SourceType.EMAIL: "via email",
    SourceType.OTHER: "",
}


def detect_tags(text: str) -> list[TaskTag]:
    tags = [tag for tag, pattern in TAG_KEYWORDS.items() if pattern.search(text)]
    return tags or [TaskTag.OTHER]


def extract_task_titles(text: str, intents: list[DetectedIntent]) -> list[str]:
    """Collect task titles, deduplicated in first-seen order."""
    titles: list[str] = []

    for pattern in REQUEST_PATTERNS:
        for match in pattern.finditer(text):
            extracted = match.group(1).strip()
            if MIN_TITLE_LENGTH < len(extracted) < MAX_TITLE_LENGTH:
                titles.append(extracted)

    if not titles:
        for intent in intents:
            title = INTENT_TITLES.get(intent.type)
            if title:
                titles.append(title)

    if "?" in text or FOLLOW_UP_PATTERN.search(text):
        follow_up_exists = any(
            "rispond" in title.lower() or "conferma" in title.lower() for title in titles
        )
        if not follow_up_exists:
            titles.append(FOLLOW_UP_TITLE)

    return list(dict.fromkeys(titles))


def describe_context(context_type: ContextType, source_type: SourceType) -> str:
    parts = [CONTEXT_DESCRIPTIONS[context_type], SOURCE_DESCRIPTIONS[source_type]]
    return " - ".join(part for part in parts if part)


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


class TaskGenerator:
    def __init__(
        self,
        detector: IntentDetector | None = None,
        date_parser: ItalianDateParser | None = None,
    ):
        self.detector = detector or IntentDetector()
        self.date_parser = date_parser or get_date_parser()

    def generate(
        self,
        text: str,
        context_type: ContextType,
        source_type: SourceType,
        person_name: str | None = None,
        role: str | None = None,
        now: datetime | None = None,
    ) -> list[Task]:
        intents = self.detector.detect(text)
        titles = extract_task_titles(text, intents)

        # Priority and due date depend only on the message, not on the title
        priority = self.determine_priority(text, intents)
        due_date, reason = self.suggest_due_date(text, priority, now)

        tasks: list[Task] = []
        for title in titles:
            description = ""
            if person_name:
                description = f"Per {person_name}"
                if role:
                    description += f" ({role})"
                description += ". "
            description += describe_context(context_type, source_type)

            tasks.append(
                Task(
                    title=capitalize_first(title),
                    description=description.strip(),
                    priority=priority,
                    due_date=due_date,
                    due_date_reason=reason,
                    tags=detect_tags(f"{text} {title}"),
                )
            )

        if not tasks:
            if person_name:
                who = f"{person_name} ({role})" if role else person_name
                description = f"Messaggio da {who} da valutare"
            else:
                description = "Messaggio da valutare"

            tasks.append(
                Task(
                    title=GENERIC_TITLE,
                    description=description,
                    priority=priority,
                    due_date=due_date,
                    due_date_reason=reason,
                    tags=[TaskTag.REPLY],
                )
            )

        logger.debug("Generated %d task(s) with priority %s", len(tasks), priority.value)
        return tasks

    def determine_priority(self, text: str, intents: list[DetectedIntent]) -> Priority:
        if self.detector.has_urgency(text):
            return Priority.HIGH

        primary = intents[0] if intents else None
        if primary:
            if primary.type == IntentType.PAYMENT and primary.confidence > 0.7:
                return Priority.HIGH
            if primary.type == IntentType.REQUEST and primary.confidence > 0.8:
                return Priority.MEDIUM

        if DEADLINE_PATTERN.search(text):
            return Priority.HIGH

        return Priority.MEDIUM

    def suggest_due_date(
        self,
        text: str,
        priority: Priority,
        now: datetime | None = None,
    ) -> tuple[datetime, str]:
        parsed = self.date_parser.parse_date(text, now)
        if parsed:
            if parsed.is_confirmed:
                reason = f"Data menzionata nel messaggio ({parsed.original})"
            else:
                reason = "Data rilevata ma da confermare"
            return parsed.date, reason

        today = self.date_parser.local_now(now).astimezone(UTC)

        if priority == Priority.HIGH:
            return today + timedelta(days=1), "Urgente - suggerito entro domani"

        if SOON_PATTERN.search(text):
            return today + timedelta(days=3), "Richiesta sollecita"

        return today + timedelta(days=7), "Scadenza standard suggerita"


def generate_tasks(
    text: str,
    context_type: ContextType,
    source_type: SourceType,
    person_name: str | None = None,
    role: str | None = None,
    now: datetime | None = None,
) -> list[Task]:
    return TaskGenerator().generate(text, context_type, source_type, person_name, role, now)
