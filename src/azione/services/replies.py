"""Reply drafting in three tones.

Greetings and sign-offs depend on the context (family, university, work,
...) and the tone; the body depends on the primary intent. When the
message proposes an appointment but leaves out the day, the time or the
place, each draft asks for it.
"""

import logging
import re

from azione.schemas import ContextType, Replies, SourceType, Tone
from azione.services.intent import DetectedIntent, IntentDetector, IntentType

logger = logging.getLogger(__name__)

GREETINGS: dict[ContextType, dict[Tone, str]] = {
    ContextType.FAMILY: {Tone.FORMAL: "Ciao", Tone.CORDIAL: "Ciao", Tone.TERSE: ""},
    ContextType.UNIVERSITY: {
        Tone.FORMAL: "Gentile Professore/Professoressa",
        Tone.CORDIAL: "Buongiorno",
        Tone.TERSE: "Buongiorno",
    },
    ContextType.WORK: {
        Tone.FORMAL: "Gentile",
        Tone.CORDIAL: "Buongiorno",
        Tone.TERSE: "Buongiorno",
    },
    ContextType.GYM: {Tone.FORMAL: "Gentili", Tone.CORDIAL: "Ciao", Tone.TERSE: "Ciao"},
    ContextType.SALES: {
        Tone.FORMAL: "Gentile Cliente",
        Tone.CORDIAL: "Buongiorno",
        Tone.TERSE: "Buongiorno",
    },
    ContextType.OTHER: {Tone.FORMAL: "Buongiorno", Tone.CORDIAL: "Ciao", Tone.TERSE: ""},
}

CLOSINGS: dict[ContextType, dict[Tone, str]] = {
    ContextType.FAMILY: {Tone.FORMAL: "Un abbraccio", Tone.CORDIAL: "Un bacio", Tone.TERSE: ""},
    ContextType.UNIVERSITY: {
        Tone.FORMAL: "Cordiali saluti",
        Tone.CORDIAL: "Grazie e buona giornata",
        Tone.TERSE: "Grazie",
    },
    ContextType.WORK: {
        Tone.FORMAL: "Distinti saluti",
        Tone.CORDIAL: "Cordiali saluti",
        Tone.TERSE: "Grazie",
    },
    ContextType.GYM: {Tone.FORMAL: "Cordiali saluti", Tone.CORDIAL: "Grazie", Tone.TERSE: "Grazie"},
    ContextType.SALES: {
        Tone.FORMAL: "Resto a disposizione per qualsiasi chiarimento.\nCordiali saluti",
        Tone.CORDIAL: "Grazie per la fiducia",
        Tone.TERSE: "Grazie",
    },
    ContextType.OTHER: {Tone.FORMAL: "Cordiali saluti", Tone.CORDIAL: "Grazie", Tone.TERSE: ""},
}

# Opening sentence per primary intent and tone; "" means no sentence
BODIES: dict[IntentType, dict[Tone, str]] = {
    IntentType.REQUEST: {
        Tone.FORMAL: "Ho ricevuto la Sua richiesta e provvederò a quanto necessario.",
        Tone.CORDIAL: "Ricevuto! Mi occupo subito della tua richiesta.",
        Tone.TERSE: "Ok, provvedo.",
    },
    IntentType.APPOINTMENT: {
        Tone.FORMAL: "Confermo la mia disponibilità per l'incontro proposto.",
        Tone.CORDIAL: "Perfetto, per me va bene!",
        Tone.TERSE: "Ok, confermo.",
    },
    IntentType.PAYMENT: {
        Tone.FORMAL: "Ho preso nota delle informazioni relative al pagamento.",
        Tone.CORDIAL: "Grazie per le informazioni, provvedo al pagamento.",
        Tone.TERSE: "Ok, provvedo.",
    },
    IntentType.INFORMATION: {
        Tone.FORMAL: "La ringrazio per l'informazione.",
        Tone.CORDIAL: "Grazie per avermi avvisato!",
        Tone.TERSE: "Ricevuto, grazie.",
    },
    IntentType.QUESTION: {
        Tone.FORMAL: "In merito alla Sua domanda:",
        Tone.CORDIAL: "Riguardo alla tua domanda:",
        Tone.TERSE: "",
    },
    IntentType.CONFIRMATION: {
        Tone.FORMAL: "Confermo la ricezione del messaggio.",
        Tone.CORDIAL: "Ricevuto, tutto chiaro!",
        Tone.TERSE: "Ok!",
    },
}

DEFAULT_BODY: dict[Tone, str] = {
    Tone.FORMAL: "Ho ricevuto il Suo messaggio.",
    Tone.CORDIAL: "Grazie per il messaggio!",
    Tone.TERSE: "Ricevuto.",
}

MISSING_INFO_TEMPLATES: dict[Tone, str] = {
    Tone.FORMAL: "Avrei bisogno di alcune informazioni aggiuntive: {items}.",
    Tone.CORDIAL: "Mi servirebbe sapere: {items}. Puoi farmi sapere?",
    Tone.TERSE: "Mi servono: {items}.",
}

SUBJECT_PREFIXES: dict[ContextType, str] = {
    ContextType.FAMILY: "",
    ContextType.UNIVERSITY: "Re: ",
    ContextType.WORK: "Re: ",
    ContextType.GYM: "Re: ",
    ContextType.SALES: "Re: ",
    ContextType.OTHER: "Re: ",
}

SUBJECTS: dict[IntentType, str] = {
    IntentType.REQUEST: "Risposta alla richiesta",
    IntentType.APPOINTMENT: "Conferma appuntamento",
    IntentType.PAYMENT: "Conferma pagamento",
    IntentType.INFORMATION: "Ricevuto - Grazie",
    IntentType.CONFIRMATION: "Conferma ricezione",
    IntentType.QUESTION: "Risposta alla domanda",
    IntentType.URGENCY: "URGENTE - Risposta",
    IntentType.OTHER: "Risposta",
}

DAY_REFERENCE = re.compile(
    r"\b(lunedì|martedì|mercoledì|giovedì|venerdì|sabato|domenica|domani|dopodomani)\b",
    re.IGNORECASE,
)
TIME_REFERENCE = re.compile(r"\b(\d{1,2}[:.]?\d{0,2}|alle\s+\d+|ore\s+\d+)\b", re.IGNORECASE)
APPOINTMENT_REFERENCE = re.compile(
    r"\b(appuntamento|incontro|vediamoci|ci\s+vediamo)\b", re.IGNORECASE
)
LOCATION_QUESTION = re.compile(r"\b(dove|luogo|posto)\b", re.IGNORECASE)
SPECIFIC_LOCATION = re.compile(r"\b(in|a|da|presso)\s+[A-Z][a-zA-Z]+")


def find_missing_info(text: str) -> list[str]:
    """Details an appointment proposal leaves out."""
    missing: list[str] = []

    if not APPOINTMENT_REFERENCE.search(text):
        return missing

    has_day = bool(DAY_REFERENCE.search(text))
    if not has_day:
        missing.append("data dell'incontro")
    elif not TIME_REFERENCE.search(text):
        missing.append("orario preciso")

    if not LOCATION_QUESTION.search(text) and not SPECIFIC_LOCATION.search(text):
        missing.append("luogo dell'incontro")

    return missing


class ReplyGenerator:
    def __init__(self, detector: IntentDetector | None = None):
        self.detector = detector or IntentDetector()

    def generate(
        self,
        text: str,
        context_type: ContextType,
        source_type: SourceType,
        person_name: str | None = None,
        role: str | None = None,
    ) -> Replies:
        intents = self.detector.detect(text)
        missing = find_missing_info(text)
        greetings = GREETINGS[context_type]
        closings = CLOSINGS[context_type]

        def greeting(base: str, include_role: bool = False) -> str:
            if not base:
                return ""
            if person_name:
                role_str = f" ({role})" if include_role and role else ""
                return f"{base} {person_name}{role_str},"
            return f"{base},"

        formal = "\n".join(
            [
                greeting(greetings[Tone.FORMAL], include_role=True),
                "",
                self._body(intents, Tone.FORMAL, missing),
                "",
                closings[Tone.FORMAL],
            ]
        ).strip()

        cordial = "\n".join(
            [
                greeting(greetings[Tone.CORDIAL]),
                "",
                self._body(intents, Tone.CORDIAL, missing),
                "",
                closings[Tone.CORDIAL],
            ]
        ).strip()

        terse_parts = [
            greeting(greetings[Tone.TERSE]),
            self._body(intents, Tone.TERSE, missing),
            closings[Tone.TERSE],
        ]
        terse = "\n".join(part for part in terse_parts if part.strip()).strip()

        logger.debug("Drafted replies for primary intent %s", intents[0].type.value)
        return Replies(formal=formal, cordial=cordial, terse=terse)

    def _body(self, intents: list[DetectedIntent], tone: Tone, missing: list[str]) -> str:
        primary = intents[0] if intents else None
        templates = BODIES.get(primary.type, DEFAULT_BODY) if primary else DEFAULT_BODY

        parts = []
        if templates[tone]:
            parts.append(templates[tone])
        if missing:
            parts.append(MISSING_INFO_TEMPLATES[tone].format(items=", ".join(missing)))

        return "\n\n".join(parts)

    def generate_email_subject(self, text: str, context_type: ContextType) -> str:
        primary = self.detector.primary_intent(text)
        return SUBJECT_PREFIXES[context_type] + SUBJECTS.get(primary.type, "Risposta")


def generate_replies(
    text: str,
    context_type: ContextType,
    source_type: SourceType,
    person_name: str | None = None,
    role: str | None = None,
) -> Replies:
    return ReplyGenerator().generate(text, context_type, source_type, person_name, role)


def generate_email_subject(text: str, context_type: ContextType) -> str:
    return ReplyGenerator().generate_email_subject(text, context_type)
