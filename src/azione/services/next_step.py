import logging

from azione.schemas import CalendarEvent, ContextType, NextStep, Priority, Task
from azione.services.intent import IntentDetector, IntentType

logger = logging.getLogger(__name__)

MAX_CHECKLIST_ITEMS = 3

FALLBACK_ACTION = "Valutare il messaggio e decidere il prossimo passo"

# (action, checklist) per primary intent when no urgency or event applies
INTENT_STEPS: dict[IntentType, tuple[str, list[str]]] = {
    IntentType.PAYMENT: (
        "Verificare e completare il pagamento",
        [
            "Controllare importo e scadenza",
            "Effettuare il pagamento",
            "Inviare conferma dell'avvenuto pagamento",
        ],
    ),
    IntentType.QUESTION: (
        "Rispondere alla domanda",
        ["Preparare la risposta", "Verificare che sia completa", "Inviare la risposta"],
    ),
    IntentType.INFORMATION: (
        "Prendere nota e confermare ricezione",
        ["Salvare le informazioni importanti", "Ringraziare per l'aggiornamento"],
    ),
    IntentType.CONFIRMATION: (
        "Confermare di aver ricevuto",
        ["Inviare breve conferma"],
    ),
}

GENERIC_STEP = (
    "Valutare il messaggio e rispondere",
    [
        "Leggere con attenzione",
        "Identificare eventuali azioni necessarie",
        "Rispondere in modo appropriato",
    ],
)


class NextStepGenerator:
    """Picks the single most useful action for a message."""

    def __init__(self, detector: IntentDetector | None = None):
        self.detector = detector or IntentDetector()

    def generate(
        self,
        text: str,
        tasks: list[Task],
        event: CalendarEvent | None,
        context_type: ContextType,
    ) -> NextStep:
        primary = self.detector.primary_intent(text)
        action = ""
        checklist: list[str] = []

        if self.detector.has_urgency(text):
            action = "Rispondere immediatamente al messaggio"
            checklist = [
                "Leggi attentamente il messaggio",
                "Prepara una risposta rapida",
                "Invia entro 5 minuti",
            ]
        elif event and not event.is_confirmed:
            action = "Confermare i dettagli dell'appuntamento"
            checklist.append("Verifica data e orario proposti")
            if not event.location:
                checklist.append("Chiedere conferma del luogo")
            checklist.append("Inviare conferma o proposta alternativa")
        elif event and event.is_confirmed:
            action = "Salvare l'appuntamento in calendario"
            checklist = [
                "Scaricare il file .ics",
                "Importare nel calendario",
                "Confermare partecipazione",
            ]
        elif primary.type == IntentType.REQUEST:
            if tasks:
                high_priority = next((t for t in tasks if t.priority == Priority.HIGH), None)
                if high_priority:
                    action = f'Completare: "{high_priority.title}"'
                    checklist = [
                        "Valuta cosa viene richiesto",
                        "Prepara quanto necessario",
                        "Rispondi confermando l'azione",
                    ]
                else:
                    action = "Rispondere confermando la presa in carico"
                    checklist = [
                        "Leggere attentamente la richiesta",
                        "Inviare risposta di conferma",
                    ]
        elif primary.type in INTENT_STEPS:
            action, steps = INTENT_STEPS[primary.type]
            checklist = list(steps)
        else:
            action, steps = GENERIC_STEP
            checklist = list(steps)

        tip = self._context_tip(context_type, primary.type, checklist)
        if tip:
            checklist.append(tip)

        if not action:
            action = FALLBACK_ACTION

        logger.debug("Next step: %s", action)
        return NextStep(action=action, checklist=checklist[:MAX_CHECKLIST_ITEMS])

    def _context_tip(
        self,
        context_type: ContextType,
        primary_type: IntentType,
        checklist: list[str],
    ) -> str | None:
        if context_type == ContextType.UNIVERSITY:
            if not any("formal" in item for item in checklist):
                return "Usare tono formale nella risposta"
        elif context_type == ContextType.WORK:
            if primary_type == IntentType.REQUEST:
                return "Definire tempistiche se necessario"
        elif context_type == ContextType.GYM:
            if primary_type == IntentType.PAYMENT:
                return "Verificare termini di disdetta/rinnovo"
        elif context_type == ContextType.SALES:
            if not any("proposta chiara" in item for item in checklist):
                return "Includere proposta chiara nella risposta"
        return None


def generate_next_step(
    text: str,
    tasks: list[Task],
    event: CalendarEvent | None,
    context_type: ContextType,
) -> NextStep:
    return NextStepGenerator().generate(text, tasks, event, context_type)
