"""Intent detection for Italian messages.

Scores text against fixed, weighted keyword patterns per intent category.
A category's confidence is its matched weight divided by the number of
patterns in the category (not by the sum of weights), capped at 1.0.
Downstream thresholds are calibrated against that normalisation.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class IntentType(str, Enum):
    REQUEST = "richiesta"
    APPOINTMENT = "appuntamento"
    URGENCY = "urgenza"
    PAYMENT = "pagamento"
    INFORMATION = "informazione"
    CONFIRMATION = "conferma"
    QUESTION = "domanda"
    OTHER = "altro"


@dataclass
class DetectedIntent:
    type: IntentType
    confidence: float  # 0-1
    matched_patterns: list[str] = field(default_factory=list)
    context: str = ""  # matched excerpts, comma separated


def _p(pattern: str, weight: float) -> tuple[re.Pattern[str], float]:
    return re.compile(pattern, re.IGNORECASE), weight


# Category order is the tie-break order of the sorted output
INTENT_PATTERNS: dict[IntentType, list[tuple[re.Pattern[str], float]]] = {
    IntentType.REQUEST: [
        _p(r"\b(puoi|potresti|potrebbe|mi\s+puoi|mi\s+potresti)\b", 0.9),
        _p(r"\b(vuoi|vorresti|vorrebbe)\b", 0.7),
        _p(r"\b(mi\s+mandi|mi\s+invii|mi\s+dai|mi\s+passi)\b", 0.95),
        _p(r"\b(serve|servirebbe|avrei\s+bisogno|ho\s+bisogno)\b", 0.85),
        _p(r"\b(fammi|facci|fai|fate)\s+\w+", 0.8),
        _p(r"\b(devi|dovresti|dovrebbe|dovremmo)\b", 0.75),
        _p(r"\b(ti\s+chiedo|ti\s+chiederei|le\s+chiedo)\b", 0.9),
        _p(r"\b(portami|comprami|prendimi)\b", 0.85),
    ],
    IntentType.APPOINTMENT: [
        _p(r"\b(appuntamento|incontro|meeting|riunione)\b", 0.95),
        _p(r"\b(vediamoci|ci\s+vediamo|incontriamoci)\b", 0.9),
        _p(r"\b(passare\s+da|venire\s+da|andare\s+da)\b", 0.7),
        _p(r"\b(quando\s+sei\s+libero|quando\s+possiamo)\b", 0.85),
        _p(r"\b(fissiamo|organizziamo|prenotiamo)\b", 0.8),
        _p(r"\b(call|chiamata|videochiamata|videocall)\b", 0.9),
        _p(r"\b(pranzo|cena|aperitivo|caffè)\s*(insieme|con\s+me)?", 0.6),
    ],
    IntentType.URGENCY: [
        _p(r"\b(urgente|urgenza|subito|immediatamente)\b", 0.95),
        _p(r"\b(oggi|entro\s+oggi|stasera|stanotte)\b", 0.8),
        _p(r"\b(scadenza|deadline|entro\s+il|entro\s+le)\b", 0.85),
        _p(r"\b(il\s+prima\s+possibile|appena\s+puoi|asap)\b", 0.9),
        _p(r"\b(non\s+c'è\s+tempo|poco\s+tempo|tempo\s+stringe)\b", 0.85),
        _p(r"\b(importante|fondamentale|cruciale|essenziale)\b", 0.6),
    ],
    IntentType.PAYMENT: [
        _p(r"\b(pagamento|pagare|bonifico|fattura)\b", 0.95),
        _p(r"\b(rinnovo|disdetta|abbonamento|iscrizione)\b", 0.85),
        _p(r"\b(quota|rata|mensilità|canone)\b", 0.8),
        _p(r"\b(scaduto|in\s+scadenza|da\s+pagare)\b", 0.85),
        _p(r"\b(euro|€|\beur\b)", 0.6),
        _p(r"\b(costo|prezzo|tariffa|importo)\b", 0.5),
    ],
    IntentType.INFORMATION: [
        _p(r"\b(ti\s+informo|ti\s+comunico|ti\s+avviso)\b", 0.9),
        _p(r"\b(volevo\s+dirti|volevo\s+farti\s+sapere)\b", 0.85),
        _p(r"\b(per\s+tua\s+informazione|fyi|nota\s+bene)\b", 0.9),
        _p(r"\b(aggiornamento|update|news)\b", 0.7),
    ],
    IntentType.CONFIRMATION: [
        _p(r"\b(conferma|confermare|confermo)\b", 0.9),
        _p(r"\b(va\s+bene|ok\s+per|d'accordo)\b", 0.7),
        _p(r"\b(ricevuto|preso\s+nota|capito)\b", 0.65),
    ],
    IntentType.QUESTION: [
        _p(r"\?", 0.6),
        _p(r"\b(come|quando|dove|perché|quanto|quale|chi)\b", 0.5),
        _p(r"\b(sai|sapete|conosci|conoscete)\s+\w+\?", 0.8),
        _p(r"\b(hai|avete)\s+\w+\?", 0.7),
    ],
    IntentType.OTHER: [],
}

# Thresholds for the derived flags
URGENCY_THRESHOLD = 0.5
APPOINTMENT_THRESHOLD = 0.4
PAYMENT_THRESHOLD = 0.5

FALLBACK_CONFIDENCE = 0.5
FALLBACK_CONTEXT_LENGTH = 50


class IntentDetector:
    """Scores a message against the weighted pattern table."""

    def __init__(
        self,
        patterns: dict[IntentType, list[tuple[re.Pattern[str], float]]] | None = None,
    ):
        self.patterns = patterns or INTENT_PATTERNS

    def detect(self, text: str) -> list[DetectedIntent]:
        """Return detected intents ordered by descending confidence.

        Never empty: when no category matches, a single OTHER intent with
        confidence 0.5 is returned, carrying the first 50 characters of
        the text as context.
        """
        intents: list[DetectedIntent] = []

        for intent_type, patterns in self.patterns.items():
            if intent_type == IntentType.OTHER or not patterns:
                continue

            total_weight = 0.0
            matched_patterns: list[str] = []
            matched_contexts: list[str] = []

            for pattern, weight in patterns:
                match = pattern.search(text)
                if match:
                    total_weight += weight
                    matched_patterns.append(pattern.pattern)
                    matched_contexts.append(match.group(0))

            if matched_patterns:
                intents.append(
                    DetectedIntent(
                        type=intent_type,
                        confidence=min(total_weight / len(patterns), 1.0),
                        matched_patterns=matched_patterns,
                        context=", ".join(matched_contexts),
                    )
                )

        intents.sort(key=lambda intent: intent.confidence, reverse=True)

        if not intents:
            intents.append(
                DetectedIntent(
                    type=IntentType.OTHER,
                    confidence=FALLBACK_CONFIDENCE,
                    context=text[:FALLBACK_CONTEXT_LENGTH],
                )
            )

        logger.debug(
            "Detected intents: %s",
            ", ".join(f"{i.type.value}={i.confidence:.3f}" for i in intents),
        )
        return intents

    def primary_intent(self, text: str) -> DetectedIntent:
        return self.detect(text)[0]

    def has_urgency(self, text: str) -> bool:
        return self._has_intent(text, IntentType.URGENCY, URGENCY_THRESHOLD)

    def is_appointment_related(self, text: str) -> bool:
        return self._has_intent(text, IntentType.APPOINTMENT, APPOINTMENT_THRESHOLD)

    def is_payment_related(self, text: str) -> bool:
        return self._has_intent(text, IntentType.PAYMENT, PAYMENT_THRESHOLD)

    def _has_intent(self, text: str, intent_type: IntentType, threshold: float) -> bool:
        return any(
            intent.type == intent_type and intent.confidence > threshold
            for intent in self.detect(text)
        )


_detector = IntentDetector()


def detect_intents(text: str) -> list[DetectedIntent]:
    return _detector.detect(text)


def get_primary_intent(text: str) -> DetectedIntent:
    return _detector.primary_intent(text)


def has_urgency(text: str) -> bool:
    return _detector.has_urgency(text)


def is_appointment_related(text: str) -> bool:
    return _detector.is_appointment_related(text)


def is_payment_related(text: str) -> bool:
    return _detector.is_payment_related(text)
