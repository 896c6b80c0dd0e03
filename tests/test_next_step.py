from datetime import UTC, datetime, timedelta

from azione.schemas import CalendarEvent, ContextType, Priority, Task, TaskTag
from azione.services.next_step import FALLBACK_ACTION, NextStepGenerator, generate_next_step

START = datetime(2025, 1, 16, 14, 0, tzinfo=UTC)


def make_event(confirmed=True, location=None):
    return CalendarEvent(
        title="Chiamata",
        start_date=START,
        end_date=START + timedelta(minutes=30),
        location=location,
        is_confirmed=confirmed,
    )


def make_task(priority=Priority.MEDIUM, title="Preparare il documento"):
    return Task(title=title, priority=priority, tags=[TaskTag.OTHER])


class TestNextStepGenerator:
    def setup_method(self):
        self.generator = NextStepGenerator()

    def test_urgency_comes_first(self):
        text = "Urgente! Serve entro oggi, il prima possibile, è importante"
        step = self.generator.generate(text, [make_task()], make_event(), ContextType.OTHER)
        assert step.action == "Rispondere immediatamente al messaggio"
        assert step.checklist[-1] == "Invia entro 5 minuti"

    def test_unconfirmed_event_without_location(self):
        step = self.generator.generate(
            "Vediamoci lunedì", [], make_event(confirmed=False), ContextType.OTHER
        )
        assert step.action == "Confermare i dettagli dell'appuntamento"
        assert step.checklist == [
            "Verifica data e orario proposti",
            "Chiedere conferma del luogo",
            "Inviare conferma o proposta alternativa",
        ]

    def test_unconfirmed_event_with_location(self):
        step = self.generator.generate(
            "Vediamoci lunedì", [], make_event(False, "Milano"), ContextType.OTHER
        )
        assert "Chiedere conferma del luogo" not in step.checklist

    def test_confirmed_event(self):
        step = self.generator.generate(
            "Ciao, puoi chiamarmi domani alle 15 per il pagamento della quota?",
            [make_task()],
            make_event(),
            ContextType.GYM,
        )
        assert step.action == "Salvare l'appuntamento in calendario"
        assert step.checklist == [
            "Scaricare il file .ics",
            "Importare nel calendario",
            "Confermare partecipazione",
        ]

    def test_request_with_high_priority_task(self):
        task = make_task(Priority.HIGH, "Mandare il contratto")
        step = self.generator.generate(
            "Puoi mandarmi il contratto", [task], None, ContextType.OTHER
        )
        assert step.action == 'Completare: "Mandare il contratto"'

    def test_request_without_high_priority_task(self):
        step = self.generator.generate(
            "Potresti portarmi le chiavi", [make_task()], None, ContextType.OTHER
        )
        assert step.action == "Rispondere confermando la presa in carico"

    def test_request_without_tasks_uses_fallback(self):
        step = self.generator.generate("Potresti portarmi le chiavi", [], None, ContextType.OTHER)
        assert step.action == FALLBACK_ACTION
        assert step.checklist == []

    def test_payment(self):
        step = self.generator.generate(
            "Ti mando la fattura del bonifico", [], None, ContextType.OTHER
        )
        assert step.action == "Verificare e completare il pagamento"

    def test_information_acknowledges_receipt(self):
        step = self.generator.generate(
            "Grazie per l'aggiornamento, tutto chiaro.", [], None, ContextType.OTHER
        )
        assert step.action == "Prendere nota e confermare ricezione"
        assert step.checklist == [
            "Salvare le informazioni importanti",
            "Ringraziare per l'aggiornamento",
        ]

    def test_confirmation(self):
        step = self.generator.generate("Va bene, confermo", [], None, ContextType.OTHER)
        assert step.action == "Confermare di aver ricevuto"

    def test_generic_step(self):
        step = self.generator.generate("ok", [], None, ContextType.OTHER)
        assert step.action == "Valutare il messaggio e rispondere"


class TestContextTips:
    def setup_method(self):
        self.generator = NextStepGenerator()

    def test_university_tip_appended(self):
        step = self.generator.generate("Va bene, confermo", [], None, ContextType.UNIVERSITY)
        assert step.checklist == ["Inviare breve conferma", "Usare tono formale nella risposta"]

    def test_work_tip_for_requests(self):
        step = self.generator.generate(
            "Potresti portarmi le chiavi", [make_task()], None, ContextType.WORK
        )
        assert step.checklist[-1] == "Definire tempistiche se necessario"

    def test_gym_payment_tip_dropped_by_truncation(self):
        step = self.generator.generate("Ti ricordo il rinnovo", [], None, ContextType.GYM)
        assert step.checklist == [
            "Controllare importo e scadenza",
            "Effettuare il pagamento",
            "Inviare conferma dell'avvenuto pagamento",
        ]

    def test_sales_tip(self):
        step = self.generator.generate("Grazie per l'aggiornamento", [], None, ContextType.SALES)
        assert step.checklist[-1] == "Includere proposta chiara nella risposta"

    def test_checklist_never_exceeds_three(self):
        texts = [
            "Urgente! Serve entro oggi, il prima possibile, è importante",
            "Ti ricordo il rinnovo",
            "Quando ci vediamo?",
            "Potresti portarmi le chiavi",
        ]
        for context in ContextType:
            for text in texts:
                for event in (None, make_event(), make_event(confirmed=False)):
                    step = generate_next_step(text, [make_task()], event, context)
                    assert len(step.checklist) <= 3
