"""Tests for reply drafting."""

from azione.schemas import ContextType, SourceType, Tone
from azione.services.replies import ReplyGenerator, find_missing_info, generate_email_subject


class TestReplyGenerator:
    def setup_method(self):
        self.generator = ReplyGenerator()

    def test_payment_message_in_gym_context(self):
        replies = self.generator.generate(
            "Ciao, puoi chiamarmi domani alle 15 per il pagamento della quota?",
            ContextType.GYM,
            SourceType.CHAT,
        )
        assert replies.formal == (
            "Gentili,\n\nHo preso nota delle informazioni relative al pagamento.\n\nCordiali saluti"
        )
        assert replies.cordial == (
            "Ciao,\n\nGrazie per le informazioni, provvedo al pagamento.\n\nGrazie"
        )
        assert replies.terse == "Ciao,\nOk, provvedo.\nGrazie"

    def test_greeting_includes_person_and_role_only_when_formal(self):
        replies = self.generator.generate(
            "Mi mandi il verbale dell'esame?",
            ContextType.UNIVERSITY,
            SourceType.EMAIL,
            person_name="Bianchi",
            role="docente",
        )
        assert replies.formal.startswith("Gentile Professore/Professoressa Bianchi (docente),")
        assert replies.cordial.startswith("Buongiorno Bianchi,")
        assert replies.terse.startswith("Buongiorno Bianchi,")
        assert replies.formal.endswith("Cordiali saluti")

    def test_no_greeting_or_closing_in_terse_family_reply(self):
        replies = self.generator.generate(
            "Ti informo che arrivo tardi", ContextType.FAMILY, SourceType.CHAT
        )
        assert replies.terse == "Ricevuto, grazie."
        assert replies.cordial == "Ciao,\n\nGrazie per avermi avvisato!\n\nUn bacio"

    def test_default_body_for_unknown_intent(self):
        replies = self.generator.generate("ok", ContextType.OTHER, SourceType.OTHER)
        assert replies.formal == "Buongiorno,\n\nHo ricevuto il Suo messaggio.\n\nCordiali saluti"
        assert replies.terse == "Ricevuto."

    def test_missing_details_are_asked(self):
        replies = self.generator.generate(
            "Fissiamo un appuntamento?", ContextType.WORK, SourceType.EMAIL
        )
        items = "data dell'incontro, luogo dell'incontro"
        assert f"Avrei bisogno di alcune informazioni aggiuntive: {items}." in replies.formal
        assert f"Mi servirebbe sapere: {items}. Puoi farmi sapere?" in replies.cordial
        assert f"Mi servono: {items}." in replies.terse

    def test_all_tones_non_empty_and_deterministic(self):
        texts = [
            "Grazie per l'aggiornamento, tutto chiaro.",
            "Urgente! Mi serve il file entro stasera",
            "Quando ci vediamo?",
            "",
        ]
        for context in ContextType:
            for text in texts:
                first = self.generator.generate(text, context, SourceType.CHAT)
                second = self.generator.generate(text, context, SourceType.CHAT)
                assert first == second
                for tone in Tone:
                    value = first.for_tone(tone)
                    assert value.strip()
                    assert "None" not in value
                    assert "undefined" not in value


class TestMissingInfo:
    def test_only_for_appointments(self):
        assert find_missing_info("Mi mandi il file?") == []

    def test_day_without_time(self):
        assert find_missing_info("Appuntamento domani in Piazza") == ["orario preciso"]

    def test_everything_present(self):
        assert find_missing_info("Appuntamento domani alle 10 presso Bar Roma") == []

    def test_location_question_counts_as_location(self):
        assert find_missing_info("Ci vediamo lunedì alle 9, dove preferisci?") == []


class TestEmailSubject:
    def test_subject_prefix_by_context(self):
        text = "Va bene, confermo"
        assert generate_email_subject(text, ContextType.WORK) == "Re: Conferma ricezione"
        assert generate_email_subject(text, ContextType.FAMILY) == "Conferma ricezione"

    def test_fallback_subject(self):
        assert generate_email_subject("ok", ContextType.OTHER) == "Re: Risposta"
