import io
import json
from pathlib import Path

import pytest

import azione.config
from azione.cli import build_parser, main

GYM_MESSAGE = "Ciao, puoi chiamarmi domani alle 15 per il pagamento della quota?"
ACK_MESSAGE = "Grazie per l'aggiornamento, tutto chiaro."


@pytest.fixture(autouse=True)
def data_dir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.setattr(azione.config.settings, "data_dir", str(tmp_path))
    monkeypatch.setattr(azione.config.settings, "sentry_dsn", "")
    return tmp_path


class TestParser:
    def test_analyze_defaults(self):
        args = build_parser().parse_args(["analyze", "ciao"])
        assert args.context == "altro"
        assert args.source == "Altro"
        assert args.format == "json"
        assert args.save is False

    def test_rejects_unknown_context(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze", "ciao", "--context", "bar"])


class TestAnalyzeCommand:
    def test_json_output(self, capsys):
        assert main(["analyze", GYM_MESSAGE, "--context", "palestra"]) == 0

        result = json.loads(capsys.readouterr().out)
        assert result["tasks"][0]["title"] == (
            "Chiamarmi domani alle 15 per il pagamento della quota"
        )
        assert result["event"]["title"] == "Chiamata"

    def test_markdown_output(self, capsys):
        assert main(["analyze", GYM_MESSAGE, "--person", "Gio", "--format", "markdown"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("# Analisi Messaggio")
        assert "**Da:** Gio" in out

    def test_csv_output(self, capsys):
        assert main(["analyze", GYM_MESSAGE, "--format", "csv"]) == 0
        assert capsys.readouterr().out.startswith("Titolo,Priorità,Scadenza,Tag,Note\n")

    def test_tasks_ics_output(self, capsys):
        assert main(["analyze", GYM_MESSAGE, "--format", "tasks-ics"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("BEGIN:VCALENDAR")
        assert "DTSTART;VALUE=DATE:" in out

    def test_invalid_duration_exits_cleanly(self, capsys, monkeypatch):
        monkeypatch.setattr(azione.config.settings, "event_duration_call_min", 0)

        assert main(["analyze", "Ciao, puoi chiamarmi domani alle 15?"]) == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_ics_without_event(self, capsys):
        assert main(["analyze", ACK_MESSAGE, "--format", "ics"]) == 1
        assert "Nessun evento" in capsys.readouterr().err

    def test_blank_text(self, capsys):
        assert main(["analyze", "   "]) == 2
        assert "invalid input" in capsys.readouterr().err

    def test_reads_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(ACK_MESSAGE))
        assert main(["analyze", "-"]) == 0
        assert json.loads(capsys.readouterr().out)["event"] is None

    def test_save_stores_record(self, capsys, data_dir: Path):
        assert main(["analyze", GYM_MESSAGE, "--save"]) == 0

        captured = capsys.readouterr()
        record = json.loads(captured.out)
        assert f"Saved as {record['id']}" in captured.err
        assert (data_dir / "analyses.jsonl").exists()


class TestHistoryCommands:
    def test_empty_history(self, capsys):
        assert main(["history"]) == 0
        assert "No saved analyses" in capsys.readouterr().out

    def test_history_and_show(self, capsys):
        main(["analyze", GYM_MESSAGE, "--context", "palestra", "--save"])
        record_id = json.loads(capsys.readouterr().out)["id"]

        assert main(["history"]) == 0
        out = capsys.readouterr().out
        assert "Showing 1 of 1 analyses:" in out
        assert record_id in out
        assert "[Palestra]" in out

        assert main(["show", record_id, "--format", "ics"]) == 0
        assert capsys.readouterr().out.startswith("BEGIN:VCALENDAR")

    def test_history_filter(self, capsys):
        main(["analyze", GYM_MESSAGE, "--context", "palestra", "--save"])
        capsys.readouterr()

        assert main(["history", "--context", "lavoro"]) == 0
        assert "No saved analyses" in capsys.readouterr().out

    def test_show_missing(self, capsys):
        assert main(["show", "missing"]) == 1
        assert "not found" in capsys.readouterr().err


class TestCheckCommand:
    def test_valid_configuration(self, capsys):
        assert main(["check"]) == 0
        out = capsys.readouterr().out
        assert "[+] Timezone (Europe/Rome): OK" in out
        assert "[-] Sentry DSN: MISSING" in out

    def test_unknown_timezone(self, capsys, monkeypatch):
        monkeypatch.setattr(azione.config.settings, "timezone", "Mars/Olympus")
        assert main(["check"]) == 1
        assert "Invalid configuration" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "analyze" in capsys.readouterr().out
