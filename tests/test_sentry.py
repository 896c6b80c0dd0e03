"""Tests for Sentry error tracking integration.

Error tracking stays off without a DSN, and events never carry secrets or
message content.
"""

from unittest.mock import patch

import azione.sentry
from azione.sentry import (
    _before_send,
    _scrub_dict,
    capture_exception,
    flush,
    init_sentry,
    is_enabled,
    set_tag,
)


# ============================================================
# Test Initialization
# ============================================================


class TestSentryInit:
    """Test Sentry initialization without a DSN."""

    def setup_method(self) -> None:
        """Reset module state before each test."""
        azione.sentry._initialized = False

    def test_is_enabled_before_init(self) -> None:
        assert is_enabled() is False

    def test_init_without_dsn_returns_false(self) -> None:
        """init_sentry with an empty DSN should return False."""
        result = init_sentry(dsn="")
        assert result is False
        assert is_enabled() is False

    def test_init_with_none_dsn_reads_settings(self) -> None:
        """init_sentry(None) falls back to the configured DSN."""
        with patch.object(azione.sentry.settings, "sentry_dsn", ""):
            assert init_sentry(dsn=None) is False

    def test_init_with_dsn_calls_sdk(self) -> None:
        with patch("azione.sentry.sentry_sdk.init") as sdk_init:
            result = init_sentry(dsn="https://key@sentry.example/1", environment="test")

        assert result is True
        assert is_enabled() is True
        kwargs = sdk_init.call_args.kwargs
        assert kwargs["environment"] == "test"
        assert kwargs["send_default_pii"] is False
        assert kwargs["before_send"] is _before_send

        azione.sentry._initialized = False


# ============================================================
# Test Data Scrubbing
# ============================================================


class TestDataScrubbing:
    """Test sensitive data scrubbing."""

    def test_scrub_token(self) -> None:
        data = {"token": "secret123", "name": "test"}
        _scrub_dict(data)
        assert data["token"] == "[REDACTED]"
        assert data["name"] == "test"

    def test_scrub_message_content(self) -> None:
        """Message text and sender details are personal data."""
        data = {
            "raw_text": "Ciao, puoi chiamarmi domani?",
            "person_name": "Anna",
            "role": "Professoressa",
            "context_type": "università",
        }
        _scrub_dict(data)
        assert data["raw_text"] == "[REDACTED]"
        assert data["person_name"] == "[REDACTED]"
        assert data["role"] == "[REDACTED]"
        assert data["context_type"] == "università"

    def test_scrub_nested_dicts(self) -> None:
        data = {
            "input": {
                "raw_text": "segreto",
                "source_type": "Email",
            },
            "api_key": "also_secret",
        }
        _scrub_dict(data)
        assert data["input"]["raw_text"] == "[REDACTED]"
        assert data["input"]["source_type"] == "Email"
        assert data["api_key"] == "[REDACTED]"

    def test_scrub_case_insensitive(self) -> None:
        data = {"TOKEN": "secret", "Sentry_DSN": "https://xxx@sentry.io/123"}
        _scrub_dict(data)
        assert data["TOKEN"] == "[REDACTED]"
        assert data["Sentry_DSN"] == "[REDACTED]"


# ============================================================
# Test Before Send Filter
# ============================================================


class TestBeforeSend:
    """Test the before_send filter callback."""

    def test_filters_validation_errors(self) -> None:
        """Invalid input is answered with a 422 and never reported."""

        class ValidationError(Exception):
            pass

        event: dict = {"exception": {}}
        hint = {"exc_info": (ValidationError, ValidationError("blank"), None)}

        assert _before_send(event, hint) is None

    def test_filters_request_validation_errors(self) -> None:
        class RequestValidationError(Exception):
            pass

        event: dict = {"exception": {}}
        hint = {"exc_info": (RequestValidationError, RequestValidationError(), None)}

        assert _before_send(event, hint) is None

    def test_passes_other_exceptions(self) -> None:
        event: dict = {"exception": {}}
        hint = {"exc_info": (RuntimeError, RuntimeError("error"), None)}

        assert _before_send(event, hint) is event

    def test_scrubs_request_data(self) -> None:
        event = {
            "request": {
                "headers": {"authorization": "Bearer xxx"},
                "data": {"raw_text": "Vediamoci domani", "context_type": "lavoro"},
            }
        }

        result = _before_send(event, {})
        assert result is not None
        assert result["request"]["headers"]["authorization"] == "[REDACTED]"
        assert result["request"]["data"]["raw_text"] == "[REDACTED]"
        assert result["request"]["data"]["context_type"] == "lavoro"

    def test_scrubs_breadcrumb_data(self) -> None:
        event = {
            "breadcrumbs": {
                "values": [
                    {"data": {"person_name": "Marco", "msg": "ok"}},
                    {"data": {"password": "hunter2"}},
                ]
            }
        }

        result = _before_send(event, {})
        assert result is not None
        assert result["breadcrumbs"]["values"][0]["data"]["person_name"] == "[REDACTED]"
        assert result["breadcrumbs"]["values"][0]["data"]["msg"] == "ok"
        assert result["breadcrumbs"]["values"][1]["data"]["password"] == "[REDACTED]"


# ============================================================
# Test Helpers (no-ops when disabled)
# ============================================================


class TestDisabledHelpers:
    def setup_method(self) -> None:
        azione.sentry._initialized = False

    def test_set_tag_when_not_initialized(self) -> None:
        with patch("azione.sentry.sentry_sdk.set_tag") as sdk_set_tag:
            set_tag("surface", "api")
        sdk_set_tag.assert_not_called()

    def test_capture_exception_when_not_initialized(self) -> None:
        assert capture_exception(Exception("test")) is None

    def test_flush_when_not_initialized(self) -> None:
        with patch("azione.sentry.sentry_sdk.flush") as sdk_flush:
            flush()
        sdk_flush.assert_not_called()


class TestConfigIntegration:
    """Test Sentry integration with settings."""

    def test_settings_has_sentry_property(self) -> None:
        from azione.config import Settings

        assert Settings(sentry_dsn="").has_sentry is False
        assert Settings(sentry_dsn="https://xxx@sentry.io/123").has_sentry is True

    def test_sentry_in_dependencies(self) -> None:
        """sentry-sdk should be in project dependencies."""
        import tomllib
        from pathlib import Path

        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject, "rb") as f:
            config = tomllib.load(f)

        deps = config["project"]["dependencies"]
        assert any("sentry-sdk" in d for d in deps), "sentry-sdk not in dependencies"
