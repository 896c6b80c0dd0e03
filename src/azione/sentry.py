"""Sentry error tracking for the API and CLI.

Usage:
    from azione.sentry import init_sentry, set_tag

    if init_sentry():
        set_tag("surface", "cli")

Message text and sender details are scrubbed from every event before it
leaves the process.
"""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any, cast

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from azione.config import settings

if TYPE_CHECKING:
    from sentry_sdk._types import Event, Hint

logger = logging.getLogger(__name__)

# Module state
_initialized = False

SENSITIVE_KEYS = {
    "token",
    "api_key",
    "apikey",
    "secret",
    "password",
    "authorization",
    "cookie",
    "sentry_dsn",
}

# Message content is personal data and never leaves the machine
MESSAGE_KEYS = {"raw_text", "person_name", "role"}


def init_sentry(
    dsn: str | None = None,
    environment: str | None = None,
    release: str | None = None,
    traces_sample_rate: float = 0.1,
) -> bool:
    """Initialize the Sentry SDK.

    Args:
        dsn: Sentry DSN. If None, read from settings. An empty DSN disables
             Sentry, which is the expected setup in development.
        environment: Environment name; defaults to settings.
        release: Release version. If None, taken from the package metadata.
        traces_sample_rate: Sample rate for performance tracing (0.0-1.0).

    Returns:
        True if Sentry was initialized, False if skipped.
    """
    global _initialized

    if _initialized:
        logger.debug("Sentry already initialized")
        return True

    if dsn is None:
        dsn = settings.sentry_dsn

    if not dsn:
        logger.info("No AZIONE_SENTRY_DSN configured, error tracking disabled")
        return False

    environment = environment or settings.sentry_environment

    if release is None:
        try:
            release = f"messaggio-azione@{version('messaggio-azione')}"
        except PackageNotFoundError:
            release = "messaggio-azione@unknown"

    logging_integration = LoggingIntegration(
        level=logging.INFO,  # breadcrumbs
        event_level=logging.ERROR,
    )

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        integrations=[logging_integration],
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=_before_send,
    )

    _initialized = True
    logger.info(f"Sentry initialized: environment={environment}, release={release}")
    return True


def _before_send(event: Event, hint: Hint) -> Event | None:
    """Drop expected errors and scrub secrets and message text."""
    if "exc_info" in hint:
        exc_type, _, _ = hint["exc_info"]

        # Invalid input is answered with a 422, not an alert
        if exc_type.__name__ in ("ValidationError", "RequestValidationError"):
            return None

    if "request" in event:
        _scrub_dict(cast(dict[str, Any], event["request"]))

    if "breadcrumbs" in event:
        breadcrumbs = cast(dict[str, Any], event["breadcrumbs"])
        if "values" in breadcrumbs:
            for breadcrumb in breadcrumbs["values"]:
                if "data" in breadcrumb:
                    _scrub_dict(breadcrumb["data"])

    return event


def _scrub_dict(data: dict[str, Any]) -> None:
    """Scrub sensitive keys from a dictionary in-place."""
    for key in list(data.keys()):
        if key.lower() in SENSITIVE_KEYS or key.lower() in MESSAGE_KEYS:
            data[key] = "[REDACTED]"
        elif isinstance(data[key], dict):
            _scrub_dict(data[key])


def set_tag(key: str, value: str) -> None:
    if not _initialized:
        return

    sentry_sdk.set_tag(key, value)


def capture_exception(exception: BaseException | None = None) -> str | None:
    """Capture an exception and send to Sentry.

    Returns:
        Event ID if captured, None otherwise.
    """
    if not _initialized:
        return None

    return sentry_sdk.capture_exception(exception)


def flush(timeout: float = 2.0) -> None:
    """Flush pending Sentry events before shutdown."""
    if not _initialized:
        return

    sentry_sdk.flush(timeout=timeout)


def is_enabled() -> bool:
    return _initialized
