"""Messaggio Azione services module.

Intent detection, date parsing, task/reply/event/next-step generation and
the analysis lifecycle. Imports are lazy so that importing one service does
not pull in the storage layer.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Intent
    "DetectedIntent": ("azione.services.intent", "DetectedIntent"),
    "IntentDetector": ("azione.services.intent", "IntentDetector"),
    "IntentType": ("azione.services.intent", "IntentType"),
    "detect_intents": ("azione.services.intent", "detect_intents"),
    "get_primary_intent": ("azione.services.intent", "get_primary_intent"),
    # Dates
    "ItalianDateParser": ("azione.services.dates", "ItalianDateParser"),
    "ParsedDateTime": ("azione.services.dates", "ParsedDateTime"),
    "extract_all_dates": ("azione.services.dates", "extract_all_dates"),
    "get_date_parser": ("azione.services.dates", "get_date_parser"),
    "parse_date": ("azione.services.dates", "parse_date"),
    "parse_time": ("azione.services.dates", "parse_time"),
    # Generators
    "EventExtractor": ("azione.services.events", "EventExtractor"),
    "extract_calendar_event": ("azione.services.events", "extract_calendar_event"),
    "TaskGenerator": ("azione.services.tasks", "TaskGenerator"),
    "generate_tasks": ("azione.services.tasks", "generate_tasks"),
    "ReplyGenerator": ("azione.services.replies", "ReplyGenerator"),
    "generate_replies": ("azione.services.replies", "generate_replies"),
    "generate_email_subject": ("azione.services.replies", "generate_email_subject"),
    "NextStepGenerator": ("azione.services.next_step", "NextStepGenerator"),
    "generate_next_step": ("azione.services.next_step", "generate_next_step"),
    # Orchestrator
    "AnalyzerOptions": ("azione.services.analyzer", "AnalyzerOptions"),
    "MessageAnalyzer": ("azione.services.analyzer", "MessageAnalyzer"),
    "analyze": ("azione.services.analyzer", "analyze"),
    # Lifecycle
    "AnalysisNotFoundError": ("azione.services.analyses", "AnalysisNotFoundError"),
    "AnalysisService": ("azione.services.analyses", "AnalysisService"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))
