"""Message analysis orchestrator.

Runs the task, reply, event and next-step generators over one message.
The reference instant is resolved once so every component sees the same
"now".
"""

import logging
from dataclasses import dataclass
from datetime import datetime

import pytz

from azione.schemas import AnalysisInput, AnalysisResult
from azione.services.dates import ItalianDateParser
from azione.services.events import (
    DEFAULT_CALL_DURATION_MIN,
    DEFAULT_MEETING_DURATION_MIN,
    EventExtractor,
)
from azione.services.intent import IntentDetector
from azione.services.next_step import NextStepGenerator
from azione.services.replies import ReplyGenerator
from azione.services.tasks import TaskGenerator

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Rome"


@dataclass(frozen=True)
class AnalyzerOptions:
    call_duration_minutes: int = DEFAULT_CALL_DURATION_MIN
    meeting_duration_minutes: int = DEFAULT_MEETING_DURATION_MIN
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self):
        if self.call_duration_minutes <= 0 or self.meeting_duration_minutes <= 0:
            raise ValueError("Event durations must be positive")
        if self.timezone not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {self.timezone}")


class MessageAnalyzer:
    def __init__(self, options: AnalyzerOptions | None = None):
        self.options = options or AnalyzerOptions()
        self.detector = IntentDetector()
        self.date_parser = ItalianDateParser(self.options.timezone)
        self.task_generator = TaskGenerator(self.detector, self.date_parser)
        self.reply_generator = ReplyGenerator(self.detector)
        self.event_extractor = EventExtractor(self.detector, self.date_parser)
        self.next_step_generator = NextStepGenerator(self.detector)

    def analyze(self, data: AnalysisInput, now: datetime | None = None) -> AnalysisResult:
        now = self.date_parser.local_now(now)
        text = data.raw_text

        tasks = self.task_generator.generate(
            text,
            data.context_type,
            data.source_type,
            person_name=data.person_name,
            role=data.role,
            now=now,
        )
        replies = self.reply_generator.generate(
            text,
            data.context_type,
            data.source_type,
            person_name=data.person_name,
            role=data.role,
        )
        event = self.event_extractor.extract(
            text,
            person_name=data.person_name,
            call_duration_minutes=self.options.call_duration_minutes,
            meeting_duration_minutes=self.options.meeting_duration_minutes,
            now=now,
        )
        next_step = self.next_step_generator.generate(text, tasks, event, data.context_type)

        logger.info(
            "Analyzed message: %d task(s), event=%s, next step=%r",
            len(tasks),
            event is not None,
            next_step.action,
        )
        return AnalysisResult(tasks=tasks, replies=replies, event=event, next_step=next_step)


def analyze(
    data: AnalysisInput,
    options: AnalyzerOptions | None = None,
    now: datetime | None = None,
) -> AnalysisResult:
    """Analyze one message; never raises for a validated input."""
    return MessageAnalyzer(options).analyze(data, now)
