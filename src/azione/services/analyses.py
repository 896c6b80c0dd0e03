"""Analysis lifecycle: create, fetch, list, duplicate, regenerate, delete."""

import logging
from datetime import UTC, datetime
from typing import Literal

from azione.schemas import (
    AnalysisInput,
    AnalysisRecord,
    AnalysisResult,
    ContextType,
    SourceType,
    generate_id,
)
from azione.services.analyzer import AnalyzerOptions, analyze
from azione.services.dates import ItalianDateParser
from azione.storage import AnalysisStore, PreferencesStore

logger = logging.getLogger(__name__)

RegenerateOnly = Literal["tasks", "replies"]


class AnalysisNotFoundError(LookupError):
    def __init__(self, analysis_id: str):
        super().__init__(f"Analysis {analysis_id} not found")
        self.analysis_id = analysis_id


class AnalysisService:
    def __init__(
        self,
        store: AnalysisStore | None = None,
        preferences_store: PreferencesStore | None = None,
    ):
        self.store = store or AnalysisStore()
        self.preferences_store = preferences_store or PreferencesStore()

    def options(self) -> AnalyzerOptions:
        preferences = self.preferences_store.load()
        return AnalyzerOptions(
            call_duration_minutes=preferences.event_duration_call_min,
            meeting_duration_minutes=preferences.event_duration_meet_min,
            timezone=preferences.timezone,
        )

    def date_parser(self) -> ItalianDateParser:
        """Parser in the stored timezone, for formatting dates of stored analyses."""
        return ItalianDateParser(self.preferences_store.load().timezone)

    def create(self, data: AnalysisInput, now: datetime | None = None) -> AnalysisRecord:
        result = analyze(data, self.options(), now)
        record = AnalysisRecord(input=data, result=result)
        return self.store.save(record)

    def get(self, analysis_id: str) -> AnalysisRecord:
        record = self.store.get(analysis_id)
        if record is None:
            raise AnalysisNotFoundError(analysis_id)
        return record

    def list(
        self,
        context_type: ContextType | None = None,
        source_type: SourceType | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[AnalysisRecord], int]:
        return self.store.list(
            context_type=context_type,
            source_type=source_type,
            search=search,
            limit=limit,
            offset=offset,
        )

    def delete(self, analysis_id: str) -> None:
        if not self.store.delete(analysis_id):
            raise AnalysisNotFoundError(analysis_id)

    def duplicate(self, analysis_id: str) -> AnalysisRecord:
        original = self.get(analysis_id)
        copy = original.model_copy(
            update={"id": generate_id(), "created_at": datetime.now(UTC)},
            deep=True,
        )
        logger.info(f"Duplicated analysis {analysis_id} as {copy.id}")
        return self.store.save(copy)

    def regenerate(
        self,
        analysis_id: str,
        context_type: ContextType | None = None,
        source_type: SourceType | None = None,
        person_name: str | None = None,
        role: str | None = None,
        regenerate_only: RegenerateOnly | None = None,
        now: datetime | None = None,
    ) -> AnalysisRecord:
        """Re-run the analysis on the stored message with updated metadata.

        With `regenerate_only="tasks"` only the tasks and the next step are
        replaced; with `"replies"` only the replies. Otherwise the updated
        input and the whole result are stored.
        """
        record = self.get(analysis_id)

        updates = {
            "context_type": context_type,
            "source_type": source_type,
            "person_name": person_name,
            "role": role,
        }
        data = AnalysisInput.model_validate(
            record.input.model_dump() | {k: v for k, v in updates.items() if v is not None}
        )
        fresh = analyze(data, self.options(), now)

        if regenerate_only == "tasks":
            result = record.result.model_copy(
                update={"tasks": fresh.tasks, "next_step": fresh.next_step}
            )
            updated = record.model_copy(update={"result": result})
        elif regenerate_only == "replies":
            result = record.result.model_copy(update={"replies": fresh.replies})
            updated = record.model_copy(update={"result": result})
        else:
            updated = record.model_copy(update={"input": data, "result": fresh})

        logger.info(f"Regenerated analysis {analysis_id} ({regenerate_only or 'all'})")
        self.store.update(updated)
        return updated


def result_summary(result: AnalysisResult) -> str:
    """One-line summary used in listings."""
    parts = [f"{len(result.tasks)} task"]
    if result.event:
        parts.append("evento")
    parts.append(result.next_step.action)
    return " | ".join(parts)
