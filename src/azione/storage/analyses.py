"""JSON-lines store for saved analyses.

One `AnalysisRecord` per line. Updates and deletes rewrite the whole file,
which is fine at the volume a single user produces.
"""

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from azione.config import settings
from azione.schemas import AnalysisRecord, ContextType, SourceType

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class AnalysisStore:
    def __init__(self, path: Path | None = None):
        self.path = path or settings.analyses_path
        self._lock = threading.Lock()

    def _ensure_dir(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> list[AnalysisRecord]:
        if not self.path.exists():
            return []

        records = []
        with open(self.path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    try:
                        records.append(AnalysisRecord.model_validate_json(line))
                    except (json.JSONDecodeError, ValidationError) as e:
                        logger.warning(f"Skipping malformed analysis entry: {e}")

        return records

    def _write_all(self, records: list[AnalysisRecord]) -> None:
        self._ensure_dir()

        with open(self.path, "w", encoding="utf-8") as f:
            for record in records:
                f.write(record.model_dump_json() + "\n")

    def save(self, record: AnalysisRecord) -> AnalysisRecord:
        with self._lock:
            self._ensure_dir()
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(record.model_dump_json() + "\n")

        logger.info(f"Saved analysis {record.id}")
        return record

    def get(self, record_id: str) -> AnalysisRecord | None:
        with self._lock:
            records = self._read_all()
        return next((r for r in records if r.id == record_id), None)

    def update(self, record: AnalysisRecord) -> AnalysisRecord | None:
        """Replace the stored record with the same id; None when missing."""
        with self._lock:
            records = self._read_all()
            for index, existing in enumerate(records):
                if existing.id == record.id:
                    records[index] = record
                    self._write_all(records)
                    logger.info(f"Updated analysis {record.id}")
                    return record
        return None

    def delete(self, record_id: str) -> bool:
        with self._lock:
            records = self._read_all()
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                return False
            self._write_all(remaining)

        logger.info(f"Deleted analysis {record_id}")
        return True

    def list(
        self,
        context_type: ContextType | None = None,
        source_type: SourceType | None = None,
        search: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> tuple[list[AnalysisRecord], int]:
        """Filtered page of records, newest first, plus the filtered total."""
        with self._lock:
            records = self._read_all()

        if context_type is not None:
            records = [r for r in records if r.input.context_type == context_type]
        if source_type is not None:
            records = [r for r in records if r.input.source_type == source_type]
        if search:
            needle = search.lower()
            records = [
                r
                for r in records
                if needle in r.input.raw_text.lower()
                or needle in (r.input.person_name or "").lower()
            ]

        # Stable sort keeps file order for records saved in the same instant
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[offset : offset + limit], len(records)

    def clear(self) -> None:
        with self._lock:
            if self.path.exists():
                self.path.unlink()
