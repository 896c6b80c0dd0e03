from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from azione.schemas import AnalysisRecord, ContextType, SourceType


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    service: str
    version: str
    timestamp: datetime


class AnalysisListResponse(BaseModel):
    analyses: list[AnalysisRecord]
    total: int
    limit: int
    offset: int


class AnalysisUpdateRequest(BaseModel):
    context_type: ContextType | None = None
    source_type: SourceType | None = None
    person_name: str | None = None
    role: str | None = None
    regenerate_only: Literal["tasks", "replies"] | None = None


class DeleteResponse(BaseModel):
    success: bool
