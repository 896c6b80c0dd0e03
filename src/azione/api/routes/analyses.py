import logging
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from azione.api.dependencies import get_analysis_service
from azione.api.schemas import AnalysisListResponse, AnalysisUpdateRequest, DeleteResponse
from azione.export import (
    generate_analysis_markdown,
    generate_event_ics,
    generate_tasks_csv,
    generate_tasks_ics,
    slugify,
)
from azione.schemas import AnalysisInput, AnalysisRecord, ContextType, SourceType
from azione.services.analyses import AnalysisService

router = APIRouter(tags=["analyses"])
logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    csv = "csv"
    ics = "ics"
    tasks_ics = "tasks-ics"
    md = "md"


@router.post("/analyze", response_model=AnalysisRecord)
def analyze_message(
    payload: AnalysisInput,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisRecord:
    record = service.create(payload)
    logger.info(
        "Analysis created id=%s context=%s source=%s",
        record.id,
        payload.context_type.value,
        payload.source_type.value,
    )
    return record


@router.get("/analyses", response_model=AnalysisListResponse)
def list_analyses(
    context_type: ContextType | None = None,
    source_type: SourceType | None = None,
    search: str | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisListResponse:
    records, total = service.list(
        context_type=context_type,
        source_type=source_type,
        search=search,
        limit=limit,
        offset=offset,
    )
    return AnalysisListResponse(analyses=records, total=total, limit=limit, offset=offset)


@router.get("/analyses/{analysis_id}", response_model=AnalysisRecord)
def get_analysis(
    analysis_id: str,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisRecord:
    return service.get(analysis_id)


@router.patch("/analyses/{analysis_id}", response_model=AnalysisRecord)
def update_analysis(
    analysis_id: str,
    payload: AnalysisUpdateRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisRecord:
    return service.regenerate(
        analysis_id,
        context_type=payload.context_type,
        source_type=payload.source_type,
        person_name=payload.person_name,
        role=payload.role,
        regenerate_only=payload.regenerate_only,
    )


@router.delete("/analyses/{analysis_id}", response_model=DeleteResponse)
def delete_analysis(
    analysis_id: str,
    service: AnalysisService = Depends(get_analysis_service),
) -> DeleteResponse:
    service.delete(analysis_id)
    return DeleteResponse(success=True)


@router.post("/analyses/{analysis_id}/duplicate", response_model=AnalysisRecord)
def duplicate_analysis(
    analysis_id: str,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisRecord:
    return service.duplicate(analysis_id)


@router.get("/analyses/{analysis_id}/export/{fmt}")
def export_analysis(
    analysis_id: str,
    fmt: ExportFormat,
    service: AnalysisService = Depends(get_analysis_service),
) -> Response:
    record = service.get(analysis_id)
    short_id = record.id[:8]
    date_parser = service.date_parser()

    if fmt == ExportFormat.csv:
        content = generate_tasks_csv(record.result.tasks, with_bom=True, date_parser=date_parser)
        return _download(content, "text/csv; charset=utf-8", f"task-{short_id}.csv")

    if fmt == ExportFormat.ics:
        event = record.result.event
        if event is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Nessun evento da esportare",
            )
        filename = f"evento-{slugify(event.title) or short_id}.ics"
        return _download(generate_event_ics(event), "text/calendar; charset=utf-8", filename)

    if fmt == ExportFormat.tasks_ics:
        content = generate_tasks_ics(record.result.tasks, date_parser=date_parser)
        if content is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Nessuna scadenza da esportare",
            )
        return _download(content, "text/calendar; charset=utf-8", f"task-{short_id}.ics")

    content = generate_analysis_markdown(
        record.result,
        record.input.raw_text,
        person_name=record.input.person_name,
        generated_at=record.created_at,
        date_parser=date_parser,
    )
    return _download(content, "text/markdown; charset=utf-8", f"analisi-{short_id}.md")


def _download(content: str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
