"""Export API: thin routes delegating to DataExportService.

The selected project comes from the X-Project-ID header and the user from
the Firebase ID token. Single exports come back as file downloads; batch
exports are written to the output directory and answer with a summary.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from passdesk.api.v1.dependencies import (
    get_batch_export_service,
    get_download_sink,
    get_export_service,
    get_identity,
    get_project_selection,
)
from passdesk.application.use_cases.data_export import DataExportService
from passdesk.core.limiter import limit_batch_exports, limit_exports
from passdesk.domain.exceptions import DeliveryException
from passdesk.domain.value_objects.categories import parse_category, parse_format
from passdesk.infrastructure.delivery.sinks import MemoryDeliverySink
from passdesk.infrastructure.security.context import HeaderProjectSelection, RequestIdentity
from passdesk.schemas.export import (
    BatchSummaryResponse,
    CollectionCheckResponse,
    ProjectDataCheckResponse,
    ProjectUserResponse,
    SeparateExportRequest,
    UsersExportRequest,
)

router = APIRouter()


@router.get("/users", response_model=list[ProjectUserResponse])
async def list_project_users(
    service: Annotated[DataExportService, Depends(get_export_service)],
):
    """List the selected project's members available for export."""
    users = await service.list_project_users()
    return [ProjectUserResponse.from_user(u) for u in users]


@router.get("/check", response_model=ProjectDataCheckResponse)
async def check_project_data(
    service: Annotated[DataExportService, Depends(get_export_service)],
    project: Annotated[HeaderProjectSelection, Depends(get_project_selection)],
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    user_id: str | None = None,
):
    """Count documents per project collection, in total and for one user (default: caller)."""
    checks = await service.check_project_data(user_id)
    return ProjectDataCheckResponse(
        project_id=project.current_project_id(),
        user_id=user_id or identity.current_user_id(),
        collections={c.value: CollectionCheckResponse.from_check(r) for c, r in checks.items()},
    )


@router.post("/separate", response_model=BatchSummaryResponse)
@limit_batch_exports
async def export_all_separately(
    request: Request,
    body: SeparateExportRequest,
    service: Annotated[DataExportService, Depends(get_batch_export_service)],
):
    """Export each category of the caller's data as its own file (empty ones skipped)."""
    summary = await service.export_all_separately(body.format, body.categories)
    return BatchSummaryResponse.from_summary(summary)


@router.post("/users", response_model=BatchSummaryResponse)
@limit_batch_exports
async def export_users(
    request: Request,
    body: UsersExportRequest,
    service: Annotated[DataExportService, Depends(get_batch_export_service)],
):
    """Export the same categories for several project members, one file per user."""
    summary = await service.export_users(body.user_ids, body.format, body.categories)
    return BatchSummaryResponse.from_summary(summary)


@router.get(
    "/{category}",
    response_class=Response,
    responses={200: {"content": {"application/json": {}, "text/csv": {}}}},
)
@limit_exports
async def download_export(
    request: Request,
    category: str,
    service: Annotated[DataExportService, Depends(get_export_service)],
    sink: Annotated[MemoryDeliverySink, Depends(get_download_sink)],
    export_format: Annotated[str, Query(alias="format")] = "json",
) -> Response:
    """Export one category (or ``all``) of the caller's data as a file download."""
    outcome = await service.export_data(parse_category(category), parse_format(export_format))
    delivered = sink.first()
    if delivered is None:
        raise DeliveryException(outcome.filename or category, "no file produced")
    return Response(
        content=delivered.content.encode("utf-8"),
        media_type=f"{delivered.mime_type}; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{delivered.filename}"',
            "X-Record-Count": str(outcome.record_count),
        },
    )
