"""Presentation-layer dependency injection (composition root).

Builds the export use case from infrastructure implementations; routes
depend only on these dependencies, not on infra directly. Tests override
get_record_store, get_identity and the sink dependencies.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from passdesk.application.interfaces.repositories import IRecordStore
from passdesk.application.interfaces.services import IDeliverySink
from passdesk.application.use_cases.data_export import DataExportService
from passdesk.core.config import get_settings
from passdesk.domain.exceptions import StoreUnavailableException, ValidationException
from passdesk.infrastructure.delivery.sinks import DirectoryDeliverySink, MemoryDeliverySink
from passdesk.infrastructure.firebase.client import (
    get_firebase_project_id,
    get_firestore_client,
)
from passdesk.infrastructure.firebase.record_store import FirestoreRecordStore
from passdesk.infrastructure.security.context import HeaderProjectSelection, RequestIdentity
from passdesk.infrastructure.security.firebase_auth import verify_id_token

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)

# Output sub-directories are named after project and user ids.
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def get_record_store() -> IRecordStore:
    """Firestore record store; 503 (STORE_UNAVAILABLE) when Firestore is not configured."""
    client = get_firestore_client()
    if client is None:
        raise StoreUnavailableException()
    return FirestoreRecordStore(client)


async def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> RequestIdentity:
    """Signed-in user from the Firebase ID token; anonymous when missing or invalid.

    Anonymous identities raise NotAuthenticatedException (401) when an export
    needs the user, after the project check.
    """
    if not credentials:
        return RequestIdentity(None)
    settings = get_settings()
    try:
        claims = await verify_id_token(
            credentials.credentials,
            get_firebase_project_id(),
            verify=settings.auth_verify_tokens,
        )
    except ValueError as e:
        logger.info("Rejected ID token: %s", e)
        return RequestIdentity(None)
    return RequestIdentity(claims.get("sub"))


def get_project_selection(request: Request) -> HeaderProjectSelection:
    """Selected project from the project header (X-Project-ID by default)."""
    name = get_settings().project_header_name
    return HeaderProjectSelection(request.headers.get(name))


def get_download_sink() -> MemoryDeliverySink:
    """In-memory sink; the endpoint streams the collected file back."""
    return MemoryDeliverySink()


def _safe_segment(value: str, field: str) -> str:
    if not _SAFE_SEGMENT.match(value):
        raise ValidationException(f"Invalid {field} for output directory: {value!r}", field=field)
    return value


def get_batch_sink(
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    project: Annotated[HeaderProjectSelection, Depends(get_project_selection)],
) -> IDeliverySink:
    """Directory sink under EXPORT_OUTPUT_DIR/<project_id>/<user_id>."""
    project_id = _safe_segment(project.current_project_id(), "project_id")
    user_id = _safe_segment(identity.current_user_id(), "user_id")
    return DirectoryDeliverySink(Path(get_settings().export_output_dir) / project_id / user_id)


def _build_service(
    store: IRecordStore,
    identity: RequestIdentity,
    project: HeaderProjectSelection,
    sink: IDeliverySink,
) -> DataExportService:
    settings = get_settings()
    return DataExportService(
        store,
        identity,
        project,
        sink,
        query_limit=settings.export_query_limit,
        max_users_per_batch=settings.export_max_users_per_batch,
        include_summary_file=settings.export_include_summary_file,
    )


def get_export_service(
    store: Annotated[IRecordStore, Depends(get_record_store)],
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    project: Annotated[HeaderProjectSelection, Depends(get_project_selection)],
    sink: Annotated[MemoryDeliverySink, Depends(get_download_sink)],
) -> DataExportService:
    """Export use case delivering into the request's in-memory sink (downloads, listings)."""
    return _build_service(store, identity, project, sink)


def get_batch_export_service(
    store: Annotated[IRecordStore, Depends(get_record_store)],
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    project: Annotated[HeaderProjectSelection, Depends(get_project_selection)],
    sink: Annotated[IDeliverySink, Depends(get_batch_sink)],
) -> DataExportService:
    """Export use case writing files into the output directory."""
    return _build_service(store, identity, project, sink)
