# =============================================================================
# app/routers/data_sources.py - Data Source Endpoints
# =============================================================================
# Register data sources on a project, process them, and preview input.
#
# Processing and preview take multipart form data:
#   file    the uploaded csv / json / text file (not used for api sources)
#   config  JSON object of processor settings, e.g. {"text_column": "body"}
#   type    (preview only) csv, json, text or api
# =============================================================================

import json
import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError, InvalidSourceConfigError
from core.models.data_source import DataSourceCreate
from core.services.data_source_service import DataSourceService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

def _parse_config(raw: str | None) -> dict[str, Any]:
    """Parse the multipart config field; absent or blank means {}."""
    if not raw or not raw.strip():
        return {}
    try:
        config = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidSourceConfigError(str(e))
    if not isinstance(config, dict):
        raise InvalidSourceConfigError("expected a JSON object")
    return config


async def _read_upload(file: UploadFile | None) -> str | None:
    """
    Validate and decode an uploaded file.

    Returns:
        File text, or None when no file was sent

    Raises:
        InvalidFileTypeError: Extension not in ALLOWED_EXTENSIONS
        FileTooLargeError: Larger than MAX_UPLOAD_SIZE_MB
    """
    if file is None:
        return None

    filename = file.filename or "upload.txt"
    file_ext = "." + filename.split(".")[-1].lower() if "." in filename else ""
    if file_ext not in settings.allowed_extensions_list:
        raise InvalidFileTypeError(filename, settings.allowed_extensions_list)

    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise FileTooLargeError(len(content) / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

    logger.info(f"Read upload: {filename} ({len(content)} bytes)")
    return content.decode("utf-8", errors="replace")


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/projects/{project_id}/data-sources", status_code=201)
async def create_data_source(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    body: DataSourceCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Register a data source on one of the caller's projects."""
    data_source = DataSourceService.create_data_source(str(project_id), body, user_id=user.id)
    return {"success": True, "data": data_source}


@router.get("/projects/{project_id}/data-sources")
async def list_data_sources(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """List a project's data sources."""
    data_sources = DataSourceService.list_data_sources(str(project_id), user_id=user.id)
    return {"success": True, "data": data_sources}


@router.post("/data-sources/{data_source_id}/process")
async def process_data_source(
    data_source_id: Annotated[UUID, Path(description="Data source UUID")],
    file: Annotated[UploadFile | None, File()] = None,
    config: Annotated[str | None, Form()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Run the data source through its processor.

    Moves the source to processing, then ready (with row_count) or error.
    Per-row problems are returned in `errors` without failing the call.
    """
    content = await _read_upload(file)
    result = DataSourceService.process_data_source(
        str(data_source_id),
        content,
        config=_parse_config(config),
        user_id=user.id,
        api_timeout=settings.API_SOURCE_TIMEOUT_SECONDS,
    )
    return {"success": True, "data": result}


@router.post("/data/preview")
async def preview_data(
    type: Annotated[str, Form(description="csv, json, text or api")],
    file: Annotated[UploadFile | None, File()] = None,
    config: Annotated[str | None, Form()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Preview how a file or API would be processed.

    Only the first PREVIEW_MAX_CHARS characters of a file are processed;
    at most five records and five errors are returned.
    """
    content = await _read_upload(file)
    result = DataSourceService.preview_data(
        type,
        content,
        config=_parse_config(config),
        max_chars=settings.PREVIEW_MAX_CHARS,
        api_timeout=settings.API_SOURCE_TIMEOUT_SECONDS,
    )
    return {"success": True, "data": result.model_dump()}
