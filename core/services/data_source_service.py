# =============================================================================
# core/services/data_source_service.py - Data Source Business Logic
# =============================================================================
# Registers data sources on a project and runs the ingestion processors.
#
# Processing flow:
#   pending -> processing -> ready   (row_count + processing metadata saved)
#                        \-> error   (error message saved in source_config)
#
# File-backed kinds (csv, json, text) take the uploaded file content as
# input; api sources take their stored source_config merged with the
# request config.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core.models.data_source import DataSourceCreate, DataSourceStatus, DataSourceType
from core.models.ingestion import PreviewResult, ProcessingResult
from core.services.project_service import ProjectService
from ingestion import FILE_SOURCE_TYPES, get_data_processor, preview
from app.exceptions import (
    DataProcessingError,
    DataSourceNotFoundError,
    NoFileProvidedError,
)

logger = logging.getLogger(__name__)

# Records echoed back in the process response
SAMPLE_RECORD_COUNT = 3


def _is_file_source(source_type: str) -> bool:
    return source_type in {t.value for t in FILE_SOURCE_TYPES}


class DataSourceService:
    """Service for data source registration and processing."""

    @staticmethod
    def create_data_source(
        project_id: str | UUID,
        data: DataSourceCreate,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Register a data source on a project in pending status.

        Raises:
            ProjectNotFoundError: If project doesn't exist or user doesn't own it
        """
        ProjectService.get_project(project_id, user_id=user_id)
        client = SupabaseClient.get_client()

        row = {
            "project_id": normalize_uuid(project_id),
            "name": data.name,
            "type": data.type.value,
            "status": DataSourceStatus.PENDING.value,
            "row_count": 0,
            "source_config": data.source_config,
        }

        try:
            response = client.table("data_sources").insert(row).execute()

            if response.data:
                data_source = response.data[0]
                logger.info(f"Created {data.type.value} data source {data_source['id']} on project {project_id}")
                return data_source

            raise Exception("Insert returned no data")

        except Exception as e:
            logger.error(f"Failed to create data source: {e}")
            raise

    @staticmethod
    def list_data_sources(
        project_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> list[dict[str, Any]]:
        """List a project's data sources, newest first."""
        ProjectService.get_project(project_id, user_id=user_id)
        client = SupabaseClient.get_client()

        response = (
            client.table("data_sources")
            .select("*")
            .eq("project_id", normalize_uuid(project_id))
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    @staticmethod
    def get_data_source(
        data_source_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Get a data source, checking ownership through its project.

        Raises:
            DataSourceNotFoundError: If missing or owned by someone else
        """
        data_source = SupabaseClient.fetch_data_source(data_source_id)

        if not data_source:
            raise DataSourceNotFoundError(str(data_source_id))

        owner = (data_source.get("projects") or {}).get("user_id")
        if user_id and str(owner) != str(user_id):
            raise DataSourceNotFoundError(str(data_source_id))

        return data_source

    @staticmethod
    def process_data_source(
        data_source_id: str | UUID,
        content: str | None,
        config: dict[str, Any] | None = None,
        user_id: UUID | str | None = None,
        api_timeout: float = 30.0,
    ) -> dict[str, Any]:
        """
        Run the matching processor and record the outcome.

        Args:
            data_source_id: The data source UUID
            content: Uploaded file text (required for csv/json/text)
            config: Processor config from the request
            user_id: If provided, verify ownership
            api_timeout: Timeout for api sources

        Returns:
            {"total_records", "errors", "metadata", "sample_records"}

        Raises:
            DataSourceNotFoundError: Missing or not owned
            UnsupportedSourceTypeError: database (or unknown) source type
            NoFileProvidedError: File-backed source without a file
            DataProcessingError: Processor produced no records
        """
        data_source = DataSourceService.get_data_source(data_source_id, user_id=user_id)
        source_type = data_source["type"]
        source_config = data_source.get("source_config") or {}
        config = config or {}

        processor = get_data_processor(source_type, timeout=api_timeout)

        DataSourceService._update(data_source_id, {"status": DataSourceStatus.PROCESSING.value})

        try:
            if _is_file_source(source_type):
                if content is None:
                    raise NoFileProvidedError(source_type)
                result: ProcessingResult = processor.process(content, {**source_config, **config})
            else:
                result = processor.process(source_config, config)

            if not result.success:
                raise DataProcessingError(result.errors)

        except Exception as e:
            logger.warning(f"Processing data source {data_source_id} failed: {e}")
            DataSourceService._update(data_source_id, {
                "status": DataSourceStatus.ERROR.value,
                "source_config": {**source_config, "error": str(e) or "Processing failed"},
            })
            raise

        DataSourceService._update(data_source_id, {
            "status": DataSourceStatus.READY.value,
            "row_count": result.total_records,
            "source_config": {
                **source_config,
                "processing_metadata": result.metadata,
                "processed_at": utc_now_iso(),
            },
        })
        logger.info(f"Data source {data_source_id} ready: {result.total_records} records, {len(result.errors)} errors")

        return {
            "total_records": result.total_records,
            "errors": result.errors,
            "metadata": result.metadata,
            "sample_records": [r.model_dump() for r in result.records[:SAMPLE_RECORD_COUNT]],
        }

    @staticmethod
    def preview_data(
        source_type: str,
        content: str | None,
        config: dict[str, Any] | None = None,
        max_chars: int = 10_000,
        api_timeout: float = 30.0,
    ) -> PreviewResult:
        """
        Process a bounded sample without touching the database.

        Raises:
            UnsupportedSourceTypeError: database (or unknown) source type
            NoFileProvidedError: File-backed source without a file
        """
        config = config or {}

        processor = get_data_processor(source_type, timeout=api_timeout)
        if source_type == DataSourceType.API.value:
            return preview(processor, config, {})

        if content is None:
            raise NoFileProvidedError(source_type)
        return preview(processor, content, config, max_chars=max_chars)

    @staticmethod
    def _update(data_source_id: str | UUID, update_data: dict[str, Any]) -> None:
        client = SupabaseClient.get_client()
        client.table("data_sources").update(update_data).eq(
            "id", normalize_uuid(data_source_id)
        ).execute()
