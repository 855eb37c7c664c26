"""Health check endpoint."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from crm.database import Database, get_database
from crm.documents import DocumentStore, get_document_store
from crm.schemas.common import ApiResponse, HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=ApiResponse[HealthStatus])
def health_check(
    database: Annotated[Database, Depends(get_database)],
    documents: Annotated[DocumentStore, Depends(get_document_store)],
):
    """Report reachability of both datastores. Always answers 200."""
    mongodb = documents.ping()
    postgresql = database.ping()

    return ApiResponse[HealthStatus](
        data=HealthStatus(
            status="healthy" if mongodb and postgresql else "unhealthy",
            mongodb=mongodb,
            postgresql=postgresql,
            timestamp=datetime.now(UTC),
        ),
    )
