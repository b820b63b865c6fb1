"""Map a BatchResult to an HTTP status and the shared bulk response body."""

from typing import Any, Dict, Tuple

from fastapi import status

from nubestock.schemas.bulk import BulkError, BulkUploadData, BulkUploadResponse
from nubestock.services.batch_reconciler import BatchResult


def bulk_status_code(result: BatchResult) -> int:
    """201 when nothing failed, 400 when everything failed, 207 otherwise."""
    if result.failed == 0:
        return status.HTTP_201_CREATED
    if result.failed == result.total:
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_207_MULTI_STATUS


def bulk_summary(result: BatchResult, entity_label: str) -> str:
    return (
        f"Processed {result.total} {entity_label}(s): "
        f"{result.created} created, {result.updated} updated, {result.failed} failed"
    )


def build_bulk_response(result: BatchResult, entity_label: str) -> Tuple[int, BulkUploadResponse]:
    if result.created + result.updated + result.failed != result.total:
        raise ValueError("bulk outcome counts do not add up to the submitted total")

    body = BulkUploadResponse(
        success=result.failed == 0,
        message=bulk_summary(result, entity_label),
        data=BulkUploadData(
            total=result.total,
            created=result.created,
            updated=result.updated,
            failed=result.failed,
            records=result.records,
            errors=[BulkError(**failure.__dict__) for failure in result.errors],
        ),
    )
    return bulk_status_code(result), body


def bulk_response_content(body: BulkUploadResponse) -> Dict[str, Any]:
    return body.model_dump(mode="json")
