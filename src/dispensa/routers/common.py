"""Helpers shared by the API routers."""

from fastapi import HTTPException, status

from dispensa.results import OperationResult, OperationStatus

STATUS_CODES: dict[OperationStatus, int] = {
    OperationStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OperationStatus.FETCH_FAILED: status.HTTP_502_BAD_GATEWAY,
    OperationStatus.DUPLICATE: status.HTTP_409_CONFLICT,
    OperationStatus.INVALID: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def raise_for_result(result: OperationResult) -> OperationResult:
    """Turn a failed operation into the matching HTTP error."""
    if result.ok:
        return result
    raise HTTPException(
        status_code=STATUS_CODES.get(result.status, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.message or result.status.value,
    )
