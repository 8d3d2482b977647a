from fastapi import HTTPException, status

from homecare.repositories.errors import ConflictError, NotFoundError, RuleViolationError, StorageError


def to_http_error(exc: Exception, storage_detail: str) -> HTTPException:
    """Map a repository exception to the HTTP error the client should see."""
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, RuleViolationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=storage_detail)


REPOSITORY_ERRORS = (RuleViolationError, NotFoundError, StorageError)
