"""Request-level dependencies and error mapping shared by the v1 endpoints."""

from typing import Optional

from fastapi import Header, HTTPException, status

from app.domain.accounting.exceptions import ConflictError, LedgerError, NotFoundError


def get_actor_id(x_actor_id: Optional[str] = Header(default=None, max_length=100)) -> Optional[str]:
    """
    Identity of the caller, taken from the ``X-Actor-Id`` header.

    Authentication happens upstream; the value is only recorded on the
    rows a request creates or posts.
    """
    return x_actor_id


def ledger_http_error(error: LedgerError) -> HTTPException:
    """Translate a domain error into the matching HTTP error."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
