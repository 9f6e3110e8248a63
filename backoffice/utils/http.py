"""
HTTP helpers shared by the admin routes.

Responses use one envelope: {"success": bool, "message": str, ...}.
CatalogError subclasses are translated to envelopes by the handlers that
main.py registers.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse

from backoffice.exceptions import (
    AuthenticationRequired,
    CatalogDatabaseError,
    CatalogError,
    ConflictError,
    EmptySelectionError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

REQUESTOR_HEADER = "X-Requestor-Id"

_STATUS_BY_ERROR = (
    (AuthenticationRequired, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (EmptySelectionError, 400),
    (CatalogDatabaseError, 500),
)


def envelope(success: bool, message: str, **extra: Any) -> dict:
    return {"success": success, "message": message, **extra}


def failure_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(False, message, **extra))


def get_requestor_id(x_requestor_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Requestor id forwarded by the auth middleware, if any"""
    if x_requestor_id and x_requestor_id.strip():
        return x_requestor_id.strip()
    return None


def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = 400
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    return failure_response(status_code, exc.message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
