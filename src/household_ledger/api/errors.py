from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from household_ledger.api.schemas import ErrorResponse
from household_ledger.domain.errors import LedgerError
from household_ledger.logger import get_logger

logger = get_logger(__name__)

STATUS_BY_KIND = {
    "closed_month": 409,
    "invalid_input": 422,
    "not_found": 404,
    "conflict": 409,
    "corrupted": 500,
}


async def ledger_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, LedgerError):
        raise exc
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    if status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("[API] %s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    body = ErrorResponse(error=exc.code, kind=exc.kind, detail=exc.message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
