from fastapi import HTTPException, Request

from household_ledger.manager import LedgerService


def get_service(request: Request) -> LedgerService:
    service = getattr(request.app.state, "service", None)
    if not service:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return service
