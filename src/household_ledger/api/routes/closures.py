import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from household_ledger.api.dependencies import get_service
from household_ledger.api.schemas import CloseMonthRequest
from household_ledger.manager import LedgerService

router = APIRouter(prefix="/api/closed-months", tags=["closure"])


@router.get("")
async def list_closed_months(
    service: Annotated[LedgerService, Depends(get_service)],
) -> list[str]:
    return await asyncio.to_thread(service.list_closed_months)


@router.post("")
async def close_month(
    req: CloseMonthRequest,
    service: Annotated[LedgerService, Depends(get_service)],
) -> list[str]:
    return await asyncio.to_thread(service.close_month, req.month)


@router.delete("")
async def reopen_month(
    month: str,
    service: Annotated[LedgerService, Depends(get_service)],
) -> list[str]:
    return await asyncio.to_thread(service.reopen_month, month)
