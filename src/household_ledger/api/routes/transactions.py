import asyncio
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from household_ledger.api.dependencies import get_service
from household_ledger.api.schemas import CreateTransactionRequest
from household_ledger.manager import LedgerService
from household_ledger.models import Transaction, TransactionPayload

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=list[Transaction])
async def list_transactions(
    service: Annotated[LedgerService, Depends(get_service)],
    competency: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Transaction]:
    return await asyncio.to_thread(
        service.list_transactions,
        competency=competency,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("", status_code=201, response_model=list[Transaction])
async def create_transaction(
    req: CreateTransactionRequest,
    service: Annotated[LedgerService, Depends(get_service)],
) -> list[Transaction]:
    payload = TransactionPayload(**req.model_dump(exclude={"installments"}))
    return await asyncio.to_thread(service.create_transaction, payload, req.installments)


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: int,
    service: Annotated[LedgerService, Depends(get_service)],
) -> Transaction:
    return await asyncio.to_thread(service.get_transaction, transaction_id)


@router.put("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: int,
    req: TransactionPayload,
    service: Annotated[LedgerService, Depends(get_service)],
) -> Transaction:
    return await asyncio.to_thread(service.update_transaction, transaction_id, req)


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int,
    service: Annotated[LedgerService, Depends(get_service)],
) -> Response:
    await asyncio.to_thread(service.delete_transaction, transaction_id)
    return Response(status_code=204)
