import asyncio
from datetime import date
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from household_ledger.api.dependencies import get_service
from household_ledger.api.schemas import DeleteGroupResponse, ReplanGroupRequest
from household_ledger.manager import LedgerService
from household_ledger.models import InstallmentPreview, Transaction

router = APIRouter(prefix="/api/installments", tags=["installments"])


@router.get("/preview", response_model=InstallmentPreview)
async def preview_installments(
    service: Annotated[LedgerService, Depends(get_service)],
    total_value: Annotated[Decimal, Query(gt=0)],
    purchase_date: date,
    installments: int = 1,
) -> InstallmentPreview:
    return service.preview_installments(total_value, purchase_date, installments)


@router.get("/{group_id}", response_model=list[Transaction])
async def list_installments(
    group_id: str,
    service: Annotated[LedgerService, Depends(get_service)],
) -> list[Transaction]:
    return await asyncio.to_thread(service.list_installments, group_id)


@router.put("/{group_id}", response_model=list[Transaction])
async def replan_group(
    group_id: str,
    req: ReplanGroupRequest,
    service: Annotated[LedgerService, Depends(get_service)],
) -> list[Transaction]:
    return await asyncio.to_thread(
        service.replan_group,
        group_id,
        new_total=req.new_total_value,
        new_purchase_date=req.new_purchase_date,
    )


@router.delete("/{group_id}", response_model=DeleteGroupResponse)
async def delete_group(
    group_id: str,
    service: Annotated[LedgerService, Depends(get_service)],
) -> DeleteGroupResponse:
    deleted = await asyncio.to_thread(service.delete_group, group_id)
    return DeleteGroupResponse(group_id=group_id, deleted=deleted)
