import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from household_ledger.api.dependencies import get_service
from household_ledger.logger import get_logger
from household_ledger.manager import LedgerService
from household_ledger.models import GenerationResult, RecurringTemplate, RecurringTemplatePayload

logger = get_logger(__name__)

router = APIRouter(prefix="/api/recurring-transactions", tags=["recurring"])


@router.get("", response_model=list[RecurringTemplate])
async def list_templates(
    service: Annotated[LedgerService, Depends(get_service)],
) -> list[RecurringTemplate]:
    return await asyncio.to_thread(service.list_templates)


@router.post("", status_code=201, response_model=RecurringTemplate)
async def create_template(
    req: RecurringTemplatePayload,
    service: Annotated[LedgerService, Depends(get_service)],
) -> RecurringTemplate:
    return await asyncio.to_thread(service.create_template, req)


@router.post("/generate", response_model=GenerationResult)
async def generate_for_month(
    competency: str,
    service: Annotated[LedgerService, Depends(get_service)],
) -> GenerationResult:
    logger.info("[RECURRING] Generation requested for %s.", competency)
    return await asyncio.to_thread(service.generate_recurring, competency)


@router.get("/{template_id}", response_model=RecurringTemplate)
async def get_template(
    template_id: int,
    service: Annotated[LedgerService, Depends(get_service)],
) -> RecurringTemplate:
    return await asyncio.to_thread(service.get_template, template_id)


@router.put("/{template_id}", response_model=RecurringTemplate)
async def update_template(
    template_id: int,
    req: RecurringTemplatePayload,
    service: Annotated[LedgerService, Depends(get_service)],
) -> RecurringTemplate:
    return await asyncio.to_thread(service.update_template, template_id, req)


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: int,
    service: Annotated[LedgerService, Depends(get_service)],
) -> Response:
    await asyncio.to_thread(service.delete_template, template_id)
    return Response(status_code=204)
