from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from household_ledger.models import TransactionPayload


class CreateTransactionRequest(TransactionPayload):
    installments: int = 1


class ReplanGroupRequest(BaseModel):
    new_total_value: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    new_purchase_date: Optional[date] = None


class CloseMonthRequest(BaseModel):
    month: str


class DeleteGroupResponse(BaseModel):
    group_id: str
    deleted: int


class ErrorResponse(BaseModel):
    error: str
    kind: str
    detail: str
