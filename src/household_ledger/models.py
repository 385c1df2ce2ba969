from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from household_ledger.domain.competency import normalize_competency
from household_ledger.domain.errors import InvalidCompetency


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class PaymentMethod(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    CASH = "cash"
    PIX = "pix"


def _optional_competency(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return normalize_competency(value)
    except InvalidCompetency as exc:
        raise ValueError(exc.message) from exc


def _check_card(payment_method: PaymentMethod, credit_card_ref: Optional[str]) -> None:
    if payment_method == PaymentMethod.CREDIT and not credit_card_ref:
        raise ValueError("credit_card_ref is required when payment_method is 'credit'")
    if payment_method != PaymentMethod.CREDIT and credit_card_ref:
        raise ValueError("credit_card_ref is only allowed when payment_method is 'credit'")


class TransactionFields(BaseModel):
    """Descriptive fields shared by transactions and recurring templates."""

    type: TransactionType = TransactionType.EXPENSE
    payment_method: PaymentMethod = PaymentMethod.DEBIT
    credit_card_ref: Optional[str] = None
    person: Optional[str] = None
    category: Optional[str] = None
    description: str = ""

    @model_validator(mode="after")
    def _credit_requires_card(self):
        _check_card(self.payment_method, self.credit_card_ref)
        return self


class TransactionPayload(TransactionFields):
    date: date
    value: Decimal = Field(gt=0, decimal_places=2)
    competency: Optional[str] = None  # MM/YYYY, defaults to the month of `date`

    @field_validator("competency")
    @classmethod
    def _normalize_competency(cls, value: Optional[str]) -> Optional[str]:
        return _optional_competency(value)


class Transaction(TransactionFields):
    id: Optional[int] = None  # assigned by the store
    date: date
    value: Decimal = Field(gt=0)
    competency: str
    installment_number: int = 1
    total_installments: int = 1
    group_id: Optional[str] = None
    source_template_id: Optional[int] = None

    @property
    def is_installment(self) -> bool:
        return self.group_id is not None


class RecurringTemplatePayload(TransactionFields):
    value: Decimal = Field(gt=0, decimal_places=2)
    day_of_month: int = Field(default=1, ge=1, le=31)
    start_date: date
    end_date: Optional[date] = None
    active: bool = True
    base_competency: Optional[str] = None  # MM/YYYY, first month the template may fill

    @field_validator("base_competency")
    @classmethod
    def _normalize_base_competency(cls, value: Optional[str]) -> Optional[str]:
        return _optional_competency(value)

    @model_validator(mode="after")
    def _window_is_ordered(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class RecurringTemplate(RecurringTemplatePayload):
    id: Optional[int] = None


class GenerationResult(BaseModel):
    competency: str
    generated: list[Transaction] = []
    skipped: list[int] = []
    reasons: dict[int, str] = {}


class InstallmentPreview(BaseModel):
    total_value: Decimal
    installments: int
    first_competency: str
    values: list[Decimal]
    competencies: list[str]
