from datetime import date
from decimal import ROUND_DOWN, Decimal

from household_ledger.domain.competency import add_months, competency_of
from household_ledger.domain.errors import (
    InconsistentGroup,
    InvalidAmount,
    InvalidInstallmentCount,
)
from household_ledger.models import (
    InstallmentPreview,
    Transaction,
    TransactionFields,
    TransactionPayload,
)

CENT = Decimal("0.01")

_DESCRIPTIVE_FIELDS = tuple(TransactionFields.model_fields)


def validate_count(count: object) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInstallmentCount(f"Installment count must be an integer, got {count!r}.")
    if count < 1:
        raise InvalidInstallmentCount(f"Installment count must be at least 1, got {count}.")
    return count


def split_value(total: Decimal, count: int) -> list[Decimal]:
    """Split ``total`` into ``count`` cent-exact parts.

    Each part is ``total / count`` rounded down to the cent and the first part
    absorbs the leftover cents, so ``sum(parts) == total`` always holds.
    """
    validate_count(count)
    total = Decimal(total)
    if total <= 0:
        raise InvalidAmount(f"Total value must be positive, got {total}.")
    if total.quantize(CENT) != total:
        raise InvalidAmount(f"Total value {total} has fractions of a cent.")
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    if base <= 0:
        raise InvalidAmount(
            f"Total value {total} is smaller than one cent per installment ({count})."
        )
    first = total - base * (count - 1)
    return [first] + [base] * (count - 1)


def plan(
    payload: TransactionPayload,
    count: int = 1,
    group_id: str | None = None,
) -> list[Transaction]:
    """Build the unsaved transactions for a purchase split in ``count`` installments."""
    count = validate_count(count)
    start = payload.competency or competency_of(payload.date)
    fields = payload.model_dump(include=set(_DESCRIPTIVE_FIELDS))

    if count == 1:
        return [Transaction(
            **fields,
            date=payload.date,
            value=payload.value,
            competency=start,
        )]

    if not group_id:
        raise ValueError("group_id is required to plan more than one installment")

    values = split_value(payload.value, count)
    return [
        Transaction(
            **fields,
            date=payload.date,
            value=value,
            competency=add_months(start, index),
            installment_number=index + 1,
            total_installments=count,
            group_id=group_id,
        )
        for index, value in enumerate(values)
    ]


def check_group(members: list[Transaction]) -> list[Transaction]:
    """Return the group ordered by installment number or raise ``InconsistentGroup``."""
    if not members:
        raise InconsistentGroup("Installment group is empty.")

    ordered = sorted(members, key=lambda tx: tx.installment_number)
    group_ids = {tx.group_id for tx in ordered}
    if len(group_ids) != 1 or None in group_ids:
        raise InconsistentGroup(f"Installments disagree on group id: {sorted(map(str, group_ids))}.")
    group_id = ordered[0].group_id

    totals = {tx.total_installments for tx in ordered}
    if totals != {len(ordered)}:
        raise InconsistentGroup(
            f"Group {group_id} has {len(ordered)} members but total_installments {sorted(totals)}."
        )

    numbers = [tx.installment_number for tx in ordered]
    if numbers != list(range(1, len(ordered) + 1)):
        raise InconsistentGroup(f"Group {group_id} has installment numbers {numbers}.")

    return ordered


def replan(
    members: list[Transaction],
    new_total: Decimal | None = None,
    new_purchase_date: date | None = None,
) -> list[Transaction]:
    """Recompute an existing group with its size fixed.

    Descriptive fields come from installment #1; ids, group id and numbering
    are kept. Without a new date the current schedule start is kept.
    """
    ordered = check_group(members)
    first = ordered[0]

    total = new_total if new_total is not None else sum(tx.value for tx in ordered)
    if new_purchase_date is not None:
        purchase_date = new_purchase_date
        start = competency_of(new_purchase_date)
    else:
        purchase_date = first.date
        start = first.competency

    values = split_value(total, len(ordered))
    fields = first.model_dump(include=set(_DESCRIPTIVE_FIELDS))
    return [
        tx.model_copy(update={
            **fields,
            "date": purchase_date,
            "value": value,
            "competency": add_months(start, index),
        })
        for index, (tx, value) in enumerate(zip(ordered, values))
    ]


def preview(total: Decimal, purchase_date: date, count: int) -> InstallmentPreview:
    values = split_value(total, count)
    first_competency = competency_of(purchase_date)
    return InstallmentPreview(
        total_value=Decimal(total),
        installments=count,
        first_competency=first_competency,
        values=values,
        competencies=[add_months(first_competency, index) for index in range(count)],
    )
