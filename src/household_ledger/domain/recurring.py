from datetime import date
from enum import Enum

from household_ledger.domain.competency import clamp_day, months_between
from household_ledger.models import RecurringTemplate, Transaction, TransactionFields

_STAMP_FIELDS = set(TransactionFields.model_fields)


class ScheduleState(str, Enum):
    NOT_DUE = "not-due"
    DUE_NOT_GENERATED = "due-not-generated"
    GENERATED = "generated"


class SkipReason(str, Enum):
    INACTIVE = "inactive"
    OUT_OF_WINDOW = "out_of_window"
    ALREADY_GENERATED = "already_generated"


def scheduled_date(template: RecurringTemplate, competency: str) -> date:
    return clamp_day(competency, template.day_of_month)


def in_window(template: RecurringTemplate, when: date) -> bool:
    if when < template.start_date:
        return False
    return template.end_date is None or when <= template.end_date


def skip_reason(template: RecurringTemplate, competency: str) -> SkipReason | None:
    """Why ``template`` is not due in ``competency``, or None when it is due."""
    if not template.active:
        return SkipReason.INACTIVE
    if template.base_competency and months_between(template.base_competency, competency) < 0:
        return SkipReason.OUT_OF_WINDOW
    if not in_window(template, scheduled_date(template, competency)):
        return SkipReason.OUT_OF_WINDOW
    return None


def is_due(template: RecurringTemplate, competency: str) -> bool:
    return skip_reason(template, competency) is None


def state(template: RecurringTemplate, competency: str, existing: Transaction | None) -> ScheduleState:
    if existing is not None:
        return ScheduleState.GENERATED
    if is_due(template, competency):
        return ScheduleState.DUE_NOT_GENERATED
    return ScheduleState.NOT_DUE


def materialize(template: RecurringTemplate, competency: str) -> Transaction:
    """The single unsaved transaction a due template produces for ``competency``."""
    if template.id is None:
        raise ValueError("Only stored templates can be materialized")
    return Transaction(
        **template.model_dump(include=_STAMP_FIELDS),
        date=scheduled_date(template, competency),
        value=template.value,
        competency=competency,
        source_template_id=template.id,
    )
