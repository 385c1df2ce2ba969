from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from household_ledger.domain import recurring
from household_ledger.domain.errors import MonthClosed
from household_ledger.domain.recurring import ScheduleState, SkipReason
from household_ledger.manager import LedgerService
from household_ledger.models import RecurringTemplate, RecurringTemplatePayload
from household_ledger.storage.memory import InMemoryLedgerStore


def _template(**kwargs) -> RecurringTemplate:
    data = {
        "id": 1,
        "description": "Rent",
        "category": "Housing",
        "value": Decimal("1500.00"),
        "day_of_month": 31,
        "start_date": date(2025, 1, 1),
    }
    data.update(kwargs)
    return RecurringTemplate(**data)


@pytest.fixture
def service() -> LedgerService:
    return LedgerService(InMemoryLedgerStore())


def _create(service: LedgerService, **kwargs) -> RecurringTemplate:
    data = _template(**kwargs).model_dump(exclude={"id"})
    return service.create_template(RecurringTemplatePayload(**data))


def test_day_31_clamps_in_february() -> None:
    tx = recurring.materialize(_template(), "02/2025")
    assert tx.date == date(2025, 2, 28)
    assert tx.competency == "02/2025"
    assert tx.source_template_id == 1
    assert (tx.installment_number, tx.total_installments, tx.group_id) == (1, 1, None)
    assert tx.description == "Rent" and tx.value == Decimal("1500.00")


def test_state_transitions() -> None:
    template = _template(start_date=date(2025, 3, 10), end_date=date(2025, 6, 5), day_of_month=5)
    assert recurring.state(template, "02/2025", None) == ScheduleState.NOT_DUE
    assert recurring.state(template, "03/2025", None) == ScheduleState.NOT_DUE  # 03/05 before start
    assert recurring.state(template, "04/2025", None) == ScheduleState.DUE_NOT_GENERATED
    assert recurring.state(template, "06/2025", None) == ScheduleState.DUE_NOT_GENERATED
    assert recurring.state(template, "07/2025", None) == ScheduleState.NOT_DUE
    existing = recurring.materialize(template, "04/2025")
    assert recurring.state(template, "04/2025", existing) == ScheduleState.GENERATED


def test_inactive_template_is_not_due() -> None:
    template = _template(active=False)
    assert recurring.skip_reason(template, "05/2025") == SkipReason.INACTIVE
    assert not recurring.is_due(template, "05/2025")


def test_base_competency_holds_back_earlier_months() -> None:
    template = _template(base_competency=" 03/2025 ")
    assert template.base_competency == "03/2025"
    assert recurring.skip_reason(template, "02/2025") == SkipReason.OUT_OF_WINDOW
    assert recurring.state(template, "02/2025", None) == ScheduleState.NOT_DUE
    assert recurring.is_due(template, "03/2025")
    assert recurring.is_due(template, "12/2025")


def test_invalid_base_competency_rejected() -> None:
    with pytest.raises(ValidationError):
        _template(base_competency="13/2025")


def test_generate_is_idempotent(service: LedgerService) -> None:
    rent = _create(service)
    gym = _create(service, description="Gym", value=Decimal("99.90"), day_of_month=10)

    first = service.generate_recurring("06/2025")
    ledger_after_first = service.list_transactions()
    second = service.generate_recurring("06/2025")

    assert {tx.source_template_id for tx in first.generated} == {rent.id, gym.id}
    assert second.generated == []
    assert second.skipped == [rent.id, gym.id]
    assert set(second.reasons.values()) == {SkipReason.ALREADY_GENERATED.value}
    assert service.list_transactions() == ledger_after_first
    assert len(ledger_after_first) == 2


def test_generate_skips_inactive_and_out_of_window(service: LedgerService) -> None:
    active = _create(service)
    inactive = _create(service, description="Old plan", active=False)
    ended = _create(service, description="Finished", end_date=date(2025, 3, 31))
    future = _create(service, description="Future", start_date=date(2026, 1, 1))

    result = service.generate_recurring("05/2025")

    assert [tx.source_template_id for tx in result.generated] == [active.id]
    assert result.reasons == {
        inactive.id: "inactive",
        ended.id: "out_of_window",
        future.id: "out_of_window",
    }


def test_generate_starts_at_base_competency(service: LedgerService) -> None:
    template = _create(service, base_competency="06/2025")

    early = service.generate_recurring("05/2025")
    assert early.generated == []
    assert early.reasons == {template.id: "out_of_window"}

    [tx] = service.generate_recurring("06/2025").generated
    assert tx.source_template_id == template.id
    assert tx.date == date(2025, 6, 30)


def test_generate_into_closed_month_rejected(service: LedgerService) -> None:
    _create(service)
    service.close_month("06/2025")

    with pytest.raises(MonthClosed):
        service.generate_recurring("06/2025")
    assert service.list_transactions() == []


def test_one_failing_template_does_not_abort_batch(service: LedgerService, monkeypatch: pytest.MonkeyPatch) -> None:
    first = _create(service, description="Broken")
    second = _create(service, description="Fine")

    original = recurring.materialize

    def flaky(template: RecurringTemplate, competency: str):
        if template.id == first.id:
            raise RuntimeError("boom")
        return original(template, competency)

    monkeypatch.setattr(recurring, "materialize", flaky)
    result = service.generate_recurring("07/2025")

    assert [tx.source_template_id for tx in result.generated] == [second.id]
    assert result.reasons == {first.id: "error"}
