import pytest

from household_ledger.domain.errors import InvalidCompetency, MonthAlreadyClosed, MonthClosed
from household_ledger.services.closure import ClosureGate
from household_ledger.storage.memory import InMemoryLedgerStore


@pytest.fixture
def gate() -> ClosureGate:
    return ClosureGate(InMemoryLedgerStore())


def test_close_and_reopen(gate: ClosureGate) -> None:
    assert gate.close("05/2025") == ["05/2025"]
    assert gate.close("12/2024") == ["12/2024", "05/2025"]
    assert gate.is_closed("05/2025")
    assert gate.reopen("05/2025") == ["12/2024"]
    assert not gate.is_closed("05/2025")


def test_close_twice_raises(gate: ClosureGate) -> None:
    gate.close("05/2025")
    with pytest.raises(MonthAlreadyClosed):
        gate.close("05/2025")
    assert gate.closed_months() == ["05/2025"]


def test_reopen_open_month_is_noop(gate: ClosureGate) -> None:
    assert gate.reopen("01/2025") == []


def test_guard(gate: ClosureGate) -> None:
    gate.close("05/2025")
    gate.guard("create transaction", "04/2025", "06/2025")
    with pytest.raises(MonthClosed) as excinfo:
        gate.guard("create transaction", "04/2025", "05/2025")
    assert excinfo.value.competency == "05/2025"
    assert excinfo.value.operation == "create transaction"


def test_guard_rejects_malformed_key(gate: ClosureGate) -> None:
    with pytest.raises(InvalidCompetency):
        gate.guard("create transaction", "2025/05")
