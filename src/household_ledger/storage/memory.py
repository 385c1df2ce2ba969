import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date

from household_ledger.domain.errors import (
    DuplicateMaterialization,
    TemplateNotFound,
    TransactionNotFound,
)
from household_ledger.logger import get_logger
from household_ledger.models import RecurringTemplate, Transaction
from household_ledger.storage.base import LedgerStore

logger = get_logger(__name__)


@dataclass
class LedgerState:
    transactions: dict[int, Transaction] = field(default_factory=dict)
    templates: dict[int, RecurringTemplate] = field(default_factory=dict)
    closed_months: set[str] = field(default_factory=set)
    next_transaction_id: int = 1
    next_template_id: int = 1

    def copy(self) -> "LedgerState":
        # Stored models are replaced, never mutated, so shallow copies are enough.
        return LedgerState(
            transactions=dict(self.transactions),
            templates=dict(self.templates),
            closed_months=set(self.closed_months),
            next_transaction_id=self.next_transaction_id,
            next_template_id=self.next_template_id,
        )


class InMemoryLedgerStore(LedgerStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._depth = 0
        self.state = LedgerState()

    @contextmanager
    def unit_of_work(self) -> Iterator["InMemoryLedgerStore"]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = self.state.copy()
            self._depth = 1
            try:
                yield self
                self.commit()
            except BaseException:
                self.state = snapshot
                logger.debug("[STORE] Unit of work rolled back.")
                raise
            finally:
                self._depth = 0

    def commit(self) -> None:
        """Hook for durable stores; the in-memory state is already current."""

    def _require_unit_of_work(self) -> None:
        if not self._depth:
            raise RuntimeError("Ledger writes must run inside unit_of_work()")

    def new_group_id(self) -> str:
        return uuid.uuid4().hex

    def _check_materialization(self, tx: Transaction, seen: set[tuple[int, str]]) -> None:
        if tx.source_template_id is None:
            return
        key = (tx.source_template_id, tx.competency)
        existing = self.find_materialization(*key)
        if key in seen or (existing is not None and existing.id != tx.id):
            raise DuplicateMaterialization(*key)
        seen.add(key)

    def add_transactions(self, drafts: list[Transaction]) -> list[Transaction]:
        self._require_unit_of_work()
        seen: set[tuple[int, str]] = set()
        stored: list[Transaction] = []
        for draft in drafts:
            self._check_materialization(draft, seen)
            tx = draft.model_copy(update={"id": self.state.next_transaction_id})
            self.state.next_transaction_id += 1
            self.state.transactions[tx.id] = tx
            stored.append(tx)
        return stored

    def replace_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        self._require_unit_of_work()
        seen: set[tuple[int, str]] = set()
        for tx in transactions:
            if tx.id not in self.state.transactions:
                raise TransactionNotFound(tx.id)
            self._check_materialization(tx, seen)
            self.state.transactions[tx.id] = tx
        return list(transactions)

    def remove_transactions(self, transaction_ids: list[int]) -> None:
        self._require_unit_of_work()
        for transaction_id in transaction_ids:
            if self.state.transactions.pop(transaction_id, None) is None:
                raise TransactionNotFound(transaction_id)

    def get_transaction(self, transaction_id: int) -> Transaction | None:
        return self.state.transactions.get(transaction_id)

    def list_transactions(
        self,
        competency: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Transaction]:
        with self._lock:
            result = [
                tx for tx in self.state.transactions.values()
                if (competency is None or tx.competency == competency)
                and (start_date is None or tx.date >= start_date)
                and (end_date is None or tx.date <= end_date)
            ]
        result.sort(key=lambda tx: (tx.date, tx.id), reverse=True)
        return result

    def find_group(self, group_id: str) -> list[Transaction]:
        with self._lock:
            members = [tx for tx in self.state.transactions.values() if tx.group_id == group_id]
        members.sort(key=lambda tx: (tx.installment_number, tx.id))
        return members

    def find_materialization(self, template_id: int, competency: str) -> Transaction | None:
        with self._lock:
            for tx in self.state.transactions.values():
                if tx.source_template_id == template_id and tx.competency == competency:
                    return tx
        return None

    def add_template(self, template: RecurringTemplate) -> RecurringTemplate:
        self._require_unit_of_work()
        stored = template.model_copy(update={"id": self.state.next_template_id})
        self.state.next_template_id += 1
        self.state.templates[stored.id] = stored
        return stored

    def update_template(self, template: RecurringTemplate) -> RecurringTemplate:
        self._require_unit_of_work()
        if template.id not in self.state.templates:
            raise TemplateNotFound(template.id)
        self.state.templates[template.id] = template
        return template

    def remove_template(self, template_id: int) -> None:
        self._require_unit_of_work()
        if self.state.templates.pop(template_id, None) is None:
            raise TemplateNotFound(template_id)

    def get_template(self, template_id: int) -> RecurringTemplate | None:
        return self.state.templates.get(template_id)

    def list_templates(self) -> list[RecurringTemplate]:
        with self._lock:
            templates = list(self.state.templates.values())
        return sorted(templates, key=lambda t: (t.start_date, t.id))

    def closed_months(self) -> set[str]:
        with self._lock:
            return set(self.state.closed_months)

    def add_closed_month(self, competency: str) -> None:
        self._require_unit_of_work()
        self.state.closed_months.add(competency)

    def remove_closed_month(self, competency: str) -> None:
        self._require_unit_of_work()
        self.state.closed_months.discard(competency)
