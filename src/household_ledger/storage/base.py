from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date

from household_ledger.models import RecurringTemplate, Transaction


class LedgerStore(ABC):
    """Durable home of transactions, recurring templates and closed months.

    Every write happens inside ``unit_of_work()``: either all of its writes are
    kept or none are, and units of work never interleave.
    """

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager["LedgerStore"]:
        pass

    @abstractmethod
    def new_group_id(self) -> str:
        """Reserve a fresh installment group id before any row is written."""
        pass

    @abstractmethod
    def add_transactions(self, drafts: list[Transaction]) -> list[Transaction]:
        """Insert ``drafts`` and return them with ids assigned.

        Raises ``DuplicateMaterialization`` when a draft repeats an existing
        ``(source_template_id, competency)`` pair.
        """
        pass

    @abstractmethod
    def replace_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        pass

    @abstractmethod
    def remove_transactions(self, transaction_ids: list[int]) -> None:
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Transaction | None:
        pass

    @abstractmethod
    def list_transactions(
        self,
        competency: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Transaction]:
        pass

    @abstractmethod
    def find_group(self, group_id: str) -> list[Transaction]:
        pass

    @abstractmethod
    def find_materialization(self, template_id: int, competency: str) -> Transaction | None:
        pass

    @abstractmethod
    def add_template(self, template: RecurringTemplate) -> RecurringTemplate:
        pass

    @abstractmethod
    def update_template(self, template: RecurringTemplate) -> RecurringTemplate:
        pass

    @abstractmethod
    def remove_template(self, template_id: int) -> None:
        pass

    @abstractmethod
    def get_template(self, template_id: int) -> RecurringTemplate | None:
        pass

    @abstractmethod
    def list_templates(self) -> list[RecurringTemplate]:
        pass

    @abstractmethod
    def closed_months(self) -> set[str]:
        pass

    @abstractmethod
    def add_closed_month(self, competency: str) -> None:
        pass

    @abstractmethod
    def remove_closed_month(self, competency: str) -> None:
        pass
