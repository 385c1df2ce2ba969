from datetime import date
from decimal import Decimal

from household_ledger.domain import installments
from household_ledger.domain.competency import normalize_competency
from household_ledger.domain.errors import (
    GroupedTransactionEdit,
    GroupNotFound,
    InconsistentGroup,
    TemplateNotFound,
    TransactionNotFound,
)
from household_ledger.logger import get_logger
from household_ledger.models import (
    GenerationResult,
    InstallmentPreview,
    RecurringTemplate,
    RecurringTemplatePayload,
    Transaction,
    TransactionFields,
    TransactionPayload,
)
from household_ledger.services.closure import ClosureGate
from household_ledger.services.recurring import RecurringGenerator
from household_ledger.storage.base import LedgerStore

logger = get_logger(__name__)

_DESCRIPTIVE_FIELDS = set(TransactionFields.model_fields)


class LedgerService:
    """Entry points for every ledger read and write.

    Writes run inside a single store unit of work: the closure gate is checked
    first, then the planner or scheduler computes the rows, then the store
    persists them. A rejected operation leaves the ledger untouched.
    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store
        self.gate = ClosureGate(store)
        self.recurring = RecurringGenerator(store, self.gate)

    # Transactions

    def create_transaction(self, payload: TransactionPayload, count: int = 1) -> list[Transaction]:
        count = installments.validate_count(count)
        with self.store.unit_of_work():
            group_id = self.store.new_group_id() if count > 1 else None
            drafts = installments.plan(payload, count, group_id=group_id)
            self.gate.guard("create transaction", *[tx.competency for tx in drafts])
            stored = self.store.add_transactions(drafts)

        if group_id:
            logger.info(
                "[INSTALLMENTS] Created group %s: %s in %d installments from %s.",
                group_id,
                payload.value,
                count,
                stored[0].competency,
            )
        else:
            logger.info("[LEDGER] Created transaction %s (%s).", stored[0].id, stored[0].competency)
        return stored

    def get_transaction(self, transaction_id: int) -> Transaction:
        tx = self.store.get_transaction(transaction_id)
        if tx is None:
            raise TransactionNotFound(transaction_id)
        return tx

    def list_transactions(
        self,
        competency: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Transaction]:
        if competency:
            competency = normalize_competency(competency)
        return self.store.list_transactions(
            competency=competency,
            start_date=start_date,
            end_date=end_date,
        )

    def update_transaction(self, transaction_id: int, payload: TransactionPayload) -> Transaction:
        """Edit one transaction.

        Installment members only accept descriptive changes; value, date and
        competency belong to the whole group and go through ``replan_group``.
        A missing competency keeps the current one.
        """
        with self.store.unit_of_work():
            existing = self.get_transaction(transaction_id)
            new_competency = payload.competency or existing.competency

            if existing.is_installment and (
                payload.value != existing.value
                or payload.date != existing.date
                or new_competency != existing.competency
            ):
                raise GroupedTransactionEdit(
                    f"Transaction {transaction_id} is installment "
                    f"{existing.installment_number}/{existing.total_installments} of group "
                    f"{existing.group_id}; use the installment group endpoint to change "
                    "value, date or competency."
                )

            self.gate.guard("update transaction", existing.competency, new_competency)
            updated = existing.model_copy(update={
                **payload.model_dump(include=_DESCRIPTIVE_FIELDS),
                "date": payload.date,
                "value": payload.value,
                "competency": new_competency,
            })
            [stored] = self.store.replace_transactions([updated])

        logger.info("[LEDGER] Updated transaction %s (%s).", stored.id, stored.competency)
        return stored

    def delete_transaction(self, transaction_id: int) -> None:
        with self.store.unit_of_work():
            existing = self.get_transaction(transaction_id)
            if existing.is_installment:
                raise GroupedTransactionEdit(
                    f"Transaction {transaction_id} belongs to installment group "
                    f"{existing.group_id}; delete the whole group instead."
                )
            self.gate.guard("delete transaction", existing.competency)
            self.store.remove_transactions([transaction_id])
        logger.info("[LEDGER] Deleted transaction %s (%s).", transaction_id, existing.competency)

    # Installment groups

    def _load_group(self, group_id: str) -> list[Transaction]:
        members = self.store.find_group(group_id)
        if not members:
            raise GroupNotFound(group_id)
        try:
            return installments.check_group(members)
        except InconsistentGroup as exc:
            logger.error("[INSTALLMENTS] Stored group %s is inconsistent: %s", group_id, exc.message)
            raise

    def list_installments(self, group_id: str) -> list[Transaction]:
        return self._load_group(group_id)

    def replan_group(
        self,
        group_id: str,
        new_total: Decimal | None = None,
        new_purchase_date: date | None = None,
    ) -> list[Transaction]:
        with self.store.unit_of_work():
            members = self._load_group(group_id)
            self.gate.guard("replan installments", *[tx.competency for tx in members])
            replanned = installments.replan(
                members,
                new_total=new_total,
                new_purchase_date=new_purchase_date,
            )
            self.gate.guard("replan installments", *[tx.competency for tx in replanned])
            stored = self.store.replace_transactions(replanned)

        logger.info(
            "[INSTALLMENTS] Replanned group %s: total %s over %d installments from %s.",
            group_id,
            sum(tx.value for tx in stored),
            len(stored),
            stored[0].competency,
        )
        return stored

    def delete_group(self, group_id: str) -> int:
        with self.store.unit_of_work():
            members = self._load_group(group_id)
            self.gate.guard("delete installments", *[tx.competency for tx in members])
            self.store.remove_transactions([tx.id for tx in members])
        logger.info("[INSTALLMENTS] Deleted group %s (%d installments).", group_id, len(members))
        return len(members)

    def preview_installments(self, total: Decimal, purchase_date: date, count: int) -> InstallmentPreview:
        return installments.preview(total, purchase_date, installments.validate_count(count))

    # Recurring templates

    def list_templates(self) -> list[RecurringTemplate]:
        return self.store.list_templates()

    def get_template(self, template_id: int) -> RecurringTemplate:
        template = self.store.get_template(template_id)
        if template is None:
            raise TemplateNotFound(template_id)
        return template

    def create_template(self, payload: RecurringTemplatePayload) -> RecurringTemplate:
        with self.store.unit_of_work():
            stored = self.store.add_template(RecurringTemplate(**payload.model_dump()))
        logger.info("[RECURRING] Created template %s (day %s).", stored.id, stored.day_of_month)
        return stored

    def update_template(self, template_id: int, payload: RecurringTemplatePayload) -> RecurringTemplate:
        with self.store.unit_of_work():
            self.get_template(template_id)
            stored = self.store.update_template(
                RecurringTemplate(id=template_id, **payload.model_dump())
            )
        logger.info("[RECURRING] Updated template %s (active=%s).", template_id, stored.active)
        return stored

    def delete_template(self, template_id: int) -> None:
        with self.store.unit_of_work():
            self.store.remove_template(template_id)
        logger.info("[RECURRING] Deleted template %s.", template_id)

    def generate_recurring(self, competency: str) -> GenerationResult:
        return self.recurring.generate(competency)

    # Closed months

    def list_closed_months(self) -> list[str]:
        return self.gate.closed_months()

    def close_month(self, competency: str) -> list[str]:
        return self.gate.close(competency)

    def reopen_month(self, competency: str) -> list[str]:
        return self.gate.reopen(competency)
