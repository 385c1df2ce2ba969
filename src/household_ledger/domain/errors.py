class LedgerError(Exception):
    """Base class for every rejected ledger operation."""

    code = "ledger_error"
    kind = "invalid_input"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MonthClosed(LedgerError):
    code = "month_closed"
    kind = "closed_month"

    def __init__(self, operation: str, competency: str) -> None:
        super().__init__(f"Cannot {operation}: competency {competency} is closed.")
        self.operation = operation
        self.competency = competency


class MonthAlreadyClosed(LedgerError):
    code = "month_already_closed"
    kind = "closed_month"

    def __init__(self, competency: str) -> None:
        super().__init__(f"Competency {competency} is already closed.")
        self.competency = competency


class InvalidCompetency(LedgerError):
    code = "invalid_competency"


class InvalidInstallmentCount(LedgerError):
    code = "invalid_installment_count"


class InvalidAmount(LedgerError):
    code = "invalid_amount"


class GroupedTransactionEdit(LedgerError):
    code = "grouped_transaction_edit"


class TransactionNotFound(LedgerError):
    code = "transaction_not_found"
    kind = "not_found"

    def __init__(self, transaction_id: int) -> None:
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id


class GroupNotFound(LedgerError):
    code = "group_not_found"
    kind = "not_found"

    def __init__(self, group_id: str) -> None:
        super().__init__(f"No installments found for group: {group_id}")
        self.group_id = group_id


class TemplateNotFound(LedgerError):
    code = "template_not_found"
    kind = "not_found"

    def __init__(self, template_id: int) -> None:
        super().__init__(f"Recurring template not found: {template_id}")
        self.template_id = template_id


class DuplicateMaterialization(LedgerError):
    code = "duplicate_materialization"
    kind = "conflict"

    def __init__(self, template_id: int, competency: str) -> None:
        super().__init__(
            f"Template {template_id} already materialized for competency {competency}."
        )
        self.template_id = template_id
        self.competency = competency


class InconsistentGroup(LedgerError):
    code = "inconsistent_group"
    kind = "corrupted"
