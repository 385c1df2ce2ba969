import json
import os
from typing import Any

from household_ledger.domain.competency import competency_sort_key
from household_ledger.logger import get_logger
from household_ledger.models import RecurringTemplate, Transaction
from household_ledger.storage.memory import InMemoryLedgerStore, LedgerState

logger = get_logger(__name__)


class JsonLedgerStore(InMemoryLedgerStore):
    """Ledger kept in memory and written to a single JSON document per commit."""

    def __init__(self, data_path: str = "ledger.json") -> None:
        super().__init__()
        self.data_path = data_path
        self.load()

    def load(self) -> None:
        if not os.path.exists(self.data_path):
            self.state = LedgerState()
            return
        with self._lock:
            with open(self.data_path, encoding="utf-8") as f:
                raw = json.load(f)
            self.state = self._decode(raw)
        logger.info(
            "[STORE] Loaded %d transactions, %d templates, %d closed months from %s",
            len(self.state.transactions),
            len(self.state.templates),
            len(self.state.closed_months),
            self.data_path,
        )

    def save(self) -> None:
        tmp_path = f"{self.data_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._encode(self.state), f, indent=2)
        os.replace(tmp_path, self.data_path)

    def commit(self) -> None:
        self.save()

    @staticmethod
    def _encode(state: LedgerState) -> dict[str, Any]:
        return {
            "next_transaction_id": state.next_transaction_id,
            "next_template_id": state.next_template_id,
            "transactions": [
                tx.model_dump(mode="json") for tx in sorted(state.transactions.values(), key=lambda t: t.id)
            ],
            "templates": [
                t.model_dump(mode="json") for t in sorted(state.templates.values(), key=lambda t: t.id)
            ],
            "closed_months": sorted(state.closed_months, key=competency_sort_key),
        }

    @staticmethod
    def _decode(raw: dict[str, Any]) -> LedgerState:
        transactions = [Transaction.model_validate(item) for item in raw.get("transactions", [])]
        templates = [RecurringTemplate.model_validate(item) for item in raw.get("templates", [])]
        state = LedgerState(
            transactions={tx.id: tx for tx in transactions},
            templates={t.id: t for t in templates},
            closed_months=set(raw.get("closed_months", [])),
        )
        state.next_transaction_id = max(
            raw.get("next_transaction_id", 1),
            max(state.transactions, default=0) + 1,
        )
        state.next_template_id = max(
            raw.get("next_template_id", 1),
            max(state.templates, default=0) + 1,
        )
        return state
