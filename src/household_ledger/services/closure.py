from household_ledger.domain.competency import competency_sort_key, normalize_competency
from household_ledger.domain.errors import MonthAlreadyClosed, MonthClosed
from household_ledger.logger import get_logger
from household_ledger.storage.base import LedgerStore

logger = get_logger(__name__)


class ClosureGate:
    """Closed competency months and the check every ledger write goes through."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def is_closed(self, competency: str) -> bool:
        return normalize_competency(competency) in self.store.closed_months()

    def closed_months(self) -> list[str]:
        return sorted(self.store.closed_months(), key=competency_sort_key)

    def close(self, competency: str) -> list[str]:
        key = normalize_competency(competency)
        with self.store.unit_of_work():
            if key in self.store.closed_months():
                logger.info("[CLOSURE] Competency %s is already closed.", key)
                raise MonthAlreadyClosed(key)
            self.store.add_closed_month(key)
        logger.info("[CLOSURE] Closed competency %s.", key)
        return self.closed_months()

    def reopen(self, competency: str) -> list[str]:
        key = normalize_competency(competency)
        with self.store.unit_of_work():
            if key in self.store.closed_months():
                self.store.remove_closed_month(key)
                logger.info("[CLOSURE] Reopened competency %s.", key)
            else:
                logger.debug("[CLOSURE] Competency %s was not closed; nothing to reopen.", key)
        return self.closed_months()

    def guard(self, operation: str, *competencies: str) -> None:
        """Raise ``MonthClosed`` if any of ``competencies`` is closed.

        Call inside the unit of work that performs the write, before any
        other side effect.
        """
        keys = [normalize_competency(c) for c in competencies]
        closed = self.store.closed_months()
        for key in keys:
            if key in closed:
                logger.info("[CLOSURE] Rejected %s: competency %s is closed.", operation, key)
                raise MonthClosed(operation, key)
