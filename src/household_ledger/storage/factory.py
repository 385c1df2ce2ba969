import os

from household_ledger.logger import get_logger
from household_ledger.storage.base import LedgerStore
from household_ledger.storage.json_store import JsonLedgerStore
from household_ledger.storage.memory import InMemoryLedgerStore

logger = get_logger(__name__)


def build_store(backend: str, data_dir: str = ".", ledger_file: str = "ledger.json") -> LedgerStore:
    if backend == "memory":
        logger.warning("[STORE] Using in-memory ledger; nothing will be persisted.")
        return InMemoryLedgerStore()
    path = os.path.join(data_dir, ledger_file)
    logger.info("[STORE] Using JSON ledger at %s", path)
    return JsonLedgerStore(data_path=path)
