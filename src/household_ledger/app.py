from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from household_ledger.api.errors import register_error_handlers
from household_ledger.api.routes import closures, installments, recurring, transactions
from household_ledger.core import settings
from household_ledger.logger import get_logger, setup_logging
from household_ledger.manager import LedgerService
from household_ledger.storage.base import LedgerStore
from household_ledger.storage.factory import build_store

logger = get_logger(__name__)


def create_app(store: LedgerStore | None = None) -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing ledger service...")
        settings.log_environment()

        ledger_store = store if store is not None else build_store(
            settings.LEDGER_STORE,
            data_dir=settings.DATA_DIR,
            ledger_file=settings.LEDGER_FILE,
        )
        app.state.service = LedgerService(ledger_store)

        logger.info("Ledger service initialized.")
        yield
        logger.info("Ledger service shutting down.")

    app = FastAPI(title="Household Ledger", lifespan=lifespan)
    register_error_handlers(app)

    app.include_router(transactions.router)
    app.include_router(installments.router)
    app.include_router(recurring.router)
    app.include_router(closures.router)

    return app


app = create_app()
