import uvicorn

from household_ledger.core import settings
from household_ledger.logger import get_logging_config


def run() -> None:
    uvicorn.run(
        "household_ledger.app:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    run()
