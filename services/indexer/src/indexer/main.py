import logging
import os
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI

from services.indexer.src.indexer.config import settings
from services.indexer.src.indexer.routes import api_router

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: BackgroundScheduler | None = None

# Ledger the next polling run starts from; None until the first run resolves it
_next_ledger: int | None = None


def poll_ledgers() -> None:
    """Run one ingestion pass, continuing from where the previous pass stopped."""
    global _next_ledger

    from services.indexer.src.indexer.jobs.ingest_ledgers import (
        LedgerIngestionError,
        run_ingestion,
    )

    try:
        total, _next_ledger = run_ingestion(start_ledger=_next_ledger)
        logger.info(f"Polling run: {total} actions recorded, next ledger {_next_ledger}")
    except LedgerIngestionError as e:
        # Skip past closes that already wrote rows
        _next_ledger = e.next_ledger
        logger.error(f"Ledger ingestion failed: {e}", exc_info=True)
    except Exception as e:
        logger.error(f"Ledger ingestion failed: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run migrations and start the ledger polling scheduler on startup."""
    global scheduler

    if os.getenv("RUN_MIGRATIONS", "true").lower() == "true":
        from services.indexer.src.indexer.db.migrate import run_migrations
        run_migrations()

    if os.getenv("ENABLE_LEDGER_INGESTION", "true").lower() == "true":
        logger.info(
            f"Starting ledger polling scheduler (every {settings.poll_interval_seconds}s)"
        )

        scheduler = BackgroundScheduler()
        scheduler.add_job(
            poll_ledgers,
            "interval",
            seconds=settings.poll_interval_seconds,
            id="ledger-ingestion",
            name="Pool Actions Ingestion",
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()

        if os.getenv("RUN_INGESTION_ON_STARTUP", "true").lower() == "true":
            logger.info("Running initial ingestion...")
            poll_ledgers()

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shutdown complete")


app = FastAPI(title="Pool Actions Indexer API", lifespan=lifespan)

app.include_router(api_router)


@app.get("/")
def root() -> dict[str, str]:
    return {"service": "pool-actions-indexer", "docs": "/docs"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
