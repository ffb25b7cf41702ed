"""
Pool actions ingestion job.

Reads contract events for the configured pool from Soroban RPC, groups them
per ledger close and records supply/withdraw collateral and borrow/repay
actions into the actions table. Resumes after the highest ledger already
stored.

Usage:
    python -m services.indexer.src.indexer.jobs.ingest_ledgers
    python -m services.indexer.src.indexer.jobs.ingest_ledgers --start-ledger 51000000
"""
import argparse
import logging
import sys

from services.indexer.src.indexer.adapters.soroban.events_fetcher import (
    LedgerEventsFetcher,
    group_by_ledger,
)
from services.indexer.src.indexer.config import require_rpc_url, settings
from services.indexer.src.indexer.db.actions_repository import ActionsRepository
from services.indexer.src.indexer.db.engine import get_engine, init_db
from services.indexer.src.indexer.domain.classifier import on_close
from services.indexer.src.indexer.utils.timestamps import unix_to_datetime

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class LedgerIngestionError(Exception):
    """Raised when a ledger close fails; carries the ledger to resume from."""

    def __init__(self, ledger: int, next_ledger: int):
        self.ledger = ledger
        self.next_ledger = next_ledger
        super().__init__(f"Ledger {ledger} failed, resume from {next_ledger}")


def resolve_start_ledger(
    repo: ActionsRepository,
    fetcher: LedgerEventsFetcher,
    configured: int | None = None,
) -> int:
    """Pick the first ledger to scan.

    The ledger after the highest one stored wins; otherwise the configured
    start ledger; otherwise the RPC's latest ledger.
    """
    max_ledger = repo.get_max_ledger()
    if max_ledger is not None:
        return max_ledger + 1
    if configured is not None:
        return configured
    return fetcher.get_latest_ledger()


def ingest_ledgers(
    fetcher: LedgerEventsFetcher,
    repo: ActionsRepository,
    contract_id: str,
    start_ledger: int,
) -> tuple[int, int]:
    """
    Ingest every ledger close from `start_ledger` up to the RPC's latest ledger.

    All pages are read before any ledger close is processed so that a close is
    never split across runs.

    Args:
        fetcher: LedgerEventsFetcher instance
        repo: Store the rows are appended to
        contract_id: Pool contract whose events are indexed
        start_ledger: First ledger to include

    Returns:
        (rows appended, next ledger to start from)

    Raises:
        LedgerIngestionError: If a ledger close fails. Closes completed before
            it, and the failed close itself if it already appended rows, lie
            before `next_ledger`.
    """
    logger.info(f"Ingesting ledgers for {contract_id}, starting from ledger {start_ledger}")

    raw_events = []
    for page in fetcher.fetch_events(start_ledger):
        raw_events.extend(page)

    total = 0
    next_ledger = start_ledger
    for context in group_by_ledger(raw_events):
        logger.debug(
            f"Ledger {context.sequence} closed at {unix_to_datetime(context.timestamp).isoformat()}"
        )
        try:
            total += len(on_close(context, repo, contract_id))
        except Exception as e:
            # A close that already wrote rows is not run again
            max_ledger = repo.get_max_ledger()
            if max_ledger is not None:
                next_ledger = max(next_ledger, max_ledger + 1)
            raise LedgerIngestionError(context.sequence, next_ledger) from e
        next_ledger = context.sequence + 1

    if fetcher.latest_ledger is not None:
        next_ledger = max(next_ledger, fetcher.latest_ledger + 1)

    logger.info(f"Completed: {total} actions recorded from {len(raw_events)} events")
    return total, next_ledger


def run_ingestion(
    start_ledger: int | None = None,
    database_url: str | None = None,
) -> tuple[int, int]:
    """Build fetcher and repository from settings and run one ingestion pass."""
    require_rpc_url()

    engine = get_engine(database_url)
    init_db(engine)

    repo = ActionsRepository(engine)
    fetcher = LedgerEventsFetcher(
        settings.rpc_url,
        settings.contract_id,
        page_size=settings.events_page_size,
        timeout=settings.rpc_timeout,
    )

    if start_ledger is None:
        start_ledger = resolve_start_ledger(repo, fetcher, settings.start_ledger)

    return ingest_ledgers(fetcher, repo, settings.contract_id, start_ledger)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Ingest pool collateral and borrow actions from Soroban RPC"
    )
    parser.add_argument(
        "--start-ledger",
        type=int,
        default=None,
        help="First ledger to scan (default: after the highest stored ledger)",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: from settings)",
    )

    args = parser.parse_args()

    try:
        total, next_ledger = run_ingestion(
            start_ledger=args.start_ledger,
            database_url=args.database_url,
        )
        logger.info(f"Ingestion complete: {total} actions, next ledger {next_ledger}")
        return 0
    except Exception as e:
        logger.error(f"Ingestion failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
