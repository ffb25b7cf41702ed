from services.indexer.src.indexer.adapters.soroban.decoder import DecodeError
from services.indexer.src.indexer.adapters.soroban.events_fetcher import (
    LedgerEventsFetcher,
    RpcError,
)

__all__ = ["DecodeError", "LedgerEventsFetcher", "RpcError"]
