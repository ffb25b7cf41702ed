"""Ledger event fetcher for Soroban RPC (getEvents / getLatestLedger)."""

import logging
from typing import Any, Iterator

import httpx

from services.indexer.src.indexer.adapters.soroban.decoder import (
    DecodeError,
    decode_symbol,
    parse_scval,
)
from services.indexer.src.indexer.domain.models import ContractEvent, LedgerContext
from services.indexer.src.indexer.utils.timestamps import iso_to_unix

logger = logging.getLogger(__name__)


class RpcError(Exception):
    """Raised when the RPC endpoint returns a JSON-RPC error object."""

    def __init__(self, method: str, error: Any):
        self.method = method
        self.error = error
        super().__init__(f"RPC {method} failed: {error}")


class LedgerEventsFetcher:
    """Fetches contract events for one contract from a Soroban RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        contract_id: str,
        page_size: int = 100,
        timeout: float = 30.0,
    ):
        self.rpc_url = rpc_url
        self.contract_id = contract_id
        self.page_size = page_size
        self.timeout = timeout
        # Updated from every getEvents response
        self.latest_ledger: int | None = None

    def _call(self, client: httpx.Client, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": 1, "method": method}
        if params is not None:
            payload["params"] = params
        response = client.post(self.rpc_url, json=payload)
        response.raise_for_status()
        data = response.json()

        if "error" in data:
            raise RpcError(method, data["error"])
        return data.get("result", {})

    def get_latest_ledger(self) -> int:
        with httpx.Client(timeout=self.timeout) as client:
            result = self._call(client, "getLatestLedger")
        return int(result["sequence"])

    def fetch_events(self, start_ledger: int) -> Iterator[list[dict[str, Any]]]:
        """
        Yield pages of raw events, oldest first. Paginate until exhausted.

        Args:
            start_ledger: First ledger to include (inclusive)

        Yields:
            Pages of raw event dictionaries as returned by getEvents
        """
        filters = [{"type": "contract", "contractIds": [self.contract_id]}]
        params: dict[str, Any] = {
            "startLedger": start_ledger,
            "filters": filters,
            "pagination": {"limit": self.page_size},
        }

        with httpx.Client(timeout=self.timeout) as client:
            while True:
                result = self._call(client, "getEvents", params)
                if result.get("latestLedger") is not None:
                    self.latest_ledger = int(result["latestLedger"])

                page = result.get("events", [])
                if not page:
                    break

                yield page

                # If we got fewer than page_size, we've reached the end
                if len(page) < self.page_size:
                    break

                # startLedger and cursor are mutually exclusive
                cursor = result.get("cursor") or page[-1].get("pagingToken")
                params = {
                    "filters": filters,
                    "pagination": {"cursor": cursor, "limit": self.page_size},
                }


class MockLedgerEventsFetcher(LedgerEventsFetcher):
    """Mock fetcher for testing without network calls."""

    def __init__(self, contract_id: str = "", latest_ledger: int | None = None) -> None:
        super().__init__("http://mock", contract_id)
        self._mock_pages: list[list[dict[str, Any]]] = []
        self._latest = latest_ledger
        self.call_history: list[int] = []

    def set_mock_pages(self, pages: list[list[dict[str, Any]]], latest_ledger: int | None = None) -> None:
        self._mock_pages = pages
        if latest_ledger is not None:
            self._latest = latest_ledger

    def get_latest_ledger(self) -> int:
        return self._latest

    def fetch_events(self, start_ledger: int) -> Iterator[list[dict[str, Any]]]:
        self.call_history.append(start_ledger)
        self.latest_ledger = self._latest
        for page in self._mock_pages:
            yield page


def to_contract_event(raw: dict[str, Any]) -> ContractEvent:
    """Parse the XDR topics and value of a raw getEvents entry.

    Raises:
        DecodeError: If a topic or the value is not valid SCVal XDR.
    """
    value = raw["value"]
    # Older RPC versions wrap the value as {"xdr": ...}
    if isinstance(value, dict):
        value = value["xdr"]
    return ContractEvent(
        contract_id=raw["contractId"],
        topics=[parse_scval(topic) for topic in raw.get("topic", [])],
        data=parse_scval(value),
    )


def _is_indexed(raw: dict[str, Any]) -> bool:
    """True if the raw event carries one of the indexed action symbols."""
    from services.indexer.src.indexer.domain.classifier import ACTION_RULES, MIN_TOPICS

    topics = raw.get("topic", [])
    if len(topics) < MIN_TOPICS:
        return False
    try:
        return decode_symbol(parse_scval(topics[0])) in ACTION_RULES
    except DecodeError:
        return False


def group_by_ledger(raw_events: list[dict[str, Any]]) -> list[LedgerContext]:
    """Group raw events into ledger closes, ascending by sequence.

    Events from failed contract calls are dropped. Event order within a
    ledger is preserved. Events that do not parse are skipped unless they
    carry an indexed action symbol.

    Raises:
        DecodeError: If an event with an indexed action symbol does not parse.
    """
    contexts: dict[int, LedgerContext] = {}
    for raw in raw_events:
        if raw.get("type", "contract") != "contract":
            continue
        if raw.get("inSuccessfulContractCall") is False:
            continue

        sequence = int(raw["ledger"])
        context = contexts.get(sequence)
        if context is None:
            context = LedgerContext(
                sequence=sequence,
                timestamp=iso_to_unix(raw["ledgerClosedAt"]),
            )
            contexts[sequence] = context
        try:
            event = to_contract_event(raw)
        except DecodeError as e:
            if _is_indexed(raw):
                raise
            logger.debug(f"Skipping unparseable event {raw.get('id')} in ledger {sequence}: {e}")
            continue
        context.events.append(event)

    return [contexts[seq] for seq in sorted(contexts)]
