import logging

from stellar_sdk import xdr as stellar_xdr

from services.indexer.src.indexer.adapters.soroban.decoder import (
    decode_address,
    decode_int128_pair,
    truncate_to_int64,
)
from services.indexer.src.indexer.db.actions_repository import ActionStore
from services.indexer.src.indexer.domain.models import Action, ActionRow

logger = logging.getLogger(__name__)


def build_action_row(
    action: Action,
    increase: bool,
    ledger_timestamp: int,
    ledger_sequence: int,
    asset_value: stellar_xdr.SCVal,
    amount_value: stellar_xdr.SCVal,
    source_value: stellar_xdr.SCVal,
) -> ActionRow:
    """Build the canonical row for one decoded event.

    The event data is `(amount, second)`; only the first element is stored.

    Raises:
        DecodeError: If the asset, source or amount does not have the expected shape.
    """
    amount, _ = decode_int128_pair(amount_value)
    delta = amount if increase else -amount
    truncated = truncate_to_int64(delta)
    if truncated != delta:
        logger.warning(
            f"Amount {delta} at ledger {ledger_sequence} exceeds 64 bits, stored as {truncated}"
        )

    return ActionRow(
        action=int(action),
        timestamp=ledger_timestamp,
        ledger=ledger_sequence,
        asset=decode_address(asset_value),
        source=decode_address(source_value),
        amount=truncated,
    )


def record_action(
    store: ActionStore,
    action: Action,
    increase: bool,
    ledger_timestamp: int,
    ledger_sequence: int,
    asset_value: stellar_xdr.SCVal,
    amount_value: stellar_xdr.SCVal,
    source_value: stellar_xdr.SCVal,
) -> ActionRow:
    """Build a row and append it to the store."""
    row = build_action_row(
        action,
        increase,
        ledger_timestamp,
        ledger_sequence,
        asset_value,
        amount_value,
        source_value,
    )
    store.append(row)
    return row
