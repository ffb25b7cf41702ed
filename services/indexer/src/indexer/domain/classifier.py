"""Selection and dispatch of pool contract events for one ledger close."""

import logging
from typing import Iterable

from services.indexer.src.indexer.adapters.soroban.decoder import DecodeError, decode_symbol
from services.indexer.src.indexer.db.actions_repository import ActionStore
from services.indexer.src.indexer.domain.models import (
    Action,
    ActionRow,
    ContractEvent,
    LedgerContext,
)
from services.indexer.src.indexer.domain.recorder import record_action

logger = logging.getLogger(__name__)

# Event symbol -> (action, increase). Spelling must match the contract exactly.
ACTION_RULES: dict[str, tuple[Action, bool]] = {
    "supply_collateral": (Action.COLLATERAL, True),
    "withdraw_collateral": (Action.COLLATERAL, False),
    "borrow": (Action.BORROW, True),
    "repay": (Action.BORROW, False),
}

MIN_TOPICS = 3


def select_contract_events(
    events: Iterable[ContractEvent], contract_id: str
) -> list[ContractEvent]:
    """Keep only events emitted by `contract_id`, in their original order."""
    return [event for event in events if event.contract_id == contract_id]


def classify(event: ContractEvent) -> tuple[Action, bool] | None:
    """
    Map an event to its action rule.

    Returns:
        (action, increase), or None if the event is not one we index
    """
    if len(event.topics) < MIN_TOPICS:
        return None
    try:
        symbol = decode_symbol(event.topics[0])
    except DecodeError:
        return None
    return ACTION_RULES.get(symbol)


def on_close(context: LedgerContext, store: ActionStore, contract_id: str) -> list[ActionRow]:
    """
    Record every indexed action in one ledger close.

    Events are handled in emission order and each row is appended before the
    next event is looked at. Unrecognized events are skipped; a recognized
    event with a malformed payload raises DecodeError and aborts the close
    (rows already appended for it stay).

    Returns:
        The rows appended, in order
    """
    recorded: list[ActionRow] = []

    for event in select_contract_events(context.events, contract_id):
        rule = classify(event)
        if rule is None:
            logger.debug(
                f"Skipping unrecognized event at ledger {context.sequence} "
                f"({len(event.topics)} topics)"
            )
            continue

        action, increase = rule
        row = record_action(
            store,
            action,
            increase,
            context.timestamp,
            context.sequence,
            event.topics[1],
            event.data,
            event.topics[2],
        )
        recorded.append(row)

    if recorded:
        logger.info(f"Ledger {context.sequence}: recorded {len(recorded)} actions")
    return recorded
