from dataclasses import dataclass, field
from enum import IntEnum

from stellar_sdk import xdr as stellar_xdr


class Action(IntEnum):
    """Action tag persisted in the `action` column. Tags must never be renumbered."""

    BORROW = 0
    COLLATERAL = 1


@dataclass(frozen=True)
class ActionRow:
    action: int  # Action tag
    # Ledger close time (unix seconds UTC)
    timestamp: int
    ledger: int
    asset: str  # strkey of the asset contract
    source: str  # strkey of the acting party
    amount: int  # signed delta, negative for withdraw/repay


@dataclass(frozen=True)
class ContractEvent:
    """A contract event as emitted on chain, values still XDR-encoded."""

    contract_id: str  # strkey (C...)
    # topic[0] = action symbol, topic[1] = asset, topic[2] = source
    topics: list[stellar_xdr.SCVal]
    data: stellar_xdr.SCVal


@dataclass
class LedgerContext:
    """One ledger close: header fields plus the contract events it carries."""

    sequence: int
    timestamp: int
    events: list[ContractEvent] = field(default_factory=list)
