from pydantic import BaseModel, ConfigDict


class ActionRowResponse(BaseModel):
    """Single persisted action."""

    model_config = ConfigDict(from_attributes=True)

    action: int
    timestamp: int
    ledger: int
    asset: str
    source: str
    amount: int
