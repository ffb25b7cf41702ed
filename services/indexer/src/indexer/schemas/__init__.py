from services.indexer.src.indexer.schemas.requests import ActionRequest
from services.indexer.src.indexer.schemas.responses import ActionRowResponse

__all__ = [
    "ActionRequest",
    "ActionRowResponse",
]
