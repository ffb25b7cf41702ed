from typing import Any

from services.indexer.src.indexer.db.actions_repository import ActionStore
from services.indexer.src.indexer.domain.models import ActionRow
from services.indexer.src.indexer.schemas.requests import ActionRequest


def request_predicates(request: ActionRequest) -> dict[str, Any]:
    """Translate a request into exact-equality column predicates."""
    predicates: dict[str, Any] = {"action": int(request.kind)}
    if request.address is not None:
        predicates["source"] = request.address
    return predicates


def retrieve(store: ActionStore, request: ActionRequest) -> list[ActionRow]:
    """Return every stored row matching the request, in store order.

    Raises:
        StoreError: If the read fails.
    """
    return store.query(request_predicates(request))
