"""Query routes over the actions table."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from services.indexer.src.indexer.db.actions_repository import ActionsRepository, StoreError
from services.indexer.src.indexer.db.engine import get_engine
from services.indexer.src.indexer.domain.models import ActionRow
from services.indexer.src.indexer.domain.query import retrieve
from services.indexer.src.indexer.schemas.requests import ActionRequest
from services.indexer.src.indexer.schemas.responses import ActionRowResponse

router = APIRouter(tags=["actions"])


def get_db_engine() -> Engine:
    return get_engine()


def _run_query(engine: Engine, request: ActionRequest) -> list[ActionRowResponse]:
    try:
        rows: list[ActionRow] = retrieve(ActionsRepository(engine), request)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return [ActionRowResponse.model_validate(row) for row in rows]


@router.post("/retrieve", response_model=list[ActionRowResponse])
def retrieve_actions(
    request: ActionRequest,
    engine: Engine = Depends(get_db_engine),
) -> list[ActionRowResponse]:
    """
    Get all actions of one kind, optionally for a single source address.

    Body: `{"kind": 0 | 1, "address": "G..." | null}`. Results are unpaged
    and in storage order.
    """
    return _run_query(engine, request)


@router.get("/actions", response_model=list[ActionRowResponse])
def list_actions(
    kind: int = Query(..., ge=0, le=1, description="0 = Borrow, 1 = Collateral"),
    address: str | None = Query(None, description="Exact source address"),
    engine: Engine = Depends(get_db_engine),
) -> list[ActionRowResponse]:
    """Same as POST /retrieve, with the filters as query parameters."""
    return _run_query(engine, ActionRequest(kind=kind, address=address))
