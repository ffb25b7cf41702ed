"""Tests for actions query endpoints."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from services.indexer.src.indexer.db.actions_repository import ActionsRepository, StoreError
from services.indexer.src.indexer.db.engine import init_db
from services.indexer.src.indexer.domain.models import Action, ActionRow
from services.indexer.src.indexer.main import app
from services.indexer.src.indexer.routes.actions import get_db_engine

SOURCE_A = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"
SOURCE_B = "GBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBHLJ"


def make_row(action: Action, source: str, amount: int, ledger: int = 2000) -> ActionRow:
    return ActionRow(
        action=int(action),
        timestamp=1700000000,
        ledger=ledger,
        asset="CASSET",
        source=source,
        amount=amount,
    )


@pytest.fixture
def engine():
    # One shared connection so the worker thread sees the same in-memory DB
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_db_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(engine):
    repo = ActionsRepository(engine)
    repo.append(make_row(Action.COLLATERAL, SOURCE_A, 1_000_000_000))
    repo.append(make_row(Action.COLLATERAL, SOURCE_B, 5))
    repo.append(make_row(Action.BORROW, SOURCE_A, -20, ledger=2010))
    return repo


class TestRetrieveEndpoint:

    def test_filters_by_kind(self, client, seeded):
        response = client.post("/api/retrieve", json={"kind": 1})

        assert response.status_code == 200
        assert sorted(r["amount"] for r in response.json()) == [5, 1_000_000_000]

    def test_filters_by_kind_and_address(self, client, seeded):
        response = client.post("/api/retrieve", json={"kind": 1, "address": SOURCE_A})

        assert response.json() == [
            {
                "action": 1,
                "timestamp": 1700000000,
                "ledger": 2000,
                "asset": "CASSET",
                "source": SOURCE_A,
                "amount": 1_000_000_000,
            }
        ]

    def test_empty_result_is_ok(self, client):
        response = client.post("/api/retrieve", json={"kind": 0})

        assert response.status_code == 200
        assert response.json() == []

    def test_accepts_variant_name(self, client, seeded):
        response = client.post("/api/retrieve", json={"kind": "Borrow"})

        assert [r["amount"] for r in response.json()] == [-20]

    def test_ignores_unknown_fields(self, client, seeded):
        response = client.post("/api/retrieve", json={"kind": 0, "limit": 1})

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_missing_kind_is_rejected(self, client):
        response = client.post("/api/retrieve", json={"address": SOURCE_A})

        assert response.status_code == 422

    def test_wrong_type_is_rejected(self, client):
        response = client.post("/api/retrieve", json={"kind": {"x": 1}})

        assert response.status_code == 422

    @pytest.mark.parametrize("kind", [True, "1", 1.0])
    def test_coercible_kind_is_rejected(self, client, seeded, kind):
        response = client.post("/api/retrieve", json={"kind": kind})

        assert response.status_code == 422

    def test_store_failure_returns_503(self, client):
        with patch.object(ActionsRepository, "query", side_effect=StoreError("db down")):
            response = client.post("/api/retrieve", json={"kind": 0})

        assert response.status_code == 503
        assert "db down" in response.json()["detail"]


class TestListActionsEndpoint:

    def test_query_parameters(self, client, seeded):
        response = client.get("/api/actions", params={"kind": 0, "address": SOURCE_A})

        assert response.status_code == 200
        assert [r["ledger"] for r in response.json()] == [2010]

    def test_rejects_out_of_range_kind(self, client):
        response = client.get("/api/actions", params={"kind": 5})

        assert response.status_code == 422
