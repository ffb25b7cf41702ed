"""Tests for ActionsRepository."""

import pytest
from sqlalchemy import create_engine, text

from services.indexer.src.indexer.db.actions_repository import ActionsRepository, StoreError
from services.indexer.src.indexer.db.engine import init_db
from services.indexer.src.indexer.domain.models import Action, ActionRow


def make_row(
    action: Action = Action.COLLATERAL,
    ledger: int = 2000,
    source: str = "GSOURCE",
    amount: int = 1000,
    **kwargs,
) -> ActionRow:
    return ActionRow(
        action=int(action),
        timestamp=kwargs.get("timestamp", 1700000000),
        ledger=ledger,
        asset=kwargs.get("asset", "CASSET"),
        source=source,
        amount=amount,
    )


@pytest.fixture
def engine():
    engine = create_engine("sqlite:///:memory:")
    init_db(engine)
    return engine


@pytest.fixture
def repository(engine):
    return ActionsRepository(engine)


class TestAppend:

    def test_appends_single_row(self, repository):
        repository.append(make_row())

        assert repository.count() == 1

    def test_keeps_duplicate_rows(self, repository):
        row = make_row()

        repository.append(row)
        repository.append(row)

        assert repository.count() == 2

    def test_stores_negative_amounts(self, repository):
        repository.append(make_row(amount=-500))

        rows = repository.query({})

        assert rows[0].amount == -500

    def test_stores_int64_extremes(self, repository):
        repository.append(make_row(amount=2**63 - 1))
        repository.append(make_row(amount=-(2**63)))

        amounts = [r.amount for r in repository.query({})]

        assert amounts == [2**63 - 1, -(2**63)]

    def test_wraps_database_errors(self, engine, repository):
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE actions"))

        with pytest.raises(StoreError):
            repository.append(make_row())


class TestQuery:

    def test_returns_all_rows_without_predicates(self, repository):
        repository.append(make_row(ledger=1))
        repository.append(make_row(ledger=2))

        assert [r.ledger for r in repository.query({})] == [1, 2]

    def test_filters_by_action(self, repository):
        repository.append(make_row(action=Action.COLLATERAL, ledger=1))
        repository.append(make_row(action=Action.BORROW, ledger=2))

        rows = repository.query({"action": int(Action.BORROW)})

        assert [r.ledger for r in rows] == [2]

    def test_combines_predicates(self, repository):
        repository.append(make_row(source="GA", ledger=1))
        repository.append(make_row(source="GB", ledger=2))
        repository.append(make_row(action=Action.BORROW, source="GA", ledger=3))

        rows = repository.query({"action": int(Action.COLLATERAL), "source": "GA"})

        assert [r.ledger for r in rows] == [1]

    def test_returns_full_rows(self, repository):
        row = make_row()
        repository.append(row)

        assert repository.query({"source": "GSOURCE"}) == [row]

    def test_empty_result(self, repository):
        assert repository.query({"action": 0}) == []

    def test_rejects_unknown_column(self, repository):
        with pytest.raises(StoreError):
            repository.query({"user": "GA"})

    def test_wraps_database_errors(self, engine, repository):
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE actions"))

        with pytest.raises(StoreError):
            repository.query({"action": 1})


class TestGetMaxLedger:

    def test_returns_none_when_table_empty(self, repository):
        assert repository.get_max_ledger() is None

    def test_returns_highest_ledger(self, repository):
        repository.append(make_row(ledger=100))
        repository.append(make_row(ledger=300))
        repository.append(make_row(ledger=200))

        assert repository.get_max_ledger() == 300
