"""Append-only store for action rows."""

from typing import Any, Mapping, Protocol

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from services.indexer.src.indexer.db.models import actions
from services.indexer.src.indexer.domain.models import ActionRow


class StoreError(Exception):
    """Raised when the underlying database append or read fails."""


class ActionStore(Protocol):
    def append(self, row: ActionRow) -> None: ...

    def query(self, predicates: Mapping[str, Any]) -> list[ActionRow]: ...


class ActionsRepository:
    """SQLAlchemy-backed action store. Rows are only ever inserted."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def append(self, row: ActionRow) -> None:
        """Insert one row in its own transaction."""
        stmt = insert(actions).values(
            action=row.action,
            timestamp=row.timestamp,
            ledger=row.ledger,
            asset=row.asset,
            source=row.source,
            amount=row.amount,
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to append action row: {e}") from e

    def query(self, predicates: Mapping[str, Any]) -> list[ActionRow]:
        """
        Read rows matching every equality predicate.

        Args:
            predicates: Mapping of column name to the exact value it must equal

        Returns:
            Matching rows in storage order (empty list if none match)
        """
        stmt = select(actions)
        for column, value in predicates.items():
            if column not in actions.c:
                raise StoreError(f"Unknown column in predicate: {column}")
            stmt = stmt.where(actions.c[column] == value)

        try:
            with self.engine.connect() as conn:
                result = conn.execute(stmt)
                return [_row_to_action(row) for row in result]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read action rows: {e}") from e

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(actions)).scalar_one()

    def get_max_ledger(self) -> int | None:
        """Highest ledger sequence recorded, or None if the table is empty."""
        with self.engine.connect() as conn:
            value = conn.execute(select(func.max(actions.c.ledger))).scalar()
            return int(value) if value is not None else None


def _row_to_action(row: Any) -> ActionRow:
    return ActionRow(
        action=row.action,
        timestamp=row.timestamp,
        ledger=row.ledger,
        asset=row.asset,
        source=row.source,
        amount=row.amount,
    )
