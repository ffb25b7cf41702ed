from sqlalchemy import BigInteger, Column, Index, Integer, MetaData, String, Table

metadata = MetaData()

# Column names and the Action tag encoding are shared with existing query
# callers; append-only, no primary key.
actions = Table(
    "actions",
    metadata,
    Column("action", Integer, nullable=False),
    # Ledger close time (unix seconds UTC)
    Column("timestamp", BigInteger, nullable=False),
    Column("ledger", BigInteger, nullable=False),
    Column("asset", String, nullable=False),
    Column("source", String, nullable=False),
    Column("amount", BigInteger, nullable=False),
    Index("idx_actions_action_source", "action", "source"),
)
