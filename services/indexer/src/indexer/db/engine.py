from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from services.indexer.src.indexer.config import settings

# One engine (and connection pool) per database URL for the process lifetime
_engines: dict[str, Engine] = {}


def get_engine(database_url: str | None = None) -> Engine:
    """Return the shared engine for `database_url`, defaulting to settings."""
    url = database_url or settings.database_url
    engine = _engines.get(url)
    if engine is None:
        # Polling runs sit idle between intervals; stale connections are replaced
        engine = create_engine(url, echo=False, pool_pre_ping=True)
        _engines[url] = engine
    return engine


def init_db(engine: Engine) -> None:
    """Create the actions table and its index if missing."""
    from services.indexer.src.indexer.db.models import metadata

    metadata.create_all(engine)
