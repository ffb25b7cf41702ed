"""Run database migrations on startup."""

import logging
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine

from services.indexer.src.indexer.db.engine import get_engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent.parent.parent / "migrations"


def run_migrations(
    engine: Engine | None = None, migrations_dir: Path = MIGRATIONS_DIR
) -> int:
    """Execute all SQL migration files in order. Returns the number of files run."""
    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return 0

    migration_files = sorted(migrations_dir.glob("*.sql"))

    if not migration_files:
        logger.info("No migration files found")
        return 0

    engine = engine or get_engine()

    with engine.connect() as conn:
        for migration_file in migration_files:
            logger.info(f"Running migration: {migration_file.name}")
            sql = migration_file.read_text()

            # Split by semicolon and execute each statement
            for statement in sql.split(";"):
                statement = statement.strip()
                if statement:
                    try:
                        conn.execute(text(statement))
                    except Exception as e:
                        # Ignore "already exists" errors
                        if "already exists" not in str(e).lower():
                            logger.warning(f"  {migration_file.name}: {e}")

            conn.commit()

    logger.info("All migrations complete")
    return len(migration_files)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_migrations()
