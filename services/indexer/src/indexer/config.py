import os
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from stellar_sdk import StrKey

# YieldBlox pool on Stellar mainnet
DEFAULT_CONTRACT_ID = "CBP7NO6F7FRDHSOFQBT2L2UWYIZ2PU76JKVRYAQTG3KZSQLYAOKIF2WB"


def _find_env_file() -> str | None:
    """Find .env file, preferring .env.local for local development."""
    for env_file in [".env.local", ".env"]:
        for base in [".", os.environ.get("REPO_ROOT", "")]:
            if base:
                path = Path(base) / env_file
                if path.exists():
                    return str(path)
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # DATABASE_URL from environment (production/CI)
    # Falls back to SQLite for local development if not set
    database_url: str = "sqlite:///./local.db"

    # Contract whose events are indexed
    contract_id: str = DEFAULT_CONTRACT_ID

    # Soroban RPC endpoint serving getEvents / getLatestLedger
    rpc_url: str = ""
    rpc_timeout: float = 30.0
    events_page_size: int = 100

    # First ledger to scan when the actions table is empty
    start_ledger: int | None = None
    poll_interval_seconds: int = 30

    @field_validator("contract_id")
    @classmethod
    def _check_contract_id(cls, value: str) -> str:
        if not StrKey.is_valid_contract(value):
            raise ValueError(f"Not a contract strkey: {value}")
        return value


settings = Settings()


def require_rpc_url() -> None:
    """Validate RPC_URL is set. Call at app/job startup."""
    if not settings.rpc_url:
        raise RuntimeError(
            "RPC_URL environment variable is required for ledger ingestion. "
            "Point it at a Soroban RPC endpoint."
        )
