"""Application settings (single file, Pydantic-based).

DB selection:
  - DATABASE_URL set and non-empty -> PostgreSQL
  - DATABASE_URL absent/empty -> SQLite (DB_SQLITE_PATH, default data/rewards.db)

Consensus parameters (payout delay, rule-change round, coin scale) are read-only
inputs to the query core; they are never computed here.
"""

import re
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _project_root() -> Path:
    """Project root. config.py lives at the top of the tree."""
    return Path(__file__).resolve().parent


def _ensure_env_loaded() -> None:
    """Load .env from project root (then its parent). Idempotent."""
    root: Path = _project_root()
    for candidate in (root / ".env", root.parent / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=False)


_ensure_env_loaded()


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str | None = Field(
        default=None,
        description="PostgreSQL DSN; when set, uses Postgres.",
        validation_alias="DATABASE_URL",
    )
    sqlite_path: str | None = Field(default="data/rewards.db")
    pool_size: int = Field(default=5)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=1800)

    def _use_postgres(self) -> bool:
        return bool((self.database_url or "").strip())

    def _resolved_sqlite_path(self) -> Path:
        raw: str = (self.sqlite_path or "data/rewards.db").strip()
        path: Path = Path(raw)
        if not path.is_absolute():
            path = (_project_root() / path).resolve()
        return path

    def _redacted_postgres_dsn(self) -> str:
        url: str = (self.database_url or "").strip()
        return re.sub(r":([^:@]+)@", r":***@", url) if url else ""

    @property
    def url(self) -> str:
        if self._use_postgres():
            return (self.database_url or "").strip()
        path = self._resolved_sqlite_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{path.as_posix()}"

    def db_info_for_logging(self) -> str:
        if self._use_postgres():
            return f"PostgreSQL @ {self._redacted_postgres_dsn()}"
        return f"SQLite @ {self._resolved_sqlite_path().as_posix()}"


class ConsensusSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CONSENSUS_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    payout_start_delay: int = Field(
        default=200,
        description="Blocks between a round's end height and its first payout block",
    )
    first_composite_rule_round: int = Field(
        default=4,
        description="First round evaluated with the composite eligibility rule",
    )
    coin_decimals: int = Field(default=8, ge=0, le=18)
    address_prefixes: str = Field(default="S", min_length=1)
    term_tier_percents: dict[int, float] = Field(
        default_factory=lambda: {1: 0.20, 2: 0.30, 3: 0.40},
        description="Annual yield fraction per term tier (years)",
    )


class SyncSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SYNC_", extra="ignore")

    enabled: bool = Field(default=True, description="Run the database refresh thread")
    interval: float = Field(default=30.0, gt=0, description="Seconds between refreshes")


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLIENT_", extra="ignore")

    retry_attempts: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=0.5, ge=0)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REWARDS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = Field(default="development")
    debug: bool = Field(
        default=False,
        description="Diagnostic mode: queries skip the readiness check",
    )
    api_key: str | None = Field(default=None, description="API key for the RPC endpoint")
    data_dir: Path = Field(default=Path("data"))

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    consensus: ConsensusSettings = Field(default_factory=ConsensusSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()
