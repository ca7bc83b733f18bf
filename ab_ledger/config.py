"""Configuration management for ab-ledger."""

import os
from dataclasses import dataclass, field

from ab_ledger.exceptions import ConfigurationError


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "ledger"
    user: str = "postgres"
    password: str = "postgres"
    connect_timeout: int = 5  # seconds

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class ImportConfig:
    """Import/export configuration."""

    phone_prefix: str = "+91"


@dataclass
class AssistantConfig:
    """Text summary service configuration."""

    api_url: str = "https://api.openai.com/v1/responses"
    model: str = "gpt-4o-mini"
    api_key: str | None = None
    timeout: float = 30.0


@dataclass
class LedgerConfig:
    """Main configuration for ab-ledger."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    imports: ImportConfig = field(default_factory=ImportConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_int_env("POSTGRES_PORT", 5432),
            database=os.getenv("POSTGRES_DB", "ledger"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            connect_timeout=_int_env("POSTGRES_CONNECT_TIMEOUT", 5),
        )

        imports = ImportConfig(phone_prefix=os.getenv("PHONE_PREFIX", "+91"))

        assistant = AssistantConfig(
            api_url=os.getenv("ASSISTANT_API_URL", "https://api.openai.com/v1/responses"),
            model=os.getenv("ASSISTANT_MODEL", "gpt-4o-mini"),
            api_key=os.getenv("OPENAI_API_KEY"),
            timeout=_float_env("ASSISTANT_TIMEOUT", 30.0),
        )

        return cls(
            postgres=postgres,
            imports=imports,
            assistant=assistant,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
