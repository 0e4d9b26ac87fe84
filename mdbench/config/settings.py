"""
Application Settings - Pydantic Settings for configuration management.

Supports environment variables and .env file loading.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BeforeValidator, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_to_lowercase(v: str) -> str:
    """Normalize string to lowercase."""
    if isinstance(v, str):
        return v.lower()
    return v


class StoreSettings(BaseSettings):
    """Metadata store connection settings."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    # Backend selection (case-insensitive via BeforeValidator)
    backend: Annotated[
        Literal["fake", "neo4j"],
        BeforeValidator(normalize_to_lowercase),
    ] = Field(default="fake", description="Store backend: in-memory fake or Neo4j")

    neo4j_uri: str = Field(default="bolt://localhost:7687", description="Neo4j connection URI")
    neo4j_username: str = Field(default="neo4j", description="Neo4j username")
    neo4j_password: SecretStr = Field(default=SecretStr("password"), description="Neo4j password")
    neo4j_database: str = Field(default="neo4j", description="Neo4j database name")
    max_connection_pool_size: int = Field(default=50, description="Connection pool size")


class BenchSettings(BaseSettings):
    """Benchmark driver settings. Values from a bench config file take precedence."""

    model_config = SettingsConfigDict(env_prefix="BENCH_")

    num_threads: int = Field(default=1, ge=1, description="Concurrent worker threads")
    seed: int | None = Field(default=None, description="Random seed for reproducible work items")
    sampler: Annotated[
        Literal["zipf", "uniform"],
        BeforeValidator(normalize_to_lowercase),
    ] = Field(default="zipf", description="Popularity sampler strategy")

    # Output
    output_dir: str = Field(default="./benchmark_results", description="Directory for result files")
    save_results: bool = Field(default=False, description="Write one JSON file per workload")

    # Failure policy
    abort_on_failure: bool = Field(default=False, description="Stop a workload on its first failed op")

    # Progress
    report_interval: int = Field(default=1000, ge=1, description="Log progress every N operations")


class ObservabilitySettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="OBSERVABILITY_")

    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format (json for machines, console for humans)"
    )


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="mdbench", description="Application name")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )

    # Sub-settings
    store: StoreSettings = Field(default_factory=StoreSettings)
    bench: BenchSettings = Field(default_factory=BenchSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
