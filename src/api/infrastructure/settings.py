"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        SCHEMAFORGE_DB_HOST: Database host (default: localhost)
        SCHEMAFORGE_DB_PORT: Database port (default: 5432)
        SCHEMAFORGE_DB_DATABASE: Database name (default: schemaforge)
        SCHEMAFORGE_DB_USERNAME: Database user (default: schemaforge)
        SCHEMAFORGE_DB_PASSWORD: Database password (required in production)
        SCHEMAFORGE_DB_POOL_MAX_CONNECTIONS: Shared pool size (default: 10)
        SCHEMAFORGE_DB_BRANCH_POOL_MAX_CONNECTIONS: Per-branch pool size (default: 5)
        SCHEMAFORGE_DB_BRANCH_POOL_IDLE_TIMEOUT_SECONDS: Recycle age for
            branch connections (default: 30)
        SCHEMAFORGE_DB_BRANCH_POOL_CONNECT_TIMEOUT_SECONDS: Connect timeout
            for branch connections (default: 5)
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAFORGE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="schemaforge", description="Database name")
    username: str = Field(default="schemaforge", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in the shared pool",
        ge=1,
        le=100,
    )
    branch_pool_max_connections: int = Field(
        default=5,
        description="Maximum connections per tenant branch pool",
        ge=1,
        le=50,
    )
    branch_pool_idle_timeout_seconds: int = Field(
        default=30,
        description="Seconds after which a branch pool connection is recycled",
        ge=1,
    )
    branch_pool_connect_timeout_seconds: int = Field(
        default=5,
        description="Seconds to wait when opening a branch connection",
        ge=1,
    )

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class BranchingSettings(BaseSettings):
    """Managed branching database (Neon) settings.

    Isolation is all-or-nothing: branches are only used when both the API key
    and the parent project id are set. Otherwise tenants fall back to
    shared-schema, name-prefixed tables.

    Environment variables:
        SCHEMAFORGE_BRANCHING_API_KEY: Branching API key
        SCHEMAFORGE_BRANCHING_PROJECT_ID: Parent project identifier
        SCHEMAFORGE_BRANCHING_DATABASE_NAME: Database on each branch (default: neondb)
        SCHEMAFORGE_BRANCHING_ROLE_NAME: Role used in branch connection strings
        SCHEMAFORGE_BRANCHING_ROLE_PASSWORD: Password for that role
        SCHEMAFORGE_BRANCHING_API_BASE_URL: API root
        SCHEMAFORGE_BRANCHING_REQUEST_TIMEOUT_SECONDS: HTTP timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAFORGE_BRANCHING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr | None = Field(default=None, description="Branching API key")
    project_id: str | None = Field(default=None, description="Parent project id")
    database_name: str = Field(default="neondb", description="Branch database name")
    role_name: str = Field(default="neondb_owner", description="Branch role name")
    role_password: SecretStr = Field(
        default=SecretStr(""),
        description="Branch role password",
    )
    api_base_url: str = Field(
        default="https://console.neon.tech/api/v2",
        description="Branching API root URL",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to every branching API call",
        gt=0,
    )
    branch_name_prefix: str = Field(
        default="app",
        description="Fixed tag prepended to every branch name",
    )
    branch_name_max_tenant_chars: int = Field(
        default=20,
        description="Number of tenant id characters kept in a branch name",
        ge=1,
        le=60,
    )

    @property
    def is_configured(self) -> bool:
        """True when both the API key and project id are present."""
        has_key = self.api_key is not None and bool(self.api_key.get_secret_value())
        return has_key and bool(self.project_id)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="SchemaForge API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    namespace_prefix: str = Field(
        default="app",
        description="Fixed prefix for every tenant table in shared-schema mode",
        min_length=1,
        max_length=16,
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def branching(self) -> BranchingSettings:
        """Get branching settings."""
        return get_branching_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_branching_settings() -> BranchingSettings:
    """Get cached branching settings."""
    return BranchingSettings()
