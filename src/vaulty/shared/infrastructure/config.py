"""
Application settings using Pydantic Settings.

Loads settings from environment variables (prefixed with VAULTY_) only; a `.env`
file in the working directory is a rendered output, not a settings source.
Project level configuration (secrets, extension, ignore files) lives in
vaulty.config, not here.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="VAULTY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="vaulty", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="WARNING", description="Logging level")

    # Logging / Privacy
    log_redaction_enabled: bool = Field(default=True, description="Enable secret redaction in logs")

    # Secrets manager
    vault_timeout_seconds: float = Field(
        default=30.0,
        description="Upper bound for a single call to the secrets manager",
    )

    # Store
    store_filename: str = Field(default=".vaulty-store", description="Store file name in the home directory")
    store_file_mode: int = Field(default=0o600, description="Required permissions of the store file")

    # Templates
    default_extension: str = Field(default=".vaulty", description="Default template file extension")
    local_cache_filename: str = Field(
        default=".vaulty.env",
        description="Dotenv file seeding the SECRETS template variable",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"


# Global settings instance
settings = Settings()
