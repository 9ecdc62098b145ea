"""Settings for the mailbox migration verifier, loaded from the environment."""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccountSettings(BaseModel):
    """Connection settings for one Exchange mailbox."""

    ews_email: str = ""
    ews_username: Optional[str] = None
    ews_password: SecretStr = Field(default=SecretStr(""))
    ews_auth_type: Literal["basic", "ntlm", "oauth2"] = "oauth2"

    # OAuth2 (Exchange Online app registration)
    ews_client_id: Optional[str] = None
    ews_client_secret: SecretStr = Field(default=SecretStr(""))
    ews_tenant_id: Optional[str] = None

    # Endpoint
    ews_server_url: Optional[str] = None
    ews_autodiscover: bool = True

    timezone: str = "UTC"
    request_timeout: int = 120
    connection_pool_size: int = 4


class Settings(BaseSettings):
    """
    Verifier settings.

    Nested account fields use a double underscore, e.g.
    MIGRATION_SOURCE__EWS_EMAIL or MIGRATION_DESTINATION__EWS_TENANT_ID.
    """

    model_config = SettingsConfigDict(
        env_prefix="MIGRATION_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    source: AccountSettings = Field(default_factory=AccountSettings)
    destination: AccountSettings = Field(default_factory=AccountSettings)

    # Enumeration
    page_size: int = Field(100, gt=0)

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Expected source mailbox contents
    fixture_path: Optional[Path] = None

    # Migration engine defaults
    engine_username: Optional[str] = None
    engine_password: SecretStr = Field(default=SecretStr(""))
    connector_type: str = "ExchangeOnline2"
    item_types: List[str] = Field(default_factory=lambda: ["Mail", "Calendar", "Contact"])


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
