from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    url: str = Field(
        default="sqlite+aiosqlite:///./vocaaid.db", alias="DATABASE_URL"
    )
    key: str = Field(default="vocab-data", alias="STORAGE_KEY")
    legacy_key: str = Field(default="vocab-words", alias="LEGACY_STORAGE_KEY")
    echo: bool = Field(default=False, alias="DB_ECHO")


class NotionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    token: Optional[str] = Field(default=None, alias="NOTION_TOKEN")
    database_id: Optional[str] = Field(default=None, alias="NOTION_DATABASE_ID")
    api_url: str = Field(default="https://api.notion.com/v1", alias="NOTION_API_URL")
    version: str = Field(default="2022-06-28", alias="NOTION_VERSION")
    timeout: float = Field(default=30.0, alias="NOTION_TIMEOUT")

    @computed_field
    def is_configured(self) -> bool:
        return bool(self.token and self.database_id)


class SyncSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    debounce_seconds: float = Field(default=2.0, alias="SYNC_DEBOUNCE_SECONDS")
    start_online: bool = Field(default=True, alias="SYNC_START_ONLINE")


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    idle_seconds: int = Field(default=1800, alias="SESSION_IDLE_SECONDS")
    sweep_seconds: int = Field(default=60, alias="SESSION_SWEEP_SECONDS")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="vocaaid", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    storage: StorageSettings = Field(default_factory=lambda: StorageSettings())
    notion: NotionSettings = Field(default_factory=lambda: NotionSettings())
    sync: SyncSettings = Field(default_factory=lambda: SyncSettings())
    sessions: SessionSettings = Field(default_factory=lambda: SessionSettings())

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], alias="CORS_ORIGINS"
    )


settings = Settings()
