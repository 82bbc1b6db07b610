"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./runcake.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class AwsSettings(BaseModel):
    default_region: str = "us-east-1"
    max_retry_attempts: int = Field(default=5, ge=0)
    connect_timeout: int = 10
    read_timeout: int = 30


class ExecutionSettings(BaseModel):
    """Knobs of the dispatch and polling loop."""

    poll_interval_seconds: float = Field(default=5.0, ge=0)
    max_poll_attempts: int = Field(default=120, ge=1)
    command_timeout_seconds: int = Field(default=3600, ge=30)
    document_name: str = "AWS-RunShellScript"
    max_consecutive_poll_errors: int = Field(default=5, ge=1)
    comment_prefix: str = "Runcake script execution"
    default_mode: Literal["all", "random"] = "random"


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Runcake Execution Server"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    aws: AwsSettings = AwsSettings()
    execution: ExecutionSettings = ExecutionSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def poll_interval(self) -> float:
        return self.execution.poll_interval_seconds

    @property
    def max_poll_attempts(self) -> int:
        return self.execution.max_poll_attempts


@lru_cache()
def get_settings() -> Settings:
    return Settings()
