"""
Application configuration using Pydantic Settings
"""
import os
from typing import List, Optional, Tuple, Type

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


def _config_file() -> str:
    return os.environ.get("CONFIG_FILE", "config.yaml")


class Settings(BaseSettings):
    """Application settings"""

    # App
    APP_NAME: str = "Message Log"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 1323
    SHUTDOWN_TIMEOUT: int = Field(default=10, ge=0)

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 20
    REDIS_SOCKET_TIMEOUT: float = 5.0

    # Message log
    MESSAGE_TTL_SECONDS: int = Field(default=3600, gt=0)

    # Rate limiting (slowapi limit string)
    RATE_LIMIT: str = "100/second"
    RATE_LIMIT_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # YAML sits below env and .env so deployments can override single keys
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=_config_file()),
            file_secret_settings,
        )


settings = Settings()
