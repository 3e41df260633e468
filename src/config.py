from enum import Enum
from pathlib import Path
from functools import lru_cache
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


#  Working modes
class AppEnvironment(str, Enum):
    """Working modes"""
    DEV = "development"
    PROD = "production"
    TEST = "testing"


#  HTTP inject API config
class ApiConfig(BaseModel):
    """HTTP inject API config"""
    host: str = Field(default="0.0.0.0", description="IP address to bind")
    port: int = Field(default=1880, description="HTTP port")


#  Flows config
class FlowsConfig(BaseModel):
    """Flows file config"""
    path: Path = Field(
        default=Path("flows.json"),
        description="Path to JSON flows file with node definitions"
    )


#  Main Settings
class Settings(BaseSettings):
    """
    Main Settings class.
    Reads configuration from .env file or environment variables.
    """
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra = "ignore"
    )

    env: AppEnvironment = Field(default=AppEnvironment.DEV, alias="APP_ENV")

    # Compose configs
    api: ApiConfig = Field(default_factory=ApiConfig)
    flows: FlowsConfig = Field(default_factory=FlowsConfig)


@lru_cache
def get_settings() -> Settings:
    """
    Creates and returns a (cached) instance of settings.
    Used for Dependency Injection.
    """
    return Settings()
