from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env at the project root (parent of mtx_gateway/) or in CWD
_env_path = Path(__file__).resolve().parent.parent / ".env"

MOCK_MODE_VALUES = ("true", "1")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=[str(_env_path), ".env"],
        env_file_encoding="utf-8",
        extra="ignore",
    )

    BASE_URL: str
    AUTH_USER: str
    AUTH_PASS: str
    MOCK_MODE: str = ""
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    @field_validator("BASE_URL", "AUTH_USER", "AUTH_PASS")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @property
    def mock_enabled(self) -> bool:
        return self.MOCK_MODE in MOCK_MODE_VALUES

    @property
    def base_url(self) -> str:
        return self.BASE_URL.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
