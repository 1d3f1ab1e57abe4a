# backoffice/config.py
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./backoffice.db"
    LOG_LEVEL: str = "INFO"

    # The source system never floored stock at zero; keep that unless told otherwise.
    ALLOW_NEGATIVE_STOCK: bool = True

    # Extra CORS origin for the deployed frontend
    FRONTEND_URL: Optional[str] = None

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")


settings = Settings()
