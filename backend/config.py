# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, List
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # Connection pool: ceiling on open connections and their max lifetime (seconds)
    DB_MAX_OPEN_CONNS: int = 3
    DB_CONN_MAX_LIFETIME: int = 60

    # Per-call statement deadlines (seconds)
    DB_QUERY_TIMEOUT: float = 3.0
    DB_LOOKUP_TIMEOUT: float = 15.0

    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    TOP_PRODUCTS_LIMIT: int = 10

    # Push channel
    WS_REFRESH_SECONDS: float = 10.0
    WS_QUEUE_SIZE: int = 32

    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()
