"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///out01/database.sqlite"
    DB_POOL_SIZE: int = 2
    DB_MAX_OVERFLOW: int = 18
    MIGRATIONS_DIR: str = "alembic"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Archive acquisition
    ARCHIVE_URL: str = "https://fiber-challenges.s3.amazonaws.com/dump.tar.gz"
    ARCHIVE_PATH: str = "tmp/dump.tar.gz"
    EXTRACT_DIR: str = "tmp/extracted"

    # Load configuration
    MAX_RETRIES: int = 5
    RETRY_DELAY: float = 1.0
    RETRY_BACKOFF: str = "fixed"
    PROGRESS_INTERVAL: int = 1000
    TRUNCATE_BEFORE_LOAD: bool = False
    CSV_CHUNK_SIZE: int = 5000

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
