"""Application configuration from environment."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Discover Portal"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Database: DATABASE_URL wins, otherwise built from the POSTGRES_* variables
    database_url: str | None = None
    postgres_host: str = "db"
    postgres_port: int = 5432
    postgres_db: str = "users_db"
    postgres_user: str = "postgres"
    postgres_password: str = "pwd"

    # Password hashing
    bcrypt_rounds: int = 10

    # Session cookie
    session_secret: str = "change-me-in-production-use-env"
    session_cookie_name: str = "portal_session"
    session_cookie_secure: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Package directory (holds templates/ and static/)
BASE_DIR = Path(__file__).resolve().parent.parent
