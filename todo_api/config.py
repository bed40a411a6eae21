from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables or a `.env`
    file. One instance is built at startup and handed to `create_app`.
    """

    JWT_SECRET: str
    """Secret used to sign and verify access tokens. Must be supplied by the deployment."""

    JWT_ALGORITHM: str = "HS256"
    """Signing algorithm passed to PyJWT."""

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    """Lifetime of an issued token, in minutes."""

    BCRYPT_ROUNDS: int = 10
    """bcrypt cost factor for new password hashes."""

    DATABASE_URL: str = "sqlite:///./todo.db"
    """SQLAlchemy connection string for the users and tasks tables."""

    CORS_ORIGINS: List[str] = ["*"]
    """Origins allowed to call the API from a browser."""

    LOG_LEVEL: str = "INFO"
    """Console log level name."""

    HOST: str = "127.0.0.1"
    PORT: int = 5000

    class Config:
        env_file = ".env"

    @field_validator("JWT_SECRET")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return value

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def _rounds_in_range(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return value


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
