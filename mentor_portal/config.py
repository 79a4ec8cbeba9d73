from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Pydantic Settings will automatically look for these as environment variables
    # or in a .env file

    # Database Settings
    # DATABASE_URL wins over the POSTGRES_* parts when set (e.g. sqlite:// in tests)
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "mentor_portal"

    # SQLAlchemy Connection Pooling Settings
    # Refer to https://docs.sqlalchemy.org/en/20/core/engines.html#connection-pooling-options
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30 # seconds
    DB_POOL_RECYCLE: int = 1800 # seconds (30 minutes)

    # Auth Settings
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    COOKIE_SECURE: bool = False

    # Mentor capacity
    DEFAULT_MAX_MENTEES: int = 5
    MIN_MAX_MENTEES: int = 1
    MAX_MAX_MENTEES: int = 20

    # Share links for mentee queries
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    QUERY_SHARE_TTL_DAYS: Optional[int] = None # None = links never expire

    # Avatar storage
    AVATAR_STORAGE_DIR: str = "media/avatars"
    AVATAR_PUBLIC_PATH: str = "/avatars"
    AVATAR_MAX_BYTES: int = 2 * 1024 * 1024

    # Feedback webhook
    FEEDBACK_WEBHOOK_URL: Optional[str] = None
    FEEDBACK_WEBHOOK_TIMEOUT: float = 10.0

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore" # Ignore extra env variables not defined here
    )

@lru_cache() # Cache settings to avoid re-reading on every call
def get_settings():
    """Returns a cached instance of the Settings."""
    return Settings()
