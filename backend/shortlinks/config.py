from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./shortlinks.db"

    # Security
    SECRET_KEY: str = "shortlinks-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    BCRYPT_ROUNDS: int = 12

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "1000/hour"
    RATE_LIMIT_SHORTEN: str = "100/hour"
    RATE_LIMIT_AUTH: str = "5/15 minutes"

    # Short codes
    SHORT_CODE_LENGTH: int = 7
    SHORT_CODE_MAX_ATTEMPTS: int = 10

    # Links expire a year after creation
    LINK_TTL_DAYS: int = 365

    # Domain
    SHORT_DOMAIN: Optional[str] = None
    PUBLIC_BASE_URL: str = "https://sho.rt"
    ENVIRONMENT: str = "development"
    PORT: int = 8000

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
