"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str
    DB_STATEMENT_TIMEOUT_MS: int = 0  # 0 disables the PostgreSQL statement timeout

    # Auth
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # Redis (leaderboard cache is disabled when unset)
    REDIS_URL: Optional[str] = None

    # Application
    APP_NAME: str = "QuizRank"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8081"]

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Scoring
    REATTEMPT_POINT_CAP: int = 85
    ATTEMPT_INSERT_RETRIES: int = 3

    # Leaderboard
    LEADERBOARD_SIZE: int = 50
    LEADERBOARD_CACHE_TTL: int = 30  # seconds

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
