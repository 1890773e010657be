"""
Centralized application configuration.
All settings live in one place for easy maintenance.
"""
from pydantic_settings import BaseSettings
from typing import Dict, List


class Settings(BaseSettings):
    """Main system configuration."""

    # ============================================
    # APPLICATION
    # ============================================
    APP_TITLE: str = "Inpatient Bed Allocation Service"
    APP_DESCRIPTION: str = "Ward, bed and admission allocation for inpatient care"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # ============================================
    # DATABASE
    # ============================================
    DATABASE_URL: str = "sqlite:///./inpatient.db"

    # ============================================
    # CORS
    # ============================================
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # ============================================
    # ALLOCATION
    # ============================================
    TIMEZONE: str = "UTC"  # calendar day used by "discharged today"
    LOCK_TIMEOUT_SECONDS: float = 10.0
    TRANSACTION_RETRIES: int = 3
    WARD_MAX_CAPACITY: int = 1000

    # Fallback daily rate per ward type when a ward has no rate of its own
    WARD_DEFAULT_DAILY_RATES: Dict[str, float] = {
        "GENERAL": 1000,
        "SEMI_PRIVATE": 2000,
        "PRIVATE": 3000,
        "ICU": 5000,
    }
    WARD_DEFAULT_DAILY_RATE_FALLBACK: float = 1000

    # ============================================
    # PAGINATION
    # ============================================
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    # ============================================
    # LOGGING
    # ============================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global configuration instance
settings = Settings()
