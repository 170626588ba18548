"""
Application configuration settings
"""
from decimal import Decimal
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    PROJECT_NAME: str = "Boxflow Document Box API"
    VERSION: str = "1.0.0"
    DATABASE_URL: str = "sqlite+aiosqlite:///./boxflow.db"
    LOG_LEVEL: str = "INFO"

    # Validation thresholds
    AMOUNT_TOLERANCE: Decimal = Decimal("1.00")      # baht
    VAT_RATE: Decimal = Decimal("7")                 # percent
    VAT_RATE_TOLERANCE: Decimal = Decimal("0.5")     # percentage points
    STALE_DRAFT_DAYS: int = 7

    # Soft duplicate heuristics
    DUPLICATE_WINDOW_DAYS: int = 3
    DUPLICATE_AMOUNT_TOLERANCE: Decimal = Field(Decimal("0.01"), ge=0, lt=1)  # relative (1%)

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
