"""
Configuration settings for the scheduling engine.
Logging options come from environment variables or a .env file; engine
constants are plain class attributes.
"""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


class Settings:
    """Application settings loaded from environment variables."""

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', '')

    # ============================================================================
    # Portfolio dependency inference
    # ============================================================================
    PROXIMITY_WINDOW_DAYS = 7
    PORTFOLIO_STATUSES = ('active', 'planning')

    # ============================================================================
    # Critical path analysis
    # ============================================================================
    NEAR_CRITICAL_THRESHOLD_DAYS = 5

    # ============================================================================
    # Earned value thresholds
    # ============================================================================
    EAC_CPI_FLOOR = 0.1
    ON_TRACK_INDEX_THRESHOLD = 0.9
    HEALTH_GOOD_THRESHOLD = 0.95
    HEALTH_WARNING_THRESHOLD = 0.85

    @classmethod
    def get_log_file(cls) -> Optional[Path]:
        """Return the log file path, or None when file logging is off."""
        if not cls.LOG_FILE:
            return None
        return Path(cls.LOG_FILE)


# Create settings instance
settings = Settings()
