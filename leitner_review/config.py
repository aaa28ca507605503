from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Get the project root directory (parent of the package folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'leitner_review.db'}"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "text"
    log_file_path: Optional[str] = None  # directory for rotating log files

    # Default number of items pulled into one review session
    review_session_limit: int = 20

    model_config = SettingsConfigDict(env_file=str(PROJECT_ROOT / ".env"), extra="ignore")

settings = Settings()
