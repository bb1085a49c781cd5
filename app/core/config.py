"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # CSV data files (one per entity type)
    data_dir: Path = Path("data")
    students_file: str = "student_list.csv"
    representatives_file: str = "company_representatives.csv"
    staff_file: str = "staff_list.csv"
    internships_file: str = "internship_opportunities.csv"
    applications_file: str = "applications.csv"
    withdrawals_file: str = "withdrawal_requests.csv"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # App
    debug: bool = True
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    def csv_path(self, file_name: str) -> Path:
        """Resolve a CSV file name against the data directory."""
        return self.data_dir / file_name

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
