"""Configuration for RentMatch, read from the environment."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


@dataclass
class Settings:
    db_path: Path = Path("rentmatch.db")
    secret_key: str = "CHANGE_ME__RENTMATCH_SECRET"
    session_max_age: int = 60 * 60 * 24 * 7
    log_level: str = "INFO"
    log_format: str = "standard"
    seed_sample_data: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from RENTMATCH_* environment variables."""
        return cls(
            db_path=Path(os.getenv("RENTMATCH_DB_PATH", "rentmatch.db")),
            secret_key=os.getenv("RENTMATCH_SECRET_KEY", "CHANGE_ME__RENTMATCH_SECRET"),
            session_max_age=int(os.getenv("RENTMATCH_SESSION_MAX_AGE", str(60 * 60 * 24 * 7))),
            log_level=os.getenv("RENTMATCH_LOG_LEVEL", "INFO"),
            log_format=os.getenv("RENTMATCH_LOG_FORMAT", "standard"),
            seed_sample_data=os.getenv("RENTMATCH_SEED_SAMPLE_DATA", "false").lower() == "true",
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
