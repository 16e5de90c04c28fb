import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        settlement_mode: str,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.settlement_mode = settlement_mode


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("FINTRACK_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    database_url = os.getenv("FINTRACK_DATABASE_URL")
    if not database_url:
        default_db = _ensure_data_dir() / "fintrack.db"
        database_url = f"sqlite:///{default_db}"
    timezone = os.getenv("FINTRACK_TIMEZONE", "Asia/Kolkata")
    settlement_mode = os.getenv("FINTRACK_SETTLEMENT_MODE", "UPI")
    return Settings(
        database_url=database_url,
        timezone=timezone,
        settlement_mode=settlement_mode,
    )
