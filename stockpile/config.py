from typing import Dict, List
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./stockpile.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # role names as issued by the upstream auth gateway
    QUANTITY_EDITOR_ROLES: List[str] = ["member", "officer", "admin"]
    TARGET_EDITOR_ROLES: List[str] = ["officer", "admin"]
    ADMIN_ROLES: List[str] = ["admin"]

    SCORING_TIER_WEIGHTS: Dict[str, float] = {
        "critical": 2.0,
        "below_target": 1.5,
        "at_target": 1.0,
        "above_target": 0.5,
    }
    SCORING_ACTION_RATES: Dict[str, float] = {
        "ADD": 1.0,
        "SET": 0.5,
        "REMOVE": 0.25,
    }

    HISTORY_PAGE_LIMIT: int = 100

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
