"""
FormCoach Configuration

Environment variables and application settings.
"""

from pydantic_settings import BaseSettings
from typing import Dict, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "FormCoach"
    DEBUG: bool = True

    # Firebase (workout store + exercise catalog)
    FIREBASE_PROJECT_ID: str = "formcoach"
    FIREBASE_CREDENTIALS_PATH: str = "service-account.json"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # WebSocket
    WS_MAX_CONNECTIONS: int = 100
    WS_HEARTBEAT_INTERVAL: int = 30

    # Thread Pool
    THREAD_POOL_SIZE: int = 4

    # Sessions
    SESSION_IDLE_TIMEOUT_SECONDS: int = 300
    SESSION_REAP_INTERVAL_SECONDS: int = 30
    SESSION_REPLACE_ON_RESTART: bool = True

    # Scoring
    SCORE_SMOOTHING: float = 0.8  # weight of the previous score in the EMA

    # Per-exercise threshold overrides, e.g.
    # EXERCISE_THRESHOLDS='{"Squat": {"knee_down": 95}}'
    EXERCISE_THRESHOLDS: Dict[str, Dict[str, float]] = {}

    # Workout store
    DEFAULT_USER_WEIGHT_KG: float = 70.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
