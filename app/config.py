from pydantic_settings import BaseSettings
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (must be injected; there is no built-in fallback)
    database_url: str
    database_url_sync: Optional[str] = None

    # Redis / Celery
    redis_url: str = "redis://localhost:6379/0"
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"
    celery_task_always_eager: bool = False

    # Application
    debug: bool = False
    environment: str = "development"
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Low-stock alerts
    low_stock_alerts_enabled: bool = False
    alert_webhook_url: Optional[str] = None
    alert_dedup_ttl_seconds: int = 3600

    # API
    api_title: str = "Inventory API"
    api_version: str = "1.0.0"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
