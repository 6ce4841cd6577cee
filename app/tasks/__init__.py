# Async task definitions
from app.tasks.celery_app import celery_app
from app.tasks import alerts  # Import to register tasks

__all__ = ["celery_app"]
