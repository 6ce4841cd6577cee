import logging
from typing import Dict, Any

import httpx
import redis
from kombu.exceptions import OperationalError as BrokerUnavailable

from app.config import settings
from app.tasks.celery_app import celery_app, to_tls_url
from app.utils.notifier import build_low_stock_payload, send_notification

logger = logging.getLogger(__name__)

# Redis connection for alert de-duplication
redis_client = redis.from_url(to_tls_url(settings.redis_url), decode_responses=True)


class AlertDeliveryError(Exception):
    """The webhook was reached but did not accept the alert."""


def alert_key(sku: str) -> str:
    return f"low_stock_alert:{sku}"


@celery_app.task(bind=True, max_retries=3, default_retry_delay=30)
def send_low_stock_alert(self, payload: Dict[str, Any]):
    """
    Deliver a low-stock notification to the configured webhook.

    At most one alert per SKU is sent within ``alert_dedup_ttl_seconds``.
    """
    url = settings.alert_webhook_url
    if not url:
        return {"sent": False, "reason": "no webhook configured"}

    sku = payload["data"]["sku"]
    key = alert_key(sku)
    if not redis_client.set(key, payload["timestamp"], nx=True, ex=settings.alert_dedup_ttl_seconds):
        logger.info("Low-stock alert for %s already sent recently, skipping", sku)
        return {"sent": False, "reason": "duplicate"}

    try:
        result = send_notification(url, payload)
        if not result["success"]:
            raise AlertDeliveryError(f"webhook answered HTTP {result['status_code']}")
    except (httpx.HTTPError, AlertDeliveryError) as exc:
        # Nothing was delivered: free the slot so the retry is not a duplicate
        redis_client.delete(key)
        logger.warning("Low-stock alert for %s failed: %s", sku, exc)
        raise self.retry(exc=exc)

    logger.info("Low-stock alert for %s delivered (HTTP %s)", sku, result["status_code"])
    return {"sent": True, **result}


def dispatch_low_stock_alert(product) -> bool:
    """
    Queue a low-stock alert for ``product`` if alerts are configured.

    The stock change has already been committed when this runs, so a broker
    outage is logged rather than raised. Returns True if a task was queued.
    """
    if not settings.low_stock_alerts_enabled or not settings.alert_webhook_url:
        return False

    try:
        send_low_stock_alert.delay(build_low_stock_payload(product))
    except BrokerUnavailable as exc:
        logger.error("Could not queue low-stock alert for %s: %s", product.sku, exc)
        return False
    return True
