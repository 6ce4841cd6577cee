import httpx
import time
from typing import Dict, Any, Optional
from datetime import datetime, timezone

NOTIFICATION_TIMEOUT = 10.0


def build_low_stock_payload(product) -> Dict[str, Any]:
    """Serialize a product into the ``inventory.low_stock`` event payload."""
    return {
        "event": "inventory.low_stock",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": {
            "id": product.id,
            "sku": product.sku,
            "name": product.name,
            "category": product.category,
            "quantity_on_hand": product.quantity_on_hand,
            "reorder_level": product.reorder_level,
            "supplier": product.supplier,
            "location": product.location,
        },
    }


def send_notification(
    url: str,
    payload: Dict[str, Any],
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    """
    POST a JSON notification.

    Returns:
        Dictionary with status_code, success and response_time_ms

    Raises:
        httpx.HTTPError: on transport failures and timeouts
    """
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=NOTIFICATION_TIMEOUT)

    start_time = time.time()
    try:
        response = client.post(url, json=payload, headers={"Content-Type": "application/json"})
    finally:
        if owns_client:
            client.close()
    response_time_ms = (time.time() - start_time) * 1000

    return {
        "status_code": response.status_code,
        "success": 200 <= response.status_code < 300,
        "response_time_ms": round(response_time_ms, 2),
    }
