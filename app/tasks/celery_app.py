from celery import Celery
from kombu.exceptions import OperationalError
from ssl import CERT_NONE
import logging
from app.config import settings

logger = logging.getLogger(__name__)


def to_tls_url(url: str) -> str:
    """
    Upstash Redis requires TLS: strip trailing slashes and database numbers
    and switch redis:// to rediss://. Other URLs are returned unchanged.
    """
    if not url or "upstash.io" not in url:
        return url
    url = url.rstrip('/').rstrip('/0').rstrip('/1').rstrip('/2')
    if url.startswith("redis://"):
        url = url.replace("redis://", "rediss://", 1)
    return url


celery_broker_url = to_tls_url(settings.celery_broker_url)
celery_result_backend = to_tls_url(settings.celery_result_backend)

celery_app = Celery(
    "inventory",
    broker=celery_broker_url,
    backend=celery_result_backend,
)

config_updates = {
    'task_serializer': "json",
    'accept_content': ["json"],
    'result_serializer': "json",
    'timezone': "UTC",
    'enable_utc': True,
    'task_track_started': True,
    'task_time_limit': 60,  # Notifications are short HTTP calls
    'task_always_eager': settings.celery_task_always_eager,
    'worker_prefetch_multiplier': 1,
    'worker_max_tasks_per_child': 1000,
    'broker_connection_retry_on_startup': True,
    'result_backend_always_retry': True,
    'result_backend_max_retries': 3,
}

# Kombu's Redis transport takes SSL options via broker_use_ssl;
# Upstash uses self-signed certs, so don't verify them
if "upstash.io" in celery_broker_url or "upstash.io" in celery_result_backend:
    config_updates['broker_use_ssl'] = {
        'ssl_cert_reqs': CERT_NONE,
        'ssl_ca_certs': None,
        'ssl_certfile': None,
        'ssl_keyfile': None,
    }
    config_updates['broker_transport_options'] = {'health_check_interval': 30}
    logger.info("Using TLS broker %s...", celery_broker_url[:50])

celery_app.conf.update(**config_updates)


def broker_reachable(timeout: float = 2.0) -> bool:
    """True if a broker connection can be established within ``timeout`` seconds."""
    try:
        with celery_app.connection_for_write() as connection:
            connection.ensure_connection(max_retries=1, timeout=timeout)
    except OperationalError as exc:
        logger.warning("Broker unreachable: %s", exc)
        return False
    return True


# Import tasks to register them
from app.tasks import alerts  # noqa
