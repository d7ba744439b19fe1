"""Celery application factory for async webhook delivery."""

import ssl

from celery import Celery

from dairycart.core.config import get_settings
from dairycart.utils.redis_client import normalize_redis_url

settings = get_settings()

broker_url = settings.celery_broker_url or settings.redis_url
backend_url = settings.celery_result_url or settings.redis_url


def _with_ssl(url: str) -> tuple[str, bool]:
    """Switch hosted Redis URLs to TLS and flag whether TLS is in use."""
    url, is_ssl = normalize_redis_url(url)
    # the Redis result backend reads ssl_cert_reqs from the URL during init
    if is_ssl and "ssl_cert_reqs" not in url:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}ssl_cert_reqs=none"
    return url, is_ssl


broker_url, broker_ssl = _with_ssl(broker_url)
backend_url, backend_ssl = _with_ssl(backend_url)
is_ssl = broker_ssl or backend_ssl

celery_app = Celery(
    "dairycart",
    broker=broker_url,
    backend=backend_url,
)

celery_config = {
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "timezone": "UTC",
    "enable_utc": True,
    "task_acks_late": True,  # Acknowledge after task completion
    "task_reject_on_worker_lost": True,  # Re-queue if worker dies
    "worker_prefetch_multiplier": 1,
    "task_time_limit": 120,
    "task_soft_time_limit": 90,
    "result_expires": 3600,
    "broker_connection_retry_on_startup": True,
    "worker_hijack_root_logger": False,
    "task_default_queue": "webhooks",
    "task_routes": {
        "dairycart.workers.tasks.webhook_dispatch_async": {"queue": "webhooks"},
        "dairycart.workers.tasks.webhook_test": {"queue": "webhooks"},
    },
}

if is_ssl:
    ssl_dict = {"ssl_cert_reqs": ssl.CERT_NONE}
    celery_config["broker_use_ssl"] = ssl_dict
    celery_config["redis_backend_use_ssl"] = ssl_dict
    celery_config["broker_transport_options"] = ssl_dict.copy()
    celery_config["result_backend_transport_options"] = ssl_dict.copy()

celery_app.conf.update(celery_config)

# Tasks use @celery_app.task, so importing them registers them
from dairycart.workers.tasks import webhook_dispatch_async, webhook_test  # noqa: E402,F401
