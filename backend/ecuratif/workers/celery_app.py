"""Celery application for background imports."""

import ssl

from celery import Celery

from ecuratif.core.config import get_settings

settings = get_settings()

broker_url = settings.celery_broker_url or settings.redis_url
backend_url = settings.celery_result_url or settings.redis_url

celery_app = Celery(
    "ecuratif",
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
    "task_time_limit": 900,
    "task_soft_time_limit": 840,
    "result_expires": 3600,
    "broker_connection_retry_on_startup": True,
    "worker_hijack_root_logger": False,
    "task_routes": {"ecuratif.workers.tasks.import_infos": {"queue": "imports"}},
    "task_default_queue": "imports",
}

# rediss:// brokers (managed Redis) need relaxed certificate checks
if broker_url.startswith("rediss://") or backend_url.startswith("rediss://"):
    ssl_dict = {"ssl_cert_reqs": ssl.CERT_NONE}
    celery_config["broker_use_ssl"] = ssl_dict
    celery_config["redis_backend_use_ssl"] = ssl_dict

celery_app.conf.update(celery_config)

# Import tasks so they register with celery_app
from ecuratif.workers.tasks import import_infos  # noqa: E402,F401
