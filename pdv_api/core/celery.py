"""
Celery configuration for background tasks
"""
from celery import Celery
import logging

from pdv_api.core.config import settings

logger = logging.getLogger(__name__)

redis_url = settings.redis_url

# Create Celery instance
celery_app = Celery(
    "pdv_api",
    broker=redis_url,
    backend=redis_url,
    include=[
        "pdv_api.modules.notifications.tasks",
    ]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=60,
    task_soft_time_limit=30,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    # Publicar nunca debe bloquear una operación de caja
    task_publish_retry=False,
    broker_connection_timeout=settings.STORE_TIMEOUT_SECONDS,
    broker_transport_options={
        "socket_connect_timeout": settings.STORE_TIMEOUT_SECONDS,
        "socket_timeout": settings.STORE_TIMEOUT_SECONDS,
    },

    # Los eventos son efímeros
    task_ignore_result=True,
    result_expires=600,

    task_routes={
        "pdv_api.modules.notifications.tasks.*": {"queue": "notifications"},
    },
)

if __name__ == "__main__":
    celery_app.start()
