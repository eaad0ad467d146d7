"""
Tareas de Celery para notificar a los paneles en tiempo real.
"""
import json
import logging
from typing import Dict, Any

import redis

from pdv_api.core.celery import celery_app
from pdv_api.core.config import settings

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=2)
def publish_register_event(self, event: str, payload: Dict[str, Any]):
    """
    Publica un evento de caja en el canal pub/sub de Redis.

    Best-effort: la base de datos sigue siendo la única fuente de verdad.
    """
    message = json.dumps({"event": event, "data": payload}, default=str)

    try:
        client = redis.Redis.from_url(
            settings.redis_url,
            socket_timeout=settings.STORE_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.STORE_TIMEOUT_SECONDS
        )
        receivers = client.publish(settings.NOTIFICATIONS_CHANNEL, message)
        logger.debug(f"Event {event} published to {receivers} subscriber(s)")
        return {"status": "published", "event": event, "receivers": receivers}

    except redis.RedisError as exc:
        logger.warning(f"Publishing event {event} failed: {exc}")

        if self.request.retries < self.max_retries:
            raise self.retry(exc=exc, countdown=2 ** self.request.retries)

        return {"status": "failed", "event": event, "error": str(exc)}
