"""
Despacho best-effort de eventos de caja
"""
import logging
from enum import Enum
from typing import Any, Dict

from pdv_api.core.config import settings

logger = logging.getLogger(__name__)


class RegisterEvent(str, Enum):
    REGISTER_OPENED = "register.opened"
    REGISTER_CLOSED = "register.closed"
    ENTRY_CREATED = "entry.created"
    SALE_COMMITTED = "sale.committed"
    SALE_CANCELLED = "sale.cancelled"


def notify(event: RegisterEvent, payload: Dict[str, Any]) -> bool:
    """
    Encola la publicación del evento. Se llama solo después del commit.

    Nunca lanza: un broker caído se registra y la operación de caja sigue.
    """
    if not settings.NOTIFICATIONS_ENABLED:
        return False

    from pdv_api.modules.notifications.tasks import publish_register_event

    try:
        publish_register_event.delay(event.value, payload)
        return True
    except Exception as exc:
        logger.warning(f"Could not enqueue {event.value} notification: {exc}")
        return False
