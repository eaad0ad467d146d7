"""
Tests para el despacho best-effort de eventos de caja
"""

import json
from types import SimpleNamespace

from pdv_api.core.config import settings
from pdv_api.modules.notifications import tasks
from pdv_api.modules.notifications.service import RegisterEvent, notify


class TestNotify:
    """Tests para notify()"""

    def test_disabled_does_nothing(self, monkeypatch):
        monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", False)
        calls = []
        monkeypatch.setattr(tasks, "publish_register_event", SimpleNamespace(delay=lambda *a: calls.append(a)))

        assert notify(RegisterEvent.REGISTER_OPENED, {"register_id": "x"}) is False
        assert calls == []

    def test_enqueues_event(self, monkeypatch):
        monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", True)
        calls = []
        monkeypatch.setattr(tasks, "publish_register_event", SimpleNamespace(delay=lambda *a: calls.append(a)))

        assert notify(RegisterEvent.SALE_COMMITTED, {"sale_id": "1"}) is True
        assert calls == [("sale.committed", {"sale_id": "1"})]

    def test_broker_down_never_raises(self, monkeypatch):
        """Test un broker caído no interrumpe la operación de caja"""
        def unreachable(*args):
            raise ConnectionError("redis unreachable")

        monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", True)
        monkeypatch.setattr(tasks, "publish_register_event", SimpleNamespace(delay=unreachable))

        assert notify(RegisterEvent.REGISTER_CLOSED, {"register_id": "x"}) is False


class TestPublishTask:
    """Tests para la tarea de Celery"""

    def test_publishes_json_to_channel(self, monkeypatch):
        published = []

        class FakeRedis:
            def publish(self, channel, message):
                published.append((channel, json.loads(message)))
                return 2

        monkeypatch.setattr(tasks.redis.Redis, "from_url", lambda *args, **kwargs: FakeRedis())

        result = tasks.publish_register_event("register.opened", {"register_id": "abc"})

        assert result["status"] == "published"
        assert result["receivers"] == 2
        assert published == [
            (settings.NOTIFICATIONS_CHANNEL, {"event": "register.opened", "data": {"register_id": "abc"}})
        ]
