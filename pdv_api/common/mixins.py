"""
Common mixins for PDV models
"""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Uuid
from uuid import uuid4


def utcnow() -> datetime:
    """UTC naive, igual a lo que devuelve SQLite/PostgreSQL en columnas sin zona"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class IdMixin:
    """Primary key UUID"""

    id = Column(Uuid, primary_key=True, default=uuid4, index=True)


class CreatedAtMixin:
    """Mixin for append-only records: only creation time is tracked"""

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class TimestampMixin(CreatedAtMixin):
    """Mixin for models that need timestamp tracking"""

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
