"""
Lectura de la balanza

El puente de la balanza empuja lecturas; el PDV consulta la más reciente
al agregar un producto pesable. Una lectura vieja se descarta en silencio:
el operador vuelve a pesar, nunca ve un error.
"""

from sqlalchemy.orm import Session
from sqlalchemy import desc
from decimal import Decimal
from typing import Any, Optional
from datetime import datetime, timedelta
import logging

from pdv_api.common.mixins import utcnow
from pdv_api.common.validators import validate_non_negative_amount
from pdv_api.core.config import settings
from pdv_api.core.exceptions import StaleReadingError
from pdv_api.database.database import atomic
from pdv_api.modules.scale.models import ScaleReading

logger = logging.getLogger(__name__)

GRAMS = Decimal("0.001")


class WeightSensor:
    """Proveedor de una lectura de peso (kg) bajo demanda"""

    def __init__(self, db: Session, freshness_seconds: Optional[float] = None,
                 retention_seconds: Optional[int] = None):
        self.db = db
        self.freshness = timedelta(
            seconds=settings.SCALE_FRESHNESS_SECONDS if freshness_seconds is None else freshness_seconds
        )
        self.retention = timedelta(
            seconds=settings.SCALE_RETENTION_SECONDS if retention_seconds is None else retention_seconds
        )

    def record_reading(self, weight_kg: Any, stable: bool = True) -> ScaleReading:
        """Guarda una lectura y purga las que superan la retención"""
        weight = validate_non_negative_amount(weight_kg, "weight_kg")

        now = utcnow()
        with atomic(self.db):
            self.db.query(ScaleReading).filter(
                ScaleReading.created_at < now - self.retention
            ).delete(synchronize_session=False)

            reading = ScaleReading(
                weight_kg=weight.quantize(GRAMS),
                stable=bool(stable),
                created_at=now
            )
            self.db.add(reading)

        self.db.refresh(reading)
        return reading

    def latest_reading(self) -> Optional[ScaleReading]:
        return self.db.query(ScaleReading).order_by(desc(ScaleReading.created_at)).first()

    def read_weight(self, now: Optional[datetime] = None) -> Optional[Decimal]:
        """
        Peso actual en kg, o None si no hay lectura utilizable.

        Se descartan lecturas más viejas que la ventana de frescura, lecturas
        inestables y pesos no positivos.
        """
        reading = self.latest_reading()
        if reading is None:
            return None

        try:
            self._ensure_fresh(reading, now or utcnow())
        except StaleReadingError as e:
            logger.debug(f"Discarding scale reading {reading.id}: {e.message}")
            return None

        if not reading.stable:
            return None

        weight = Decimal(reading.weight_kg)
        if weight <= 0:
            return None
        return weight.quantize(GRAMS)

    def _ensure_fresh(self, reading: ScaleReading, now: datetime) -> None:
        age = now - reading.created_at
        if age > self.freshness:
            raise StaleReadingError(
                f"Lectura con {age.total_seconds():.1f}s (máximo {self.freshness.total_seconds():.1f}s)"
            )
