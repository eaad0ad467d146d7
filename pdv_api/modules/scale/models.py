from pdv_api.database.database import Base
from pdv_api.common.mixins import IdMixin, CreatedAtMixin
from sqlalchemy import Column, Boolean, Numeric, CheckConstraint


class ScaleReading(Base, IdMixin, CreatedAtMixin):
    """
    Lectura enviada por el puente de la balanza.

    Las lecturas son efímeras: se purgan al recibir nuevas cuando superan
    SCALE_RETENTION_SECONDS.
    """
    __tablename__ = "scale_readings"

    weight_kg = Column(Numeric(10, 3), nullable=False)
    stable = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("weight_kg >= 0", name="ck_scale_readings_weight_non_negative"),
    )
