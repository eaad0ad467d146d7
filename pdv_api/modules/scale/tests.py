"""
Tests para la lectura de la balanza: ventana de frescura, lecturas
inestables y purga de lecturas viejas.
"""

import pytest
from decimal import Decimal
from datetime import timedelta

from pdv_api.common.mixins import utcnow
from pdv_api.core.exceptions import ValidationError
from pdv_api.modules.scale.models import ScaleReading
from pdv_api.modules.scale.service import WeightSensor


def add_reading(db_session, weight, age_seconds=0.0, stable=True):
    reading = ScaleReading(
        weight_kg=Decimal(weight),
        stable=stable,
        created_at=utcnow() - timedelta(seconds=age_seconds)
    )
    db_session.add(reading)
    db_session.commit()
    return reading


class TestWeightSensor:
    """Tests para WeightSensor.read_weight"""

    def test_no_readings(self, db_session):
        assert WeightSensor(db_session).read_weight() is None

    def test_fresh_stable_reading(self, db_session):
        add_reading(db_session, "0.352", age_seconds=1)

        assert WeightSensor(db_session).read_weight() == Decimal("0.352")

    def test_stale_reading_discarded(self, db_session):
        """Test lectura de más de 4 segundos se descarta sin error"""
        add_reading(db_session, "0.352", age_seconds=10)

        assert WeightSensor(db_session).read_weight() is None

    def test_freshness_window_boundary(self, db_session):
        reading = add_reading(db_session, "0.500")
        sensor = WeightSensor(db_session, freshness_seconds=4)

        assert sensor.read_weight(now=reading.created_at + timedelta(seconds=3.9)) == Decimal("0.500")
        assert sensor.read_weight(now=reading.created_at + timedelta(seconds=4.1)) is None

    def test_unstable_reading_ignored(self, db_session):
        add_reading(db_session, "0.352", age_seconds=2)
        add_reading(db_session, "0.410", age_seconds=0.5, stable=False)

        assert WeightSensor(db_session).read_weight() is None

    def test_empty_scale_returns_none(self, db_session):
        add_reading(db_session, "0")

        assert WeightSensor(db_session).read_weight() is None

    def test_record_reading_purges_old(self, db_session):
        add_reading(db_session, "1.000", age_seconds=120)
        sensor = WeightSensor(db_session, retention_seconds=60)

        reading = sensor.record_reading(Decimal("0.2504"))

        assert reading.weight_kg == Decimal("0.250")
        assert db_session.query(ScaleReading).count() == 1
        assert sensor.read_weight() == Decimal("0.250")

    def test_negative_reading_rejected(self, db_session):
        with pytest.raises(ValidationError):
            WeightSensor(db_session).record_reading(Decimal("-0.1"))


class TestScaleAPI:
    """Tests de los endpoints de la balanza"""

    def test_push_and_read_weight(self, client):
        response = client.post("/api/v1/scale/readings", json={"weight_kg": "0.300", "stable": True})
        assert response.status_code == 201

        weight = client.get("/api/v1/scale/weight").json()

        assert weight["available"] is True
        assert Decimal(weight["weight_kg"]) == Decimal("0.300")

    def test_weight_unavailable(self, client):
        weight = client.get("/api/v1/scale/weight").json()

        assert weight == {"weight_kg": None, "available": False}
