"""
Fixtures compartidos para los tests del PDV

Los tests corren contra SQLite en memoria: el engine de la app se crea con
DATABASE_URL=sqlite:// (una sola conexión compartida) y la dependencia
get_db se sobrescribe para usar la misma sesión del test.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["NOTIFICATIONS_ENABLED"] = "false"

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from pdv_api.main import app
from pdv_api.database.database import Base, SessionLocal, engine, get_db
from pdv_api.modules.catalog.models import Product, ProductCategory


# ===== BASE DE DATOS =====

@pytest.fixture
def db_session():
    """Sesión sobre un esquema recién creado; se descarta al terminar"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ===== CATÁLOGO =====

def _product(db_session, **data):
    product = Product(**data)
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def acai_kg(db_session):
    """Açaí por peso: R$ 0,05 el gramo (R$ 50,00 el kg)"""
    return _product(
        db_session,
        code="ACAI-KG",
        name="Açaí no peso",
        category=ProductCategory.ACAI.value,
        is_weighable=True,
        price_per_gram=Decimal("0.05")
    )


@pytest.fixture
def copo_500(db_session):
    return _product(
        db_session,
        code="COPO-500",
        name="Copo 500ml",
        category=ProductCategory.ACAI.value,
        is_weighable=False,
        unit_price=Decimal("20.00")
    )


@pytest.fixture
def milkshake(db_session):
    return _product(
        db_session,
        code="SHAKE-700",
        name="Milkshake 700ml",
        category=ProductCategory.BEBIDAS.value,
        is_weighable=False,
        unit_price=Decimal("30.00")
    )


@pytest.fixture
def inactive_product(db_session):
    return _product(
        db_session,
        code="OLD-001",
        name="Produto descontinuado",
        category=ProductCategory.OUTROS.value,
        is_weighable=False,
        unit_price=Decimal("5.00"),
        is_active=False
    )
