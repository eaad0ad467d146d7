"""
Modelo de producto del catálogo PDV

El catálogo se administra fuera de este servicio; aquí solo se lee para
valorizar carritos y ventas.
"""

from pdv_api.database.database import Base
from pdv_api.common.mixins import IdMixin, TimestampMixin
from sqlalchemy import Column, String, Boolean, Numeric, Text, CheckConstraint
import enum


class ProductCategory(enum.Enum):
    ACAI = "acai"
    BEBIDAS = "bebidas"
    COMPLEMENTOS = "complementos"
    SOBREMESAS = "sobremesas"
    SORVETES = "sorvetes"
    OUTROS = "outros"


class Product(Base, IdMixin, TimestampMixin):
    """
    Producto vendible en el PDV.

    - Pesable: precio por gramo, la cantidad se expresa en kg
    - No pesable: precio unitario
    """
    __tablename__ = "products"

    code = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    category = Column(String(30), nullable=False, default=ProductCategory.OUTROS.value)
    is_weighable = Column(Boolean, nullable=False, default=False)
    unit_price = Column(Numeric(15, 2), nullable=True)
    price_per_gram = Column(Numeric(15, 4), nullable=True)
    barcode = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        CheckConstraint(
            "(is_weighable AND price_per_gram IS NOT NULL) OR (NOT is_weighable AND unit_price IS NOT NULL)",
            name="ck_products_price_matches_kind",
        ),
    )
