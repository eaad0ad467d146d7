"""
Esquemas Pydantic para cotización de carritos
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pdv_api.modules.cart.pricing import DiscountType


class CartItemIn(BaseModel):
    """Línea de carrito enviada por el frontend"""
    product_id: UUID = Field(..., description="ID del producto")
    quantity: int = Field(1, gt=0, description="Cantidad (unidades)")
    weight_kg: Optional[Decimal] = Field(None, gt=0, description="Peso en kg (solo pesables)")
    discount: Decimal = Field(Decimal("0"), ge=0, description="Descuento de la línea")
    notes: Optional[str] = Field(None, max_length=500)


class CartDiscountIn(BaseModel):
    type: DiscountType = Field(DiscountType.NONE, description="none | percentage | amount")
    value: Decimal = Field(Decimal("0"), ge=0, description="Porcentaje (0-100) o monto fijo")


class CartQuoteRequest(BaseModel):
    items: List[CartItemIn] = Field(..., min_length=1)
    discount: CartDiscountIn = Field(default_factory=CartDiscountIn)


class CartLineOut(BaseModel):
    product_id: UUID
    product_code: str
    product_name: str
    quantity: int
    weight_kg: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    price_per_gram: Optional[Decimal] = None
    discount_amount: Decimal
    subtotal: Decimal


class CartQuoteOut(BaseModel):
    items: List[CartLineOut]
    subtotal: Decimal
    discount_amount: Decimal
    discount_percentage: Decimal
    total: Decimal
    item_count: int
    total_items: int
