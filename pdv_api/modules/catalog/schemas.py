from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID


class ProductOut(BaseModel):
    """Esquema de salida para producto"""
    id: UUID = Field(description="ID único del producto")
    code: str = Field(description="Código interno")
    name: str = Field(description="Nombre del producto")
    category: str = Field(description="Categoría")
    is_weighable: bool = Field(description="Se vende por peso")
    unit_price: Optional[Decimal] = Field(None, description="Precio unitario (no pesables)")
    price_per_gram: Optional[Decimal] = Field(None, description="Precio por gramo (pesables)")
    barcode: Optional[str] = Field(None, description="Código de barras")

    model_config = {"from_attributes": True}


class ProductList(BaseModel):
    products: List[ProductOut]
    total: int
    limit: int
    offset: int
