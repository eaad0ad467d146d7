from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional
from uuid import UUID
from datetime import datetime


class ScaleReadingIn(BaseModel):
    """Lectura enviada por el puente de la balanza"""
    weight_kg: Decimal = Field(ge=0, description="Peso en kg")
    stable: bool = Field(True, description="La balanza reporta peso estabilizado")


class ScaleReadingOut(BaseModel):
    id: UUID
    weight_kg: Decimal
    stable: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ScaleWeightOut(BaseModel):
    """Peso disponible para el carrito; None si no hay lectura fresca y estable"""
    weight_kg: Optional[Decimal] = None
    available: bool = False
