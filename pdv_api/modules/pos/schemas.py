"""
Esquemas Pydantic para el módulo POS (Point of Sale)

Define la validación de datos de entrada y salida para:
- CashRegister: apertura/cierre de caja y resumen
- CashEntry: movimientos manuales
- Sale: envío, cancelación y consulta de ventas
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List, Dict
from uuid import UUID
from datetime import datetime
from enum import Enum

from pdv_api.modules.cart.schemas import CartItemIn, CartDiscountIn
from pdv_api.modules.pos.models import EntryType, Channel, PaymentMethod


# ===== ENUMS =====

class ReconciliationStatus(str, Enum):
    """Clasificación de la diferencia del arqueo"""
    SURPLUS = "surplus"     # Sobra dinero en el cajón
    SHORTAGE = "shortage"   # Falta dinero en el cajón
    EXACT = "exact"


# ===== CASH REGISTER SCHEMAS =====

class CashRegisterOpen(BaseModel):
    """Esquema para abrir caja registradora"""
    opening_amount: Decimal = Field(..., gt=0, description="Fondo de cambio inicial")
    operator_id: Optional[UUID] = Field(None, description="Operador responsable")
    opening_notes: Optional[str] = Field(None, max_length=500, description="Notas de apertura")


class CashRegisterClose(BaseModel):
    """Esquema para cerrar caja registradora"""
    closing_amount: Decimal = Field(..., ge=0, description="Efectivo contado físicamente")
    closing_notes: Optional[str] = Field(None, max_length=500, description="Notas de cierre")


class CashRegisterOut(BaseModel):
    """Esquema de salida para caja registradora"""
    id: UUID = Field(description="ID único de la caja")
    status: str = Field(description="open | closed")
    opening_amount: Decimal = Field(description="Fondo de apertura")
    opened_at: datetime = Field(description="Fecha y hora de apertura")
    operator_id: Optional[UUID] = Field(None, description="Operador responsable")
    opening_notes: Optional[str] = None
    closed_at: Optional[datetime] = Field(None, description="Fecha y hora de cierre")
    closing_amount: Optional[Decimal] = Field(None, description="Efectivo contado")
    expected_balance: Optional[Decimal] = Field(None, description="Saldo esperado al cierre")
    difference: Optional[Decimal] = Field(None, description="Contado - esperado")
    closing_notes: Optional[str] = None

    model_config = {"from_attributes": True, "frozen": True}


class CashRegisterStatusOut(BaseModel):
    is_open: bool
    register: Optional[CashRegisterOut] = None


class RegisterSummary(BaseModel):
    """
    Resumen derivado de una caja. Nunca se persiste.

    expected_balance considera solo efectivo; total_all_sales es la cifra
    de facturación sin importar el medio de pago.
    """
    opening_amount: Decimal
    sales_total: Decimal
    delivery_total: Decimal
    manual_total: Decimal
    other_income_total: Decimal
    total_income: Decimal
    total_expense: Decimal
    expected_balance: Decimal
    total_all_sales: Decimal
    sales_count: int
    delivery_count: int
    manual_count: int
    payment_breakdown: Dict[str, Decimal] = Field(default_factory=dict)

    model_config = {"frozen": True}


class CloseResult(BaseModel):
    """Snapshot inmutable del cierre para reportes/impresión"""
    register: CashRegisterOut
    summary: RegisterSummary
    difference: Decimal
    status: ReconciliationStatus

    model_config = {"frozen": True}


class CashRegisterHistoryItem(BaseModel):
    register: CashRegisterOut
    summary: RegisterSummary


class CashRegisterList(BaseModel):
    """Esquema para historial de cajas"""
    cash_registers: List[CashRegisterHistoryItem] = Field(description="Cajas con su resumen")
    total: int = Field(description="Total de cajas")
    limit: int = Field(description="Límite aplicado")
    offset: int = Field(description="Offset aplicado")


# ===== CASH ENTRY SCHEMAS =====

class CashEntryCreate(BaseModel):
    """Esquema para registrar un movimiento manual"""
    type: EntryType = Field(..., description="income | expense")
    amount: Decimal = Field(..., gt=0, description="Monto (siempre positivo)")
    description: str = Field(..., min_length=1, max_length=500, description="Motivo del movimiento")
    payment_method: PaymentMethod = Field(PaymentMethod.CASH, description="Medio de pago")

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('La descripción no puede estar vacía')
        return cleaned


class CashEntryOut(BaseModel):
    id: UUID
    register_id: UUID
    type: EntryType
    amount: Decimal
    description: str
    payment_method: PaymentMethod
    created_at: datetime

    model_config = {"from_attributes": True}


# ===== SALE SCHEMAS =====

class SaleSubmission(BaseModel):
    """
    Venta enviada por el flujo de cierre de venta (PDV, delivery o pedido manual).

    - Con items: el total se calcula en el servidor; si se envía total_amount debe coincidir
    - Sin items: total_amount es obligatorio (pedidos valorizados fuera del catálogo PDV)
    """
    channel: Channel = Field(Channel.POS, description="pos | delivery | manual")
    register_id: Optional[UUID] = Field(None, description="Caja esperada (opcional)")
    items: List[CartItemIn] = Field(default_factory=list)
    discount: CartDiscountIn = Field(default_factory=CartDiscountIn)
    payment_method: PaymentMethod = Field(..., description="Medio de pago")
    total_amount: Optional[Decimal] = Field(None, gt=0, description="Total informado por el cliente")
    amount_received: Optional[Decimal] = Field(None, ge=0, description="Efectivo recibido (para vuelto)")
    operator_id: Optional[UUID] = None
    customer_name: Optional[str] = Field(None, max_length=200)
    customer_phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode='after')
    def validate_items_or_total(self):
        if not self.items and self.total_amount is None:
            raise ValueError('Se requieren items o total_amount')
        return self


class SaleCancel(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500, description="Motivo de la cancelación")


class SaleItemOut(BaseModel):
    id: UUID
    product_id: UUID
    product_code: str
    product_name: str
    quantity: int
    weight_kg: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    price_per_gram: Optional[Decimal] = None
    discount_amount: Decimal
    subtotal: Decimal

    model_config = {"from_attributes": True}


class SaleOut(BaseModel):
    id: UUID
    sale_number: Optional[int] = None
    channel: Channel
    register_id: Optional[UUID] = None
    subtotal: Decimal
    discount_amount: Decimal
    discount_percentage: Decimal
    total_amount: Decimal
    payment_method: PaymentMethod
    amount_received: Optional[Decimal] = None
    change_amount: Decimal
    customer_name: Optional[str] = None
    is_cancelled: bool
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    created_at: datetime
    items: List[SaleItemOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class SaleList(BaseModel):
    sales: List[SaleOut]
    total: int
    limit: int
    offset: int
