"""
Modelos SQLAlchemy para el módulo POS (Point of Sale)

Este módulo maneja las operaciones de caja:
- CashRegister: Sesión de caja física (apertura -> cierre)
- CashEntry: Movimientos manuales de entrada/salida (solo inserción)
- Sale / SaleItem: Ventas confirmadas de cualquier canal (pos, delivery, manual)

Regla de negocio central: como máximo una caja abierta en todo el sistema.
Se garantiza en la base de datos con la columna centinela `open_slot`
(TRUE mientras la caja está abierta, NULL al cerrar) más una restricción UNIQUE.
"""

from pdv_api.database.database import Base
from pdv_api.common.mixins import IdMixin, CreatedAtMixin, TimestampMixin, utcnow
from sqlalchemy import (
    Column, String, Boolean, DateTime, ForeignKey, Numeric, Enum, Integer, Text, Uuid,
    CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
import enum


# ===== ENUMS =====

class EntryType(str, enum.Enum):
    """Tipos de movimiento manual"""
    INCOME = "income"     # Entrada (suministro, cambio, etc.)
    EXPENSE = "expense"   # Salida (sangría, pago a proveedor, etc.)


class Channel(str, enum.Enum):
    """Canal de origen de la venta"""
    POS = "pos"
    DELIVERY = "delivery"
    MANUAL = "manual"


class PaymentMethod(str, enum.Enum):
    CASH = "dinheiro"
    PIX = "pix"
    CREDIT_CARD = "cartao_credito"
    DEBIT_CARD = "cartao_debito"
    VOUCHER = "voucher"
    MIXED = "misto"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# Un solo tipo compartido por cash_entries y sales
payment_method_enum = Enum(PaymentMethod, values_callable=_enum_values, name="payment_method")


# ===== MODELOS =====

class CashRegister(Base, IdMixin, TimestampMixin):
    """
    Sesión de caja registradora

    Se crea al abrir y se modifica una única vez al cerrar; después es inmutable.
    """
    __tablename__ = "cash_registers"

    opening_amount = Column(Numeric(15, 2), nullable=False)
    opened_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    operator_id = Column(Uuid, nullable=True, index=True)
    opening_notes = Column(Text, nullable=True)

    # Solo se llenan al cerrar
    closed_at = Column(DateTime, nullable=True, index=True)
    closing_amount = Column(Numeric(15, 2), nullable=True)
    expected_balance = Column(Numeric(15, 2), nullable=True)  # Snapshot del resumen al cierre
    difference = Column(Numeric(15, 2), nullable=True)
    closing_notes = Column(Text, nullable=True)

    # TRUE mientras está abierta, NULL al cerrar (UNIQUE ignora NULLs)
    open_slot = Column(Boolean, nullable=True, default=True)

    entries = relationship("CashEntry", back_populates="register", order_by="CashEntry.created_at")
    sales = relationship("Sale", back_populates="register")

    __table_args__ = (
        UniqueConstraint("open_slot", name="uq_cash_registers_single_open"),
        CheckConstraint("opening_amount > 0", name="ck_cash_registers_opening_positive"),
        CheckConstraint(
            "(closed_at IS NULL AND open_slot IS NOT NULL) OR (closed_at IS NOT NULL AND open_slot IS NULL)",
            name="ck_cash_registers_open_slot_matches_state",
        ),
        CheckConstraint(
            "closed_at IS NULL OR closing_amount >= 0",
            name="ck_cash_registers_closing_non_negative",
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.closed_at is None

    @property
    def status(self) -> str:
        return "open" if self.is_open else "closed"


class CashEntry(Base, IdMixin, CreatedAtMixin):
    """
    Movimiento manual de caja (auditoría)

    Solo inserción: no se exponen actualizaciones ni borrados.
    """
    __tablename__ = "cash_entries"

    register_id = Column(Uuid, ForeignKey("cash_registers.id"), nullable=False, index=True)
    type = Column(Enum(EntryType, values_callable=_enum_values, name="cash_entry_type"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(String(500), nullable=False)
    payment_method = Column(payment_method_enum, nullable=False, default=PaymentMethod.CASH)

    register = relationship("CashRegister", back_populates="entries")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_cash_entries_amount_positive"),
    )


class Sale(Base, IdMixin, TimestampMixin):
    """
    Venta confirmada

    register_id se estampa en la misma transacción que crea la venta.
    Las ventas canceladas quedan registradas pero no cuentan en ningún agregado.
    """
    __tablename__ = "sales"

    sale_number = Column(Integer, nullable=True, index=True)
    channel = Column(Enum(Channel, values_callable=_enum_values, name="sale_channel"), nullable=False, index=True)
    register_id = Column(Uuid, ForeignKey("cash_registers.id"), nullable=True, index=True)
    operator_id = Column(Uuid, nullable=True)

    customer_name = Column(String(200), nullable=True)
    customer_phone = Column(String(50), nullable=True)

    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(15, 2), nullable=False, default=0)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False)

    payment_method = Column(payment_method_enum, nullable=False)
    amount_received = Column(Numeric(15, 2), nullable=True)
    change_amount = Column(Numeric(15, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    is_cancelled = Column(Boolean, nullable=False, default=False, index=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancel_reason = Column(Text, nullable=True)

    register = relationship("CashRegister", back_populates="sales")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_sales_total_non_negative"),
    )


class SaleItem(Base, IdMixin, CreatedAtMixin):
    """Línea de venta: forma persistida de una línea del carrito"""
    __tablename__ = "sale_items"

    sale_id = Column(Uuid, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False, index=True)
    product_code = Column(String(50), nullable=False)
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    weight_kg = Column(Numeric(10, 3), nullable=True)
    unit_price = Column(Numeric(15, 2), nullable=True)
    price_per_gram = Column(Numeric(15, 4), nullable=True)
    discount_amount = Column(Numeric(15, 2), nullable=False, default=0)
    subtotal = Column(Numeric(15, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
