"""
Módulo POS (Point of Sale) - Caja del PDV

ENTIDADES PRINCIPALES:
- CashRegister: Caja registradora con apertura/cierre y arqueo
- CashEntry: Movimientos manuales (entradas y salidas)
- Sale: Ventas de PDV, delivery y pedidos manuales atribuidas a la caja

FUNCIONALIDADES:
- Apertura con fondo de cambio y cierre con arqueo (sobrante / faltante / exacto)
- Resumen en vivo: totales por canal, desglose por medio de pago, saldo esperado
- Historial de cajas cerradas con su resumen

REGLAS DE NEGOCIO:
- Solo una caja abierta en todo el sistema (restricción UNIQUE en el store)
- Una caja cerrada es inmutable: no admite ventas, movimientos ni cancelaciones
- Solo el efectivo afecta el saldo esperado de la gaveta
- Las ventas canceladas no cuentan en ningún total
"""

from .models import (
    CashRegister, CashEntry, Sale, SaleItem,
    EntryType, Channel, PaymentMethod
)

from .schemas import (
    # CashRegister schemas
    CashRegisterOpen, CashRegisterClose, CashRegisterOut, CashRegisterStatusOut,
    CashRegisterList, RegisterSummary, CloseResult, ReconciliationStatus,

    # CashEntry schemas
    CashEntryCreate, CashEntryOut,

    # Sale schemas
    SaleSubmission, SaleCancel, SaleOut, SaleList
)

from .summary import calculate_summary
from .reconciliation import reconcile

from .services import CashRegisterService, CashEntryService
from .sales import SaleService

from .routers import cash_registers_router, sales_router

__all__ = [
    # Models
    "CashRegister", "CashEntry", "Sale", "SaleItem",
    "EntryType", "Channel", "PaymentMethod",

    # Schemas
    "CashRegisterOpen", "CashRegisterClose", "CashRegisterOut", "CashRegisterStatusOut",
    "CashRegisterList", "RegisterSummary", "CloseResult", "ReconciliationStatus",
    "CashEntryCreate", "CashEntryOut",
    "SaleSubmission", "SaleCancel", "SaleOut", "SaleList",

    # Calculations
    "calculate_summary", "reconcile",

    # Services
    "CashRegisterService", "CashEntryService", "SaleService",

    # Routers
    "cash_registers_router", "sales_router"
]
