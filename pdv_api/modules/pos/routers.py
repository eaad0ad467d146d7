"""
Routers FastAPI para el módulo POS (Point of Sale)

Define los endpoints REST para:
- CashRegisters: apertura/cierre, estado, resumen e historial
- CashEntries: movimientos manuales
- Sales: confirmación y cancelación de ventas

Los errores de dominio se traducen a HTTP en el handler global (main.py).
"""

from fastapi import APIRouter, HTTPException, status, Query, Path
from typing import Optional, List
from uuid import UUID
from datetime import date

from pdv_api.core.config import settings
from pdv_api.dependencies.dbDependecies import db_dependency
from pdv_api.modules.pos.sales import SaleService
from pdv_api.modules.pos.services import CashRegisterService, CashEntryService
from pdv_api.modules.pos.schemas import (
    CashRegisterOpen, CashRegisterClose, CashRegisterOut, CashRegisterStatusOut,
    CashRegisterList, CashRegisterHistoryItem, CloseResult, RegisterSummary,
    CashEntryCreate, CashEntryOut,
    SaleSubmission, SaleCancel, SaleOut, SaleList
)


# ===== CASH REGISTERS ROUTER =====

cash_registers_router = APIRouter(prefix="/cash-registers", tags=["POS"])


@cash_registers_router.post("/open", response_model=CashRegisterOut, status_code=status.HTTP_201_CREATED)
async def open_cash_register(register_data: CashRegisterOpen, db: db_dependency):
    """
    Abrir caja registradora.

    - **opening_amount**: Fondo de cambio inicial (> 0)
    - **operator_id**: Operador responsable (opcional)
    - **opening_notes**: Notas opcionales de apertura

    Validaciones:
    - Solo una caja abierta en todo el sistema (409 si ya existe)
    """
    service = CashRegisterService(db)
    return service.open_register(
        opening_amount=register_data.opening_amount,
        operator_id=register_data.operator_id,
        opening_notes=register_data.opening_notes
    )


@cash_registers_router.get("/current", response_model=CashRegisterOut)
async def get_current_cash_register(db: db_dependency):
    """
    Devuelve la caja abierta actual.

    - 404 si no hay caja abierta
    """
    register = CashRegisterService(db).get_current_register()
    if not register:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No hay caja abierta")
    return register


@cash_registers_router.get("/status", response_model=CashRegisterStatusOut)
async def get_cash_register_status(db: db_dependency):
    """Indica si hay una caja abierta y cuál es"""
    register = CashRegisterService(db).get_current_register()
    return CashRegisterStatusOut(
        is_open=register is not None,
        register=CashRegisterOut.model_validate(register) if register else None
    )


@cash_registers_router.post("/{register_id}/close", response_model=CloseResult)
async def close_cash_register(
    db: db_dependency,
    register_id: UUID = Path(..., description="ID de la caja registradora"),
    close_data: CashRegisterClose = ...
):
    """
    Cerrar caja registradora con arqueo.

    - **closing_amount**: Efectivo contado físicamente (>= 0)
    - **closing_notes**: Notas opcionales de cierre

    Funcionalidades:
    - Recalcula el resumen desde la base en la misma transacción del cierre
    - difference = contado - esperado (surplus / shortage / exact)
    - La caja queda inmutable; no existe reapertura
    """
    service = CashRegisterService(db)
    return service.close_register(
        register_id=register_id,
        closing_amount=close_data.closing_amount,
        closing_notes=close_data.closing_notes
    )


@cash_registers_router.get("/{register_id}/summary", response_model=RegisterSummary)
async def get_cash_register_summary(
    db: db_dependency,
    register_id: UUID = Path(..., description="ID de la caja registradora")
):
    """
    Resumen de la caja: totales por canal, entradas, salidas, saldo esperado
    en efectivo y desglose por medio de pago.
    """
    return CashRegisterService(db).get_summary(register_id)


@cash_registers_router.get("/", response_model=CashRegisterList)
async def get_cash_registers(
    db: db_dependency,
    start_date: Optional[date] = Query(None, description="Apertura desde (inclusive)"),
    end_date: Optional[date] = Query(None, description="Apertura hasta (inclusive)"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Offset para paginación")
):
    """
    Historial de cajas con su resumen.

    Ordenamiento: Por fecha de apertura descendente
    """
    result = CashRegisterService(db).list_registers(
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset
    )

    return CashRegisterList(
        cash_registers=[
            CashRegisterHistoryItem(
                register=CashRegisterOut.model_validate(item["register"]),
                summary=item["summary"]
            )
            for item in result["cash_registers"]
        ],
        total=result["total"],
        limit=result["limit"],
        offset=result["offset"]
    )


@cash_registers_router.get("/{register_id}", response_model=CashRegisterOut)
async def get_cash_register(
    db: db_dependency,
    register_id: UUID = Path(..., description="ID de la caja registradora")
):
    return CashRegisterService(db).get_register(register_id)


# ===== CASH ENTRIES =====

@cash_registers_router.post(
    "/{register_id}/entries", response_model=CashEntryOut, status_code=status.HTTP_201_CREATED
)
async def create_cash_entry(
    db: db_dependency,
    register_id: UUID = Path(..., description="ID de la caja registradora"),
    entry_data: CashEntryCreate = ...
):
    """
    Registrar movimiento manual de caja.

    - **type**: income | expense
    - **amount**: Monto (siempre positivo)
    - **description**: Motivo (obligatorio)
    - **payment_method**: Medio de pago (por defecto dinheiro)

    Validaciones:
    - Caja debe existir y estar abierta (409 si está cerrada)
    - Los movimientos no se editan ni eliminan
    """
    service = CashEntryService(db)
    return service.add_entry(
        register_id=register_id,
        type=entry_data.type,
        amount=entry_data.amount,
        description=entry_data.description,
        payment_method=entry_data.payment_method
    )


@cash_registers_router.get("/{register_id}/entries", response_model=List[CashEntryOut])
async def get_cash_entries(
    db: db_dependency,
    register_id: UUID = Path(..., description="ID de la caja registradora")
):
    """Movimientos manuales de la caja, más recientes primero"""
    return CashEntryService(db).list_entries(register_id)


# ===== SALES ROUTER =====

sales_router = APIRouter(prefix="/sales", tags=["POS"])


@sales_router.post("/", response_model=SaleOut, status_code=status.HTTP_201_CREATED)
async def submit_sale(sale_data: SaleSubmission, db: db_dependency):
    """
    Confirmar venta y atribuirla a la caja abierta.

    - **channel**: pos | delivery | manual
    - **items**: líneas del carrito (se valorizan con el catálogo)
    - **total_amount**: obligatorio sin items; con items debe coincidir con el calculado
    - **payment_method**: dinheiro, pix, cartao_credito, cartao_debito, voucher, misto
    - **amount_received**: efectivo recibido (calcula vuelto)

    Rechazo con 409 si no hay caja abierta o la caja indicada ya cerró.
    """
    return SaleService(db).commit_sale(sale_data)


@sales_router.post("/{sale_id}/cancel", response_model=SaleOut)
async def cancel_sale(
    db: db_dependency,
    sale_id: UUID = Path(..., description="ID de la venta"),
    cancel_data: SaleCancel = ...
):
    """Cancelar venta (solo si su caja sigue abierta)"""
    return SaleService(db).cancel_sale(sale_id, cancel_data.reason)


@sales_router.get("/", response_model=SaleList)
async def get_sales(
    db: db_dependency,
    register_id: Optional[UUID] = Query(None, description="Filtrar por caja"),
    include_cancelled: bool = Query(True, description="Incluir ventas canceladas"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
):
    result = SaleService(db).list_sales(
        register_id=register_id,
        include_cancelled=include_cancelled,
        limit=limit,
        offset=offset
    )
    return SaleList(**result)


@sales_router.get("/{sale_id}", response_model=SaleOut)
async def get_sale(
    db: db_dependency,
    sale_id: UUID = Path(..., description="ID de la venta")
):
    return SaleService(db).get_sale(sale_id)
