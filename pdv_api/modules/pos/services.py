"""
Servicios de negocio para el módulo POS (Point of Sale)

Implementa la lógica de:
- CashRegisterService: apertura/cierre de caja, resumen y arqueo
- CashEntryService: movimientos manuales de caja (solo inserción)

La caja abierta actual nunca se guarda en memoria del proceso: siempre se
consulta (closed_at IS NULL), respaldada por la restricción UNIQUE del store.
"""

from sqlalchemy.orm import Session
from sqlalchemy import desc
from collections import defaultdict
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import date, datetime, time, timedelta
import logging

from pdv_api.common.mixins import utcnow
from pdv_api.common.validators import (
    clean_description, to_money, validate_non_negative_amount, validate_positive_amount
)
from pdv_api.core.config import settings
from pdv_api.core.exceptions import (
    AlreadyClosedError, ClosedRegisterError, ConflictError, NotFoundError,
    TransientStoreError, ValidationError
)
from pdv_api.database.database import TRANSIENT_DB_ERRORS, atomic
from pdv_api.modules.notifications.service import RegisterEvent, notify
from pdv_api.modules.pos.models import CashEntry, CashRegister, EntryType, PaymentMethod, Sale
from pdv_api.modules.pos.reconciliation import build_close_result, reconcile
from pdv_api.modules.pos.schemas import CloseResult, RegisterSummary
from pdv_api.modules.pos.summary import calculate_summary

logger = logging.getLogger(__name__)


class CashRegisterService:
    """Servicio para el ciclo de vida de la caja registradora"""

    def __init__(self, db: Session):
        self.db = db

    # ===== CONSULTAS =====

    def get_current_register(self) -> Optional[CashRegister]:
        """Caja abierta actual, o None si no hay ninguna"""
        return self.db.query(CashRegister).filter(
            CashRegister.closed_at.is_(None)
        ).order_by(desc(CashRegister.opened_at)).first()

    def is_open(self) -> bool:
        return self.get_current_register() is not None

    def get_register(self, register_id: UUID, lock: bool = False) -> CashRegister:
        query = self.db.query(CashRegister).filter(CashRegister.id == register_id)
        if lock:
            # Serializa cierre, movimientos y ventas sobre la misma caja
            query = query.with_for_update()

        register = query.first()
        if not register:
            raise NotFoundError(f"Caja registradora {register_id} no encontrada")
        return register

    def get_summary(self, register_id: UUID) -> RegisterSummary:
        """
        Resumen de la caja para visualización en vivo.

        Solo lectura: ante errores transitorios del store se reintenta un
        número acotado de veces (SUMMARY_READ_RETRIES).
        """
        attempts = settings.SUMMARY_READ_RETRIES + 1
        for attempt in range(1, attempts + 1):
            try:
                register = self.get_register(register_id)
                return self.compute_summary(register)
            except TRANSIENT_DB_ERRORS as e:
                self.db.rollback()
                logger.warning(f"Summary read for {register_id} failed (attempt {attempt}/{attempts}): {e}")
                if attempt == attempts:
                    raise TransientStoreError("No fue posible calcular el resumen, intente nuevamente") from e

    def compute_summary(self, register: CashRegister) -> RegisterSummary:
        """Recalcula el resumen desde el store (nunca desde un valor cacheado)"""
        entries = self.db.query(CashEntry).filter(CashEntry.register_id == register.id).all()
        sales = self.db.query(Sale).filter(
            Sale.register_id == register.id,
            Sale.is_cancelled == False
        ).all()
        return calculate_summary(register.opening_amount, entries, sales)

    def list_registers(self, start_date: Optional[date] = None, end_date: Optional[date] = None,
                       limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        """Historial de cajas (más recientes primero) con su resumen"""
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date no puede ser posterior a end_date")

        query = self.db.query(CashRegister)
        if start_date:
            query = query.filter(CashRegister.opened_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(CashRegister.opened_at < datetime.combine(end_date + timedelta(days=1), time.min))

        total = query.count()
        registers = query.order_by(desc(CashRegister.opened_at)).offset(offset).limit(limit).all()

        summaries = self._summaries_for(registers)
        return {
            "cash_registers": [
                {"register": register, "summary": summaries[register.id]}
                for register in registers
            ],
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def _summaries_for(self, registers: List[CashRegister]) -> Dict[UUID, RegisterSummary]:
        """Una consulta por tabla en lugar de una por caja"""
        ids = [register.id for register in registers]
        if not ids:
            return {}

        entries_by_register = defaultdict(list)
        for entry in self.db.query(CashEntry).filter(CashEntry.register_id.in_(ids)).all():
            entries_by_register[entry.register_id].append(entry)

        sales_by_register = defaultdict(list)
        for sale in self.db.query(Sale).filter(Sale.register_id.in_(ids), Sale.is_cancelled == False).all():
            sales_by_register[sale.register_id].append(sale)

        return {
            register.id: calculate_summary(
                register.opening_amount,
                entries_by_register[register.id],
                sales_by_register[register.id]
            )
            for register in registers
        }

    # ===== APERTURA / CIERRE =====

    def open_register(self, opening_amount: Any, operator_id: Optional[UUID] = None,
                      opening_notes: Optional[str] = None) -> CashRegister:
        """
        Abrir caja registradora.

        Raises:
            ValidationError: monto de apertura <= 0
            ConflictError: ya existe una caja abierta (chequeo previo o
                violación de la restricción única en una carrera)
        """
        amount = validate_positive_amount(opening_amount, "opening_amount")

        with atomic(self.db, conflict_message="Ya existe una caja abierta"):
            existing = self.get_current_register()
            if existing:
                raise ConflictError(f"Ya existe una caja abierta ({existing.id})")

            register = CashRegister(
                opening_amount=to_money(amount),
                opened_at=utcnow(),
                operator_id=operator_id,
                opening_notes=opening_notes,
                open_slot=True
            )
            self.db.add(register)

        self.db.refresh(register)
        logger.info(f"Cash register {register.id} opened with {register.opening_amount}")
        notify(RegisterEvent.REGISTER_OPENED, {
            "register_id": str(register.id),
            "opening_amount": str(register.opening_amount)
        })
        return register

    def close_register(self, register_id: UUID, closing_amount: Any,
                       closing_notes: Optional[str] = None) -> CloseResult:
        """
        Cerrar caja registradora con arqueo.

        El resumen se recalcula dentro de la misma transacción que fija
        closing_amount, con la fila de la caja bloqueada: ninguna venta ni
        movimiento puede entrar entre el cálculo y el cierre.

        Raises:
            ValidationError: monto contado negativo
            NotFoundError: la caja no existe
            AlreadyClosedError: la caja ya fue cerrada
        """
        counted = to_money(validate_non_negative_amount(closing_amount, "closing_amount"))

        with atomic(self.db):
            register = self.get_register(register_id, lock=True)
            if not register.is_open:
                raise AlreadyClosedError(f"La caja {register_id} ya está cerrada")

            summary = self.compute_summary(register)
            difference, _ = reconcile(counted, summary)

            register.closed_at = utcnow()
            register.closing_amount = counted
            register.expected_balance = summary.expected_balance
            register.difference = difference
            register.closing_notes = closing_notes
            register.open_slot = None

        self.db.refresh(register)
        result = build_close_result(register, summary)
        logger.info(
            f"Cash register {register.id} closed: counted={counted} "
            f"expected={summary.expected_balance} difference={result.difference} ({result.status.value})"
        )
        notify(RegisterEvent.REGISTER_CLOSED, {
            "register_id": str(register.id),
            "difference": str(result.difference),
            "status": result.status.value
        })
        return result


class CashEntryService:
    """Servicio para movimientos manuales de caja"""

    def __init__(self, db: Session):
        self.db = db
        self.registers = CashRegisterService(db)

    def add_entry(self, register_id: UUID, type: EntryType, amount: Any, description: str,
                  payment_method: PaymentMethod = PaymentMethod.CASH) -> CashEntry:
        """
        Registrar movimiento manual (entrada o salida).

        Raises:
            ValidationError: monto <= 0 o descripción vacía
            NotFoundError: la caja no existe
            ClosedRegisterError: la caja ya fue cerrada
        """
        value = to_money(validate_positive_amount(amount, "amount"))
        if value <= 0:
            raise ValidationError("El monto debe ser de al menos un centavo")
        text = clean_description(description)
        entry_type = EntryType(type)
        method = PaymentMethod(payment_method or PaymentMethod.CASH)

        with atomic(self.db):
            register = self.registers.get_register(register_id, lock=True)
            if not register.is_open:
                raise ClosedRegisterError(f"La caja {register_id} está cerrada: no admite movimientos")

            entry = CashEntry(
                register_id=register.id,
                type=entry_type,
                amount=value,
                description=text,
                payment_method=method,
                created_at=utcnow()
            )
            self.db.add(entry)

        self.db.refresh(entry)
        logger.info(f"Cash entry {entry.id} ({entry_type.value} {value} {method.value}) on register {register_id}")
        notify(RegisterEvent.ENTRY_CREATED, {
            "register_id": str(register_id),
            "entry_id": str(entry.id),
            "type": entry_type.value,
            "amount": str(value)
        })
        return entry

    def list_entries(self, register_id: UUID) -> List[CashEntry]:
        """Movimientos de la caja, más recientes primero"""
        self.registers.get_register(register_id)
        return self.db.query(CashEntry).filter(
            CashEntry.register_id == register_id
        ).order_by(desc(CashEntry.created_at)).all()
