"""
Arqueo de cierre: compara el efectivo contado con el saldo esperado
"""

from decimal import Decimal
from typing import Any, Tuple

from pdv_api.common.validators import to_money, validate_non_negative_amount
from pdv_api.modules.pos.schemas import (
    CashRegisterOut, CloseResult, ReconciliationStatus, RegisterSummary
)


def classify_difference(difference: Decimal) -> ReconciliationStatus:
    if difference > 0:
        return ReconciliationStatus.SURPLUS
    if difference < 0:
        return ReconciliationStatus.SHORTAGE
    return ReconciliationStatus.EXACT


def reconcile(closing_amount: Any, summary: RegisterSummary) -> Tuple[Decimal, ReconciliationStatus]:
    """difference = contado - esperado (positivo sobra, negativo falta)"""
    counted = validate_non_negative_amount(closing_amount, "closing_amount")
    difference = to_money(counted - summary.expected_balance)
    return difference, classify_difference(difference)


def build_close_result(register: Any, summary: RegisterSummary) -> CloseResult:
    """Snapshot inmutable a partir de una caja ya cerrada"""
    difference, status = reconcile(register.closing_amount, summary)
    return CloseResult(
        register=CashRegisterOut.model_validate(register),
        summary=summary,
        difference=difference,
        status=status
    )
