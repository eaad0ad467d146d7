"""
Cálculo del resumen de caja

Función pura sobre (fondo de apertura, movimientos, ventas). Es la única
ruta de agregación: la usan tanto la vista en vivo como el cierre.
Sumatoria pura, por lo que el resultado no depende del orden de entrada.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable

from pdv_api.common.validators import to_decimal, to_money
from pdv_api.modules.pos.models import Channel, EntryType, PaymentMethod
from pdv_api.modules.pos.schemas import RegisterSummary

ZERO = Decimal("0")


def _method(value: Any) -> PaymentMethod:
    return value if isinstance(value, PaymentMethod) else PaymentMethod(value)


def calculate_summary(
    opening_amount: Any,
    entries: Iterable[Any],
    sales: Iterable[Any],
    cash_method: PaymentMethod = PaymentMethod.CASH
) -> RegisterSummary:
    """
    Args:
        opening_amount: fondo de apertura de la caja
        entries: movimientos manuales (type, amount, payment_method)
        sales: ventas atribuidas (channel, total_amount, payment_method, is_cancelled)
        cash_method: medio de pago que entra al cajón físico

    Returns:
        RegisterSummary inmutable
    """
    opening = to_decimal(opening_amount)

    channel_totals = defaultdict(lambda: ZERO)
    channel_counts = defaultdict(int)
    breakdown: Dict[PaymentMethod, Decimal] = defaultdict(lambda: ZERO)

    income_total = ZERO
    expense_total = ZERO
    cash_in = ZERO
    cash_out = ZERO

    for entry in entries:
        amount = to_decimal(entry.amount)
        method = _method(entry.payment_method)

        if EntryType(entry.type) == EntryType.INCOME:
            breakdown[method] += amount
            income_total += amount
            if method == cash_method:
                cash_in += amount
        else:
            # Neto por medio de pago: las salidas restan
            breakdown[method] -= amount
            expense_total += amount
            if method == cash_method:
                cash_out += amount

    for sale in sales:
        if sale.is_cancelled:
            continue
        amount = to_decimal(sale.total_amount)
        method = _method(sale.payment_method)
        channel = Channel(sale.channel)

        channel_totals[channel] += amount
        channel_counts[channel] += 1
        breakdown[method] += amount
        if method == cash_method:
            cash_in += amount

    sales_total = channel_totals[Channel.POS]
    delivery_total = channel_totals[Channel.DELIVERY]
    manual_total = channel_totals[Channel.MANUAL]

    return RegisterSummary(
        opening_amount=to_money(opening),
        sales_total=to_money(sales_total),
        delivery_total=to_money(delivery_total),
        manual_total=to_money(manual_total),
        other_income_total=to_money(income_total),
        total_income=to_money(income_total + sales_total + delivery_total + manual_total),
        total_expense=to_money(expense_total),
        expected_balance=to_money(opening + cash_in - cash_out),
        total_all_sales=to_money(sales_total + delivery_total),
        sales_count=channel_counts[Channel.POS],
        delivery_count=channel_counts[Channel.DELIVERY],
        manual_count=channel_counts[Channel.MANUAL],
        # Orden fijo de claves para respuestas estables
        payment_breakdown={
            method.value: to_money(breakdown[method])
            for method in PaymentMethod
            if method in breakdown
        }
    )
