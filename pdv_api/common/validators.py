"""
Validadores de montos y textos para el PDV
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

from pdv_api.core.exceptions import ValidationError

CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """
    Convierte a Decimal sin pasar por la representación binaria de float.
    - 0.3 -> Decimal("0.3"), no Decimal("0.299999...")
    """
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Valor numérico inválido: {value!r}")


def to_money(value: Number) -> Decimal:
    """Redondea a centavos (ROUND_HALF_UP)"""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_positive_amount(value: Number, field: str = "amount") -> Decimal:
    """El monto debe ser mayor a cero"""
    amount = to_decimal(value)
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"El campo '{field}' debe ser mayor a cero")
    return amount


def validate_non_negative_amount(value: Number, field: str = "amount") -> Decimal:
    amount = to_decimal(value)
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"El campo '{field}' no puede ser negativo")
    return amount


def clean_description(value: Optional[str], field: str = "description") -> str:
    """Descripción obligatoria; se eliminan espacios extremos"""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"El campo '{field}' no puede estar vacío")
    return cleaned
