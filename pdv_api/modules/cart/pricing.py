"""
Motor de precios del carrito PDV

Calcula subtotales por línea y totales del carrito antes de confirmar la venta:
- Productos pesables: peso (kg) × 1000 × precio por gramo
- Productos unitarios: cantidad × precio unitario
- Descuento por ítem: subtotal = max(0, base - descuento)
- Descuento de carrito (porcentaje o monto fijo), aplicado solo al cerrar la venta

Una línea por producto: agregar el mismo producto acumula cantidad/peso.
Todo el cálculo es en Decimal; los montos se redondean a centavos.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional
import enum

from pdv_api.common.validators import (
    Number, to_decimal, to_money,
    validate_positive_amount, validate_non_negative_amount
)
from pdv_api.core.exceptions import NotFoundError, ValidationError

GRAMS_PER_KG = Decimal("1000")
GRAM = Decimal("0.001")
ZERO = Decimal("0")


def to_kg(weight: Number, field: str = "weight") -> Decimal:
    """Peso en kg redondeado al gramo, la misma precisión con que se persiste"""
    kg = validate_positive_amount(weight, field).quantize(GRAM, rounding=ROUND_HALF_UP)
    if kg <= 0:
        raise ValidationError(f"{field} debe ser de al menos un gramo")
    return kg


class DiscountType(str, enum.Enum):
    NONE = "none"
    PERCENTAGE = "percentage"
    AMOUNT = "amount"


def base_price(product: Any, quantity: int, weight: Optional[Decimal]) -> Decimal:
    """Precio bruto de una línea antes de descuentos"""
    if product.is_weighable:
        if product.price_per_gram is None:
            raise ValidationError(f"El producto '{product.name}' no tiene precio por gramo")
        if weight is None or weight <= 0:
            raise ValidationError(f"El producto '{product.name}' es pesable: el peso debe ser mayor a cero")
        return weight * GRAMS_PER_KG * to_decimal(product.price_per_gram)

    if product.unit_price is None:
        raise ValidationError(f"El producto '{product.name}' no tiene precio unitario")
    return Decimal(quantity) * to_decimal(product.unit_price)


def line_subtotal(product: Any, quantity: int, weight: Optional[Decimal], discount: Decimal = ZERO) -> Decimal:
    return to_money(max(ZERO, base_price(product, quantity, weight) - discount))


@dataclass
class CartItem:
    product: Any
    quantity: int = 1
    weight: Optional[Decimal] = None
    discount: Decimal = ZERO
    subtotal: Decimal = ZERO
    notes: Optional[str] = None

    @property
    def product_id(self):
        return self.product.id

    def recalculate(self) -> None:
        self.subtotal = line_subtotal(self.product, self.quantity, self.weight, self.discount)


@dataclass
class CartDiscount:
    type: DiscountType = DiscountType.NONE
    value: Decimal = ZERO


@dataclass
class Cart:
    items: List[CartItem] = field(default_factory=list)
    discount: CartDiscount = field(default_factory=CartDiscount)

    # ===== LÍNEAS =====

    def add_item(self, product: Any, quantity: int = 1, weight: Optional[Number] = None) -> CartItem:
        """
        Agregar producto al carrito.

        Si el producto ya está en el carrito, acumula cantidad (y peso si
        se informa) en la misma línea.
        """
        if quantity is None or int(quantity) != quantity or quantity <= 0:
            raise ValidationError("La cantidad debe ser un entero mayor a cero")
        quantity = int(quantity)

        kg = None
        if weight is not None:
            kg = to_kg(weight)
        elif product.is_weighable:
            raise ValidationError(f"El producto '{product.name}' es pesable: informe el peso")

        existing = self._find(product.id)
        if existing:
            new_weight = existing.weight
            if kg is not None and product.is_weighable:
                new_weight = (existing.weight or ZERO) + kg
            # Validar antes de mutar para no dejar la línea a medias
            line_subtotal(existing.product, existing.quantity + quantity, new_weight, existing.discount)
            existing.quantity += quantity
            existing.weight = new_weight
            existing.recalculate()
            return existing

        item = CartItem(product=product, quantity=quantity, weight=kg if product.is_weighable else None)
        item.recalculate()
        self.items.append(item)
        return item

    def remove_item(self, product_id) -> None:
        self.items = [item for item in self.items if item.product_id != product_id]

    def update_item_quantity(self, product_id, quantity: int) -> Optional[CartItem]:
        """Cantidad <= 0 elimina la línea"""
        if quantity <= 0:
            self.remove_item(product_id)
            return None

        item = self._get(product_id)
        line_subtotal(item.product, quantity, item.weight, item.discount)
        item.quantity = int(quantity)
        item.recalculate()
        return item

    def update_item_weight(self, product_id, weight: Number) -> CartItem:
        item = self._get(product_id)
        kg = to_kg(weight)
        line_subtotal(item.product, item.quantity, kg, item.discount)
        item.weight = kg
        item.recalculate()
        return item

    def apply_item_discount(self, product_id, discount: Number) -> CartItem:
        item = self._get(product_id)
        item.discount = validate_non_negative_amount(discount, "discount")
        item.recalculate()
        return item

    def clear(self) -> None:
        self.items = []
        self.discount = CartDiscount()

    # ===== DESCUENTO DE CARRITO =====

    def set_discount(self, discount_type: DiscountType, value: Number = ZERO) -> None:
        discount_type = DiscountType(discount_type)
        amount = validate_non_negative_amount(value, "discount_value")

        if discount_type == DiscountType.PERCENTAGE and amount > 100:
            raise ValidationError("El porcentaje de descuento no puede superar 100")
        if discount_type == DiscountType.NONE:
            amount = ZERO

        self.discount = CartDiscount(type=discount_type, value=amount)

    # ===== TOTALES =====

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((item.subtotal for item in self.items), ZERO))

    @property
    def discount_amount(self) -> Decimal:
        subtotal = self.subtotal
        if self.discount.type == DiscountType.PERCENTAGE:
            return to_money(subtotal * self.discount.value / Decimal("100"))
        if self.discount.type == DiscountType.AMOUNT:
            return to_money(min(self.discount.value, subtotal))
        return ZERO

    @property
    def discount_percentage(self) -> Decimal:
        if self.discount.type == DiscountType.PERCENTAGE:
            return self.discount.value
        return ZERO

    @property
    def total(self) -> Decimal:
        return to_money(max(ZERO, self.subtotal - self.discount_amount))

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    # ===== HELPERS =====

    def _find(self, product_id) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def _get(self, product_id) -> CartItem:
        item = self._find(product_id)
        if item is None:
            raise NotFoundError(f"El producto {product_id} no está en el carrito")
        return item
