"""
Tests para el motor de precios del carrito

Las pruebas de Cart usan productos en memoria; las de CartService y el
endpoint de cotización usan el catálogo de los fixtures compartidos.
"""

import pytest
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from pdv_api.core.exceptions import NotFoundError, ValidationError
from pdv_api.modules.cart.pricing import Cart, DiscountType, base_price
from pdv_api.modules.cart.schemas import CartItemIn, CartDiscountIn
from pdv_api.modules.cart.service import CartService


# ===== FIXTURES =====

def make_product(unit_price=None, price_per_gram=None, name="Produto"):
    return SimpleNamespace(
        id=uuid4(),
        code=name.upper()[:10],
        name=name,
        is_weighable=price_per_gram is not None,
        unit_price=Decimal(unit_price) if unit_price is not None else None,
        price_per_gram=Decimal(price_per_gram) if price_per_gram is not None else None
    )


@pytest.fixture
def acai():
    return make_product(price_per_gram="0.05", name="Açaí")


@pytest.fixture
def copo():
    return make_product(unit_price="20.00", name="Copo")


@pytest.fixture
def shake():
    return make_product(unit_price="30.00", name="Shake")


# ===== TESTS DE PRECIOS =====

class TestPricing:
    """Tests para el cálculo de precios por línea"""

    def test_weighable_price(self, acai):
        """Test 0,3 kg a R$ 0,05 el gramo = R$ 15,00"""
        cart = Cart()
        item = cart.add_item(acai, weight=Decimal("0.3"))

        assert item.subtotal == Decimal("15.00")
        assert base_price(acai, 1, Decimal("0.3")) == Decimal("15.000")

    def test_weight_from_float_is_exact(self, acai):
        cart = Cart()

        assert cart.add_item(acai, weight=0.3).subtotal == Decimal("15.00")

    def test_weight_rounded_to_grams(self, acai):
        """Test 0,3456 kg se valoriza como 0,346 kg, la precisión persistida"""
        cart = Cart()
        item = cart.add_item(acai, weight=Decimal("0.3456"))

        assert item.weight == Decimal("0.346")
        assert item.subtotal == Decimal("17.30")

        cart.update_item_weight(acai.id, "0.1004")
        assert item.weight == Decimal("0.100")
        assert item.subtotal == Decimal("5.00")

    def test_weight_below_one_gram_rejected(self, acai):
        with pytest.raises(ValidationError):
            Cart().add_item(acai, weight=Decimal("0.0004"))

    def test_weighable_requires_weight(self, acai):
        with pytest.raises(ValidationError):
            Cart().add_item(acai)

    def test_unit_price(self, copo):
        cart = Cart()

        assert cart.add_item(copo, quantity=3).subtotal == Decimal("60.00")

    @pytest.mark.parametrize("quantity", [0, -1, 1.5])
    def test_invalid_quantity(self, copo, quantity):
        with pytest.raises(ValidationError):
            Cart().add_item(copo, quantity=quantity)

    def test_missing_price(self):
        product = make_product(unit_price=None)

        with pytest.raises(ValidationError):
            Cart().add_item(product)


# ===== TESTS DE LÍNEAS =====

class TestCartLines:
    """Tests para agregar, modificar y quitar líneas"""

    def test_same_product_merges(self, copo, acai):
        """Test una sola línea por producto"""
        cart = Cart()
        cart.add_item(copo)
        cart.add_item(copo, quantity=2)
        cart.add_item(acai, weight=Decimal("0.2"))
        cart.add_item(acai, weight=Decimal("0.1"))

        assert cart.item_count == 2
        assert cart.total_items == 5
        assert cart.items[0].quantity == 3
        assert cart.items[1].weight == Decimal("0.3")
        assert cart.subtotal == Decimal("75.00")

    def test_item_discount_floors_at_zero(self, copo):
        cart = Cart()
        cart.add_item(copo)

        item = cart.apply_item_discount(copo.id, Decimal("25.00"))

        assert item.subtotal == Decimal("0.00")
        assert cart.total == Decimal("0.00")

    def test_negative_item_discount_rejected(self, copo):
        cart = Cart()
        cart.add_item(copo)

        with pytest.raises(ValidationError):
            cart.apply_item_discount(copo.id, Decimal("-1"))

    def test_update_quantity_zero_removes(self, copo, shake):
        cart = Cart()
        cart.add_item(copo)
        cart.add_item(shake)

        assert cart.update_item_quantity(copo.id, 0) is None
        assert [item.product_id for item in cart.items] == [shake.id]

    def test_update_quantity_and_weight(self, copo, acai):
        cart = Cart()
        cart.add_item(copo)
        cart.add_item(acai, weight=Decimal("0.1"))

        cart.update_item_quantity(copo.id, 4)
        cart.update_item_weight(acai.id, Decimal("0.5"))

        assert cart.subtotal == Decimal("105.00")

    def test_update_missing_line(self, copo):
        with pytest.raises(NotFoundError):
            Cart().update_item_weight(copo.id, Decimal("1"))

    def test_clear(self, copo):
        cart = Cart()
        cart.add_item(copo)
        cart.set_discount(DiscountType.AMOUNT, Decimal("5"))

        cart.clear()

        assert cart.items == []
        assert cart.total == Decimal("0.00")
        assert cart.discount.type == DiscountType.NONE


# ===== TESTS DE DESCUENTO DE CARRITO =====

class TestCartDiscount:
    """Tests para el descuento de carrito"""

    def test_percentage_discount(self, copo, shake):
        """Test 20 + 30 con 10% = 5,00 de descuento y 45,00 de total"""
        cart = Cart()
        cart.add_item(copo)
        cart.add_item(shake)
        cart.set_discount(DiscountType.PERCENTAGE, Decimal("10"))

        assert cart.subtotal == Decimal("50.00")
        assert cart.discount_amount == Decimal("5.00")
        assert cart.discount_percentage == Decimal("10")
        assert cart.total == Decimal("45.00")

    def test_amount_discount_capped_at_subtotal(self, copo):
        cart = Cart()
        cart.add_item(copo)
        cart.set_discount(DiscountType.AMOUNT, Decimal("100"))

        assert cart.discount_amount == Decimal("20.00")
        assert cart.total == Decimal("0.00")

    def test_percentage_over_hundred_rejected(self, copo):
        cart = Cart()
        cart.add_item(copo)

        with pytest.raises(ValidationError):
            cart.set_discount(DiscountType.PERCENTAGE, Decimal("101"))

    def test_percentage_rounds_half_up(self):
        product = make_product(unit_price="0.15")
        cart = Cart()
        cart.add_item(product)
        cart.set_discount(DiscountType.PERCENTAGE, Decimal("50"))

        assert cart.discount_amount == Decimal("0.08")
        assert cart.total == Decimal("0.07")


# ===== TESTS DE SERVICIO Y ENDPOINT =====

class TestCartService:
    """Tests para CartService con el catálogo real"""

    def test_build_cart_from_catalog(self, db_session, acai_kg, copo_500):
        cart = CartService(db_session).build_cart(
            [
                CartItemIn(product_id=acai_kg.id, weight_kg=Decimal("0.3")),
                CartItemIn(product_id=copo_500.id, quantity=2, discount=Decimal("5"))
            ],
            CartDiscountIn(type=DiscountType.AMOUNT, value=Decimal("10"))
        )

        assert cart.subtotal == Decimal("50.00")
        assert cart.total == Decimal("40.00")

    def test_repeated_product_sums_discounts(self, db_session, copo_500):
        """Test producto repetido: una línea con la suma de descuentos, sin importar el orden"""
        def build(first, second):
            return CartService(db_session).build_cart([
                CartItemIn(product_id=copo_500.id, discount=Decimal(first)),
                CartItemIn(product_id=copo_500.id, discount=Decimal(second))
            ])

        forward = build("2", "3")
        backward = build("3", "2")

        assert forward.item_count == 1
        assert forward.items[0].quantity == 2
        assert forward.items[0].discount == Decimal("5")
        assert forward.total == backward.total == Decimal("35.00")

    def test_inactive_product_not_found(self, db_session, inactive_product):
        with pytest.raises(NotFoundError):
            CartService(db_session).build_cart([CartItemIn(product_id=inactive_product.id)])

    def test_quote_endpoint(self, client, copo_500, milkshake):
        response = client.post("/api/v1/cart/quote", json={
            "items": [
                {"product_id": str(copo_500.id)},
                {"product_id": str(milkshake.id)}
            ],
            "discount": {"type": "percentage", "value": "10"}
        })

        assert response.status_code == 200
        quote = response.json()
        assert Decimal(quote["subtotal"]) == Decimal("50.00")
        assert Decimal(quote["discount_amount"]) == Decimal("5.00")
        assert Decimal(quote["total"]) == Decimal("45.00")
        assert quote["item_count"] == 2

    def test_quote_weighable_without_weight(self, client, acai_kg):
        response = client.post("/api/v1/cart/quote", json={"items": [{"product_id": str(acai_kg.id)}]})

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"
