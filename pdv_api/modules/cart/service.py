from sqlalchemy.orm import Session
from collections import defaultdict
from typing import Iterable, Optional

from pdv_api.common.validators import to_decimal
from pdv_api.modules.cart.pricing import ZERO, Cart, CartItem
from pdv_api.modules.cart.schemas import CartItemIn, CartDiscountIn, CartLineOut, CartQuoteOut
from pdv_api.modules.catalog.service import ProductCatalog


class CartService:
    """Arma carritos a partir del catálogo; los precios nunca vienen del cliente"""

    def __init__(self, db: Session):
        self.catalog = ProductCatalog(db)

    def build_cart(self, items: Iterable[CartItemIn], discount: Optional[CartDiscountIn] = None) -> Cart:
        items = list(items)
        products = self.catalog.get_products(item.product_id for item in items)

        cart = Cart()
        for item in items:
            line = cart.add_item(products[item.product_id], quantity=item.quantity, weight=item.weight_kg)
            if item.notes:
                line.notes = item.notes

        # Un producto repetido se fusiona en una línea: sus descuentos se suman
        discounts = defaultdict(lambda: ZERO)
        for item in items:
            if item.discount:
                discounts[item.product_id] += to_decimal(item.discount)
        for product_id, amount in discounts.items():
            cart.apply_item_discount(product_id, amount)

        if discount is not None:
            cart.set_discount(discount.type, discount.value)
        return cart

    def quote(self, items: Iterable[CartItemIn], discount: Optional[CartDiscountIn] = None) -> CartQuoteOut:
        cart = self.build_cart(items, discount)
        return CartQuoteOut(
            items=[to_line_out(item) for item in cart.items],
            subtotal=cart.subtotal,
            discount_amount=cart.discount_amount,
            discount_percentage=cart.discount_percentage,
            total=cart.total,
            item_count=cart.item_count,
            total_items=cart.total_items
        )


def to_line_out(item: CartItem) -> CartLineOut:
    product = item.product
    return CartLineOut(
        product_id=product.id,
        product_code=product.code,
        product_name=product.name,
        quantity=item.quantity,
        weight_kg=item.weight,
        unit_price=None if product.is_weighable else product.unit_price,
        price_per_gram=product.price_per_gram if product.is_weighable else None,
        discount_amount=item.discount,
        subtotal=item.subtotal
    )
