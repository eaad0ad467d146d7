from fastapi import APIRouter

from pdv_api.dependencies.dbDependecies import db_dependency
from pdv_api.modules.cart.schemas import CartQuoteRequest, CartQuoteOut
from pdv_api.modules.cart.service import CartService

cart_router = APIRouter(prefix="/cart", tags=["POS"])


@cart_router.post("/quote", response_model=CartQuoteOut)
async def quote_cart(quote_data: CartQuoteRequest, db: db_dependency):
    """
    Valorizar un carrito con los precios del catálogo.

    - **items**: productos con cantidad, peso (kg, pesables) y descuento por línea
    - **discount**: descuento de carrito (percentage 0-100 o amount)

    Reglas:
    - Una línea por producto (se acumulan cantidad y peso)
    - subtotal de línea = max(0, base - descuento)
    - total = max(0, Σ subtotales - descuento de carrito)
    """
    return CartService(db).quote(quote_data.items, quote_data.discount)
