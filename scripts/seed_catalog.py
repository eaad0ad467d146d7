"""
Seed script: carga un catálogo demo de açaiteria y, opcionalmente, un turno de caja.

What it creates:
- Products: açaí por peso, copos, bebidas, complementos y sobremesas.
- (--with-register) Una caja abierta con fondo de cambio, movimientos
  manuales y ventas de PDV/delivery con medios de pago variados.

Run inside the API container to use 'postgres' host and project PYTHONPATH:
    docker compose exec api python scripts/seed_catalog.py --with-register --sales 25

Note: This is intended for development environments only.
"""

# Add project root to sys.path so `pdv_api.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import random
from decimal import Decimal

from pdv_api.database.database import Base, SessionLocal, engine
from pdv_api.modules.catalog.models import Product, ProductCategory
from pdv_api.modules.cart.schemas import CartItemIn
from pdv_api.modules.pos.models import Channel, EntryType, PaymentMethod
from pdv_api.modules.pos.sales import SaleService
from pdv_api.modules.pos.schemas import SaleSubmission
from pdv_api.modules.pos.services import CashEntryService, CashRegisterService
import pdv_api.modules.scale.models


# (code, name, category, price_per_gram, unit_price)
CATALOG = [
    ("ACAI-KG", "Açaí no peso", ProductCategory.ACAI, "0.0599", None),
    ("SORV-KG", "Sorvete no peso", ProductCategory.SORVETES, "0.0549", None),
    ("ACAI-300", "Copo de açaí 300ml", ProductCategory.ACAI, None, "14.00"),
    ("ACAI-500", "Copo de açaí 500ml", ProductCategory.ACAI, None, "20.00"),
    ("ACAI-700", "Copo de açaí 700ml", ProductCategory.ACAI, None, "26.00"),
    ("SHAKE-500", "Milkshake 500ml", ProductCategory.BEBIDAS, None, "18.00"),
    ("AGUA-500", "Água mineral 500ml", ProductCategory.BEBIDAS, None, "3.50"),
    ("REFRI-LT", "Refrigerante lata", ProductCategory.BEBIDAS, None, "6.00"),
    ("COMP-LEITE", "Leite em pó (porção)", ProductCategory.COMPLEMENTOS, None, "3.00"),
    ("COMP-NUT", "Creme de avelã (porção)", ProductCategory.COMPLEMENTOS, None, "5.00"),
    ("COMP-GRAN", "Granola (porção)", ProductCategory.COMPLEMENTOS, None, "2.50"),
    ("SOBR-BROW", "Brownie", ProductCategory.SOBREMESAS, None, "9.00"),
]

METHODS = [
    PaymentMethod.CASH, PaymentMethod.CASH, PaymentMethod.PIX, PaymentMethod.PIX,
    PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD, PaymentMethod.VOUCHER,
]


def create_products(db):
    products = []
    for code, name, category, price_per_gram, unit_price in CATALOG:
        existing = db.query(Product).filter(Product.code == code).first()
        if existing:
            products.append(existing)
            continue
        product = Product(
            code=code,
            name=name,
            category=category.value,
            is_weighable=price_per_gram is not None,
            price_per_gram=Decimal(price_per_gram) if price_per_gram else None,
            unit_price=Decimal(unit_price) if unit_price else None,
            is_active=True,
        )
        db.add(product)
        products.append(product)
    db.commit()
    return products


def random_items(products):
    items = []
    for product in random.sample(products, k=random.randint(1, 3)):
        if product.is_weighable:
            weight = Decimal(random.randint(150, 650)) / Decimal("1000")
            items.append(CartItemIn(product_id=product.id, weight_kg=weight))
        else:
            items.append(CartItemIn(product_id=product.id, quantity=random.randint(1, 2)))
    return items


def create_register_shift(db, products, sales_count: int):
    registers = CashRegisterService(db)
    register = registers.get_current_register() or registers.open_register(
        Decimal("150.00"), opening_notes="Turno demo"
    )

    entries = CashEntryService(db)
    entries.add_entry(register.id, EntryType.INCOME, Decimal("50.00"), "Reforço de troco")
    entries.add_entry(register.id, EntryType.EXPENSE, Decimal("35.00"), "Compra de gelo")

    sales = SaleService(db)
    for _ in range(sales_count):
        channel = Channel.DELIVERY if random.random() < 0.3 else Channel.POS
        sales.commit_sale(SaleSubmission(
            channel=channel,
            items=random_items(products),
            payment_method=random.choice(METHODS),
        ))

    return register, registers.get_summary(register.id)


def main():
    parser = argparse.ArgumentParser(description="Seed PDV demo data")
    parser.add_argument("--with-register", action="store_true", help="Abrir caja y registrar ventas demo")
    parser.add_argument("--sales", type=int, default=20)
    parser.add_argument("--create-tables", action="store_true", help="Crear tablas sin Alembic")
    args = parser.parse_args()

    if args.create_tables:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        print("Creating products...")
        products = create_products(db)
        print(f"Products available: {len(products)}")

        if args.with_register:
            print("Opening register and creating sales...")
            register, summary = create_register_shift(db, products, args.sales)
            print(f"  Register ID:      {register.id}")
            print(f"  Sales (PDV):      {summary.sales_count} / {summary.sales_total}")
            print(f"  Delivery:         {summary.delivery_count} / {summary.delivery_total}")
            print(f"  Expected balance: {summary.expected_balance}")

        print("\nSeed completed.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
