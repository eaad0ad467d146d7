"""initial schema: catalog, cash registers, entries, sales, scale readings

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

payment_method = postgresql.ENUM(
    "dinheiro", "pix", "cartao_credito", "cartao_debito", "voucher", "misto",
    name="payment_method", create_type=False
)
cash_entry_type = postgresql.ENUM("income", "expense", name="cash_entry_type", create_type=False)
sale_channel = postgresql.ENUM("pos", "delivery", "manual", name="sale_channel", create_type=False)

ENUMS = (payment_method, cash_entry_type, sale_channel)


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("is_weighable", sa.Boolean(), nullable=False),
        sa.Column("unit_price", sa.Numeric(15, 2), nullable=True),
        sa.Column("price_per_gram", sa.Numeric(15, 4), nullable=True),
        sa.Column("barcode", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(is_weighable AND price_per_gram IS NOT NULL) OR (NOT is_weighable AND unit_price IS NOT NULL)",
            name="ck_products_price_matches_kind",
        ),
    )
    op.create_index("ix_products_id", "products", ["id"])
    op.create_index("ix_products_code", "products", ["code"], unique=True)
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_barcode", "products", ["barcode"])
    op.create_index("ix_products_is_active", "products", ["is_active"])
    op.create_index("ix_products_created_at", "products", ["created_at"])

    op.create_table(
        "cash_registers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("opening_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("opened_at", sa.DateTime(), nullable=False),
        sa.Column("operator_id", sa.Uuid(), nullable=True),
        sa.Column("opening_notes", sa.Text(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.Column("closing_amount", sa.Numeric(15, 2), nullable=True),
        sa.Column("expected_balance", sa.Numeric(15, 2), nullable=True),
        sa.Column("difference", sa.Numeric(15, 2), nullable=True),
        sa.Column("closing_notes", sa.Text(), nullable=True),
        sa.Column("open_slot", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("open_slot", name="uq_cash_registers_single_open"),
        sa.CheckConstraint("opening_amount > 0", name="ck_cash_registers_opening_positive"),
        sa.CheckConstraint(
            "(closed_at IS NULL AND open_slot IS NOT NULL) OR (closed_at IS NOT NULL AND open_slot IS NULL)",
            name="ck_cash_registers_open_slot_matches_state",
        ),
        sa.CheckConstraint(
            "closed_at IS NULL OR closing_amount >= 0",
            name="ck_cash_registers_closing_non_negative",
        ),
    )
    op.create_index("ix_cash_registers_id", "cash_registers", ["id"])
    op.create_index("ix_cash_registers_opened_at", "cash_registers", ["opened_at"])
    op.create_index("ix_cash_registers_operator_id", "cash_registers", ["operator_id"])
    op.create_index("ix_cash_registers_closed_at", "cash_registers", ["closed_at"])
    op.create_index("ix_cash_registers_created_at", "cash_registers", ["created_at"])

    op.create_table(
        "cash_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("register_id", sa.Uuid(), sa.ForeignKey("cash_registers.id"), nullable=False),
        sa.Column("type", cash_entry_type, nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_cash_entries_amount_positive"),
    )
    op.create_index("ix_cash_entries_id", "cash_entries", ["id"])
    op.create_index("ix_cash_entries_register_id", "cash_entries", ["register_id"])
    op.create_index("ix_cash_entries_type", "cash_entries", ["type"])
    op.create_index("ix_cash_entries_created_at", "cash_entries", ["created_at"])

    op.create_table(
        "sales",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("sale_number", sa.Integer(), nullable=True),
        sa.Column("channel", sale_channel, nullable=False),
        sa.Column("register_id", sa.Uuid(), sa.ForeignKey("cash_registers.id"), nullable=True),
        sa.Column("operator_id", sa.Uuid(), nullable=True),
        sa.Column("customer_name", sa.String(200), nullable=True),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("amount_received", sa.Numeric(15, 2), nullable=True),
        sa.Column("change_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("cancel_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("total_amount >= 0", name="ck_sales_total_non_negative"),
    )
    op.create_index("ix_sales_id", "sales", ["id"])
    op.create_index("ix_sales_sale_number", "sales", ["sale_number"])
    op.create_index("ix_sales_channel", "sales", ["channel"])
    op.create_index("ix_sales_register_id", "sales", ["register_id"])
    op.create_index("ix_sales_is_cancelled", "sales", ["is_cancelled"])
    op.create_index("ix_sales_created_at", "sales", ["created_at"])

    op.create_table(
        "sale_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("sale_id", sa.Uuid(), sa.ForeignKey("sales.id"), nullable=False),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_code", sa.String(50), nullable=False),
        sa.Column("product_name", sa.String(200), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("weight_kg", sa.Numeric(10, 3), nullable=True),
        sa.Column("unit_price", sa.Numeric(15, 2), nullable=True),
        sa.Column("price_per_gram", sa.Numeric(15, 4), nullable=True),
        sa.Column("discount_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_sale_items_id", "sale_items", ["id"])
    op.create_index("ix_sale_items_sale_id", "sale_items", ["sale_id"])
    op.create_index("ix_sale_items_product_id", "sale_items", ["product_id"])
    op.create_index("ix_sale_items_created_at", "sale_items", ["created_at"])

    op.create_table(
        "scale_readings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("weight_kg", sa.Numeric(10, 3), nullable=False),
        sa.Column("stable", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("weight_kg >= 0", name="ck_scale_readings_weight_non_negative"),
    )
    op.create_index("ix_scale_readings_id", "scale_readings", ["id"])
    op.create_index("ix_scale_readings_created_at", "scale_readings", ["created_at"])


def downgrade() -> None:
    op.drop_table("scale_readings")
    op.drop_table("sale_items")
    op.drop_table("sales")
    op.drop_table("cash_entries")
    op.drop_table("cash_registers")
    op.drop_table("products")

    bind = op.get_bind()
    for enum in ENUMS:
        enum.drop(bind, checkfirst=True)
