"""Initial schema: stores, users, vehicles, vehicle expenses, store OPEX

Revision ID: 20261001_01_initial
Revises:
Create Date: 2026-10-01

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261001_01_initial"
down_revision = None
branch_labels = None
depends_on = None


def _table_exists(name: str) -> bool:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    return insp.has_table(name)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    if not _table_exists("stores"):
        op.create_table(
            "stores",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("cnpj", sa.String(length=18), nullable=True),
            sa.Column("phone", sa.String(length=32), nullable=True),
            sa.Column("cep", sa.String(length=9), nullable=True),
            sa.Column("city", sa.String(length=128), nullable=True),
            sa.Column("state", sa.String(length=2), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_stores_created_at", "stores", ["created_at"])

    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False, unique=True),
            sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
            sa.Column("store_id", sa.Uuid(), nullable=False),
            sa.Column("role", sa.String(length=50), nullable=False, server_default="owner"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
            sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_users_store_id", "users", ["store_id"])

    if not _table_exists("vehicles"):
        op.create_table(
            "vehicles",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("store_id", sa.Uuid(), nullable=False),
            sa.Column("make", sa.String(length=64), nullable=False, server_default=""),
            sa.Column("model", sa.String(length=128), nullable=False, server_default=""),
            sa.Column("version", sa.String(length=255), nullable=True),
            sa.Column("year", sa.Integer(), nullable=True),
            sa.Column("plate", sa.String(length=8), nullable=True),
            sa.Column("km", sa.Integer(), nullable=True),
            sa.Column("color", sa.String(length=32), nullable=True),
            sa.Column("fuel", sa.String(length=32), nullable=True),
            sa.Column("transmission", sa.String(length=32), nullable=True),
            sa.Column("status", sa.String(length=16), nullable=False, server_default="available"),
            sa.Column("purchase_price", sa.Numeric(14, 2), nullable=False, server_default="0"),
            sa.Column("purchase_date", sa.Date(), nullable=True),
            sa.Column("expected_sale_price", sa.Numeric(14, 2), nullable=False, server_default="0"),
            sa.Column("fipe_price", sa.Numeric(14, 2), nullable=True),
            sa.Column("sold_price", sa.Numeric(14, 2), nullable=True),
            sa.Column("sold_date", sa.Date(), nullable=True),
            sa.Column("payment_method", sa.String(length=64), nullable=True),
            sa.Column("sale_commission", sa.Numeric(14, 2), nullable=True),
            sa.Column("sale_commission_to", sa.String(length=255), nullable=True),
            sa.Column("buyer_name", sa.String(length=255), nullable=True),
            sa.Column("buyer_cpf", sa.String(length=14), nullable=True),
            sa.Column("buyer_phone", sa.String(length=32), nullable=True),
            sa.Column("trade_in_info", sa.JSON(), nullable=True),
            sa.Column("reservation_details", sa.JSON(), nullable=True),
            sa.Column("warranty_time", sa.String(length=64), nullable=True),
            sa.Column("warranty_km", sa.String(length=64), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_vehicles_store_id", "vehicles", ["store_id"])
        op.create_index("ix_vehicles_plate", "vehicles", ["plate"])
        op.create_index("ix_vehicles_status", "vehicles", ["status"])
        op.create_index("ix_vehicles_sold_date", "vehicles", ["sold_date"])
        op.create_index("ix_vehicles_created_at", "vehicles", ["created_at"])
        op.create_index("ix_vehicles_store_status", "vehicles", ["store_id", "status"])
        op.create_index("ix_vehicles_store_sold_date", "vehicles", ["store_id", "sold_date"])

    if not _table_exists("vehicle_expenses"):
        op.create_table(
            "vehicle_expenses",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("vehicle_id", sa.Uuid(), nullable=False),
            sa.Column("category", sa.String(length=32), nullable=False, server_default="other"),
            sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
            sa.Column("expense_date", sa.Date(), nullable=True),
            sa.Column("employee_name", sa.String(length=255), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_vehicle_expenses_vehicle_id", "vehicle_expenses", ["vehicle_id"])
        op.create_index("ix_vehicle_expenses_category", "vehicle_expenses", ["category"])
        op.create_index("ix_vehicle_expenses_created_at", "vehicle_expenses", ["created_at"])

    if not _table_exists("store_expenses"):
        op.create_table(
            "store_expenses",
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("store_id", sa.Uuid(), nullable=False),
            sa.Column("expense_date", sa.Date(), nullable=False),
            sa.Column("category", sa.String(length=32), nullable=False, server_default="other"),
            sa.Column("description", sa.String(length=255), nullable=False),
            sa.Column("amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
            sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_store_expenses_store_id", "store_expenses", ["store_id"])
        op.create_index("ix_store_expenses_expense_date", "store_expenses", ["expense_date"])
        op.create_index("ix_store_expenses_category", "store_expenses", ["category"])
        op.create_index("ix_store_expenses_created_at", "store_expenses", ["created_at"])
        op.create_index("ix_store_expenses_store_date", "store_expenses", ["store_id", "expense_date"])


def downgrade() -> None:
    for table in ("store_expenses", "vehicle_expenses", "vehicles", "users", "stores"):
        if _table_exists(table):
            op.drop_table(table)
