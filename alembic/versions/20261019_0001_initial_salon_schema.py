"""initial salon schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(length=36), nullable=False)


def _created_at_column() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True)


def _money(name: str, nullable: bool = False, server_default: str | None = "0") -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=nullable, server_default=server_default)


def upgrade() -> None:
    op.create_table(
        "salons",
        _id_column(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("city", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "hairdressers",
        _id_column(),
        sa.Column("matricule", sa.String(length=50), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("rib_1", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("rib_2", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("matricule"),
    )

    op.create_table(
        "users",
        _id_column(),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="coiffeur"),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("hairdresser_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at_column(),
        sa.ForeignKeyConstraint(["hairdresser_id"], ["hairdressers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_hairdresser_id", "users", ["hairdresser_id"], unique=False)
    op.execute("CREATE UNIQUE INDEX IF NOT EXISTS ux_users_username_lower ON users (lower(username))")

    op.create_table(
        "services",
        _id_column(),
        sa.Column("name", sa.String(length=255), nullable=False),
        _money("price_salon"),
        _money("price_coiffeur"),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "product_categories",
        _id_column(),
        sa.Column("name", sa.String(length=100), nullable=False),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "products",
        _id_column(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("reference", sa.String(length=100), nullable=True),
        sa.Column("category_id", sa.String(length=36), nullable=True),
        _money("purchase_price"),
        _money("sale_price"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at_column(),
        sa.ForeignKeyConstraint(["category_id"], ["product_categories.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_category_id", "products", ["category_id"], unique=False)

    op.create_table(
        "product_stock",
        _id_column(),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("salon_id", sa.String(length=36), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("alert_threshold", sa.Integer(), nullable=False, server_default="5"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.ForeignKeyConstraint(["salon_id"], ["salons.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_id", "salon_id", name="ux_product_stock_product_salon"),
    )
    op.create_index("ix_product_stock_product_id", "product_stock", ["product_id"], unique=False)
    op.create_index("ix_product_stock_salon_id", "product_stock", ["salon_id"], unique=False)

    op.create_table(
        "stock_movements",
        _id_column(),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("salon_id", sa.String(length=36), nullable=False),
        sa.Column("movement_type", sa.String(length=20), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("previous_stock", sa.Integer(), nullable=False),
        sa.Column("new_stock", sa.Integer(), nullable=False),
        _money("unit_price", nullable=True, server_default=None),
        _money("total_price", nullable=True, server_default=None),
        sa.Column("reason", sa.String(length=255), nullable=True),
        _created_at_column(),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.ForeignKeyConstraint(["salon_id"], ["salons.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stock_movements_product_id", "stock_movements", ["product_id"], unique=False)
    op.create_index("ix_stock_movements_salon_id", "stock_movements", ["salon_id"], unique=False)
    op.create_index(
        "ix_stock_movements_salon_created_at",
        "stock_movements",
        ["salon_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "assignments",
        _id_column(),
        sa.Column("hairdresser_id", sa.String(length=36), nullable=False),
        sa.Column("salon_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("compensation_type", sa.String(length=20), nullable=False, server_default="commission"),
        sa.Column("commission_percentage", sa.Numeric(5, 2), nullable=False, server_default="50"),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        _money("fixed_salary"),
        _created_at_column(),
        sa.ForeignKeyConstraint(["hairdresser_id"], ["hairdressers.id"]),
        sa.ForeignKeyConstraint(["salon_id"], ["salons.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assignments_hairdresser_id", "assignments", ["hairdresser_id"], unique=False)
    op.create_index("ix_assignments_salon_id", "assignments", ["salon_id"], unique=False)
    op.create_index("ix_assignments_salon_start_date", "assignments", ["salon_id", "start_date"], unique=False)

    op.create_table(
        "presence",
        _id_column(),
        sa.Column("hairdresser_id", sa.String(length=36), nullable=False),
        sa.Column("salon_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        _created_at_column(),
        sa.ForeignKeyConstraint(["hairdresser_id"], ["hairdressers.id"]),
        sa.ForeignKeyConstraint(["salon_id"], ["salons.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("hairdresser_id", "salon_id", "date", name="ux_presence_hairdresser_salon_date"),
    )
    op.create_index("ix_presence_hairdresser_id", "presence", ["hairdresser_id"], unique=False)
    op.create_index("ix_presence_salon_id", "presence", ["salon_id"], unique=False)
    op.create_index("ix_presence_date", "presence", ["date"], unique=False)

    op.create_table(
        "service_history",
        _id_column(),
        sa.Column("service_date_time", sa.DateTime(), nullable=False),
        sa.Column("salon_id", sa.String(length=36), nullable=False),
        sa.Column("hairdresser_id", sa.String(length=36), nullable=False),
        sa.Column("service_id", sa.String(length=36), nullable=True),
        sa.Column("service_name", sa.String(length=255), nullable=False, server_default=""),
        _money("price_salon"),
        _money("price_coiffeur"),
        sa.Column("payment_method", sa.String(length=20), nullable=False, server_default="cash"),
        _created_at_column(),
        sa.ForeignKeyConstraint(["salon_id"], ["salons.id"]),
        sa.ForeignKeyConstraint(["hairdresser_id"], ["hairdressers.id"]),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_service_history_service_date_time", "service_history", ["service_date_time"], unique=False)
    op.create_index("ix_service_history_salon_id", "service_history", ["salon_id"], unique=False)
    op.create_index("ix_service_history_hairdresser_id", "service_history", ["hairdresser_id"], unique=False)
    op.create_index(
        "ix_service_history_hairdresser_date",
        "service_history",
        ["hairdresser_id", "service_date_time"],
        unique=False,
    )
    op.create_index(
        "ix_service_history_salon_date",
        "service_history",
        ["salon_id", "service_date_time"],
        unique=False,
    )

    op.create_table(
        "expenses",
        _id_column(),
        sa.Column("salon_id", sa.String(length=36), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="variable"),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="other"),
        _money("amount"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
        _created_at_column(),
        sa.ForeignKeyConstraint(["salon_id"], ["salons.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_expenses_salon_id", "expenses", ["salon_id"], unique=False)
    op.create_index("ix_expenses_salon_date", "expenses", ["salon_id", "date"], unique=False)

    op.create_table(
        "fixed_expenses",
        _id_column(),
        sa.Column("salon_id", sa.String(length=36), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="other"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at_column(),
        sa.ForeignKeyConstraint(["salon_id"], ["salons.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_fixed_expenses_salon_id", "fixed_expenses", ["salon_id"], unique=False)

    op.create_table(
        "fixed_expense_amounts",
        _id_column(),
        sa.Column("fixed_expense_id", sa.String(length=36), nullable=False),
        _money("amount", server_default=None),
        sa.Column("effective_from", sa.Date(), nullable=False),
        _created_at_column(),
        sa.ForeignKeyConstraint(["fixed_expense_id"], ["fixed_expenses.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("fixed_expense_id", "effective_from", name="ux_fixed_expense_amounts_expense_date"),
    )
    op.create_index(
        "ix_fixed_expense_amounts_fixed_expense_id",
        "fixed_expense_amounts",
        ["fixed_expense_id"],
        unique=False,
    )

    op.create_table(
        "salary_costs",
        _id_column(),
        sa.Column("hairdresser_id", sa.String(length=36), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        _money("net_salary"),
        _money("gross_salary"),
        _money("total_cost"),
        _money("charges"),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        _created_at_column(),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["hairdresser_id"], ["hairdressers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_salary_costs_hairdresser_id", "salary_costs", ["hairdresser_id"], unique=False)
    op.create_index("ix_salary_costs_year_month", "salary_costs", ["year", "month"], unique=False)

    op.create_table(
        "salary_payments",
        _id_column(),
        sa.Column("salary_cost_id", sa.String(length=36), nullable=False),
        _money("amount", server_default=None),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("payment_method", sa.String(length=30), nullable=False, server_default="virement"),
        sa.Column("notes", sa.String(length=255), nullable=True),
        _created_at_column(),
        sa.ForeignKeyConstraint(["salary_cost_id"], ["salary_costs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_salary_payments_salary_cost_id", "salary_payments", ["salary_cost_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_salary_payments_salary_cost_id", table_name="salary_payments")
    op.drop_table("salary_payments")
    op.drop_index("ix_salary_costs_year_month", table_name="salary_costs")
    op.drop_index("ix_salary_costs_hairdresser_id", table_name="salary_costs")
    op.drop_table("salary_costs")
    op.drop_index("ix_fixed_expense_amounts_fixed_expense_id", table_name="fixed_expense_amounts")
    op.drop_table("fixed_expense_amounts")
    op.drop_index("ix_fixed_expenses_salon_id", table_name="fixed_expenses")
    op.drop_table("fixed_expenses")
    op.drop_index("ix_expenses_salon_date", table_name="expenses")
    op.drop_index("ix_expenses_salon_id", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("ix_service_history_salon_date", table_name="service_history")
    op.drop_index("ix_service_history_hairdresser_date", table_name="service_history")
    op.drop_index("ix_service_history_hairdresser_id", table_name="service_history")
    op.drop_index("ix_service_history_salon_id", table_name="service_history")
    op.drop_index("ix_service_history_service_date_time", table_name="service_history")
    op.drop_table("service_history")
    op.drop_index("ix_presence_date", table_name="presence")
    op.drop_index("ix_presence_salon_id", table_name="presence")
    op.drop_index("ix_presence_hairdresser_id", table_name="presence")
    op.drop_table("presence")
    op.drop_index("ix_assignments_salon_start_date", table_name="assignments")
    op.drop_index("ix_assignments_salon_id", table_name="assignments")
    op.drop_index("ix_assignments_hairdresser_id", table_name="assignments")
    op.drop_table("assignments")
    op.drop_index("ix_stock_movements_salon_created_at", table_name="stock_movements")
    op.drop_index("ix_stock_movements_salon_id", table_name="stock_movements")
    op.drop_index("ix_stock_movements_product_id", table_name="stock_movements")
    op.drop_table("stock_movements")
    op.drop_index("ix_product_stock_salon_id", table_name="product_stock")
    op.drop_index("ix_product_stock_product_id", table_name="product_stock")
    op.drop_table("product_stock")
    op.drop_index("ix_products_category_id", table_name="products")
    op.drop_table("products")
    op.drop_table("product_categories")
    op.drop_table("services")
    op.execute("DROP INDEX IF EXISTS ux_users_username_lower")
    op.drop_index("ix_users_hairdresser_id", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_table("hairdressers")
    op.drop_table("salons")
