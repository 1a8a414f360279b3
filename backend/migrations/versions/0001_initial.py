"""Initial schema: users and products

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

Creates both tables with the indexes the API queries on: category for
browsing and last_update for the product list ordering.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql

# Alembic revision identifiers
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

# Fractional seconds on MySQL so back-to-back writes still order correctly
_TIMESTAMP = sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), "mysql")


def upgrade() -> None:
    # -- users ----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column(
            "role",
            sa.Enum("admin", "user", name="user_role"),
            nullable=False,
            server_default="user",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    # -- products -------------------------------------------------------
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category", sa.String(128), nullable=True),
        sa.Column("brand", sa.String(128), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("sizes", sa.String(255), nullable=True),
        sa.Column("product_code", sa.String(64), nullable=True),
        sa.Column("order_name", sa.String(255), nullable=True),
        # URL or data: URI
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("Active", "Inactive", name="product_status"),
            nullable=False,
            server_default="Active",
        ),
        sa.Column("store_availability", sa.JSON(), nullable=False),
        sa.Column("last_update", _TIMESTAMP, nullable=False),
    )
    op.create_index("idx_products_category", "products", ["category"])
    op.create_index("idx_products_last_update", "products", ["last_update"])


def downgrade() -> None:
    op.drop_index("idx_products_last_update", table_name="products")
    op.drop_index("idx_products_category", table_name="products")
    op.drop_table("products")
    op.drop_table("users")
