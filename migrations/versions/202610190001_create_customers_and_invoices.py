"""create customers and invoices

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op


def _has_table(table_name: str, bind) -> bool:
    inspector = sa.inspect(bind)
    return inspector.has_table(table_name)


# revision identifiers, used by Alembic.
revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None


CUSTOMERS_TABLE = "customers"
INVOICES_TABLE = "invoices"


def upgrade():
    bind = op.get_bind()
    if not bind:
        return

    if not _has_table(CUSTOMERS_TABLE, bind):
        op.create_table(
            CUSTOMERS_TABLE,
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False, unique=True),
            sa.Column("image_url", sa.String(length=255), nullable=True),
        )

    if not _has_table(INVOICES_TABLE, bind):
        op.create_table(
            INVOICES_TABLE,
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column(
                "customer_id",
                sa.String(length=36),
                sa.ForeignKey("customers.id"),
                nullable=False,
            ),
            sa.Column("amount", sa.BigInteger(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False),
            sa.Column("date", sa.Date(), nullable=False),
            sa.CheckConstraint(
                "status IN ('paid', 'pending')", name="ck_invoices_status"
            ),
        )
        op.create_index(
            "ix_invoices_customer_id", INVOICES_TABLE, ["customer_id"]
        )
        op.create_index("ix_invoices_date", INVOICES_TABLE, ["date"])


def downgrade():
    bind = op.get_bind()
    if not bind:
        return

    if _has_table(INVOICES_TABLE, bind):
        op.drop_index("ix_invoices_date", table_name=INVOICES_TABLE)
        op.drop_index("ix_invoices_customer_id", table_name=INVOICES_TABLE)
        op.drop_table(INVOICES_TABLE)
    if _has_table(CUSTOMERS_TABLE, bind):
        op.drop_table(CUSTOMERS_TABLE)
