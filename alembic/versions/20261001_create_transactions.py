"""create transactions table"""
from alembic import op
import sqlalchemy as sa

revision = "20261001_create_transactions"
down_revision = None
branch_labels = None
depends_on = None

CURRENCIES = ("USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF")
TRANSACTION_TYPES = ("PAYMENT", "REFUND", "ADJUSTMENT")
TRANSACTION_STATUSES = ("PENDING", "PROCESSING", "COMPLETE", "FAILED")


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.Enum(*CURRENCIES, name="currency"), nullable=False),
        sa.Column("type", sa.Enum(*TRANSACTION_TYPES, name="transactiontype"), nullable=False),
        sa.Column("status", sa.Enum(*TRANSACTION_STATUSES, name="transactionstatus"), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_transactions_positive_amount"),
    )
    # external_id is unique among active rows only, so soft-deleted keys can be reused.
    op.create_index(
        "uq_transactions_active_external_id",
        "transactions",
        ["external_id"],
        unique=True,
        sqlite_where=sa.text("is_active"),
        postgresql_where=sa.text("is_active"),
    )
    op.create_index("ix_transactions_active_created", "transactions", ["is_active", "created_at"])
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index("ix_transactions_currency", "transactions", ["currency"])


def downgrade() -> None:
    op.drop_index("ix_transactions_currency", table_name="transactions")
    op.drop_index("ix_transactions_status", table_name="transactions")
    op.drop_index("ix_transactions_active_created", table_name="transactions")
    op.drop_index("uq_transactions_active_external_id", table_name="transactions")
    op.drop_table("transactions")
    bind = op.get_bind()
    for enum_name in ("transactionstatus", "transactiontype", "currency"):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
