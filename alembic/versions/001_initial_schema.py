"""Initial schema - imports, trades and generated documents.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

IMPORT_STATUSES = ("IMPORTED", "CONSOLIDATED", "DOCUMENTS_GENERATED", "PUSHED")
GROUPING_CRITERIA = (
    "CURRENCY_PAIR",
    "COUNTERPARTY",
    "BOOK",
    "CURRENCY_PAIR_AND_COUNTERPARTY",
    "CURRENCY_PAIR_AND_BOOK",
    "COUNTERPARTY_AND_BOOK",
    "ALL_CRITERIA",
)


def upgrade() -> None:
    # --- trade_imports ---
    op.create_table(
        "trade_imports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("import_name", sa.String(100), nullable=False),
        sa.Column("status", sa.Enum(*IMPORT_STATUSES, name="importstatus"), nullable=False),
        sa.Column(
            "consolidation_criteria",
            sa.Enum(*GROUPING_CRITERIA, name="groupingcriteria"),
            nullable=True,
        ),
        sa.Column("original_trade_count", sa.Integer(), nullable=False),
        sa.Column("current_trade_count", sa.Integer(), nullable=False),
        sa.Column("documents_generated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("pushed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("consolidated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("documents_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pushed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("import_name"),
    )
    op.create_index("ix_trade_imports_status", "trade_imports", ["status"])

    # --- trades ---
    op.create_table(
        "trades",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("trade_id", sa.String(100), nullable=False),
        sa.Column("currency_pair", sa.String(20), nullable=False),
        sa.Column("side", sa.Enum("BUY", "SELL", name="tradeside"), nullable=False),
        sa.Column("counterparty", sa.String(100), nullable=False),
        sa.Column("book", sa.String(100), nullable=False),
        sa.Column("quantity", sa.BigInteger(), nullable=True),
        sa.Column("price", sa.Numeric(15, 6), nullable=True),
        sa.Column("import_id", sa.Integer(), nullable=False),
        sa.Column("is_original", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["import_id"], ["trade_imports.id"]),
    )
    op.create_index("ix_trades_import_original", "trades", ["import_id", "is_original"])

    # --- generated_documents ---
    op.create_table(
        "generated_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("import_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["import_id"], ["trade_imports.id"]),
    )
    op.create_index(
        "ix_generated_documents_import_id", "generated_documents", ["import_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_generated_documents_import_id", table_name="generated_documents")
    op.drop_table("generated_documents")
    op.drop_index("ix_trades_import_original", table_name="trades")
    op.drop_table("trades")
    op.drop_index("ix_trade_imports_status", table_name="trade_imports")
    op.drop_table("trade_imports")
    sa.Enum(name="tradeside").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="groupingcriteria").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="importstatus").drop(op.get_bind(), checkfirst=True)
