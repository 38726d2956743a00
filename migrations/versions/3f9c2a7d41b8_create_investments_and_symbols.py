"""create investments and symbols

Revision ID: 3f9c2a7d41b8
Revises:
Create Date: 2025-10-04 16:33:59.753406

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d41b8'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "symbols",
        sa.Column("symbol", sa.String(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False, server_default=""),
        sa.Column("exchange", sa.String(), nullable=True),
        sa.Column("isin", sa.String(), nullable=True),
        sa.Column("instrument_type", sa.String(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
    )
    # lookup filters on lower(name) LIKE '%q%' OR lower(symbol) LIKE 'q%'
    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm;")
    op.execute("CREATE INDEX IF NOT EXISTS ix_symbols_name_trgm ON symbols USING gin (lower(name) gin_trgm_ops);")
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_symbols_symbol_prefix ON symbols (lower(symbol) text_pattern_ops);"
    )

    op.create_table(
        "investments",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("symbol", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("shares", sa.Numeric(20, 8), nullable=False),
        sa.Column("buy_price", sa.Numeric(20, 8), nullable=False),
        sa.Column("current_price", sa.Numeric(20, 8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_investments_user_id", "investments", ["user_id"])


def downgrade():
    op.drop_index("ix_investments_user_id", table_name="investments")
    op.drop_table("investments")
    op.execute("DROP INDEX IF EXISTS ix_symbols_symbol_prefix;")
    op.execute("DROP INDEX IF EXISTS ix_symbols_name_trgm;")
    op.drop_table("symbols")
