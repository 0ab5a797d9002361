"""Create products and profiles tables

Revision ID: 001
Revises: None
Create Date: 2025-01-20 00:00:00.000000+00:00

What:  Creates `products` (one row per variant) and `profiles` (name and role
       of each auth account).
How:   PostgreSQL features: UUID primary key, TEXT[] arrays, JSONB colors,
       TIMESTAMP WITH TIME ZONE.

Rollback: downgrade() drops both tables (all catalog data is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "group_id",
            sa.String(64),
            nullable=True,
            comment="Shared by every variant of the same garment (e.g. P-GG and Plus Size)",
        ),
        sa.Column("reference", sa.String(100), nullable=False),
        sa.Column(
            "sizes",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column(
            "colors",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
            comment="List of {hex, name}",
        ),
        sa.Column(
            "price_representative",
            sa.Numeric(10, 2),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "price_sacoleira",
            sa.Numeric(10, 2),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "images",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'"),
            comment="Public URLs; the first one is the cover photo",
        ),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("fabric", sa.String(150), nullable=True),
        sa.Column("is_highlight", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # The catalog lists newest first; the editor loads a group by id
    op.create_index("idx_products_created_at", "products", [sa.text("created_at DESC")])
    op.create_index("idx_products_group_id", "products", ["group_id"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), nullable=False, comment="Auth provider user id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.String(32),
            nullable=False,
            server_default=sa.text("'GUEST'"),
            comment="ADMIN, REPRESENTANTE, SACOLEIRA or GUEST",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "role IN ('ADMIN', 'REPRESENTANTE', 'SACOLEIRA', 'GUEST')",
            name="ck_profiles_role",
        ),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])


def downgrade() -> None:
    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
    op.drop_index("idx_products_group_id", table_name="products")
    op.drop_index("idx_products_created_at", table_name="products")
    op.drop_table("products")
