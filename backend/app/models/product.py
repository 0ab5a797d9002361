"""
Kavin's Catalog Backend — Product SQLAlchemy Model
====================================================

What:  ORM model representing the `products` table.
Who:   Used by ProductService for CRUD operations and by Alembic for schema management.

Table Design:
    - One row per variant ("grade"). Variants of the same garment share
      `group_id`, name, description, category, fabric, highlight flag and
      images; each row has its own reference, sizes, colors and prices.
    - `group_id` is nullable: legacy single-variant products have none.
    - `colors` is JSONB: a list of {"hex": "#000000", "name": "Preto"}.
    - Prices are NUMERIC(10, 2); they are converted to float at the API edge.

    Index on group_id:
        Loading the admin form and deleting a group both filter by it.
    Index on created_at DESC:
        The catalog always lists newest products first.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, Index, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Product(Base):
    """A single product variant row."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    # ── Grouping ──────────────────────────────────────────────────────────
    group_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Shared by every variant of the same garment (e.g. P-GG and Plus Size)",
    )

    # ── Variant-specific fields ───────────────────────────────────────────
    reference: Mapped[str] = mapped_column(String(100), nullable=False)
    sizes: Mapped[List[str]] = mapped_column(
        ARRAY(Text), nullable=False, default=list, server_default=text("'{}'")
    )
    colors: Mapped[List[dict]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )
    price_representative: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0"), server_default=text("0")
    )
    price_sacoleira: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0"), server_default=text("0")
    )

    # ── Shared fields (identical across a group) ──────────────────────────
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=text("''")
    )
    images: Mapped[List[str]] = mapped_column(
        ARRAY(Text), nullable=False, default=list, server_default=text("'{}'")
    )
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    fabric: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    is_highlight: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_products_group_id", "group_id"),
        Index("idx_products_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Product(id={self.id}, reference='{self.reference}', "
            f"group_id='{self.group_id}')>"
        )
