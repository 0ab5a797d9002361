"""
Kavin's Catalog Backend — Profile SQLAlchemy Model
====================================================

What:  ORM model for the `profiles` table (one row per auth account).
How:   `id` is the auth provider's user id; the provider owns the account
       and its password, this table only stores name, email and role.
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, String, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "role IN ('ADMIN', 'REPRESENTANTE', 'SACOLEIRA', 'GUEST')",
            name="ck_profiles_role",
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # ADMIN | REPRESENTANTE | SACOLEIRA | GUEST
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default="GUEST", server_default=text("'GUEST'")
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email='{self.email}', role='{self.role}')>"
