"""
Tablas SQLAlchemy para la persistencia de bundles.

Las líneas del bundle se guardan embebidas como JSON: no tienen
identidad propia y conservan el orden de inserción.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class BundleRecord(Base):
    """Fila de la tabla ``bundles``."""

    __tablename__ = "bundles"
    __table_args__ = (UniqueConstraint("shop_domain", "handle", name="uq_bundles_shop_handle"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    handle: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    products: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    shop_domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"BundleRecord(id={self.id}, handle={self.handle!r}, shop={self.shop_domain!r})"
