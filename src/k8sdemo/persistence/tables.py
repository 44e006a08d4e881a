"""SQLAlchemy ORM models for the system of record."""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class DataItemTable(Base):
    """Data items table.

    Ids are opaque strings assigned by the client or generated on create.
    The timestamp is epoch milliseconds of the last create or update.
    """

    __tablename__ = "data_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (Index("idx_data_items_timestamp", "timestamp"),)
