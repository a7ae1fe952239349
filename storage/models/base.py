"""
Base ORM Model and Mixins.

============================================================
PURPOSE
============================================================
Declarative base and shared columns for the snapshot tables.

============================================================
COMPONENTS
============================================================
- Base: declarative base with a constraint naming convention
- TimestampMixin: row creation / update timestamps
- PayloadHashMixin: SHA-256 of the stored payload(s)

============================================================
"""

from datetime import datetime

from sqlalchemy import DateTime, MetaData, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Declarative base for the snapshot tables.

    Base.metadata.create_all() creates the whole schema.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Server-side created_at / updated_at columns (UTC)."""

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class PayloadHashMixin:
    """
    Hex SHA-256 of the row's payload(s).

    Lets consumers detect a changed artifact without comparing
    the payload bytes themselves.
    """

    payload_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 of the stored payload(s)",
    )
