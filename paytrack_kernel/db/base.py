"""
Module: paytrack_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the UUID primary key convention, the type annotation map for consistent
    column types, and the TrackedBase mixin for row timestamps.
Architecture position: Kernel > DB.  Lowest-level import target for the
    persistence layer.  MUST NOT import from modules, engines, or config.

Invariants enforced:
    - UUID primary keys: every model inherits a uuid4-generated primary key.
    - Decimal precision: Python Decimal maps to Numeric(38, 9).  Pay rates,
      multipliers, tax coefficients and amounts never touch float.
    - Timestamps are timezone-aware.

Failure modes:
    - IntegrityError on duplicate primary key.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from paytrack_kernel.db.types import (
    Hours,
    LongText,
    Money,
    Rate,
    ShortCode,
    TaxYearLabel,
    TimeOfDay,
)


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Accepts UUID objects or their string form on the way in and always
    returns UUID objects on the way out.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value if isinstance(value, PyUUID) else PyUUID(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return PyUUID(value)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        # Annotated aliases from db/types.py
        Money: Numeric(38, 9),
        Hours: Numeric(38, 9),
        Rate: Numeric(38, 18),
        TaxYearLabel: String(7),
        TimeOfDay: String(5),
        ShortCode: String(50),
        LongText: String(4000),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TrackedBase(Base):
    """
    Abstract base with created/updated timestamps.

    ``updated_at`` refreshes on every UPDATE, so a recalculation writeback
    is visible on the period row even when no amount changed.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


UUID = PyUUID
