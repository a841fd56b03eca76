"""Database layer - engine, base classes and column types."""

from paytrack_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from paytrack_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from paytrack_kernel.db.types import Hours, Money, Rate, ShortCode, TaxYearLabel

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Money",
    "Rate",
    "Hours",
    "ShortCode",
    "TaxYearLabel",
]
