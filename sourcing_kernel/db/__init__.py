"""Database layer - engine, base classes and column types."""

from sourcing_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from sourcing_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
)
from sourcing_kernel.db.types import Currency, Money, Rate

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Money",
    "Rate",
    "Currency",
]
