"""
Column type for monetary amounts.

Amounts are decimal.Decimal everywhere in the application. Databases with a
native NUMERIC type store them as NUMERIC(38, 10). SQLite has no exact decimal
storage (its NUMERIC affinity converts to a binary float), so there the value
is stored as its canonical string and parsed back into a Decimal on load.
"""

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

# Fractional digits kept by NUMERIC columns. Requests with more are refused.
MONEY_SCALE = 10


class Money(TypeDecorator):
    """Exact decimal column, independent of the backend's float handling."""

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(64))
        return dialect.type_descriptor(Numeric(precision=38, scale=MONEY_SCALE, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)
