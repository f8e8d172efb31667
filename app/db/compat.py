"""
Dialect-compatible column types and error translation (PostgreSQL + SQLite).

Production runs on PostgreSQL, tests on SQLite; the helpers here keep both
behaving the same.
"""
from sqlalchemy import Numeric, String
from sqlalchemy.exc import IntegrityError
from sqlalchemy.types import TypeDecorator

from app.core.decimals import format_decimal, parse_decimal
from app.core.exceptions import ConflictException, NotFoundException


class ExactDecimal(TypeDecorator):
    """Exact decimal column.

    PostgreSQL: unconstrained NUMERIC (keeps every digit and the scale).
    Other dialects: the fixed-point text itself, since SQLite's NUMERIC
    affinity would round through a float.
    """
    impl = String(64)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(asdecimal=True))
        return dialect.type_descriptor(String(64))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = parse_decimal(value)
        if dialect.name == "postgresql":
            return value
        return format_decimal(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return parse_decimal(value)


# Message fragments per driver: asyncpg / psycopg, then SQLite
_UNIQUE_SIGNATURES = ("duplicate key value", "unique constraint failed", "uniqueviolation")
_FOREIGN_KEY_SIGNATURES = ("foreign key constraint", "foreignkeyviolation")


def classify_integrity_error(
    exc: IntegrityError,
    *,
    conflict_message: str,
    missing_resource: str = "Referenced resource",
    missing_identifier: object = None,
) -> Exception:
    """Map a driver IntegrityError to the domain exception the caller should raise.

    Unique violations become ConflictException, foreign-key violations become
    NotFoundException; anything else is returned unchanged.
    """
    message = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
    if any(sig in message for sig in _UNIQUE_SIGNATURES):
        return ConflictException(conflict_message)
    if any(sig in message for sig in _FOREIGN_KEY_SIGNATURES):
        return NotFoundException(missing_resource, missing_identifier)
    return exc
