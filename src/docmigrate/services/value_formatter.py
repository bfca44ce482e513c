"""SQL literal formatting for document values.

Each literal is complete as returned: strings, datetimes and identifiers are
quoted here, numbers, bits and binary are not. Callers must not add quotes.
"""

import datetime
import decimal
import math
from typing import Any

from bson import Binary, Decimal128

from docmigrate.errors import UnsupportedValueError
from docmigrate.models.enums import ValueKind
from docmigrate.services.type_mapper import kind_of

NULL_LITERAL = "NULL"


def quote_text(text: str) -> str:
    """Single-quote text, doubling embedded single quotes."""
    return "'" + text.replace("'", "''") + "'"


def format_value(value: Any) -> str:
    """Format a document value as a SQL Server literal.

    Args:
        value: A normalized document value.

    Returns:
        The literal text, including its own quotes where the kind needs them.

    Raises:
        UnsupportedValueError: For nested documents, arrays and any kind
            without a literal form.
    """
    kind = kind_of(value)

    if kind == ValueKind.NULL:
        return NULL_LITERAL
    if kind == ValueKind.BOOLEAN:
        return "1" if value else "0"
    if kind == ValueKind.STRING:
        return quote_text(value)
    if kind in (ValueKind.INT32, ValueKind.INT64):
        return str(int(value))
    if kind == ValueKind.DOUBLE:
        return _format_double(value)
    if kind == ValueKind.DECIMAL:
        return _format_decimal(value)
    if kind == ValueKind.DATETIME:
        return quote_text(_format_datetime(value))
    if kind == ValueKind.BINARY:
        return "0x" + bytes(value).hex().upper()
    if kind == ValueKind.OBJECT_ID:
        return quote_text(str(value))
    if kind == ValueKind.GUID:
        if isinstance(value, Binary):
            value = value.as_uuid(value.subtype)
        return quote_text(str(value))

    raise UnsupportedValueError(str(kind))


def _format_double(value: float) -> str:
    if not math.isfinite(value):
        raise UnsupportedValueError(str(ValueKind.DOUBLE), repr(value))
    # Shortest round-trip digits, written out without an exponent.
    return format(decimal.Decimal(repr(value)), "f")


def _format_decimal(value: decimal.Decimal | Decimal128) -> str:
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    if not value.is_finite():
        raise UnsupportedValueError(str(ValueKind.DECIMAL), str(value))
    return format(value, "f")


def _format_datetime(value: datetime.datetime) -> str:
    if value.tzinfo is not None and value.utcoffset() is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}.{value.microsecond // 1000:03d}"
    )
