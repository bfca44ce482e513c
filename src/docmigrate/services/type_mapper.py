"""Value kind detection and column type mapping.

Classifies decoded BSON values into the closed ValueKind set and maps kinds
onto the fixed set of SQL Server column types.
"""

import datetime
import decimal
import re
import uuid
from collections.abc import Mapping
from typing import Any

from bson import Binary, Code, Decimal128, MaxKey, MinKey, ObjectId, Regex, Timestamp
from bson.binary import OLD_UUID_SUBTYPE, UUID_SUBTYPE
from bson.int64 import Int64

from docmigrate.errors import UnsupportedTypeError
from docmigrate.models.enums import ColumnType, ValueKind

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# Generic, old generic, MD5 and the user-defined range.
_PLAIN_BINARY_SUBTYPES = frozenset({0, 2, 5})
_USER_DEFINED_SUBTYPE_START = 0x80

_COLUMN_TYPES: dict[ValueKind, ColumnType] = {
    ValueKind.STRING: ColumnType.TEXT,
    ValueKind.NULL: ColumnType.TEXT,
    ValueKind.ARRAY: ColumnType.TEXT,
    ValueKind.OBJECT_ID: ColumnType.TEXT,
    ValueKind.GUID: ColumnType.TEXT,
    ValueKind.INT32: ColumnType.INTEGER32,
    ValueKind.DATETIME: ColumnType.DATETIME,
    ValueKind.BOOLEAN: ColumnType.BOOLEAN,
    ValueKind.DOUBLE: ColumnType.DECIMAL,
    ValueKind.DECIMAL: ColumnType.DECIMAL,
    ValueKind.INT64: ColumnType.INTEGER64,
    ValueKind.BINARY: ColumnType.BINARY,
}


def kind_of(value: Any) -> ValueKind:
    """Return the ValueKind tag of a decoded document value.

    Order matters: bool is a subclass of int, Int64 is a subclass of int,
    Binary is a subclass of bytes and Code is a subclass of str.

    Args:
        value: A value as produced by pymongo's BSON decoder.

    Returns:
        The ValueKind for the value. Never raises.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, Int64):
        return ValueKind.INT64
    if isinstance(value, int):
        return ValueKind.INT32 if INT32_MIN <= value <= INT32_MAX else ValueKind.INT64
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, (decimal.Decimal, Decimal128)):
        return ValueKind.DECIMAL
    if isinstance(value, Code):
        return ValueKind.CODE
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, datetime.datetime):
        return ValueKind.DATETIME
    if isinstance(value, Binary):
        return _binary_kind(value.subtype)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    if isinstance(value, ObjectId):
        return ValueKind.OBJECT_ID
    if isinstance(value, uuid.UUID):
        return ValueKind.GUID
    if isinstance(value, Mapping):
        return ValueKind.DOCUMENT
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, Timestamp):
        return ValueKind.TIMESTAMP
    if isinstance(value, (Regex, re.Pattern)):
        return ValueKind.REGEX
    if isinstance(value, MinKey):
        return ValueKind.MIN_KEY
    if isinstance(value, MaxKey):
        return ValueKind.MAX_KEY
    return ValueKind.UNKNOWN


def _binary_kind(subtype: int) -> ValueKind:
    if subtype in (OLD_UUID_SUBTYPE, UUID_SUBTYPE):
        return ValueKind.GUID
    if subtype in _PLAIN_BINARY_SUBTYPES or subtype >= _USER_DEFINED_SUBTYPE_START:
        return ValueKind.BINARY
    return ValueKind.BINARY_UNMAPPED


def map_type(kind: ValueKind) -> ColumnType:
    """Map a value kind to its destination column type.

    Raises:
        UnsupportedTypeError: If the kind has no entry in the mapping table.
    """
    try:
        return _COLUMN_TYPES[kind]
    except KeyError:
        raise UnsupportedTypeError(str(kind)) from None


def is_mapped(kind: ValueKind) -> bool:
    return kind in _COLUMN_TYPES
