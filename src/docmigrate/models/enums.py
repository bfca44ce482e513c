from enum import StrEnum


class ValueKind(StrEnum):
    NULL = "null"
    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    BINARY = "binary"
    OBJECT_ID = "object_id"
    GUID = "guid"
    ARRAY = "array"
    DOCUMENT = "document"
    TIMESTAMP = "timestamp"
    REGEX = "regex"
    CODE = "code"
    MIN_KEY = "min_key"
    MAX_KEY = "max_key"
    BINARY_UNMAPPED = "binary_unmapped"
    UNKNOWN = "unknown"


class ColumnType(StrEnum):
    TEXT = "NVARCHAR(MAX)"
    INTEGER32 = "INT"
    DATETIME = "DATETIME"
    BOOLEAN = "BIT"
    DECIMAL = "DECIMAL(38,18)"
    INTEGER64 = "BIGINT"
    BINARY = "VARBINARY(MAX)"


class SchemaPolicyName(StrEnum):
    FIRST_SEEN = "first_seen"
    WIDEST = "widest"
    TEXT = "text"


class NestedDocumentPolicy(StrEnum):
    KEEP = "keep"
    SERIALIZE = "serialize"
