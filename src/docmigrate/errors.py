"""Error hierarchy for the migration pipeline.

Everything raised by the pipeline derives from MigrationError so the
orchestrator can roll back the run and report a single readable message.
Driver exceptions are wrapped at the collaborator boundary and chained.
"""


class MigrationError(Exception):
    """Base class for failures that abort a migration run."""


class UnsupportedTypeError(MigrationError):
    """A value kind has no entry in the column type mapping."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unsupported column type: {kind}")


class UnsupportedValueError(MigrationError):
    """A value has no SQL literal representation."""

    def __init__(self, kind: str, detail: str | None = None) -> None:
        self.kind = kind
        message = f"Unsupported value kind for SQL literal: {kind}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class SchemaMismatchError(MigrationError):
    """A document field is absent from the inferred schema.

    Diagnostic only: the insert builder reports it and skips the field.
    """

    def __init__(self, table_name: str, field: str) -> None:
        self.table_name = table_name
        self.field = field
        super().__init__(f"Column {field} not found in the extracted schema for {table_name}")


class EmptySchemaError(MigrationError):
    """A table cannot be created from a schema without columns."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"Cannot create table {table_name} without columns")


class DestinationExecutionError(MigrationError):
    """The destination engine rejected a statement or transaction operation."""


class SourceFetchError(MigrationError):
    """Reading documents or index descriptors from the source failed."""
