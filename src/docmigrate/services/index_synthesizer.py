"""Mirrors source-side indexes onto destination columns.

Each source index is treated as a flat set of field names, so a compound
index yields one single-column index per field. Index names are not
deduplicated: re-running against a destination that already holds
``IX_<table>_<field>`` fails the run.
"""

from collections.abc import Sequence
from typing import Protocol

import structlog

from docmigrate.models.enums import ColumnType
from docmigrate.models.index import IndexDescriptor
from docmigrate.models.schema import SchemaMap
from docmigrate.services.type_mapper import map_type

# SQL Server rejects (MAX) columns as index key columns.
UNINDEXABLE_COLUMN_TYPES = frozenset({ColumnType.TEXT, ColumnType.BINARY})


class StatementDestination(Protocol):
    def execute(self, sql: str) -> None: ...


class IndexSynthesizer:
    """Creates single-column destination indexes for indexed source fields."""

    def __init__(
        self,
        destination: StatementDestination,
        skip_unindexable_columns: bool = True,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._destination = destination
        self._skip_unindexable_columns = skip_unindexable_columns
        self._logger = logger or structlog.get_logger(__name__)

    @staticmethod
    def index_name(table_name: str, field: str) -> str:
        return f"IX_{table_name}_{field}"

    def build_create_index(self, table_name: str, field: str) -> str:
        return f"CREATE INDEX {self.index_name(table_name, field)} ON {table_name}({field})"

    def mirror_indexes(
        self,
        schema: SchemaMap,
        table_name: str,
        source_indexes: Sequence[IndexDescriptor],
    ) -> list[str]:
        """Create a destination index for every schema field a source index references.

        Args:
            schema: Inferred schema of the collection.
            table_name: Destination table name.
            source_indexes: Index descriptors listed from the source collection.

        Returns:
            The CREATE INDEX statements that were executed, in schema order.
        """
        if not source_indexes:
            return []

        executed: list[str] = []
        for field, kind in schema.items():
            if not any(index.references(field) for index in source_indexes):
                continue

            if self._skip_unindexable_columns and map_type(kind) in UNINDEXABLE_COLUMN_TYPES:
                self._logger.warning(
                    "index_skipped_unindexable_column",
                    table=table_name,
                    field=field,
                    column_type=str(map_type(kind)),
                )
                continue

            sql = self.build_create_index(table_name, field)
            self._destination.execute(sql)
            executed.append(sql)
            self._logger.info(
                "index_created",
                table=table_name,
                field=field,
                index=self.index_name(table_name, field),
            )

        return executed
