"""DDL generation for destination tables.

Builds CREATE TABLE statements from an inferred SchemaMap and creates the
table at the destination when the catalog does not already have it. An
existing table is used as-is; its columns are never compared to the schema.
"""

from typing import Protocol

import structlog

from docmigrate.errors import EmptySchemaError
from docmigrate.models.schema import SchemaMap
from docmigrate.services.type_mapper import map_type


class TableDestination(Protocol):
    def table_exists(self, table_name: str) -> bool: ...

    def execute(self, sql: str) -> None: ...


class DDLGenerator:
    """Generates and applies CREATE TABLE statements."""

    def __init__(
        self,
        destination: TableDestination,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._destination = destination
        self._logger = logger or structlog.get_logger(__name__)

    @staticmethod
    def build_create_table(table_name: str, schema: SchemaMap) -> str:
        """Generate the CREATE TABLE statement for a schema.

        Columns follow SchemaMap order, each typed via map_type.

        Args:
            table_name: Destination table name, used verbatim.
            schema: Inferred schema for the collection.

        Returns:
            CREATE TABLE statement text.

        Raises:
            EmptySchemaError: If the schema has no columns.
            UnsupportedTypeError: If any column kind has no mapping.
        """
        if schema.is_empty():
            raise EmptySchemaError(table_name)

        column_definitions = [f"{field} {map_type(kind)}" for field, kind in schema.items()]
        return f"CREATE TABLE {table_name} ({', '.join(column_definitions)})"

    def ensure_table(self, schema: SchemaMap, table_name: str) -> bool:
        """Create the table unless the destination already has one by that name.

        Mapping failures surface before any statement is executed.

        Returns:
            True if the table was created, False if it already existed.
        """
        if self._destination.table_exists(table_name):
            self._logger.info("table_exists", table=table_name)
            return False

        create_sql = self.build_create_table(table_name, schema)
        self._destination.execute(create_sql)
        self._logger.info(
            "table_created",
            table=table_name,
            column_count=len(schema),
        )
        return True
