"""INSERT statement assembly for normalized documents."""

from collections.abc import Mapping
from typing import Any

import structlog

from docmigrate.errors import SchemaMismatchError
from docmigrate.models.results import InsertStatement
from docmigrate.models.schema import SchemaMap
from docmigrate.services.value_formatter import NULL_LITERAL, format_value


class InsertStatementBuilder:
    """Builds one INSERT statement per document.

    Columns are listed in SchemaMap order so every statement for a table has
    the same shape. Schema columns missing from a document are inserted as
    NULL. Document fields missing from the schema are skipped and reported.
    Values are formatted by their own runtime kind, which can differ from the
    kind recorded in the schema; literal quoting is left to the formatter.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger(__name__)

    def build_insert(
        self,
        table_name: str,
        schema: SchemaMap,
        document: Mapping[str, Any],
    ) -> InsertStatement:
        """Build the INSERT statement for a single document.

        Args:
            table_name: Destination table name.
            schema: Inferred schema of the collection.
            document: Normalized document.

        Returns:
            InsertStatement with the SQL text and any skipped fields.

        Raises:
            UnsupportedValueError: If a value has no literal form.
        """
        skipped_fields = [field for field in document if field not in schema]
        for field in skipped_fields:
            mismatch = SchemaMismatchError(table_name, field)
            self._logger.warning(
                "schema_mismatch",
                table=table_name,
                field=field,
                detail=str(mismatch),
            )

        columns = schema.field_names()
        values = [format_value(document[field]) if field in document else NULL_LITERAL for field in columns]

        sql = f"INSERT INTO {table_name} ({','.join(columns)}) VALUES ({','.join(values)})"
        return InsertStatement(sql=sql, skipped_fields=skipped_fields)
