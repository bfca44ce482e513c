from docmigrate.models.enums import ColumnType, NestedDocumentPolicy, SchemaPolicyName, ValueKind
from docmigrate.models.index import IndexDescriptor
from docmigrate.models.results import InsertStatement, MigrationResult
from docmigrate.models.schema import SchemaMap

__all__ = [
    "ColumnType",
    "IndexDescriptor",
    "InsertStatement",
    "MigrationResult",
    "NestedDocumentPolicy",
    "SchemaMap",
    "SchemaPolicyName",
    "ValueKind",
]
