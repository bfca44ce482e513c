from pydantic import Field

from docmigrate.models.base import FrozenModel


class InsertStatement(FrozenModel):
    """A generated INSERT plus the document fields it had to leave out."""

    sql: str
    skipped_fields: list[str] = Field(default_factory=list)


class MigrationResult(FrozenModel):
    """Outcome of one migration run with statistics."""

    success: bool
    collections_processed: int = Field(default=0, ge=0)
    tables_created: int = Field(default=0, ge=0)
    indexes_created: int = Field(default=0, ge=0)
    documents_inserted: int = Field(default=0, ge=0)
    fields_skipped: int = Field(default=0, ge=0)
    error: str | None = None


__all__ = ["InsertStatement", "MigrationResult"]
