from typing import Iterator

from pydantic import Field

from docmigrate.models.base import FrozenModel
from docmigrate.models.enums import ValueKind


class SchemaMap(FrozenModel):
    """Ordered field name to value kind mapping inferred for one collection.

    Column order is the order in which fields first appeared while scanning
    the documents; it drives the column order of generated DDL and DML. Names
    are kept exactly as they appear in the documents, blank ones included.
    """

    columns: dict[str, ValueKind] = Field(default_factory=dict)

    def __contains__(self, field: object) -> bool:
        return field in self.columns

    def __len__(self) -> int:
        return len(self.columns)

    def kind_for(self, field: str) -> ValueKind | None:
        return self.columns.get(field)

    def field_names(self) -> list[str]:
        return list(self.columns)

    def items(self) -> Iterator[tuple[str, ValueKind]]:
        return iter(self.columns.items())

    def is_empty(self) -> bool:
        return not self.columns


__all__ = ["SchemaMap"]
