from typing import Any, Mapping

from pydantic import Field, field_validator

from docmigrate.models.base import FrozenModel, ensure_non_empty_text


class IndexDescriptor(FrozenModel):
    """A source-side index reduced to the flat set of fields it references."""

    name: str
    fields: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return ensure_non_empty_text(value, "name")

    def references(self, field: str) -> bool:
        return field in self.fields

    @classmethod
    def from_index_info(cls, info: Mapping[str, Any]) -> "IndexDescriptor":
        """Build a descriptor from a ``listIndexes`` entry.

        Only the key document is consulted; sort direction and index type
        ("text", "2dsphere", ...) are ignored.
        """
        key = info.get("key") or {}
        return cls(name=info["name"], fields=list(key.keys()))


__all__ = ["IndexDescriptor"]
