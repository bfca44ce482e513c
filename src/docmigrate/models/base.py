from typing import Any

from pydantic import BaseModel, ConfigDict


class FrozenModel(BaseModel):
    """Base class for immutable value objects passed between pipeline stages."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def ensure_non_empty_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    if not value.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return value


def ensure_unique(values: list[str], field_name: str) -> list[str]:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            raise ValueError(f"{field_name} contains duplicate entry '{value}'")
        seen.add(value)
    return values
