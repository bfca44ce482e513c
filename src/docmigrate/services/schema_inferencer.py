"""Schema inference over a sequence of documents.

The kind recorded for each field is decided by a pluggable policy. The
default, FirstSeenPolicy, keeps the kind of the first document in scan order
that carries the field; later documents never change it.
"""

from collections.abc import Iterable, Mapping
from itertools import islice
from typing import Any, Protocol

import structlog

from docmigrate.models.enums import SchemaPolicyName, ValueKind
from docmigrate.models.schema import SchemaMap
from docmigrate.services.type_mapper import kind_of


class SchemaPolicy(Protocol):
    """Resolves the kind of a field already present in the schema."""

    def resolve(self, field: str, current: ValueKind, incoming: ValueKind) -> ValueKind: ...


class FirstSeenPolicy:
    """Keeps the kind of the first occurrence of a field."""

    def resolve(self, field: str, current: ValueKind, incoming: ValueKind) -> ValueKind:
        return current


class WidestTypePolicy:
    """Widens numeric kinds and falls back to string on any other conflict.

    Null never decides a kind while a concrete kind is available.
    """

    _NUMERIC_RANK = {
        ValueKind.INT32: 0,
        ValueKind.INT64: 1,
        ValueKind.DOUBLE: 2,
        ValueKind.DECIMAL: 3,
    }

    def resolve(self, field: str, current: ValueKind, incoming: ValueKind) -> ValueKind:
        if current == incoming or incoming == ValueKind.NULL:
            return current
        if current == ValueKind.NULL:
            return incoming
        if current in self._NUMERIC_RANK and incoming in self._NUMERIC_RANK:
            return max(current, incoming, key=self._NUMERIC_RANK.__getitem__)
        return ValueKind.STRING


class TextUnionPolicy:
    """Turns every conflicting field into a string column."""

    def resolve(self, field: str, current: ValueKind, incoming: ValueKind) -> ValueKind:
        if current == incoming:
            return current
        return ValueKind.STRING


def policy_for(name: SchemaPolicyName) -> SchemaPolicy:
    policies: dict[SchemaPolicyName, type] = {
        SchemaPolicyName.FIRST_SEEN: FirstSeenPolicy,
        SchemaPolicyName.WIDEST: WidestTypePolicy,
        SchemaPolicyName.TEXT: TextUnionPolicy,
    }
    return policies[SchemaPolicyName(name)]()


class SchemaInferencer:
    """Builds a SchemaMap from documents in the order they are given."""

    def __init__(
        self,
        policy: SchemaPolicy | None = None,
        sample_size: int | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if sample_size is not None and sample_size <= 0:
            raise ValueError("sample_size must be positive")

        self._policy = policy or FirstSeenPolicy()
        self._sample_size = sample_size
        self._logger = logger or structlog.get_logger(__name__)

    def infer_schema(self, documents: Iterable[Mapping[str, Any]]) -> SchemaMap:
        """Infer an ordered field to kind mapping.

        Args:
            documents: Documents in scan order. Only the first ``sample_size``
                are read when a sample size is configured.

        Returns:
            SchemaMap in first-appearance order. Empty input gives an empty map.
        """
        columns: dict[str, ValueKind] = {}
        scanned = 0

        for document in islice(documents, self._sample_size):
            scanned += 1
            for field, value in document.items():
                incoming = kind_of(value)
                current = columns.get(field)
                if current is None:
                    columns[field] = incoming
                    continue
                resolved = self._policy.resolve(field, current, incoming)
                if resolved != current:
                    self._logger.debug(
                        "schema_kind_resolved",
                        field=field,
                        previous=str(current),
                        incoming=str(incoming),
                        resolved=str(resolved),
                    )
                columns[field] = resolved

        self._logger.debug(
            "schema_inferred",
            documents_scanned=scanned,
            column_count=len(columns),
        )
        return SchemaMap(columns=columns)
