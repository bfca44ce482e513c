"""Document normalizer that reduces arrays (and optionally nested documents) to text."""

from collections.abc import Mapping
from typing import Any

from bson import json_util

from docmigrate.models.enums import NestedDocumentPolicy


class DocumentNormalizer:
    """Rewrites documents so array values become their JSON text.

    Nested documents are normalized recursively and kept nested, or
    serialized to JSON text when the policy is SERIALIZE. The input
    document is never mutated and field order is preserved.
    """

    def __init__(
        self,
        nested_documents: NestedDocumentPolicy = NestedDocumentPolicy.KEEP,
    ) -> None:
        self._nested_documents = nested_documents

    def normalize(self, document: Mapping[str, Any]) -> dict[str, Any]:
        """Return a normalized copy of a document.

        Args:
            document: Field to value mapping as read from the source.

        Returns:
            A new dict with the same field order.
        """
        normalized: dict[str, Any] = {}
        for field, value in document.items():
            normalized[field] = self._normalize_value(value)
        return normalized

    def _normalize_value(self, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return serialize_json(value)
        if isinstance(value, Mapping):
            if self._nested_documents == NestedDocumentPolicy.SERIALIZE:
                return serialize_json(value)
            return self.normalize(value)
        return value


def serialize_json(value: Any) -> str:
    """Serialize a BSON-compatible value to relaxed Extended JSON text."""
    return json_util.dumps(value, json_options=json_util.RELAXED_JSON_OPTIONS)
