"""Unit tests for the DocumentNormalizer."""

import json

from bson import ObjectId

from docmigrate.models.enums import NestedDocumentPolicy
from docmigrate.services.normalizer import DocumentNormalizer, serialize_json


class TestNormalizeArrays:
    """Tests for array serialization."""

    def test_array_becomes_json_text(self) -> None:
        normalizer = DocumentNormalizer()

        result = normalizer.normalize({"tags": ["a", "b"], "scores": [1, 2.5]})

        assert isinstance(result["tags"], str)
        assert json.loads(result["tags"]) == ["a", "b"]
        assert json.loads(result["scores"]) == [1, 2.5]

    def test_array_of_documents_stays_one_value(self) -> None:
        normalizer = DocumentNormalizer()

        result = normalizer.normalize({"items": [{"sku": "A1", "qty": 2}, {"sku": "B2", "qty": 1}]})

        assert json.loads(result["items"]) == [{"sku": "A1", "qty": 2}, {"sku": "B2", "qty": 1}]

    def test_array_uses_extended_json_for_bson_types(self) -> None:
        oid = ObjectId("65a4f0c2e4b0a1b2c3d4e5f6")

        text = serialize_json([oid])

        assert json.loads(text) == [{"$oid": "65a4f0c2e4b0a1b2c3d4e5f6"}]

    def test_empty_array(self) -> None:
        result = DocumentNormalizer().normalize({"tags": []})

        assert result["tags"] == "[]"


class TestNormalizeNestedDocuments:
    """Tests for nested document handling."""

    def test_nested_document_is_kept_and_normalized(self) -> None:
        normalizer = DocumentNormalizer()

        result = normalizer.normalize({"address": {"city": "NY", "lines": ["1 Main St"]}})

        assert isinstance(result["address"], dict)
        assert result["address"]["city"] == "NY"
        assert json.loads(result["address"]["lines"]) == ["1 Main St"]

    def test_nested_document_serialized_when_configured(self) -> None:
        normalizer = DocumentNormalizer(nested_documents=NestedDocumentPolicy.SERIALIZE)

        result = normalizer.normalize({"address": {"city": "NY", "lines": ["1 Main St"]}})

        assert isinstance(result["address"], str)
        assert json.loads(result["address"]) == {"city": "NY", "lines": ["1 Main St"]}


class TestNormalizeInvariants:
    """Tests for purity and ordering."""

    def test_scalars_pass_through(self) -> None:
        document = {"name": "Alice", "age": 30, "active": True, "note": None}

        assert DocumentNormalizer().normalize(document) == document

    def test_field_order_is_preserved(self) -> None:
        document = {"z": 1, "a": [1], "m": {"k": 2}}

        result = DocumentNormalizer().normalize(document)

        assert list(result) == ["z", "a", "m"]

    def test_input_is_not_mutated(self) -> None:
        document = {"tags": ["a"], "address": {"lines": ["x"]}}

        DocumentNormalizer().normalize(document)

        assert document == {"tags": ["a"], "address": {"lines": ["x"]}}
