"""Unit tests for the MongoSource collaborator."""

from typing import Any

import pytest
from bson.errors import InvalidBSON
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from docmigrate.errors import SourceFetchError
from docmigrate.models.index import IndexDescriptor
from docmigrate.services.source import MongoSource


class FakeCollection:
    """Minimal stand-in for a pymongo Collection."""

    def __init__(
        self,
        documents: list[dict[str, Any]] | None = None,
        indexes: list[dict[str, Any]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._documents = documents or []
        self._indexes = indexes or []
        self._error = error
        self.find_filters: list[dict[str, Any]] = []

    def find(self, filter: dict[str, Any]) -> list[dict[str, Any]]:
        if self._error:
            raise self._error
        self.find_filters.append(filter)
        return iter(self._documents)

    def list_indexes(self) -> list[dict[str, Any]]:
        if self._error:
            raise self._error
        return iter(self._indexes)


class FakeDatabase:
    """Minimal stand-in for a pymongo Database."""

    def __init__(self, collections: dict[str, FakeCollection]) -> None:
        self._collections = collections

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())


class TestFetchAll:
    """Tests for reading documents."""

    def test_returns_documents_in_source_order(self) -> None:
        documents = [{"_id": 2, "name": "Bob"}, {"_id": 1, "name": "Alice"}]
        collection = FakeCollection(documents=documents)
        source = MongoSource(database=FakeDatabase({"people": collection}))

        result = source.fetch_all("people")

        assert result == documents
        assert collection.find_filters == [{}]

    def test_missing_collection_is_empty(self) -> None:
        source = MongoSource(database=FakeDatabase({}))

        assert source.fetch_all("nothing") == []

    def test_wraps_driver_errors(self) -> None:
        collection = FakeCollection(error=ServerSelectionTimeoutError("no servers"))
        source = MongoSource(database=FakeDatabase({"people": collection}))

        with pytest.raises(SourceFetchError, match="people") as exc_info:
            source.fetch_all("people")

        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)

    def test_wraps_decoding_errors(self) -> None:
        collection = FakeCollection(error=InvalidBSON("invalid utf-8"))
        source = MongoSource(database=FakeDatabase({"people": collection}))

        with pytest.raises(SourceFetchError, match="people") as exc_info:
            source.fetch_all("people")

        assert isinstance(exc_info.value.__cause__, InvalidBSON)


class TestListIndexes:
    """Tests for reading index descriptors."""

    def test_converts_index_info_to_descriptors(self) -> None:
        indexes = [
            {"v": 2, "key": {"_id": 1}, "name": "_id_"},
            {"v": 2, "key": {"customer_id": 1, "placed_at": -1}, "name": "customer_id_1_placed_at_-1"},
        ]
        source = MongoSource(database=FakeDatabase({"orders": FakeCollection(indexes=indexes)}))

        result = source.list_indexes("orders")

        assert result == [
            IndexDescriptor(name="_id_", fields=["_id"]),
            IndexDescriptor(name="customer_id_1_placed_at_-1", fields=["customer_id", "placed_at"]),
        ]

    def test_wraps_driver_errors(self) -> None:
        collection = FakeCollection(error=OperationFailure("not authorized"))
        source = MongoSource(database=FakeDatabase({"orders": collection}))

        with pytest.raises(SourceFetchError, match="indexes"):
            source.list_indexes("orders")

    def test_wraps_decoding_errors(self) -> None:
        collection = FakeCollection(error=InvalidBSON("bad index document"))
        source = MongoSource(database=FakeDatabase({"orders": collection}))

        with pytest.raises(SourceFetchError, match="indexes"):
            source.list_indexes("orders")
