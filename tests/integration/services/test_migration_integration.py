"""End-to-end migration runs against in-memory SQLite.

Documents avoid string and ObjectId fields since SQLite does not accept the
NVARCHAR(MAX) column type.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Connection, text

from docmigrate.models.index import IndexDescriptor
from docmigrate.services.destination import SqlDestination
from docmigrate.services.factory import create_orchestrator

INVENTORY = [
    {"sku": 100, "qty": 5, "price": Decimal("12.50"), "active": True},
    {"sku": 101, "qty": 0, "price": Decimal("3"), "restocked": datetime(2024, 3, 1, 9, 30)},
]


class FakeSource:
    def __init__(
        self,
        collections: dict[str, list[dict[str, Any]]],
        indexes: dict[str, list[IndexDescriptor]] | None = None,
    ) -> None:
        self.collections = collections
        self.indexes = indexes or {}

    def fetch_all(self, collection_name: str) -> list[dict[str, Any]]:
        return self.collections.get(collection_name, [])

    def list_indexes(self, collection_name: str) -> list[IndexDescriptor]:
        return self.indexes.get(collection_name, [])


def _table_names(connection: Connection) -> list[str]:
    rows = connection.exec_driver_sql("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name").all()
    return [row[0] for row in rows]


def _index_names(connection: Connection) -> list[str]:
    rows = connection.exec_driver_sql("SELECT name FROM sqlite_master WHERE type = 'index' ORDER BY name").all()
    return [row[0] for row in rows]


class TestSuccessfulMigration:
    def test_copies_rows_and_indexes(self, destination: SqlDestination, connection: Connection) -> None:
        source = FakeSource(
            {"inventory": INVENTORY},
            {"inventory": [IndexDescriptor(name="sku_1_qty_-1", fields=["sku", "qty"])]},
        )

        result = create_orchestrator(source, destination).run_migration(["inventory"])

        assert result.success is True
        assert result.collections_processed == 1
        assert result.tables_created == 1
        assert result.indexes_created == 2
        assert result.documents_inserted == 2
        rows = connection.execute(
            text("SELECT sku, qty, price, active, restocked FROM inventory ORDER BY sku")
        ).all()
        assert rows[0][:2] == (100, 5)
        assert float(rows[0][2]) == 12.5
        assert rows[0][3] == 1
        assert rows[0][4] is None
        assert rows[1][3] is None
        assert rows[1][4] == "2024-03-01 09:30:00.000"
        assert _index_names(connection) == ["IX_inventory_qty", "IX_inventory_sku"]

    def test_reuses_existing_table(self, destination: SqlDestination, connection: Connection) -> None:
        connection.exec_driver_sql("CREATE TABLE inventory (sku INT, qty INT, price DECIMAL(38,18), active BIT)")
        connection.commit()
        source = FakeSource({"inventory": [INVENTORY[0]]})

        result = create_orchestrator(source, destination).run_migration(["inventory"])

        assert result.success is True
        assert result.tables_created == 0
        assert connection.execute(text("SELECT COUNT(*) FROM inventory")).scalar_one() == 1

    def test_empty_collection_creates_nothing(self, destination: SqlDestination, connection: Connection) -> None:
        source = FakeSource({"inventory": INVENTORY, "archive": []})

        result = create_orchestrator(source, destination).run_migration(["archive", "inventory"])

        assert result.success is True
        assert result.collections_processed == 2
        assert result.tables_created == 1
        assert _table_names(connection) == ["inventory"]


class TestFailedMigration:
    def test_failure_rolls_back_earlier_collections(
        self, destination: SqlDestination, connection: Connection
    ) -> None:
        source = FakeSource(
            {
                "inventory": INVENTORY,
                "shipments": [{"parcel": {"weight": 3}}],
            }
        )

        result = create_orchestrator(source, destination).run_migration(["inventory", "shipments"])

        assert result.success is False
        assert result.error == "Unsupported column type: document"
        assert result.collections_processed == 1
        assert destination.in_transaction is False
        assert _table_names(connection) == []

    def test_rejected_statement_rolls_back(self, destination: SqlDestination, connection: Connection) -> None:
        connection.exec_driver_sql("CREATE TABLE inventory (sku INT)")
        connection.commit()
        source = FakeSource({"orders": [{"total": 9}], "inventory": INVENTORY})

        result = create_orchestrator(source, destination).run_migration(["orders", "inventory"])

        assert result.success is False
        assert "Failed to execute statement" in (result.error or "")
        assert _table_names(connection) == ["inventory"]
        assert connection.execute(text("SELECT COUNT(*) FROM inventory")).scalar_one() == 0
