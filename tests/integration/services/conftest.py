"""Shared SQLite fixtures for destination integration tests."""

from collections.abc import Iterator

import pytest
from sqlalchemy import Connection, Engine, create_engine, event

from docmigrate.services.destination import SqlDestination


@pytest.fixture
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine whose transactions also cover DDL.

    pysqlite only opens transactions before DML by default, so CREATE TABLE
    would otherwise commit on its own and survive a rollback.
    """
    sqlite_engine = create_engine("sqlite://")

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN")

    yield sqlite_engine
    sqlite_engine.dispose()


@pytest.fixture
def connection(engine: Engine) -> Iterator[Connection]:
    with engine.connect() as conn:
        yield conn


@pytest.fixture
def destination(connection: Connection) -> SqlDestination:
    return SqlDestination(connection=connection)
