"""Destination collaborator executing generated SQL through SQLAlchemy.

Statements are sent with ``exec_driver_sql`` so literal text containing
colons or question marks is never parsed for bind parameters. Every
SQLAlchemy failure surfaces as DestinationExecutionError.
"""

import structlog
from sqlalchemy import URL, Connection, Engine, create_engine, inspect
from sqlalchemy.engine import RootTransaction
from sqlalchemy.exc import SQLAlchemyError

from docmigrate.errors import DestinationExecutionError


class SqlDestination:
    """Runs catalog checks and statements on one connection and transaction.

    Accepts a SQLAlchemy Connection via dependency injection so SQL Server
    in production and in-memory SQLite in tests share the same code path.
    """

    def __init__(
        self,
        connection: Connection,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._connection = connection
        self._logger = logger or structlog.get_logger(__name__)
        self._transaction: RootTransaction | None = None

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None and self._transaction.is_active

    def begin(self) -> None:
        """Open the run-wide transaction.

        Raises:
            RuntimeError: If a transaction is already open.
            DestinationExecutionError: If the engine refuses to begin.
        """
        if self.in_transaction:
            raise RuntimeError("A destination transaction is already open.")
        try:
            self._transaction = self._connection.begin()
        except SQLAlchemyError as e:
            raise DestinationExecutionError(f"Failed to begin transaction: {e}") from e
        self._logger.debug("transaction_started")

    def commit(self) -> None:
        if not self.in_transaction:
            raise RuntimeError("No destination transaction to commit.")
        try:
            self._transaction.commit()
        except SQLAlchemyError as e:
            raise DestinationExecutionError(f"Failed to commit transaction: {e}") from e
        finally:
            self._transaction = None
        self._logger.debug("transaction_committed")

    def rollback(self) -> None:
        """Roll back the open transaction. Does nothing when none is open."""
        if not self.in_transaction:
            return
        try:
            self._transaction.rollback()
        except SQLAlchemyError as e:
            raise DestinationExecutionError(f"Failed to roll back transaction: {e}") from e
        finally:
            self._transaction = None
        self._logger.debug("transaction_rolled_back")

    def table_exists(self, table_name: str) -> bool:
        """Check the destination catalog for a table in the default schema."""
        try:
            return inspect(self._connection).has_table(table_name)
        except SQLAlchemyError as e:
            raise DestinationExecutionError(f"Failed to check for table {table_name}: {e}") from e

    def execute(self, sql: str) -> None:
        """Execute one statement inside the current transaction.

        Raises:
            RuntimeError: If no transaction is open.
            DestinationExecutionError: If the engine rejects the statement.
        """
        if not self.in_transaction:
            raise RuntimeError("Destination statements must run inside the run transaction.")
        try:
            self._connection.exec_driver_sql(sql)
        except SQLAlchemyError as e:
            raise DestinationExecutionError(f"Failed to execute statement: {e}") from e
        self._logger.debug("statement_executed", sql=sql)


def build_engine_url(connection_string: str) -> str | URL:
    """Turn a configured connection string into something create_engine accepts.

    A value containing ``://`` is already a SQLAlchemy URL. Anything else is
    taken as an ODBC connection string for SQL Server via pyodbc.
    """
    if "://" in connection_string:
        return connection_string
    return URL.create("mssql+pyodbc", query={"odbc_connect": connection_string})


def create_destination_engine(connection_string: str) -> Engine:
    return create_engine(build_engine_url(connection_string))
