"""Factory functions for creating and wiring migration services.

Provides the production entry point that opens MongoDB and SQL Server
connections from settings, and a wiring helper that accepts any source and
destination so tests can run the pipeline against fakes or SQLite.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from pymongo import MongoClient
from sqlalchemy.exc import SQLAlchemyError

from docmigrate.errors import DestinationExecutionError, MigrationError
from docmigrate.models.results import MigrationResult
from docmigrate.services.ddl_generator import DDLGenerator
from docmigrate.services.destination import SqlDestination, create_destination_engine
from docmigrate.services.index_synthesizer import IndexSynthesizer
from docmigrate.services.insert_builder import InsertStatementBuilder
from docmigrate.services.normalizer import DocumentNormalizer
from docmigrate.services.orchestrator import (
    DocumentSource,
    MigrationOrchestrator,
    TransactionalDestination,
)
from docmigrate.services.schema_inferencer import SchemaInferencer, policy_for
from docmigrate.services.source import MongoSource
from docmigrate.settings import MigrationOptions, Settings


def create_orchestrator(
    source: DocumentSource,
    destination: TransactionalDestination,
    options: MigrationOptions | None = None,
) -> MigrationOrchestrator:
    """Wire a MigrationOrchestrator around the given collaborators.

    Args:
        source: Document source (MongoSource or a test fake).
        destination: Transactional destination (SqlDestination or a test fake).
        options: Pipeline options; defaults are used when omitted.

    Returns:
        Configured MigrationOrchestrator.
    """
    options = options or MigrationOptions()
    logger = structlog.get_logger(__name__)

    return MigrationOrchestrator(
        source=source,
        destination=destination,
        normalizer=DocumentNormalizer(nested_documents=options.nested_documents),
        inferencer=SchemaInferencer(
            policy=policy_for(options.schema_policy),
            sample_size=options.sample_size,
            logger=logger,
        ),
        ddl_generator=DDLGenerator(destination=destination, logger=logger),
        index_synthesizer=IndexSynthesizer(
            destination=destination,
            skip_unindexable_columns=options.skip_unindexable_columns,
            logger=logger,
        ),
        insert_builder=InsertStatementBuilder(logger=logger),
        logger=logger,
    )


@contextmanager
def open_source(settings: Settings) -> Iterator[MongoSource]:
    """Open a MongoSource for the configured database and close the client afterwards."""
    client: MongoClient = MongoClient(settings.mongodb.connection_string)
    try:
        yield MongoSource(
            database=client[settings.mongodb.database_name],
            logger=structlog.get_logger(__name__),
        )
    finally:
        client.close()


@contextmanager
def open_destination(settings: Settings) -> Iterator[SqlDestination]:
    """Open a SqlDestination on a fresh connection and dispose of the engine afterwards.

    Raises:
        DestinationExecutionError: If the connection string is rejected or the
            connection cannot be established.
    """
    try:
        engine = create_destination_engine(settings.sqlserver.connection_string)
    except SQLAlchemyError as e:
        raise DestinationExecutionError(f"Invalid destination connection string: {e}") from e
    try:
        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            raise DestinationExecutionError(f"Failed to connect to destination: {e}") from e
        with connection:
            yield SqlDestination(connection=connection, logger=structlog.get_logger(__name__))
    finally:
        engine.dispose()


def run_migration(settings: Settings) -> MigrationResult:
    """Run one migration for the configured collections.

    Connections are closed whether the run commits or rolls back.

    Returns:
        MigrationResult; ``success`` is False when the run was rolled back or
        the destination could not be reached.
    """
    try:
        with open_source(settings) as source, open_destination(settings) as destination:
            orchestrator = create_orchestrator(source, destination, settings.migration)
            return orchestrator.run_migration(settings.mongodb.collections)
    except MigrationError as e:
        return MigrationResult(success=False, error=str(e))
