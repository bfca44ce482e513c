"""Migration orchestrator that runs every collection inside one transaction.

Coordinates document fetching, normalization, schema inference, table and
index creation, and row insertion. The run commits once at the end; any
failure rolls back everything done so far, across all collections.
"""

from collections.abc import Sequence
from typing import Any, Protocol

import structlog
from pydantic import BaseModel, Field

from docmigrate.errors import MigrationError
from docmigrate.models.index import IndexDescriptor
from docmigrate.models.results import MigrationResult
from docmigrate.services.ddl_generator import DDLGenerator
from docmigrate.services.index_synthesizer import IndexSynthesizer
from docmigrate.services.insert_builder import InsertStatementBuilder
from docmigrate.services.normalizer import DocumentNormalizer
from docmigrate.services.schema_inferencer import SchemaInferencer


class DocumentSource(Protocol):
    def fetch_all(self, collection_name: str) -> list[dict[str, Any]]: ...

    def list_indexes(self, collection_name: str) -> list[IndexDescriptor]: ...


class TransactionalDestination(Protocol):
    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def execute(self, sql: str) -> None: ...


class CollectionStats(BaseModel):
    """Per-collection counters accumulated during a run."""

    collection: str
    table_created: bool = False
    indexes_created: int = Field(default=0, ge=0)
    documents_inserted: int = Field(default=0, ge=0)
    fields_skipped: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


class MigrationOrchestrator:
    """Sequences the migration pipeline for a list of collections.

    Owns the run-wide destination transaction: no other component begins,
    commits or rolls it back. All dependencies are injected via constructor
    for testability.
    """

    def __init__(
        self,
        source: DocumentSource,
        destination: TransactionalDestination,
        normalizer: DocumentNormalizer,
        inferencer: SchemaInferencer,
        ddl_generator: DDLGenerator,
        index_synthesizer: IndexSynthesizer,
        insert_builder: InsertStatementBuilder,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._source = source
        self._destination = destination
        self._normalizer = normalizer
        self._inferencer = inferencer
        self._ddl_generator = ddl_generator
        self._index_synthesizer = index_synthesizer
        self._insert_builder = insert_builder
        self._logger = logger or structlog.get_logger(__name__)

    def run_migration(self, collections: Sequence[str]) -> MigrationResult:
        """Migrate the given collections, in order, as a single unit.

        Args:
            collections: Collection names; each becomes a table of the same name.

        Returns:
            MigrationResult with statistics on success, or with ``error`` set
            after a rollback.

        Raises:
            Exception: Errors outside the MigrationError hierarchy are
                re-raised after the transaction has been rolled back.
        """
        self._logger.info("migration_started", collections=list(collections))

        stats: list[CollectionStats] = []
        try:
            self._destination.begin()
            for collection_name in collections:
                stats.append(self._migrate_collection(collection_name))
            self._destination.commit()
        except MigrationError as e:
            self._rollback(e)
            return MigrationResult(success=False, collections_processed=len(stats), error=str(e))
        except Exception as e:
            self._rollback(e)
            raise

        result = MigrationResult(
            success=True,
            collections_processed=len(stats),
            tables_created=sum(1 for s in stats if s.table_created),
            indexes_created=sum(s.indexes_created for s in stats),
            documents_inserted=sum(s.documents_inserted for s in stats),
            fields_skipped=sum(s.fields_skipped for s in stats),
        )
        self._logger.info(
            "migration_committed",
            collections_processed=result.collections_processed,
            tables_created=result.tables_created,
            indexes_created=result.indexes_created,
            documents_inserted=result.documents_inserted,
            fields_skipped=result.fields_skipped,
        )
        return result

    def _migrate_collection(self, collection_name: str) -> CollectionStats:
        """Run the pipeline for one collection inside the open transaction."""
        self._logger.info("collection_started", collection=collection_name)

        documents = [self._normalizer.normalize(doc) for doc in self._source.fetch_all(collection_name)]
        schema = self._inferencer.infer_schema(documents)

        if schema.is_empty():
            self._logger.warning("collection_empty", collection=collection_name)
            return CollectionStats(collection=collection_name)

        table_created = self._ddl_generator.ensure_table(schema, collection_name)

        source_indexes = self._source.list_indexes(collection_name)
        index_statements = self._index_synthesizer.mirror_indexes(schema, collection_name, source_indexes)

        fields_skipped = 0
        for document in documents:
            statement = self._insert_builder.build_insert(collection_name, schema, document)
            self._destination.execute(statement.sql)
            fields_skipped += len(statement.skipped_fields)

        collection_stats = CollectionStats(
            collection=collection_name,
            table_created=table_created,
            indexes_created=len(index_statements),
            documents_inserted=len(documents),
            fields_skipped=fields_skipped,
        )
        self._logger.info(
            "collection_completed",
            collection=collection_name,
            table_created=table_created,
            indexes_created=collection_stats.indexes_created,
            documents_inserted=collection_stats.documents_inserted,
        )
        return collection_stats

    def _rollback(self, error: Exception) -> None:
        self._logger.error(
            "migration_rolled_back",
            error=str(error),
            error_type=type(error).__name__,
        )
        self._destination.rollback()
