"""Source collaborator reading documents and index metadata from MongoDB."""

from typing import Any

import structlog
from bson.errors import BSONError
from pymongo.database import Database
from pymongo.errors import PyMongoError

from docmigrate.errors import SourceFetchError
from docmigrate.models.index import IndexDescriptor


class MongoSource:
    """Reads whole collections and their index descriptors.

    Accepts a pymongo Database via dependency injection. Driver and BSON
    decoding errors are wrapped in SourceFetchError so the run is rolled back and reported.
    """

    def __init__(
        self,
        database: Database,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._database = database
        self._logger = logger or structlog.get_logger(__name__)

    def fetch_all(self, collection_name: str) -> list[dict[str, Any]]:
        """Return every document of a collection in the order the server yields them."""
        try:
            documents = list(self._database[collection_name].find({}))
        except (PyMongoError, BSONError) as e:
            raise SourceFetchError(f"Failed to read collection {collection_name}: {e}") from e

        self._logger.info(
            "documents_fetched",
            collection=collection_name,
            document_count=len(documents),
        )
        return documents

    def list_indexes(self, collection_name: str) -> list[IndexDescriptor]:
        """Return the indexes defined on a collection, including the default ``_id_`` index."""
        try:
            index_infos = list(self._database[collection_name].list_indexes())
        except (PyMongoError, BSONError) as e:
            raise SourceFetchError(f"Failed to list indexes of {collection_name}: {e}") from e

        descriptors = [IndexDescriptor.from_index_info(info) for info in index_infos]
        self._logger.debug(
            "indexes_listed",
            collection=collection_name,
            indexes=[descriptor.name for descriptor in descriptors],
        )
        return descriptors
