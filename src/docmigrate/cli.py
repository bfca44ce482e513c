"""Document store to SQL Server migration CLI.

Provides a migrate command that copies configured MongoDB collections into
SQL Server tables inside one transaction, and a schema command that previews
the inferred schema and CREATE TABLE statement for a single collection.
"""

import logging
import sys
from pathlib import Path

import structlog
import typer
from pydantic import ValidationError

from docmigrate.errors import MigrationError, UnsupportedTypeError
from docmigrate.services.ddl_generator import DDLGenerator
from docmigrate.services.factory import open_source, run_migration
from docmigrate.services.normalizer import DocumentNormalizer
from docmigrate.services.schema_inferencer import SchemaInferencer, policy_for
from docmigrate.services.type_mapper import is_mapped, map_type
from docmigrate.settings import DEFAULT_CONFIG_PATH, Settings, load_settings

SUCCESS_MESSAGE = "Data imported successfully!"


def configure_logging(log_level: str = "INFO") -> None:
    level = logging.getLevelNamesMapping().get(log_level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=lambda name: structlog.PrintLogger(file=sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        cache_logger_on_first_use=False,
    )


configure_logging()

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="docmigrate",
    help="""Migrate MongoDB collections into SQL Server tables with inferred schemas.

Examples:

  # Migrate every collection listed in docmigrate.json
  uv run docmigrate migrate

  # Use another config file
  uv run docmigrate migrate --config ./appsettings.json

  # Preview the inferred schema of one collection
  uv run docmigrate schema customers""",
    rich_markup_mode="markdown",
)

config_option = typer.Option(
    DEFAULT_CONFIG_PATH,
    "--config",
    "-c",
    help="JSON config file (environment variables prefixed DOCMIGRATE_ override it)",
)


def _load_settings_or_exit(config: Path) -> Settings:
    try:
        settings = load_settings(config)
    except FileNotFoundError as e:
        logger.error("config_not_found", config=str(config))
        typer.echo(str(e))
        raise typer.Exit(1) from e
    except ValidationError as e:
        logger.error("config_invalid", config=str(config), error_count=e.error_count())
        typer.echo(f"Invalid configuration in {config}:\n{e}")
        raise typer.Exit(1) from e

    configure_logging(settings.log_level)
    return settings


@app.command()
def migrate(config: Path = config_option) -> None:
    """Copy all configured collections into SQL Server in a single transaction."""
    settings = _load_settings_or_exit(config)

    result = run_migration(settings)

    if not result.success:
        typer.echo(f"An error occurred: {result.error}")
        raise typer.Exit(1)

    typer.echo(SUCCESS_MESSAGE)
    typer.echo(
        f"Migrated {result.collections_processed} collections "
        f"({result.documents_inserted} documents, {result.tables_created} tables created, "
        f"{result.indexes_created} indexes created)"
    )
    if result.fields_skipped:
        typer.echo(f"Skipped {result.fields_skipped} fields missing from inferred schemas")


@app.command()
def schema(
    collection: str = typer.Argument(
        ...,
        help="Collection whose schema should be inferred",
    ),
    config: Path = config_option,
) -> None:
    """Show the inferred schema and CREATE TABLE statement for a collection."""
    settings = _load_settings_or_exit(config)
    options = settings.migration

    normalizer = DocumentNormalizer(nested_documents=options.nested_documents)
    inferencer = SchemaInferencer(policy=policy_for(options.schema_policy), sample_size=options.sample_size)

    try:
        with open_source(settings) as source:
            documents = [normalizer.normalize(doc) for doc in source.fetch_all(collection)]
    except MigrationError as e:
        typer.echo(f"An error occurred: {e}")
        raise typer.Exit(1) from e

    inferred = inferencer.infer_schema(documents)
    if inferred.is_empty():
        typer.echo(f"Collection {collection} has no documents.")
        return

    for field, kind in inferred.items():
        column_type = str(map_type(kind)) if is_mapped(kind) else "unsupported"
        typer.echo(f"{field}: {kind} -> {column_type}")

    try:
        typer.echo(DDLGenerator.build_create_table(collection, inferred))
    except UnsupportedTypeError as e:
        typer.echo(f"An error occurred: {e}")
        raise typer.Exit(1) from e


@app.command()
def version() -> None:
    """Show version information."""
    from docmigrate import __version__

    typer.echo(f"docmigrate {__version__}")
