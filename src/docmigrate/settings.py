"""Configuration management.

Settings come from a JSON file and ``DOCMIGRATE_`` environment variables;
the environment wins. Nested values use ``__`` as delimiter, for example
``DOCMIGRATE_SQLSERVER__CONNECTION_STRING``.
"""

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from docmigrate.models.base import ensure_non_empty_text, ensure_unique
from docmigrate.models.enums import NestedDocumentPolicy, SchemaPolicyName

DEFAULT_CONFIG_PATH = Path("docmigrate.json")

_SECTION_NAMES = ("mongodb", "sqlserver")


class MongoSettings(BaseModel):
    connection_string: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("connection_string", "ConnectionString"),
    )
    database_name: str = Field(validation_alias=AliasChoices("database_name", "DatabaseName"))
    collections: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("collections", "Collections"),
    )

    @field_validator("database_name")
    @classmethod
    def _validate_database_name(cls, value: str) -> str:
        return ensure_non_empty_text(value, "database_name")

    @field_validator("collections")
    @classmethod
    def _validate_collections(cls, value: list[str]) -> list[str]:
        for name in value:
            ensure_non_empty_text(name, "collection name")
        return ensure_unique(value, "collections")


class SqlServerSettings(BaseModel):
    # SQLAlchemy URL, or a raw ODBC connection string for mssql+pyodbc.
    connection_string: str = Field(validation_alias=AliasChoices("connection_string", "ConnectionString"))

    @field_validator("connection_string")
    @classmethod
    def _validate_connection_string(cls, value: str) -> str:
        return ensure_non_empty_text(value, "connection_string")


class MigrationOptions(BaseModel):
    schema_policy: SchemaPolicyName = SchemaPolicyName.FIRST_SEEN
    nested_documents: NestedDocumentPolicy = NestedDocumentPolicy.KEEP
    sample_size: int | None = Field(default=None, gt=0)
    skip_unindexable_columns: bool = True


class Settings(BaseSettings):
    mongodb: MongoSettings
    sqlserver: SqlServerSettings
    migration: MigrationOptions = Field(default_factory=MigrationOptions)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DOCMIGRATE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @model_validator(mode="before")
    @classmethod
    def _merge_section_names(cls, data: Any) -> Any:
        """Accept section names in any case, such as appsettings.json style ``MongoDB``.

        Keys under the lower-case name win over keys under another spelling.
        """
        if not isinstance(data, dict):
            return data

        merged = dict(data)
        for key, value in data.items():
            name = key.lower() if isinstance(key, str) else key
            if name not in _SECTION_NAMES or key == name:
                continue
            del merged[key]
            current = merged.get(name)
            if isinstance(value, dict) and isinstance(current, dict):
                merged[name] = {**value, **current}
            elif current is None:
                merged[name] = value
        return merged

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return str(value).upper()


def load_settings(config_path: Path = DEFAULT_CONFIG_PATH, **overrides: Any) -> Settings:
    """Load settings from a JSON config file with environment overrides.

    Args:
        config_path: Path to the JSON config file.
        **overrides: Values taking precedence over both file and environment.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If the resulting settings are invalid.
    """
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    class FileSettings(Settings):
        model_config = SettingsConfigDict(json_file=config_path, json_file_encoding="utf-8")

    return FileSettings(**overrides)
