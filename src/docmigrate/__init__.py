"""docmigrate - migrate MongoDB collections into SQL Server with inferred schemas."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("docmigrate")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
