"""Content ingestion for static sites: items, layouts and includes."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .config import AttributeSyntax, SourceConfig, load_config, validate_options
from .content import ContentEntity, ContentRole
from .errors import (
    ConfigurationError,
    ContentError,
    FilesystemAccessError,
    IngestionCancelled,
    SiteSourceError,
)
from .ingest import ContentIngestor, load_content
from .registry import ContentRegistry

__all__ = [
    "AttributeSyntax",
    "ConfigurationError",
    "ContentEntity",
    "ContentError",
    "ContentIngestor",
    "ContentRegistry",
    "ContentRole",
    "FilesystemAccessError",
    "IngestionCancelled",
    "SiteSourceError",
    "SourceConfig",
    "__version__",
    "load_config",
    "load_content",
    "validate_options",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("sitesource")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
