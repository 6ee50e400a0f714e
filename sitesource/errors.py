"""Exception hierarchy raised while loading site sources."""

from __future__ import annotations

import json


class SiteSourceError(Exception):
    """Base exception for all content ingestion failures."""


class ConfigurationError(SiteSourceError, ValueError):
    """An ingestion option is missing or has the wrong shape."""

    def __init__(self, message: str, *, option: str | None = None) -> None:
        super().__init__(message)
        self.option = option


class ContentError(SiteSourceError):
    """A single content file could not be read or parsed."""

    def __init__(self, message: str, *, id: str | None = None) -> None:
        self.raw_message = message
        self.id = id
        super().__init__(_with_id(message, id))


class FilesystemAccessError(SiteSourceError):
    """A scan root or path could not be accessed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class IngestionCancelled(SiteSourceError):
    """Raised when a load is cancelled between files."""


def _with_id(message: str, id: str | None) -> str:
    if not id:
        return message
    if message.endswith("."):
        return f"{message[:-1]} in {json.dumps(id)}."
    return f"{message} in {json.dumps(id)}"
