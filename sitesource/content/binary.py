"""Binary/text discrimination based on media types.

Classification is a coarse heuristic: the media type is guessed from the
file name only and the file's bytes are never inspected. A file counts as
text only when its primary media type is ``text``; anything else, including
files whose type cannot be guessed, is treated as binary.
"""

from __future__ import annotations

import mimetypes
from functools import lru_cache
from pathlib import Path

# Site source formats registered on top of the built-in mimetypes defaults.
SITE_TEXT_TYPES: dict[str, str] = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".mkd": "text/markdown",
    ".mdown": "text/markdown",
    ".twig": "text/x-twig",
    ".yml": "text/yaml",
    ".yaml": "text/yaml",
    ".textile": "text/x-textile",
    ".js": "text/javascript",
    ".csv": "text/csv",
}


@lru_cache(maxsize=1)
def _registry() -> mimetypes.MimeTypes:
    registry = mimetypes.MimeTypes()
    for extension, media_type in SITE_TEXT_TYPES.items():
        registry.add_type(media_type, extension)
    return registry


def guess_media_type(path: str | Path) -> str | None:
    """Return the media type for ``path`` or ``None`` when unknown."""
    media_type, _ = _registry().guess_type(Path(path).name, strict=False)
    return media_type


def is_binary(path: str | Path) -> bool:
    """Report whether ``path`` should be handled as opaque bytes."""
    media_type = guess_media_type(path)
    if not media_type:
        return True
    primary, _, _ = media_type.partition("/")
    return primary != "text"
