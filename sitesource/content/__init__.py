"""Content entity models and per-file parsing helpers."""

from .binary import guess_media_type, is_binary
from .frontmatter import (
    AttributeCodec,
    FrontMatterError,
    JsonAttributeCodec,
    YamlAttributeCodec,
    codec_for,
)
from .models import ContentEntity, ContentRole

__all__ = [
    "AttributeCodec",
    "ContentEntity",
    "ContentRole",
    "FrontMatterError",
    "JsonAttributeCodec",
    "YamlAttributeCodec",
    "codec_for",
    "guess_media_type",
    "is_binary",
]
