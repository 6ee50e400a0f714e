"""Front matter extraction for YAML and JSON attribute syntaxes."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

from ..config import AttributeSyntax

FENCE = "---"
BOM = "\ufeff"


class FrontMatterError(ValueError):
    """Raised when a front matter block or metadata document is malformed."""


class AttributeCodec(ABC):
    """Split front matter from text and parse standalone metadata documents."""

    syntax: AttributeSyntax

    @property
    def sidecar_suffix(self) -> str:
        return self.syntax.sidecar_suffix

    def extract(self, raw: str) -> tuple[dict[str, Any], str]:
        """Return ``(attributes, body)`` for ``raw``.

        Text that does not open with a ``---`` fence, or whose opening fence
        is never closed, is returned untouched with empty attributes.
        """
        block, body = _split_front_matter(raw)
        if block is None:
            return {}, raw
        return self.parse(block), body

    def parse(self, text: str) -> dict[str, Any]:
        """Parse a whole metadata document into an attribute mapping."""
        if not text.strip():
            return {}
        data = self._load(text)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise FrontMatterError(
                f"Attributes must be a {self.syntax.value} mapping, got {type(data).__name__}."
            )
        return {str(key): value for key, value in data.items()}

    def sidecar_path(self, path: Path) -> Path:
        """Return the metadata file that sits next to ``path``."""
        stem = path.stem if path.suffix else path.name
        return path.with_name(f"{stem}.{self.sidecar_suffix}")

    @abstractmethod
    def _load(self, text: str) -> Any:
        ...


class YamlAttributeCodec(AttributeCodec):
    syntax = AttributeSyntax.YAML

    def _load(self, text: str) -> Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise FrontMatterError(f"Invalid YAML attributes: {exc}") from exc


class JsonAttributeCodec(AttributeCodec):
    syntax = AttributeSyntax.JSON

    def _load(self, text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise FrontMatterError(f"Invalid JSON attributes: {exc}") from exc


_CODECS: dict[AttributeSyntax, AttributeCodec] = {
    AttributeSyntax.YAML: YamlAttributeCodec(),
    AttributeSyntax.JSON: JsonAttributeCodec(),
}


def codec_for(syntax: AttributeSyntax | str) -> AttributeCodec:
    """Return the shared codec for ``syntax``."""
    return _CODECS[AttributeSyntax(syntax)]


def _split_front_matter(text: str) -> tuple[str | None, str]:
    lines = text.removeprefix(BOM).splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FENCE:
        return None, text

    for idx, line in enumerate(lines[1:], start=1):
        if line.rstrip() == FENCE:
            block = "".join(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            return block, body
    return None, text
