"""Load content items, layouts and includes from the configured roots."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Mapping

from .config import SourceConfig, validate_options
from .content import (
    AttributeCodec,
    ContentEntity,
    ContentRole,
    FrontMatterError,
    codec_for,
    is_binary,
)
from .errors import ContentError, IngestionCancelled
from .registry import ContentRegistry
from .scanner import FileScanner, PathFilter, ScannedFile

logger = logging.getLogger(__name__)


class ContentIngestor:
    """Validate ingestion options and build a :class:`ContentRegistry`.

    Options are checked when the ingestor is created, so a bad configuration
    fails before the filesystem is touched. Every relative root is joined
    onto ``source_root``; a relative ``source_root`` is anchored to
    ``base_dir`` (the current directory by default). The process working
    directory is never changed.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | SourceConfig,
        *,
        base_dir: str | Path | None = None,
    ) -> None:
        config = options if isinstance(options, SourceConfig) else validate_options(options).unwrap()
        self._config = config
        self._codec: AttributeCodec = codec_for(config.attribute_syntax)
        anchor = Path(base_dir) if base_dir is not None else Path.cwd()
        self._source_root = _anchor(config.source_root, anchor)
        self._registry: ContentRegistry | None = None

    @property
    def config(self) -> SourceConfig:
        return self._config

    @property
    def source_root(self) -> Path:
        return self._source_root

    def load(self, cancel: threading.Event | None = None) -> ContentRegistry:
        """Run the item, layout and include phases and return a sealed registry.

        Any failure aborts the whole load; the previous registry (if any)
        stays in place and no partial result is exposed.
        """
        registry = ContentRegistry()
        self._load_items(registry, cancel)
        self._load_layouts(registry, cancel)
        self._load_includes(registry, cancel)
        registry.seal()
        self._registry = registry
        logger.info(
            "Loaded %d item(s), %d layout(s), %d include(s) from %s",
            len(registry.items),
            len(registry.layouts),
            len(registry.includes),
            self._source_root,
        )
        return registry

    @property
    def registry(self) -> ContentRegistry:
        if self._registry is None:
            raise RuntimeError("Content has not been loaded yet; call load() first.")
        return self._registry

    def get_items(self) -> Mapping[str, ContentEntity]:
        return self.registry.items

    def get_layouts(self) -> Mapping[str, ContentEntity]:
        return self.registry.layouts

    def get_includes(self) -> Mapping[str, ContentEntity]:
        return self.registry.includes

    def _load_items(self, registry: ContentRegistry, cancel: threading.Event | None) -> None:
        config = self._config
        extra_roots = [self._resolve(config.posts_root)] if config.posts_root is not None else []
        scanner = FileScanner(
            self._source_root,
            extra_roots=extra_roots,
            include=config.include,
            path_filter=PathFilter(
                reserved=True,
                sidecar_suffix=self._codec.sidecar_suffix,
                exclude=config.exclude,
            ),
        )
        self._ingest(scanner.scan(), ContentRole.ITEM, registry, cancel, with_attributes=True)

    def _load_layouts(self, registry: ContentRegistry, cancel: threading.Event | None) -> None:
        if self._config.layouts_root is None:
            return
        scanner = FileScanner(self._resolve(self._config.layouts_root))
        self._ingest(scanner.scan(), ContentRole.LAYOUT, registry, cancel, with_attributes=True)

    def _load_includes(self, registry: ContentRegistry, cancel: threading.Event | None) -> None:
        if self._config.includes_root is None:
            return
        scanner = FileScanner(self._resolve(self._config.includes_root))
        self._ingest(scanner.scan(), ContentRole.INCLUDE, registry, cancel, with_attributes=False)

    def _ingest(
        self,
        files: list[ScannedFile],
        role: ContentRole,
        registry: ContentRegistry,
        cancel: threading.Event | None,
        *,
        with_attributes: bool,
    ) -> None:
        logger.debug("Ingesting %d %s file(s)", len(files), role.value)
        for scanned in files:
            if cancel is not None and cancel.is_set():
                raise IngestionCancelled(f"Ingestion cancelled before '{scanned.relative}'.")
            registry.insert(self._build_entity(scanned, role, with_attributes=with_attributes))

    def _build_entity(self, scanned: ScannedFile, role: ContentRole, *, with_attributes: bool) -> ContentEntity:
        entity_id = scanned.relative
        binary = is_binary(scanned.path)
        raw = "" if binary else _read_text(scanned.path, entity_id)

        attributes: dict[str, Any] = {}
        body = raw
        if with_attributes and not binary:
            attributes, body = self._extract_attributes(scanned.path, raw, entity_id)

        return ContentEntity(
            id=entity_id,
            path=entity_id,
            source_path=str(scanned.path),
            role=role,
            is_binary=binary,
            raw_content=raw,
            body=body,
            attributes=attributes,
        )

    def _extract_attributes(self, path: Path, raw: str, entity_id: str) -> tuple[dict[str, Any], str]:
        try:
            attributes, body = self._codec.extract(raw)
        except FrontMatterError as exc:
            raise ContentError(f"Invalid front matter: {exc}", id=entity_id) from exc
        if attributes:
            return attributes, body

        sidecar = self._codec.sidecar_path(path)
        if not sidecar.is_file():
            return attributes, body
        text = _read_text(sidecar, entity_id)
        try:
            return self._codec.parse(text), body
        except FrontMatterError as exc:
            raise ContentError(f"Invalid attributes file {sidecar.name}: {exc}", id=entity_id) from exc

    def _resolve(self, value: Path) -> Path:
        return _anchor(value, self._source_root)


def load_content(
    options: Mapping[str, Any] | SourceConfig,
    *,
    base_dir: str | Path | None = None,
) -> ContentRegistry:
    """Validate ``options`` and load a fresh registry in one call."""
    return ContentIngestor(options, base_dir=base_dir).load()


def _anchor(value: Path, base: Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def _read_text(path: Path, entity_id: str) -> str:
    try:
        with path.open("r", encoding="utf-8", errors="surrogateescape", newline="") as handle:
            return handle.read()
    except OSError as exc:
        raise ContentError(f"Cannot read {path}: {exc.strerror or exc}", id=entity_id) from exc
