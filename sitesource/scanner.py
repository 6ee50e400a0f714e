"""Directory scanning with built-in and user-supplied path filters."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Sequence

from .errors import FilesystemAccessError

logger = logging.getLogger(__name__)

INTERNAL_PREFIX = "_"
HIDDEN_PREFIX = "."
SITE_CONFIG_NAME = "config.yml"
SITE_CONFIG_VARIANT = "config_*.yml"
GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True, slots=True)
class ScannedFile:
    """A discovered file and its path relative to the root it was found in."""

    path: Path
    relative: str


@dataclass(frozen=True, slots=True)
class PathFilter:
    """Decide which relative paths survive a directory scan.

    With ``reserved`` enabled, internal ``_`` entries, the site config files
    and sidecar metadata files are dropped. ``exclude`` entries remove a
    path when they name it, name one of its parent directories, or match it
    as a glob pattern.
    """

    reserved: bool = True
    sidecar_suffix: str | None = None
    exclude: tuple[str, ...] = ()

    @classmethod
    def files_only(cls) -> "PathFilter":
        return cls(reserved=False)

    def accepts(self, relative: str) -> bool:
        if self.reserved and self.is_reserved(relative):
            return False
        return not self.is_excluded(relative)

    def is_reserved(self, relative: str) -> bool:
        parts = PurePosixPath(relative).parts
        if not parts:
            return False
        if any(part.startswith(INTERNAL_PREFIX) for part in parts):
            return True
        name = parts[-1]
        if relative == SITE_CONFIG_NAME or fnmatchcase(name, SITE_CONFIG_VARIANT):
            return True
        if self.sidecar_suffix and fnmatchcase(name, f"*.{self.sidecar_suffix}"):
            return True
        return False

    def is_excluded(self, relative: str) -> bool:
        return any(_matches(pattern, relative) for pattern in self.exclude)


class FileScanner:
    """Enumerate files under a base root, extra roots and included entries."""

    def __init__(
        self,
        root: Path,
        *,
        extra_roots: Sequence[Path] = (),
        include: Sequence[str] = (),
        path_filter: PathFilter | None = None,
    ) -> None:
        self._root = Path(root)
        self._extra_roots = [Path(item) for item in extra_roots]
        self._include = list(include)
        self._filter = path_filter or PathFilter.files_only()

    def scan(self) -> list[ScannedFile]:
        """Return matching files in scan order without duplicates.

        Directory roots are scanned first (base root, extra roots, then
        included directories) and explicitly included files come last. An
        explicitly included file is always returned, whatever the filter says.
        """
        roots = [self._root, *self._extra_roots]
        explicit: list[ScannedFile] = []
        for entry in self._include:
            candidate = self._resolve(entry)
            if candidate.is_dir():
                roots.append(candidate)
            elif candidate.is_file():
                explicit.append(ScannedFile(path=candidate, relative=candidate.name))
            else:
                logger.warning("Include entry '%s' not found under %s; skipping.", entry, self._root)

        results: list[ScannedFile] = []
        seen: set[Path] = set()
        for scanned in self._iter_roots(roots):
            if not self._filter.accepts(scanned.relative):
                continue
            _append_unique(results, seen, scanned)
        for scanned in explicit:
            _append_unique(results, seen, scanned)
        return results

    def _iter_roots(self, roots: Iterable[Path]) -> Iterator[ScannedFile]:
        for root in roots:
            yield from iter_files(root)

    def _resolve(self, entry: str) -> Path:
        candidate = Path(entry)
        if candidate.is_absolute():
            return candidate
        return self._root / candidate


def iter_files(root: Path) -> Iterator[ScannedFile]:
    """Yield regular files under ``root`` in sorted, directory-first order.

    Hidden entries are never descended into or returned.
    """
    root = Path(root)
    if not root.exists():
        raise FilesystemAccessError(f"Directory not found: {root}", path=str(root))
    if not root.is_dir():
        raise FilesystemAccessError(f"Not a directory: {root}", path=str(root))

    def _raise(exc: OSError) -> None:
        failed = exc.filename or root
        raise FilesystemAccessError(f"Cannot read directory {failed}: {exc.strerror}", path=str(failed)) from exc

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith(HIDDEN_PREFIX))
        directory = Path(dirpath)
        for name in sorted(filenames):
            if name.startswith(HIDDEN_PREFIX):
                continue
            path = directory / name
            if not path.is_file():
                continue
            yield ScannedFile(path=path, relative=path.relative_to(root).as_posix())


def _append_unique(results: list[ScannedFile], seen: set[Path], scanned: ScannedFile) -> None:
    key = scanned.path.resolve()
    if key in seen:
        return
    seen.add(key)
    results.append(scanned)


def _matches(pattern: str, relative: str) -> bool:
    normalized = pattern.strip().replace("\\", "/")
    if not normalized:
        return False
    normalized = str(PurePosixPath(normalized))
    if normalized == ".":
        return False
    if relative == normalized or relative.startswith(f"{normalized}/"):
        return True
    if GLOB_CHARS.intersection(normalized):
        name = PurePosixPath(relative).name
        return fnmatchcase(relative, normalized) or fnmatchcase(name, normalized)
    return False
