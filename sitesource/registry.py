"""Keyed collections of ingested entities, one per content role."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterator, Mapping

from .content import ContentEntity, ContentRole

logger = logging.getLogger(__name__)


class ContentRegistry:
    """Write-once store of entities keyed by relative path within each role.

    Inserting an entity whose id already exists in its role replaces the
    earlier one (last write wins). Once :meth:`seal` is called the registry
    rejects further inserts.
    """

    def __init__(self) -> None:
        self._buckets: dict[ContentRole, dict[str, ContentEntity]] = {role: {} for role in ContentRole}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def insert(self, entity: ContentEntity) -> None:
        if self._sealed:
            raise RuntimeError("Content registry is sealed; start a new load to ingest again.")
        bucket = self._buckets[entity.role]
        previous = bucket.get(entity.id)
        if previous is not None:
            logger.warning(
                "Duplicate %s '%s': %s replaces %s.",
                entity.role.value,
                entity.id,
                entity.source_path,
                previous.source_path,
            )
        bucket[entity.id] = entity

    def seal(self) -> None:
        self._sealed = True

    def get(self, role: ContentRole | str) -> Mapping[str, ContentEntity]:
        return MappingProxyType(self._buckets[ContentRole(role)])

    @property
    def items(self) -> Mapping[str, ContentEntity]:
        return self.get(ContentRole.ITEM)

    @property
    def layouts(self) -> Mapping[str, ContentEntity]:
        return self.get(ContentRole.LAYOUT)

    @property
    def includes(self) -> Mapping[str, ContentEntity]:
        return self.get(ContentRole.INCLUDE)

    def __iter__(self) -> Iterator[ContentEntity]:
        for role in ContentRole:
            yield from self._buckets[role].values()

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())
