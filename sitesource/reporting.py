"""Scan summaries for sitesource."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from .content import ContentEntity, ContentRole
from .registry import ContentRegistry


class RoleStats(BaseModel):
    total: int
    binary: int
    with_attributes: int


class ScanReport(BaseModel):
    source_root: str
    generated_at: datetime
    duration_seconds: float
    items: RoleStats
    layouts: RoleStats
    includes: RoleStats
    ids: dict[str, list[str]] = Field(default_factory=dict)


def build_role_stats(entities: list[ContentEntity]) -> RoleStats:
    binary = sum(1 for entity in entities if entity.is_binary)
    with_attributes = sum(1 for entity in entities if entity.attributes)
    return RoleStats(total=len(entities), binary=binary, with_attributes=with_attributes)


def build_scan_report(
    registry: ContentRegistry,
    *,
    source_root: Path,
    duration_seconds: float,
) -> ScanReport:
    stats: dict[ContentRole, RoleStats] = {}
    ids: dict[str, list[str]] = {}
    for role in ContentRole:
        bucket = registry.get(role)
        stats[role] = build_role_stats(list(bucket.values()))
        ids[role.value] = sorted(bucket)

    return ScanReport(
        source_root=str(source_root),
        generated_at=datetime.now(timezone.utc),
        duration_seconds=duration_seconds,
        items=stats[ContentRole.ITEM],
        layouts=stats[ContentRole.LAYOUT],
        includes=stats[ContentRole.INCLUDE],
        ids=ids,
    )


def write_report(report: ScanReport, target: Path) -> Path:
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(report.model_dump(mode="json"), handle, ensure_ascii=False, indent=2)
    return target
