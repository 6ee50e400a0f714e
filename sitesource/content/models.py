"""Typed representations of ingested site files."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentRole(str, Enum):
    """Role a file plays in the site build."""

    ITEM = "item"
    LAYOUT = "layout"
    INCLUDE = "include"


class ContentEntity(BaseModel):
    """A single file loaded from one of the scan roots."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Path relative to the scan root; unique per role.")
    path: str = Field(description="Relative path used for filesystem operations.")
    source_path: str = Field(description="Absolute path of the file on disk.")
    role: ContentRole = Field(default=ContentRole.ITEM)
    is_binary: bool = Field(default=False)
    raw_content: str = Field(
        default="",
        description="Text as read from disk, undecodable bytes kept as surrogates; empty for binaries.",
    )
    body: str = Field(default="", description="Raw content without the front matter block.")
    attributes: Mapping[str, Any] = Field(
        default_factory=dict, description="Read-only front matter metadata."
    )

    @field_validator("id", "path")
    def _normalize_separators(cls, value: str) -> str:
        return value.replace("\\", "/")

    @field_validator("attributes", mode="before")
    def _ensure_mapping(cls, value: Any) -> Any:
        if value is None:
            return {}
        return value

    @field_validator("attributes")
    def _freeze_attributes(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))
