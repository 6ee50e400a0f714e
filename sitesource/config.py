"""Options accepted by the content ingestor and the YAML config loader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

CONFIG_FILENAME = "sitesource.yml"

# Used when a project directory is given without a config file.
DEFAULT_LAYOUT: dict[str, Any] = {
    "source_root": ".",
    "posts_root": "_posts",
    "layouts_root": "_layouts",
    "includes_root": "_includes",
}


class AttributeSyntax(str, Enum):
    """Serialization used for front matter and sidecar metadata files."""

    YAML = "yaml"
    JSON = "json"

    @property
    def sidecar_suffix(self) -> str:
        extension = "yml" if self is AttributeSyntax.YAML else "json"
        return f"meta.{extension}"


class SourceConfig(BaseModel):
    """Validated ingestion options."""

    model_config = ConfigDict(extra="ignore")

    source_root: Path = Field(description="Base directory for content items.")
    posts_root: Path | None = Field(
        default=None,
        description="Additional root merged into the content item scan.",
    )
    layouts_root: Path | None = Field(default=None, description="Root directory for layouts.")
    includes_root: Path | None = Field(default=None, description="Root directory for includes.")
    include: tuple[str, ...] = Field(
        default=(),
        description="Files or directories force-included in the content item scan.",
    )
    exclude: tuple[str, ...] = Field(
        default=(),
        description="Path patterns removed from the content item scan.",
    )
    attribute_syntax: AttributeSyntax = Field(default=AttributeSyntax.YAML)

    @field_validator("source_root", mode="before")
    def _ensure_required_path(cls, value: Any) -> Path:
        if not isinstance(value, (str, os.PathLike)):
            raise ValueError("expected a string path")
        return Path(value)

    @field_validator("posts_root", "layouts_root", "includes_root", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None:
            return None
        if not isinstance(value, (str, os.PathLike)):
            raise ValueError("expected a string path")
        return Path(value)

    @field_validator("include", "exclude", mode="before")
    def _ensure_string_sequence(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if not isinstance(value, (list, tuple)):
            raise ValueError("expected a list of strings")
        for entry in value:
            if not isinstance(entry, str):
                raise ValueError(f"expected a list of strings, got item {entry!r}")
        return tuple(value)

    @field_validator("attribute_syntax", mode="before")
    def _ensure_syntax(cls, value: Any) -> AttributeSyntax:
        if value is None:
            return AttributeSyntax.YAML
        if isinstance(value, AttributeSyntax):
            return value
        if isinstance(value, str):
            for syntax in AttributeSyntax:
                if syntax.value == value:
                    return syntax
        raise ValueError(f'unsupported value "{value}", expected "yaml" or "json"')

    @property
    def sidecar_suffix(self) -> str:
        return self.attribute_syntax.sidecar_suffix


@dataclass(frozen=True, slots=True)
class OptionCheck:
    """Outcome of validating raw ingestion options."""

    config: SourceConfig | None = None
    error: ConfigurationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> SourceConfig:
        if self.error is not None:
            raise self.error
        assert self.config is not None
        return self.config


def validate_options(options: Mapping[str, Any]) -> OptionCheck:
    """Validate raw options, stopping at the first invalid one."""
    if not isinstance(options, Mapping):
        return OptionCheck(error=ConfigurationError("Ingestion options must be a mapping."))
    for key in options:
        if not isinstance(key, str):
            return OptionCheck(error=ConfigurationError(f"Option names must be strings, got {key!r}."))
    try:
        config = SourceConfig.model_validate(dict(options))
    except ValidationError as exc:
        return OptionCheck(error=_configuration_error(exc))
    return OptionCheck(config=config)


def _configuration_error(exc: ValidationError) -> ConfigurationError:
    first = exc.errors()[0]
    location = first.get("loc") or ()
    option = str(location[0]) if location else None
    if first.get("type") == "missing":
        message = f'Missing required option "{option}".'
    else:
        reason = str(first.get("msg", "invalid value")).removeprefix("Value error, ")
        message = f'Invalid option "{option}": {reason}.'
    error = ConfigurationError(message, option=option)
    error.__cause__ = exc
    return error


def load_config(path: str | Path) -> SourceConfig:
    """Load ingestion options from a YAML file.

    ``path`` may point at the config file itself or at a project directory.
    A directory without a ``sitesource.yml`` falls back to the conventional
    ``_posts``/``_layouts``/``_includes`` layout rooted at that directory.
    Relative ``source_root`` values are anchored to the directory holding
    the config; the remaining roots stay relative to ``source_root``.
    """
    candidate = Path(path)
    data: Any
    if candidate.is_dir():
        config_file = candidate / CONFIG_FILENAME
        data = _read_yaml(config_file) if config_file.exists() else dict(DEFAULT_LAYOUT)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration in {candidate} must define a mapping.")

    cfg = validate_options(data).unwrap()
    if not cfg.source_root.is_absolute():
        cfg.source_root = (base_dir / cfg.source_root).resolve()
    return cfg


def _read_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Configuration file {path} is not valid YAML: {exc}") from exc
