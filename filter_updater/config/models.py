"""Pydantic models used across the filter updater configuration flow."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class FilterSource(BaseModel):
    """A configured filter list; the persisted subset of a registry entry."""

    id: int = Field(default=0, ge=0)
    enabled: bool = True
    name: str
    url: str

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Filter name cannot be empty")
        return value

    @field_validator("url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Filter URL must be http(s): {value}")
        return value


class UpdaterConfig(BaseModel):
    """Controls for the refresh loop and on-disk layout."""

    enabled: bool = True
    filter_dir: Path = Field(default=Path("filters"))
    file_extension: str = "txt"
    update_interval_hours: float = Field(default=24, gt=0)
    http_timeout: float = Field(default=30.0, gt=0)
    filters: list[FilterSource] = Field(default_factory=list)

    @field_validator("filter_dir", mode="before")
    @classmethod
    def _coerce_dir(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("file_extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        value = value.strip().lstrip(".")
        if not value:
            raise ValueError("file_extension cannot be empty")
        return value

    @model_validator(mode="after")
    def _validate_unique_filters(self) -> "UpdaterConfig":
        names: set[str] = set()
        urls: set[str] = set()
        for source in self.filters:
            if source.name in names or source.url in urls:
                raise ValueError(f"Duplicate filter name or URL: {source.name} ({source.url})")
            names.add(source.name)
            urls.add(source.url)
        return self

    @property
    def update_interval(self) -> timedelta:
        return timedelta(hours=self.update_interval_hours)

    def resolved_filter_dir(self, base_dir: Path) -> Path:
        """Return filter directory relative to the data directory."""

        if not self.filter_dir.is_absolute():
            return (base_dir / self.filter_dir).resolve()
        return self.filter_dir


__all__ = ["FilterSource", "UpdaterConfig"]
