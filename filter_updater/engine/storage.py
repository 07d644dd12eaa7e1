"""On-disk layout for canonical and staged filter files."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

from ..errors import FilterIOError


class FilterStorage:
    """Map filter ids to ``<dir>/<id>.<ext>`` and move files between them.

    A file only ever appears under an id-derived name fully written: writes go
    to a ``.tmp`` sibling first and are renamed into place.
    """

    def __init__(self, directory: Path, extension: str = "txt") -> None:
        self.directory = directory
        self.extension = extension
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, filter_id: int) -> Path:
        return self.directory / f"{filter_id}.{self.extension}"

    def write(self, filter_id: int, body: bytes) -> Path:
        path = self.path_for(filter_id)
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_bytes(body)
            os.replace(tmp, path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise FilterIOError(f"Couldn't write filter file {path}: {exc}") from exc
        return path

    def read(self, filter_id: int) -> bytes:
        path = self.path_for(filter_id)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FilterIOError(f"Couldn't read filter file {path}: {exc}") from exc

    def modified_at(self, filter_id: int) -> datetime:
        path = self.path_for(filter_id)
        try:
            stat = path.stat()
        except OSError as exc:
            raise FilterIOError(f"Couldn't stat filter file {path}: {exc}") from exc
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    def promote(self, staged_id: int, canonical_id: int) -> Path:
        """Rename the staged file over the canonical one in a single step.

        Safe to call again after a failure: nothing is touched unless the
        rename itself succeeds.
        """

        staged = self.path_for(staged_id)
        canonical = self.path_for(canonical_id)
        try:
            os.replace(staged, canonical)
        except OSError as exc:
            raise FilterIOError(f"Couldn't rename {staged} -> {canonical}: {exc}") from exc
        return canonical

    def discard(self, filter_id: int) -> None:
        try:
            self.path_for(filter_id).unlink(missing_ok=True)
        except OSError as exc:
            raise FilterIOError(f"Couldn't remove filter file {filter_id}: {exc}") from exc


__all__ = ["FilterStorage"]
