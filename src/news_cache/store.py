"""Single-slot JSON cache holding the most recent successful snapshot."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from .errors import CacheWriteError, CorruptCacheError
from .models import Snapshot

log = logging.getLogger("news_cache.store")


class SnapshotStore:
    """
    Load and save one Snapshot at a fixed path.

    Schema:
    {
      "headlines": [ {article}, ... ],
      "everything": [ {article}, ... ]
    }

    Every save replaces the whole file; no earlier version is kept.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Snapshot:
        if not self.path.exists():
            log.info("No cache at %s, starting empty.", self.path)
            return Snapshot.empty()
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CorruptCacheError(f"cannot read cache {self.path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptCacheError(f"invalid JSON in {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CorruptCacheError(f"cache {self.path} must hold a JSON object.")
        try:
            return Snapshot.model_validate(data)
        except ValidationError as exc:
            raise CorruptCacheError(
                f"cache {self.path} does not match the snapshot shape: {exc}"
            ) from exc

    def save(self, snapshot: Snapshot) -> None:
        tmp = self.path.with_name(f"{self.path.name}.tmp")
        payload = json.dumps(snapshot.model_dump(mode="json"), ensure_ascii=False, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            raise CacheWriteError(f"cannot write cache {self.path}: {exc}") from exc
        log.info(
            "Cached %d headline(s) and %d tech article(s) to %s.",
            len(snapshot.headlines),
            len(snapshot.everything),
            self.path,
        )
