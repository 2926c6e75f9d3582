"""JSON file storage for the three durable records.

Each record is one JSON file under a base directory, named with a common
key prefix:

    {base}/
      {prefix}-model.json             ← serialised SessionModel
      {prefix}-simple-char-svgs.json  ← identity → SVG text
      {prefix}-backup-handle.json     ← path of the user's backup file

Reads return None when a record has never been written. Values are stored
and returned as plain JSON data; decoding into domain types is the core's
job.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MODEL_RECORD = "model"
ASSETS_RECORD = "simple-char-svgs"
HANDLE_RECORD = "backup-handle"


class Storage:
    def __init__(self, base_path: Path, prefix: str = "buyan-studio") -> None:
        self._base = base_path
        self._prefix = prefix
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, record: str) -> Path:
        return self._base / f"{self._prefix}-{record}.json"

    def _read(self, record: str) -> Any:
        path = self._path(record)
        if not path.is_file():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, record: str, data: Any) -> None:
        self._path(record).write_text(
            json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        logger.debug("Wrote %s record", record)

    # ------------------------------------------------------------------
    # Model
    # ------------------------------------------------------------------

    def get_model(self) -> Any:
        return self._read(MODEL_RECORD)

    def save_model(self, model: dict[str, Any]) -> None:
        self._write(MODEL_RECORD, model)

    # ------------------------------------------------------------------
    # Asset store
    # ------------------------------------------------------------------

    def get_assets(self) -> dict[str, str] | None:
        return self._read(ASSETS_RECORD)

    def save_assets(self, svgs: dict[str, str]) -> None:
        """Replace the whole asset record."""
        self._write(ASSETS_RECORD, svgs)

    def delete_asset(self, identity: str) -> bool:
        """Remove one asset. Returns False if it was not stored."""
        svgs = self.get_assets() or {}
        if identity not in svgs:
            return False
        del svgs[identity]
        self._write(ASSETS_RECORD, svgs)
        return True

    def clear_assets(self) -> None:
        self._write(ASSETS_RECORD, {})

    # ------------------------------------------------------------------
    # Backup handle
    # ------------------------------------------------------------------

    def get_backup_handle(self) -> str | None:
        return self._read(HANDLE_RECORD)

    def save_backup_handle(self, handle: str) -> None:
        self._write(HANDLE_RECORD, handle)
