"""Local boundary: carries out core requests against disk and storage.

The core never calls into the file system. It emits Requests; the boundary
performs each one and returns the resulting Events, which the runtime feeds
back into the core. Two collaborators are injected, matching the protocols:

    class FilePicker(Protocol):
        async def pick_files(self, accept: str) -> list[Path]: ...
        async def pick_backup(self, mode, suggested) -> str | None: ...

    class PermissionPolicy(Protocol):
        async def ensure(self, handle: str, mode) -> bool: ...

Defaults:
    HintPicker             uses the path hint carried by the request; with
                           no hint (always the case for asset files) the
                           "dialog" is closed and nothing happens
    FilesystemPermissions  os.access check on the file (or its directory)

Tests pass their own stubs instead.
"""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Protocol

from buyan_studio import config
from buyan_studio.protocol import (
    AcquireBackupHandle,
    AssetBatchReady,
    AssetsLoaded,
    AssetUploaded,
    BackupFailed,
    BackupHandleAcquired,
    BackupHandleLoaded,
    BackupRead,
    BackupSucceeded,
    ClearStoredAssets,
    DeleteStoredAsset,
    Event,
    ExportArtwork,
    FetchDefaultAssets,
    HandleMode,
    ModelLoaded,
    Notify,
    PermissionResolved,
    PickAssetFiles,
    PickReplacementAsset,
    ReadBackupFile,
    Request,
    SaveAssets,
    SaveModel,
    StoreBackupHandle,
    VerifyPermission,
    WriteBackupFile,
)
from buyan_studio.render import compose_svg
from buyan_studio.storage import Storage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------

class FilePicker(Protocol):
    async def pick_files(self, accept: str) -> list[Path]: ...

    async def pick_backup(self, mode: HandleMode, suggested: str | None) -> str | None: ...


class PermissionPolicy(Protocol):
    async def ensure(self, handle: str, mode: HandleMode) -> bool: ...


class HintPicker:
    """Non-interactive picker: answers with the hint, or closes the dialog.

    Asset requests carry no hint, so pick_files always closes the dialog and
    ImportAssets / ReplaceAsset complete nothing with this picker. Hosts
    without a file dialog send AssetBatchReady or AssetUploaded directly, as
    the HTTP routes do.
    """

    def __init__(self, backup_dir: Path | None = None) -> None:
        self._backup_dir = backup_dir

    async def pick_files(self, accept: str) -> list[Path]:
        return []

    async def pick_backup(self, mode: HandleMode, suggested: str | None) -> str | None:
        if not suggested:
            return None
        path = Path(suggested)
        if not path.is_absolute() and self._backup_dir is not None:
            path = self._backup_dir / path
        return str(path)


class FilesystemPermissions:
    async def ensure(self, handle: str, mode: HandleMode) -> bool:
        path = Path(handle)
        if mode == "open":
            return os.access(path, os.R_OK)
        if path.exists():
            return os.access(path, os.R_OK | os.W_OK)
        return os.access(path.parent, os.W_OK)


# ---------------------------------------------------------------------------
# LocalBoundary
# ---------------------------------------------------------------------------

class LocalBoundary:
    def __init__(
        self,
        storage: Storage,
        *,
        picker: FilePicker | None = None,
        permissions: PermissionPolicy | None = None,
        defaults_dir: Path = config.DEFAULT_ASSETS_DIR,
        exports_dir: Path | None = None,
    ) -> None:
        self.storage = storage
        self.picker = picker or HintPicker(storage.base_path)
        self.permissions = permissions or FilesystemPermissions()
        self.defaults_dir = defaults_dir
        self.exports_dir = exports_dir or storage.base_path / "exports"
        self.notifications: list[Notify] = []

    def startup_events(self) -> list[Event]:
        """Load the durable records, in the order the core expects them."""
        return [
            ModelLoaded(model=self.storage.get_model()),
            AssetsLoaded(svgs=self.storage.get_assets()),
            BackupHandleLoaded(handle=self.storage.get_backup_handle()),
        ]

    async def perform(self, request: Request) -> list[Event]:
        """Carry out one request. Backup file I/O errors come back as BackupFailed."""
        try:
            return await self._perform(request)
        except (OSError, ValueError, ET.ParseError) as e:
            if isinstance(request, ExportArtwork):
                logger.warning("Export of %r failed: %s", request.identity, e)
                self._notify(Notify(
                    level="error", message=f"Could not export {request.identity!r}: {e}",
                ))
                return []
            if isinstance(e, OSError) and isinstance(
                request, (VerifyPermission, WriteBackupFile, ReadBackupFile)
            ):
                logger.warning("Backup file %s: %s", request.handle, e)
                return [BackupFailed(error=str(e))]
            raise

    async def _perform(self, request: Request) -> list[Event]:
        if isinstance(request, SaveModel):
            self.storage.save_model(request.model.model_dump(mode="json"))
            return []
        if isinstance(request, SaveAssets):
            self.storage.save_assets(request.svgs)
            return []
        if isinstance(request, DeleteStoredAsset):
            self.storage.delete_asset(request.identity)
            return []
        if isinstance(request, ClearStoredAssets):
            self.storage.clear_assets()
            return []
        if isinstance(request, StoreBackupHandle):
            self.storage.save_backup_handle(request.handle)
            return []
        if isinstance(request, PickAssetFiles):
            paths = await self.picker.pick_files(".svg")
            if not paths:
                return []
            return [AssetBatchReady(files=_read_files(paths))]
        if isinstance(request, PickReplacementAsset):
            paths = await self.picker.pick_files(".svg")
            if not paths:
                return []
            return [AssetUploaded(
                identity=request.identity,
                svg=paths[0].read_text(encoding="utf-8"),
            )]
        if isinstance(request, FetchDefaultAssets):
            return self._fetch_defaults(request.identities)
        if isinstance(request, AcquireBackupHandle):
            handle = await self.picker.pick_backup(request.mode, request.suggested)
            return [BackupHandleAcquired(handle=handle)]
        if isinstance(request, VerifyPermission):
            granted = await self.permissions.ensure(request.handle, request.mode)
            return [PermissionResolved(granted=granted)]
        if isinstance(request, WriteBackupFile):
            Path(request.handle).write_text(request.contents, encoding="utf-8")
            return [BackupSucceeded()]
        if isinstance(request, ReadBackupFile):
            return [BackupRead(contents=Path(request.handle).read_text(encoding="utf-8"))]
        if isinstance(request, ExportArtwork):
            self.export(request)
            return []
        if isinstance(request, Notify):
            self._notify(request)
            return []
        raise ValueError(f"Unsupported request {request!r}")

    def _notify(self, notice: Notify) -> None:
        log = logger.error if notice.level == "error" else logger.info
        log("Notify [%s]: %s", notice.level, notice.message)
        self.notifications.append(notice)

    def _fetch_defaults(self, identities: list[str]) -> list[Event]:
        paths = []
        for identity in identities:
            path = self.defaults_dir / f"{identity}.svg"
            if path.is_file():
                paths.append(path)
            else:
                logger.warning("Bundled asset for %r not found at %s", identity, path)
        if not paths:
            return []
        return [AssetBatchReady(files=_read_files(paths))]

    def export(self, request: ExportArtwork) -> Path:
        # Identities come from file names, so only the final component is kept
        name = Path(request.filename).name
        if name in ("", ".", ".."):
            raise ValueError(f"invalid export file name {request.filename!r}")
        self.exports_dir.mkdir(parents=True, exist_ok=True)
        path = self.exports_dir / name
        path.write_text(compose_svg(request.boxes, request.size), encoding="utf-8")
        logger.info("Exported %r to %s", request.identity, path)
        return path


def _read_files(paths: list[Path]) -> dict[str, str]:
    return {path.name: path.read_text(encoding="utf-8") for path in paths}
