"""Sync protocol: the messages crossing the core/boundary seam.

Three families, each a pydantic model with a literal `type` tag:

  Actions   user intents coming from the UI (import, delete, compose, backup…)
  Requests  core → boundary; fire-and-forget, the core never waits on them
  Events    boundary → core; results of earlier requests, or startup loads

The core's transition function consumes Actions and Events and produces
Requests. The boundary executes Requests and answers with Events, which
re-enter the core later in arrival order.

Inbound asset batches are keyed by filename. decode_asset_batch() turns a
filename into an identity by taking its first code point, so "上.svg" →
"上". An empty filename maps to the sentinel ERROR_IDENTITY.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from buyan_studio.models import Box, SessionModel

ERROR_IDENTITY = "\ufffd"

HandleMode = Literal["save", "open"]
NotifyLevel = Literal["info", "warning", "error"]


class DecodeError(ValueError):
    """An inbound payload does not match any known message shape."""


# ── Actions (UI → core) ──────────────────────────────────


class ImportAssets(BaseModel):
    type: Literal["import_assets"] = "import_assets"


class ReplaceAsset(BaseModel):
    type: Literal["replace_asset"] = "replace_asset"
    identity: str


class DeleteAsset(BaseModel):
    type: Literal["delete_asset"] = "delete_asset"
    identity: str


class ClearAssets(BaseModel):
    type: Literal["clear_assets"] = "clear_assets"


class AddCompound(BaseModel):
    type: Literal["add_compound"] = "add_compound"
    identity: str
    components: list[str]


class PlaceComponent(BaseModel):
    type: Literal["place_component"] = "place_component"
    identity: str
    index: int
    x: int
    y: int
    width: int
    height: int


class RemoveComponent(BaseModel):
    type: Literal["remove_component"] = "remove_component"
    identity: str
    index: int


class DeleteCharacter(BaseModel):
    type: Literal["delete_character"] = "delete_character"
    identity: str


class SetLanguage(BaseModel):
    type: Literal["set_language"] = "set_language"
    language: str


class SetBackupLocation(BaseModel):
    type: Literal["set_backup_location"] = "set_backup_location"
    path: str | None = None


class BackupNow(BaseModel):
    type: Literal["backup_now"] = "backup_now"


class Restore(BaseModel):
    type: Literal["restore"] = "restore"
    path: str | None = None


class ExportCharacter(BaseModel):
    type: Literal["export_character"] = "export_character"
    identity: str


# ── Requests (core → boundary) ───────────────────────────


class PickAssetFiles(BaseModel):
    type: Literal["pick_asset_files"] = "pick_asset_files"


class PickReplacementAsset(BaseModel):
    type: Literal["pick_replacement_asset"] = "pick_replacement_asset"
    identity: str


class DeleteStoredAsset(BaseModel):
    type: Literal["delete_stored_asset"] = "delete_stored_asset"
    identity: str


class ClearStoredAssets(BaseModel):
    type: Literal["clear_stored_assets"] = "clear_stored_assets"


class SaveModel(BaseModel):
    type: Literal["save_model"] = "save_model"
    model: SessionModel


class SaveAssets(BaseModel):
    type: Literal["save_assets"] = "save_assets"
    svgs: dict[str, str]


class FetchDefaultAssets(BaseModel):
    type: Literal["fetch_default_assets"] = "fetch_default_assets"
    identities: list[str]


class AcquireBackupHandle(BaseModel):
    type: Literal["acquire_backup_handle"] = "acquire_backup_handle"
    mode: HandleMode
    suggested: str | None = None


class StoreBackupHandle(BaseModel):
    type: Literal["store_backup_handle"] = "store_backup_handle"
    handle: str


class VerifyPermission(BaseModel):
    type: Literal["verify_permission"] = "verify_permission"
    handle: str
    mode: HandleMode


class WriteBackupFile(BaseModel):
    type: Literal["write_backup_file"] = "write_backup_file"
    handle: str
    contents: str


class ReadBackupFile(BaseModel):
    type: Literal["read_backup_file"] = "read_backup_file"
    handle: str


class ExportArtwork(BaseModel):
    type: Literal["export_artwork"] = "export_artwork"
    identity: str
    filename: str
    size: int
    boxes: list[Box]


class Notify(BaseModel):
    type: Literal["notify"] = "notify"
    level: NotifyLevel = "info"
    message: str


# ── Events (boundary → core) ─────────────────────────────


class AssetBatchReady(BaseModel):
    type: Literal["asset_batch_ready"] = "asset_batch_ready"
    files: dict[str, str]  # filename -> SVG text


class AssetsLoaded(BaseModel):
    type: Literal["assets_loaded"] = "assets_loaded"
    svgs: dict[str, str] | None = None


class ModelLoaded(BaseModel):
    type: Literal["model_loaded"] = "model_loaded"
    model: Any = None  # raw JSON; decoded by the core


class BackupHandleLoaded(BaseModel):
    type: Literal["backup_handle_loaded"] = "backup_handle_loaded"
    handle: str | None = None


class AssetUploaded(BaseModel):
    type: Literal["asset_uploaded"] = "asset_uploaded"
    identity: str
    svg: str


class BackupHandleAcquired(BaseModel):
    type: Literal["backup_handle_acquired"] = "backup_handle_acquired"
    handle: str | None = None  # None: the picker was closed


class PermissionResolved(BaseModel):
    type: Literal["permission_resolved"] = "permission_resolved"
    granted: bool


class BackupSucceeded(BaseModel):
    type: Literal["backup_succeeded"] = "backup_succeeded"


class BackupRead(BaseModel):
    type: Literal["backup_read"] = "backup_read"
    contents: str


class BackupFailed(BaseModel):
    type: Literal["backup_failed"] = "backup_failed"
    error: str


class PageUnloading(BaseModel):
    type: Literal["page_unloading"] = "page_unloading"


Action = Union[
    ImportAssets, ReplaceAsset, DeleteAsset, ClearAssets, AddCompound,
    PlaceComponent, RemoveComponent, DeleteCharacter, SetLanguage,
    SetBackupLocation, BackupNow, Restore, ExportCharacter,
]

Request = Union[
    PickAssetFiles, PickReplacementAsset, DeleteStoredAsset, ClearStoredAssets,
    SaveModel, SaveAssets, FetchDefaultAssets, AcquireBackupHandle,
    StoreBackupHandle, VerifyPermission, WriteBackupFile, ReadBackupFile,
    ExportArtwork, Notify,
]

Event = Union[
    AssetBatchReady, AssetsLoaded, ModelLoaded, BackupHandleLoaded,
    AssetUploaded, BackupHandleAcquired, PermissionResolved, BackupSucceeded,
    BackupRead, BackupFailed, PageUnloading,
]

Msg = Union[Action, Event]

_msg_adapter: TypeAdapter = TypeAdapter(
    Annotated[Union[Action, Event], Field(discriminator="type")]
)
_request_adapter: TypeAdapter = TypeAdapter(
    Annotated[Request, Field(discriminator="type")]
)


def decode_message(raw: Any) -> Msg:
    """Validate a JSON-shaped payload into an Action or Event.

    Raises DecodeError if the payload matches no message.
    """
    try:
        return _msg_adapter.validate_python(raw)
    except ValidationError as e:
        raise DecodeError(f"Unrecognised message: {e.error_count()} error(s)") from e


def decode_request(raw: Any) -> Request:
    try:
        return _request_adapter.validate_python(raw)
    except ValidationError as e:
        raise DecodeError(f"Unrecognised request: {e.error_count()} error(s)") from e


def identity_from_filename(filename: str) -> str:
    """First code point of the filename, or ERROR_IDENTITY if it is empty."""
    return filename[0] if filename else ERROR_IDENTITY


def decode_asset_batch(files: dict[str, str]) -> dict[str, str]:
    """Re-key a filename -> text batch by identity.

    When two filenames share a first code point the later one wins.
    """
    return {identity_from_filename(name): text for name, text in files.items()}
