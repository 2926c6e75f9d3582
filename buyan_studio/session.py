"""Session state and the core transition function.

    update(session, msg) -> (session, requests)

`msg` is a user Action or a boundary Event (see protocol.py). The function
is pure: it never touches files or storage, it only returns the Requests the
boundary should carry out. Invalid user actions produce a Notify request
and leave the session unchanged; malformed boundary payloads are logged and
dropped. Nothing here raises for bad input.

Every committed change is followed by its durable write:
  asset store changed   → SaveAssets / DeleteStoredAsset / ClearStoredAssets
  character model changed → SaveModel
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from pydantic import ValidationError

from buyan_studio import backup as coordinator
from buyan_studio import config
from buyan_studio.assets import AssetStore, store_to_json
from buyan_studio.characters import (
    CharacterError,
    MissingAssetError,
    add_compound_character,
    add_simple_characters,
    delete_character,
    find_character,
    place_component,
    remove_component,
    render_geometry,
)
from buyan_studio.merge import clear_assets, merge_assets, remove_assets
from buyan_studio.models import DisplayConfig, SessionModel
from buyan_studio.protocol import (
    AddCompound,
    AssetBatchReady,
    AssetsLoaded,
    AssetUploaded,
    BackupFailed,
    BackupHandleAcquired,
    BackupHandleLoaded,
    BackupNow,
    BackupRead,
    BackupSucceeded,
    ClearAssets,
    ClearStoredAssets,
    DeleteAsset,
    DeleteCharacter,
    DeleteStoredAsset,
    ExportArtwork,
    ExportCharacter,
    FetchDefaultAssets,
    ImportAssets,
    ModelLoaded,
    Msg,
    Notify,
    PageUnloading,
    PermissionResolved,
    PickAssetFiles,
    PickReplacementAsset,
    PlaceComponent,
    RemoveComponent,
    ReplaceAsset,
    Request,
    Restore,
    SaveAssets,
    SaveModel,
    SetBackupLocation,
    SetLanguage,
    decode_asset_batch,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    model: SessionModel = field(default_factory=SessionModel)
    assets: AssetStore = field(default_factory=dict)
    backup: coordinator.BackupState = field(default_factory=coordinator.BackupState)

    @classmethod
    def initial(cls, display: DisplayConfig | None = None, language: str | None = None) -> Session:
        return cls(model=SessionModel(
            display=display or DisplayConfig(),
            language=language or config.DEFAULT_LANGUAGE,
        ))

    def snapshot(self) -> str:
        return coordinator.serialize_snapshot(self.model, self.assets)


Step = tuple[Session, list[Request]]


def _save_model(session: Session) -> SaveModel:
    return SaveModel(model=session.model)


def _save_assets(session: Session) -> SaveAssets:
    return SaveAssets(svgs=store_to_json(session.assets))


# ── Asset store ──────────────────────────────────────────


def _merge_batch(session: Session, texts: dict[str, str]) -> Step:
    """Merge identity -> text into the store and add any new simple characters."""
    result = merge_assets(session.assets, texts)
    model = add_simple_characters(session.model, texts.keys())
    new = replace(session, assets=result.store, model=model)
    requests: list[Request] = [_save_assets(new)]
    if model is not session.model:
        requests.append(_save_model(new))
    return new, requests


def _reject_identity(session: Session, identity: str) -> Step:
    logger.warning("Rejected asset identity %r", identity)
    return session, [Notify(
        level="error", message=f"Identity must be a single character, got {identity!r}",
    )]


def _on_assets_loaded(session: Session, svgs: dict[str, str] | None) -> Step:
    if not svgs:
        logger.info("No stored assets, fetching built-in defaults")
        return session, [FetchDefaultAssets(identities=list(config.DEFAULT_IDENTITIES))]
    result = merge_assets(session.assets, svgs)
    return replace(session, assets=result.store), []


def _on_model_loaded(session: Session, raw: object) -> Step:
    if raw is None:
        return session, []
    try:
        model = SessionModel.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Stored model could not be decoded, keeping defaults: {e}")
        return session, []
    return replace(session, model=model), []


# ── Character model ──────────────────────────────────────


def _edit_model(session: Session, edit) -> Step:
    try:
        model = edit(session.model)
    except CharacterError as e:
        return session, [Notify(level="error", message=str(e))]
    new = replace(session, model=model)
    return new, [_save_model(new)]


def _export(session: Session, identity: str) -> Step:
    character = find_character(session.model, identity)
    if character is None:
        return session, [Notify(level="error", message=f"Unknown character {identity!r}")]
    try:
        boxes = render_geometry(character, session.assets)
    except MissingAssetError as e:
        logger.warning(str(e))
        return session, [Notify(level="error", message=str(e))]
    return session, [ExportArtwork(
        identity=identity,
        filename=f"{identity}.svg",
        size=session.model.display.box_size,
        boxes=boxes,
    )]


# ── Backup / restore ─────────────────────────────────────


def _with_backup(session: Session, transition: coordinator.Transition) -> Step:
    state, requests = transition
    return replace(session, backup=state), requests


def _on_backup_read(session: Session, contents: str) -> Step:
    state, snapshot = coordinator.on_read(session.backup, contents)
    session = replace(session, backup=state)
    if snapshot is None:
        return session, []
    result = merge_assets(session.assets, snapshot.simple_char_svgs)
    new = replace(session, model=snapshot.model, assets=result.store)
    logger.info("Restored %d characters and %d assets",
                len(new.model.characters), len(snapshot.simple_char_svgs))
    return new, [_save_model(new), _save_assets(new), Notify(level="info", message="Backup restored")]


# ── Transition ───────────────────────────────────────────


def update(session: Session, msg: Msg) -> Step:
    """Apply one action or event to the session."""
    # Boundary events
    if isinstance(msg, AssetBatchReady):
        return _merge_batch(session, decode_asset_batch(msg.files))
    if isinstance(msg, AssetUploaded):
        if len(msg.identity) != 1:
            return _reject_identity(session, msg.identity)
        return _merge_batch(session, {msg.identity: msg.svg})
    if isinstance(msg, AssetsLoaded):
        return _on_assets_loaded(session, msg.svgs)
    if isinstance(msg, ModelLoaded):
        return _on_model_loaded(session, msg.model)
    if isinstance(msg, BackupHandleLoaded):
        return replace(session, backup=coordinator.on_handle_loaded(session.backup, msg.handle)), []
    if isinstance(msg, BackupHandleAcquired):
        return _with_backup(session, coordinator.on_handle_acquired(session.backup, msg.handle))
    if isinstance(msg, PermissionResolved):
        return _with_backup(
            session, coordinator.on_permission(session.backup, msg.granted, session.snapshot)
        )
    if isinstance(msg, BackupSucceeded):
        return _with_backup(session, coordinator.on_written(session.backup))
    if isinstance(msg, BackupRead):
        return _on_backup_read(session, msg.contents)
    if isinstance(msg, BackupFailed):
        return _with_backup(session, coordinator.on_failed(session.backup, msg.error))
    if isinstance(msg, PageUnloading):
        return session, [_save_model(session)]

    # User actions
    if isinstance(msg, ImportAssets):
        return session, [PickAssetFiles()]
    if isinstance(msg, ReplaceAsset):
        if len(msg.identity) != 1:
            return _reject_identity(session, msg.identity)
        return session, [PickReplacementAsset(identity=msg.identity)]
    if isinstance(msg, DeleteAsset):
        if msg.identity not in session.assets:
            return session, [Notify(level="error", message=f"No asset for {msg.identity!r}")]
        new = replace(session, assets=remove_assets(session.assets, [msg.identity]))
        return new, [DeleteStoredAsset(identity=msg.identity)]
    if isinstance(msg, ClearAssets):
        return replace(session, assets=clear_assets()), [ClearStoredAssets()]
    if isinstance(msg, AddCompound):
        return _edit_model(
            session, lambda m: add_compound_character(m, msg.identity, msg.components)
        )
    if isinstance(msg, PlaceComponent):
        return _edit_model(session, lambda m: place_component(
            m, msg.identity, msg.index,
            x=msg.x, y=msg.y, width=msg.width, height=msg.height,
        ))
    if isinstance(msg, RemoveComponent):
        return _edit_model(session, lambda m: remove_component(m, msg.identity, msg.index))
    if isinstance(msg, DeleteCharacter):
        return _edit_model(session, lambda m: delete_character(m, msg.identity))
    if isinstance(msg, SetLanguage):
        return _edit_model(session, lambda m: m.model_copy(update={"language": msg.language}))
    if isinstance(msg, SetBackupLocation):
        return _with_backup(session, coordinator.begin_set_location(session.backup, msg.path))
    if isinstance(msg, BackupNow):
        return _with_backup(session, coordinator.begin_backup(session.backup))
    if isinstance(msg, Restore):
        return _with_backup(session, coordinator.begin_restore(session.backup, msg.path))
    if isinstance(msg, ExportCharacter):
        return _export(session, msg.identity)

    logger.warning("Unhandled message %r", msg)
    return session, []
