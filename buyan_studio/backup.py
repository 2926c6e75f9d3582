"""Backup/restore coordinator: a small state machine per backup action.

Phases:
  idle → awaiting_handle → awaiting_permission → writing | reading → idle

Operations:
  set_location  save-mode picker; once write permission is granted the
                handle is persisted and a snapshot written
  backup        reuse the stored handle (falls back to set_location if none)
  restore       open-mode picker, read and parse the snapshot

A closed picker or a denied permission ends the action as "aborted"
without touching committed state. A BackupFailed event (stale handle,
I/O error) ends it as "failed". Only one action runs at a time; starting
another while busy is refused.

Every transition returns (new_state, requests). The snapshot text is taken
from the caller at the moment the write is issued, so the file reflects
the state after permission was granted.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from buyan_studio import config
from buyan_studio.assets import AssetStore, store_to_json
from buyan_studio.models import BackupSnapshot, SessionModel
from buyan_studio.protocol import (
    AcquireBackupHandle,
    Notify,
    ReadBackupFile,
    Request,
    StoreBackupHandle,
    VerifyPermission,
    WriteBackupFile,
)

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    AWAITING_HANDLE = "awaiting_handle"
    AWAITING_PERMISSION = "awaiting_permission"
    READING = "reading"
    WRITING = "writing"


class Operation(str, Enum):
    SET_LOCATION = "set_location"
    BACKUP = "backup"
    RESTORE = "restore"


Outcome = Literal["success", "aborted", "failed"]


class BackupState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: Phase = Phase.IDLE
    operation: Operation | None = None
    handle: str | None = None  # persisted backup file, reused across sessions
    pending: str | None = None  # picked file awaiting permission, or being restored
    outcome: Outcome | None = None

    @property
    def busy(self) -> bool:
        return self.phase is not Phase.IDLE

    @property
    def target(self) -> str | None:
        return self.pending if self.pending is not None else self.handle


Transition = tuple[BackupState, list[Request]]


# ── Snapshot (de)serialisation ───────────────────────────


def serialize_snapshot(model: SessionModel, assets: AssetStore) -> str:
    snapshot = BackupSnapshot(model=model, simple_char_svgs=store_to_json(assets))
    return snapshot.model_dump_json(by_alias=True, indent=2)


def parse_snapshot(text: str) -> BackupSnapshot | None:
    """Parse a backup file. Returns None if it is malformed or incomplete."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Backup file is not valid JSON: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning("Backup file must hold a JSON object")
        return None
    missing = [key for key in ("model", "simpleCharSvgs") if key not in data]
    if missing:
        logger.warning(f"Backup file is missing {', '.join(missing)}, ignoring it")
        return None
    try:
        return BackupSnapshot.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Backup file does not match the snapshot format: {e}")
        return None


# ── Starting an action ───────────────────────────────────


def _refuse(state: BackupState) -> Transition:
    logger.info("Backup action refused, %s already in progress", state.operation)
    return state, [Notify(level="warning", message="A backup operation is already in progress")]


def begin_set_location(state: BackupState, path: str | None = None) -> Transition:
    if state.busy:
        return _refuse(state)
    new = state.model_copy(update={
        "phase": Phase.AWAITING_HANDLE,
        "operation": Operation.SET_LOCATION,
        "pending": None,
        "outcome": None,
    })
    return new, [AcquireBackupHandle(mode="save", suggested=path or config.BACKUP_FILENAME)]


def begin_backup(state: BackupState) -> Transition:
    if state.busy:
        return _refuse(state)
    if state.handle is None:
        return begin_set_location(state)
    new = state.model_copy(update={
        "phase": Phase.AWAITING_PERMISSION,
        "operation": Operation.BACKUP,
        "outcome": None,
    })
    return new, [VerifyPermission(handle=state.handle, mode="save")]


def begin_restore(state: BackupState, path: str | None = None) -> Transition:
    if state.busy:
        return _refuse(state)
    new = state.model_copy(update={
        "phase": Phase.AWAITING_HANDLE,
        "operation": Operation.RESTORE,
        "pending": None,
        "outcome": None,
    })
    return new, [AcquireBackupHandle(mode="open", suggested=path)]


# ── Boundary results ─────────────────────────────────────


def _finish(state: BackupState, outcome: Outcome) -> BackupState:
    return state.model_copy(update={
        "phase": Phase.IDLE,
        "operation": None,
        "pending": None,
        "outcome": outcome,
    })


def _out_of_phase(state: BackupState, event: str) -> Transition:
    logger.warning("Ignoring %s while backup coordinator is %s", event, state.phase.value)
    return state, []


def on_handle_loaded(state: BackupState, handle: str | None) -> BackupState:
    """Adopt the handle persisted by an earlier session."""
    return state.model_copy(update={"handle": handle})


def on_handle_acquired(state: BackupState, handle: str | None) -> Transition:
    if state.phase is not Phase.AWAITING_HANDLE:
        return _out_of_phase(state, "backup_handle_acquired")
    if handle is None:
        logger.info("Backup file picker closed without a selection")
        return _finish(state, "aborted"), []
    # The handle is only adopted once permission is granted
    mode = "open" if state.operation is Operation.RESTORE else "save"
    new = state.model_copy(update={"phase": Phase.AWAITING_PERMISSION, "pending": handle})
    return new, [VerifyPermission(handle=handle, mode=mode)]


def on_permission(
    state: BackupState, granted: bool, snapshot: Callable[[], str]
) -> Transition:
    """Permission answered. `snapshot()` serialises the current state for a write."""
    if state.phase is not Phase.AWAITING_PERMISSION:
        return _out_of_phase(state, "permission_resolved")
    target = state.target
    assert target is not None
    if not granted:
        logger.info("Permission denied for backup file %s", target)
        return _finish(state, "aborted"), [
            Notify(level="warning", message=f"Permission to access {target} was not granted"),
        ]
    if state.operation is Operation.RESTORE:
        return state.model_copy(update={"phase": Phase.READING}), [ReadBackupFile(handle=target)]
    requests: list[Request] = []
    if state.operation is Operation.SET_LOCATION:
        requests.append(StoreBackupHandle(handle=target))
    new = state.model_copy(update={"phase": Phase.WRITING, "handle": target, "pending": None})
    return new, [*requests, WriteBackupFile(handle=target, contents=snapshot())]


def on_written(state: BackupState) -> Transition:
    if state.phase is not Phase.WRITING:
        return _out_of_phase(state, "backup_succeeded")
    logger.info("Backup written to %s", state.handle)
    return _finish(state, "success"), [Notify(level="info", message="Backup saved")]


def on_read(state: BackupState, contents: str) -> tuple[BackupState, BackupSnapshot | None]:
    """Parse the file read for a restore. None means nothing is applied."""
    if state.phase is not Phase.READING:
        logger.warning("Ignoring backup_read while backup coordinator is %s", state.phase.value)
        return state, None
    snapshot = parse_snapshot(contents)
    if snapshot is None:
        return _finish(state, "failed"), None
    return _finish(state, "success"), snapshot


def on_failed(state: BackupState, error: str) -> Transition:
    if state.phase not in (Phase.READING, Phase.WRITING, Phase.AWAITING_PERMISSION):
        return _out_of_phase(state, "backup_failed")
    logger.warning("Backup %s failed: %s", state.operation.value, error)
    return _finish(state, "failed"), [
        Notify(level="error", message=f"Backup file could not be accessed: {error}"),
    ]
