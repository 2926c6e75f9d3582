"""Backup location, backup-now, and restore endpoints."""

from fastapi import APIRouter

from buyan_studio.protocol import BackupNow, Restore, SetBackupLocation
from buyan_studio.runtime import studio

from .models import BackupLocationBody, RestoreBody

router = APIRouter()


def _state(since: int = 0) -> dict:
    """Coordinator state plus notifications raised after index `since`."""
    s = studio()
    state = s.session.backup
    return {
        "phase": state.phase.value,
        "handle": state.handle,
        "outcome": state.outcome,
        "notifications": [n.model_dump() for n in s.boundary.notifications[since:]],
    }


@router.get("/backup")
async def get_backup_state():
    """Current backup handle and the outcome of the last action."""
    return _state(len(studio().boundary.notifications))


@router.put("/backup/location")
async def set_backup_location(body: BackupLocationBody):
    """Choose the backup file and write a snapshot to it right away."""
    since = len(studio().boundary.notifications)
    await studio().send(SetBackupLocation(path=body.path))
    return _state(since)


@router.post("/backup")
async def backup_now():
    """Write a snapshot to the stored backup file."""
    since = len(studio().boundary.notifications)
    await studio().send(BackupNow())
    return _state(since)


@router.post("/restore")
async def restore(body: RestoreBody):
    """Restore characters and artwork from a backup file."""
    since = len(studio().boundary.notifications)
    await studio().send(Restore(path=body.path))
    return _state(since)
