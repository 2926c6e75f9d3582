"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, language, notifications), characters
(listing, geometry, compound editing, export), assets (import, replace,
delete, clear), and backup (location, backup now, restore). Every mutating
endpoint sends an action or event to the studio runtime; nothing here
edits the session directly.
"""

from fastapi import APIRouter

from .assets import router as assets_router
from .backup import router as backup_router
from .characters import router as characters_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(characters_router)
router.include_router(assets_router)
router.include_router(backup_router)
