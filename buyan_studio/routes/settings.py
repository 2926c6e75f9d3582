"""Health check, settings, and notification endpoints."""

from fastapi import APIRouter

from buyan_studio.protocol import SetLanguage
from buyan_studio.runtime import studio

from .models import UpdateSettings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Display constants and language preference."""
    model = studio().session.model
    return {"display": model.display.model_dump(), "language": model.language}


@router.patch("/settings")
async def update_settings(body: UpdateSettings):
    """Update the language preference."""
    if body.language is not None:
        await studio().send(SetLanguage(language=body.language))
    return await get_settings()


@router.get("/notifications")
async def list_notifications():
    """Messages the studio has raised for the user, oldest first."""
    return [n.model_dump() for n in studio().boundary.notifications]
