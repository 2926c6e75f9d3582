"""Character listing, geometry, compound editing, and export endpoints."""

from pathlib import Path

from fastapi import APIRouter, HTTPException

from buyan_studio.characters import (
    CharacterKind,
    MissingAssetError,
    characters_of_kind,
    find_character,
    render_geometry,
)
from buyan_studio.models import CompoundCharacter
from buyan_studio.protocol import (
    AddCompound,
    DeleteCharacter,
    ExportCharacter,
    PlaceComponent,
    RemoveComponent,
)
from buyan_studio.runtime import studio

from .models import CreateCompound, PlaceComponentBody

router = APIRouter()


def _require(identity: str):
    char = find_character(studio().session.model, identity)
    if char is None:
        raise HTTPException(404, "Character not found")
    return char


def _require_compound(identity: str, index: int | None = None) -> CompoundCharacter:
    char = _require(identity)
    if not isinstance(char, CompoundCharacter):
        raise HTTPException(409, f"Character '{identity}' is not a compound character")
    if index is not None and not 0 <= index < len(char.components):
        raise HTTPException(404, "Component not found")
    return char


@router.get("/characters")
async def list_characters(kind: CharacterKind | None = None):
    """List characters in creation order, optionally filtered by kind."""
    model = studio().session.model
    chars = model.characters if kind is None else characters_of_kind(model, kind)
    return [c.model_dump() for c in chars]


@router.post("/characters", status_code=201)
async def create_compound(body: CreateCompound):
    """Compose a new compound character from existing characters."""
    if len(body.identity) != 1:
        raise HTTPException(422, "Identity must be a single character")
    if find_character(studio().session.model, body.identity) is not None:
        raise HTTPException(409, f"Character '{body.identity}' already exists")
    if not body.components:
        raise HTTPException(422, "A compound character needs at least one component")
    for component in body.components:
        if find_character(studio().session.model, component) is None:
            raise HTTPException(404, f"Component '{component}' not found")
    await studio().send(AddCompound(identity=body.identity, components=body.components))
    return _require(body.identity).model_dump()


@router.get("/characters/{identity}")
async def get_character(identity: str):
    """Get a single character by identity."""
    return _require(identity).model_dump()


@router.get("/characters/{identity}/geometry")
async def get_geometry(identity: str):
    """Leaf boxes of a character, in component order."""
    char = _require(identity)
    try:
        boxes = render_geometry(char, studio().session.assets)
    except MissingAssetError as e:
        raise HTTPException(409, str(e))
    return [b.model_dump() for b in boxes]


@router.patch("/characters/{identity}/components/{index}")
async def place_component(identity: str, index: int, body: PlaceComponentBody):
    """Move or resize a simple component of a compound character."""
    char = _require_compound(identity, index)
    if char.components[index].kind != "simple":
        raise HTTPException(409, "Only simple components can be placed")
    if body.width <= 0 or body.height <= 0:
        raise HTTPException(422, "Width and height must be positive")
    await studio().send(PlaceComponent(identity=identity, index=index, **body.model_dump()))
    return _require(identity).model_dump()


@router.delete("/characters/{identity}/components/{index}")
async def remove_component(identity: str, index: int):
    """Remove a component from a compound character."""
    _require_compound(identity, index)
    await studio().send(RemoveComponent(identity=identity, index=index))
    return _require(identity).model_dump()


@router.delete("/characters/{identity}")
async def delete_character(identity: str):
    """Remove a character. Compounds already built from it keep their copy."""
    _require(identity)
    await studio().send(DeleteCharacter(identity=identity))
    return {"ok": True}


@router.post("/characters/{identity}/export")
async def export_character(identity: str):
    """Write the character's composed SVG to the exports directory."""
    char = _require(identity)
    try:
        render_geometry(char, studio().session.assets)
    except MissingAssetError as e:
        raise HTTPException(409, str(e))
    boundary = studio().boundary
    since = len(boundary.notifications)
    await studio().send(ExportCharacter(identity=identity))
    errors = [n for n in boundary.notifications[since:] if n.level == "error"]
    if errors:
        raise HTTPException(500, errors[-1].message)
    path = boundary.exports_dir / Path(f"{identity}.svg").name
    return {"ok": True, "path": str(path)}
