"""Asset store endpoints for importing and removing SVG artwork."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from buyan_studio.protocol import (
    AssetBatchReady,
    AssetUploaded,
    ClearAssets,
    DeleteAsset,
    decode_asset_batch,
)
from buyan_studio.runtime import studio

from .models import ImportAssetsBody, ReplaceAssetBody

router = APIRouter()


@router.get("/assets")
async def list_assets():
    """Identities with stored artwork."""
    return sorted(studio().session.assets)


@router.get("/assets/{identity}")
async def get_asset(identity: str):
    """Raw SVG for one identity."""
    doc = studio().session.assets.get(identity)
    if doc is None:
        raise HTTPException(404, "Asset not found")
    return Response(content=doc.text, media_type="image/svg+xml")


@router.post("/assets", status_code=201)
async def import_assets(body: ImportAssetsBody):
    """Import a batch of SVG files keyed by filename.

    Each file's identity is the first character of its name. Existing
    artwork for the same identity is overwritten.
    """
    if not body.files:
        raise HTTPException(422, "No files to import")
    await studio().send(AssetBatchReady(files=body.files))
    return {"imported": sorted(decode_asset_batch(body.files))}


@router.put("/assets/{identity}")
async def replace_asset(identity: str, body: ReplaceAssetBody):
    """Upload replacement artwork for one identity."""
    if len(identity) != 1:
        raise HTTPException(422, "Identity must be a single character")
    await studio().send(AssetUploaded(identity=identity, svg=body.svg))
    return {"ok": True}


@router.delete("/assets/{identity}")
async def delete_asset(identity: str):
    """Delete one asset. Characters that use it are kept."""
    if identity not in studio().session.assets:
        raise HTTPException(404, "Asset not found")
    await studio().send(DeleteAsset(identity=identity))
    return {"ok": True}


@router.delete("/assets")
async def clear_assets():
    """Delete every asset. The character list is left untouched."""
    await studio().send(ClearAssets())
    return {"ok": True}
