"""Pydantic request bodies for API endpoints."""

from pydantic import BaseModel


class ImportAssetsBody(BaseModel):
    files: dict[str, str]  # filename -> SVG text


class ReplaceAssetBody(BaseModel):
    svg: str


class CreateCompound(BaseModel):
    identity: str
    components: list[str]


class PlaceComponentBody(BaseModel):
    x: int
    y: int
    width: int
    height: int


class BackupLocationBody(BaseModel):
    path: str


class RestoreBody(BaseModel):
    path: str


class UpdateSettings(BaseModel):
    language: str | None = None
