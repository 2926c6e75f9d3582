"""Core domain models.

A character is either simple (a leaf glyph backed by one SVG asset) or
compound (an ordered list of other characters, copied in by value). The
two variants are a discriminated union on the `kind` field, so the JSON
form round-trips through pydantic without any custom decoding.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from buyan_studio import config


def _single_scalar(value: str) -> str:
    if len(value) != 1:
        raise ValueError(f"identity must be exactly one code point, got {value!r}")
    return value


class SimpleCharacter(BaseModel):
    """A leaf glyph placed in its box on the abstract grid."""

    kind: Literal["simple"] = "simple"
    identity: str
    width: int
    height: int
    x: int
    y: int

    @field_validator("identity")
    @classmethod
    def check_identity(cls, value: str) -> str:
        return _single_scalar(value)


class CompoundCharacter(BaseModel):
    """A character composed of other characters."""

    kind: Literal["compound"] = "compound"
    identity: str
    components: list[Character] = Field(default_factory=list)

    @field_validator("identity")
    @classmethod
    def check_identity(cls, value: str) -> str:
        return _single_scalar(value)


Character = Annotated[
    Union[SimpleCharacter, CompoundCharacter],
    Field(discriminator="kind"),
]

CompoundCharacter.model_rebuild()


class DisplayConfig(BaseModel):
    """Display constants for a session. Never mutated once created."""

    model_config = ConfigDict(frozen=True)

    box_size: int = config.BOX_SIZE
    border_size: int = config.BORDER_SIZE
    grid_scale: float = config.GRID_SCALE
    thumbnail_scale: float = config.THUMBNAIL_SCALE


class SessionModel(BaseModel):
    """Every character the user has created plus display settings."""

    characters: list[Character] = Field(default_factory=list)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    language: str = config.DEFAULT_LANGUAGE


class BackupSnapshot(BaseModel):
    """Self-contained export written to the user's backup file."""

    model_config = ConfigDict(populate_by_name=True)

    model: SessionModel
    simple_char_svgs: dict[str, str] = Field(alias="simpleCharSvgs")


class Box(BaseModel):
    """One positioned leaf produced by render_geometry."""

    identity: str
    x: int
    y: int
    width: int
    height: int
    svg: str
