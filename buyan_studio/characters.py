"""Character model operations: creation, lookup, composition, and geometry.

Model functions never mutate their input; they return an updated copy of
the SessionModel. Components of a compound character are deep copies of
the characters they were built from, so a compound can never contain
itself and geometry resolution always terminates.

Geometry: render_geometry() flattens a character into its leaf boxes, in
component order. Each SimpleCharacter contributes one Box at its stored
placement with its SVG text. Absolute pixel layout is left to the renderer.

A SimpleCharacter whose identity is missing from the Asset Store is a
recoverable lookup failure (MissingAssetError). Clearing the store keeps
the characters, so this state is reachable and callers must handle it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum

from buyan_studio.assets import AssetStore
from buyan_studio.models import (
    Box,
    Character,
    CompoundCharacter,
    DisplayConfig,
    SessionModel,
    SimpleCharacter,
)


class CharacterError(ValueError):
    """Raised for invalid edits to the character model."""


class MissingAssetError(LookupError):
    """A SimpleCharacter has no matching entry in the Asset Store."""

    def __init__(self, identity: str) -> None:
        super().__init__(f"No asset for simple character {identity!r}")
        self.identity = identity


class CharacterKind(str, Enum):
    SIMPLE = "simple"
    COMPOUND = "compound"


def identity_of(character: Character) -> str:
    return character.identity


def kind_of(character: Character) -> CharacterKind:
    return CharacterKind(character.kind)


def new_simple_character(identity: str, display: DisplayConfig) -> SimpleCharacter:
    """Create a simple character filling the default box inside the border."""
    size = display.box_size - display.border_size
    return SimpleCharacter(
        identity=identity,
        width=size,
        height=size,
        x=display.border_size,
        y=display.border_size,
    )


def new_compound_character(
    identity: str, components: Iterable[Character]
) -> CompoundCharacter:
    """Create a compound character from copies of `components`."""
    return CompoundCharacter(
        identity=identity,
        components=[c.model_copy(deep=True) for c in components],
    )


def find_character(model: SessionModel, identity: str) -> Character | None:
    for character in model.characters:
        if character.identity == identity:
            return character
    return None


# ── Kind views ───────────────────────────────────────────


class KindView:
    """Restartable, lazy view of the model's characters of one kind."""

    def __init__(self, characters: list[Character], kind: CharacterKind) -> None:
        self._characters = characters
        self._kind = CharacterKind(kind)

    def __iter__(self) -> Iterator[Character]:
        return (c for c in self._characters if c.kind == self._kind.value)

    def __repr__(self) -> str:
        return f"KindView({self._kind.value}, {[c.identity for c in self]})"


def characters_of_kind(model: SessionModel, kind: CharacterKind) -> KindView:
    return KindView(model.characters, kind)


# ── Model updates ────────────────────────────────────────


def add_simple_characters(model: SessionModel, identities: Iterable[str]) -> SessionModel:
    """Append a default SimpleCharacter for each identity not yet represented.

    `identities` is typically the keys of a freshly merged asset batch.
    Identities already used by any character (simple or compound) are
    skipped, so identities stay unique and a second call with the same
    batch changes nothing.
    """
    present = {c.identity for c in model.characters}
    added: list[Character] = []
    for identity in identities:
        if identity in present:
            continue
        present.add(identity)
        added.append(new_simple_character(identity, model.display))
    if not added:
        return model
    return model.model_copy(update={"characters": [*model.characters, *added]})


def add_compound_character(
    model: SessionModel, identity: str, component_identities: list[str]
) -> SessionModel:
    """Compose a new compound character from existing characters by identity."""
    if len(identity) != 1:
        raise CharacterError(f"Identity must be a single character, got {identity!r}")
    if find_character(model, identity) is not None:
        raise CharacterError(f"Character {identity!r} already exists")
    if not component_identities:
        raise CharacterError("A compound character needs at least one component")
    components = []
    for component_identity in component_identities:
        found = find_character(model, component_identity)
        if found is None:
            raise CharacterError(f"Unknown component {component_identity!r}")
        components.append(found)
    compound = new_compound_character(identity, components)
    return model.model_copy(update={"characters": [*model.characters, compound]})


def _replace_character(model: SessionModel, updated: Character) -> SessionModel:
    characters = [
        updated if c.identity == updated.identity else c for c in model.characters
    ]
    return model.model_copy(update={"characters": characters})


def _get_compound(model: SessionModel, identity: str) -> CompoundCharacter:
    found = find_character(model, identity)
    if found is None:
        raise CharacterError(f"Unknown character {identity!r}")
    if not isinstance(found, CompoundCharacter):
        raise CharacterError(f"Character {identity!r} is not a compound character")
    return found


def _check_index(compound: CompoundCharacter, index: int) -> None:
    if not 0 <= index < len(compound.components):
        raise CharacterError(
            f"Component index {index} out of range for {compound.identity!r}"
        )


def place_component(
    model: SessionModel,
    identity: str,
    index: int,
    *,
    x: int,
    y: int,
    width: int,
    height: int,
) -> SessionModel:
    """Move or resize the simple component at `index` of a compound character."""
    compound = _get_compound(model, identity)
    _check_index(compound, index)
    component = compound.components[index]
    if not isinstance(component, SimpleCharacter):
        raise CharacterError("Only simple components carry a placement box")
    if width <= 0 or height <= 0:
        raise CharacterError("Component width and height must be positive")
    components = list(compound.components)
    components[index] = component.model_copy(
        update={"x": x, "y": y, "width": width, "height": height}
    )
    return _replace_character(
        model, compound.model_copy(update={"components": components})
    )


def remove_component(model: SessionModel, identity: str, index: int) -> SessionModel:
    compound = _get_compound(model, identity)
    _check_index(compound, index)
    components = [c for i, c in enumerate(compound.components) if i != index]
    return _replace_character(
        model, compound.model_copy(update={"components": components})
    )


def delete_character(model: SessionModel, identity: str) -> SessionModel:
    """Remove a top-level character. Copies already inside compounds stay."""
    characters = [c for c in model.characters if c.identity != identity]
    if len(characters) == len(model.characters):
        raise CharacterError(f"Unknown character {identity!r}")
    return model.model_copy(update={"characters": characters})


# ── Geometry ─────────────────────────────────────────────


def _leaves(character: Character) -> Iterator[SimpleCharacter]:
    # Explicit stack instead of recursion: nesting depth is unbounded.
    stack: list[Character] = [character]
    while stack:
        current = stack.pop()
        if isinstance(current, SimpleCharacter):
            yield current
        else:
            stack.extend(reversed(current.components))


def leaf_count(character: Character) -> int:
    return sum(1 for _ in _leaves(character))


def render_geometry(character: Character, assets: AssetStore) -> list[Box]:
    """Resolve a character into its leaf boxes, in component order.

    Raises MissingAssetError for the first leaf with no asset.
    """
    boxes = []
    for leaf in _leaves(character):
        doc = assets.get(leaf.identity)
        if doc is None:
            raise MissingAssetError(leaf.identity)
        boxes.append(Box(
            identity=leaf.identity,
            x=leaf.x,
            y=leaf.y,
            width=leaf.width,
            height=leaf.height,
            svg=doc.text,
        ))
    return boxes
