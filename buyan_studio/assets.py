"""SVG asset documents and the Asset Store type.

The Asset Store maps a one-code-point identity to a parsed SVG document.
Documents keep their source text so the store serialises back to the
identity -> text mapping used by durable storage and backup files.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from pydantic import BaseModel, ConfigDict

SVG_NS = "http://www.w3.org/2000/svg"
EMPTY_SVG = f'<svg xmlns="{SVG_NS}"></svg>'


class SvgParseError(ValueError):
    """Raised when asset text is not well-formed SVG markup."""


class SvgDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str

    @classmethod
    def empty(cls) -> SvgDocument:
        return cls(text=EMPTY_SVG)

    def root(self) -> ET.Element:
        return ET.fromstring(self.text)

    @property
    def is_empty(self) -> bool:
        return len(self.root()) == 0


AssetStore = dict[str, SvgDocument]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_svg(text: str) -> SvgDocument:
    """Validate `text` as SVG markup and wrap it in a document.

    Raises SvgParseError if the text is not XML or its root is not <svg>.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise SvgParseError(f"not well-formed markup: {e}") from e
    if _local_name(root.tag) != "svg":
        raise SvgParseError(f"root element is <{_local_name(root.tag)}>, expected <svg>")
    return SvgDocument(text=text)


def store_to_json(store: AssetStore) -> dict[str, str]:
    """Serialise the store to identity -> SVG text."""
    return {identity: doc.text for identity, doc in store.items()}
