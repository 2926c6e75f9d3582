"""Compose a character's leaf boxes into a single SVG document.

Each box's artwork is wrapped in a <g> translated to the box origin and
scaled from its own viewBox to the box size. Used by the boundary when
exporting a character.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from buyan_studio.assets import SVG_NS
from buyan_studio.models import Box

ET.register_namespace("", SVG_NS)


def parse_viewbox(root: ET.Element) -> tuple[float, float, float, float]:
    """Return (min_x, min_y, width, height), falling back to width/height attributes."""
    vb = root.get("viewBox")
    if vb:
        try:
            parts = [float(p) for p in vb.replace(",", " ").split()]
        except ValueError:
            parts = []
        if len(parts) == 4 and parts[2] > 0 and parts[3] > 0:
            return parts[0], parts[1], parts[2], parts[3]
    width = _length(root.get("width"))
    height = _length(root.get("height"))
    return 0.0, 0.0, width, height


def _length(value: str | None, default: float = 100.0) -> float:
    if not value:
        return default
    try:
        number = float(value.rstrip("px"))
    except ValueError:
        return default
    return number if number > 0 else default


def compose_svg(boxes: list[Box], size: int) -> str:
    """Return SVG text of all boxes drawn on a size × size canvas."""
    root = ET.Element(f"{{{SVG_NS}}}svg", {
        "viewBox": f"0 0 {size} {size}",
        "width": str(size),
        "height": str(size),
    })
    for box in boxes:
        art = ET.fromstring(box.svg)
        x0, y0, w, h = parse_viewbox(art)
        sx, sy = box.width / w, box.height / h
        group = ET.SubElement(root, f"{{{SVG_NS}}}g", {
            "data-identity": box.identity,
            "transform": f"translate({box.x - x0 * sx},{box.y - y0 * sy}) scale({sx},{sy})",
        })
        for child in list(art):
            group.append(child)
    return ET.tostring(root, encoding="unicode")
