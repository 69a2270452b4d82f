"""SVG output and document handling for unitext2path.

This subpackage provides:
- Safe SVG parsing with XXE protection (defusedxml)
- Text element extraction (text, tspan) into TextNodes
- Glyph outline to path data conversion
- The path assembler that places glyphs, emoji and fallback text
"""

from unitext2path.svg.assembler import LayoutCursor, PathAssembler, Placement, PlacementKind, RenderedText
from unitext2path.svg.document import (
    find_text_elements,
    parse_svg,
    parse_svg_string,
    text_node_from_element,
    to_string,
)
from unitext2path.svg.pathdata import recording_to_path_data

__all__ = [
    "LayoutCursor",
    "PathAssembler",
    "Placement",
    "PlacementKind",
    "RenderedText",
    "find_text_elements",
    "parse_svg",
    "parse_svg_string",
    "text_node_from_element",
    "to_string",
    "recording_to_path_data",
]
