"""Glyph placement and SVG fragment assembly.

The assembler walks text runs in display order with a single cursor that
starts at the node's anchor point. Shaped glyphs become ``<path>``
elements carrying their outline in font units plus a transform that
scales to the font size and flips Y (font units are Y-up, SVG is Y-down).
Emoji artwork is inlined as transformed groups, and clusters no font
covers are emitted as native ``<text>`` nodes so something is always
visible.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from xml.etree.ElementTree import Element, SubElement, tostring

from unitext2path.exceptions import ShapingError
from unitext2path.shaping.bidi import visual_clusters
from unitext2path.shaping.harfbuzz import ShapingEngine
from unitext2path.svg.document import register_namespaces, svg_tag
from unitext2path.svg.pathdata import fmt_number, recording_to_path_data
from unitext2path.text.runs import EmojiRun, FallbackRun, FontRun, LineBreak, TextRun
from unitext2path.text.scripts import DEFAULT_SCRIPT_TABLE, ScriptTable, classify

logger = logging.getLogger(__name__)

LINE_HEIGHT = 1.2
# Twemoji artwork is drawn on a 36x36 grid
EMOJI_UNITS = 36.0
EMOJI_ASCENT = 0.75
FALLBACK_ADVANCE = 0.6
CJK_FALLBACK_ADVANCE = 1.0

PLACEHOLDER_FILL = "#FF6B6B"
PLACEHOLDER_STROKE = "#FF4444"

Artwork = Sequence[Element]


@dataclass
class LayoutCursor:
    """Pen position for one text node."""

    x: float
    y: float
    origin_x: float

    @classmethod
    def at(cls, x: float, y: float) -> LayoutCursor:
        return cls(x, y, x)

    def advance(self, dx: float) -> None:
        self.x += dx

    def line_break(self, font_size: float) -> None:
        self.x = self.origin_x
        self.y += LINE_HEIGHT * font_size

    @property
    def width(self) -> float:
        return self.x - self.origin_x


class PlacementKind(Enum):
    GLYPH = "glyph"
    EMOJI = "emoji"
    PLACEHOLDER = "placeholder"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Placement:
    kind: PlacementKind
    x: float
    y: float
    advance: float
    glyph_id: int | None = None
    cluster: str | None = None


@dataclass
class RenderedText:
    """Assembled fragment for one text node."""

    element: Element
    width: float
    cursor: LayoutCursor
    placements: list[Placement] = field(default_factory=list)

    def to_string(self) -> str:
        register_namespaces()
        return tostring(self.element, encoding="unicode")

    def count(self, kind: PlacementKind) -> int:
        return sum(1 for p in self.placements if p.kind is kind)


class PathAssembler:
    """Turns text runs into positioned SVG elements.

    Args:
        engine: Shaper used for font runs.
        table: Script table, consulted for fallback font-family names and
            CJK advances.
        precision: Decimal places in path data and coordinates.
        emoji_placeholder: Draw a circle when emoji artwork is missing;
            when False the emoji is left out (its advance is kept).
    """

    def __init__(
        self,
        engine: ShapingEngine | None = None,
        table: ScriptTable = DEFAULT_SCRIPT_TABLE,
        precision: int = 2,
        emoji_placeholder: bool = True,
    ) -> None:
        self.engine = engine or ShapingEngine()
        self.table = table
        self.precision = precision
        self.emoji_placeholder = emoji_placeholder

    def _fmt(self, value: float) -> str:
        return fmt_number(value, self.precision)

    def assemble(
        self,
        runs: Iterable[TextRun],
        x: float,
        y: float,
        font_size: float,
        fill: str = "black",
        anchor: str = "start",
        artwork: Mapping[str, Artwork | None] | None = None,
    ) -> RenderedText:
        """Place ``runs`` (already in display order) starting at ``(x, y)``."""
        artwork = artwork or {}
        cursor = LayoutCursor.at(x, y)
        group = Element(svg_tag("g"), {"fill": fill})
        placements: list[Placement] = []

        for run in runs:
            if isinstance(run, LineBreak):
                cursor.line_break(font_size)
            elif isinstance(run, EmojiRun):
                for cluster in visual_clusters(run.clusters, run.direction):
                    placements.append(self._emit_emoji(group, cluster, artwork.get(cluster), cursor, font_size))
            elif isinstance(run, FallbackRun):
                pairs = list(zip(run.clusters, run.scripts))
                for cluster, script in visual_clusters(pairs, run.direction):
                    placements.append(self._emit_fallback(group, cluster, script, cursor, font_size))
            elif isinstance(run, FontRun):
                placements.extend(self._emit_glyphs(group, run, cursor, font_size))
            else:
                raise TypeError(f"unknown run type: {type(run).__name__}")

        width = cursor.width
        element = group
        shift = {"middle": -width / 2, "end": -width}.get(anchor)
        if shift:
            element = Element(svg_tag("g"), {"transform": f"translate({self._fmt(shift)} 0)"})
            element.append(group)

        return RenderedText(element=element, width=width, cursor=cursor, placements=placements)

    def _emit_glyphs(
        self, parent: Element, run: FontRun, cursor: LayoutCursor, font_size: float
    ) -> list[Placement]:
        try:
            glyphs = self.engine.shape(run.font, run.text, run.direction, run.is_primary)
        except ShapingError as e:
            logger.warning("%s; rendering %d clusters as text", e, len(run.clusters))
            return [
                self._emit_fallback(parent, cluster, classify(cluster, self.table).script, cursor, font_size)
                for cluster in visual_clusters(run.clusters, run.direction)
            ]

        scale = font_size / run.font.units_per_em
        scale_text = fmt_number(scale, max(self.precision, 6))
        placements = []
        for glyph in glyphs:
            gx = cursor.x + glyph.x_offset * scale
            gy = cursor.y - glyph.y_offset * scale
            outline = run.font.glyph_outline(glyph.glyph_id)
            path_data = recording_to_path_data(outline, self.precision) if outline else ""
            if path_data:
                SubElement(
                    parent,
                    svg_tag("path"),
                    {
                        "d": path_data,
                        "transform": f"translate({self._fmt(gx)} {self._fmt(gy)}) scale({scale_text} -{scale_text})",
                    },
                )
            advance = glyph.x_advance * scale
            placements.append(Placement(PlacementKind.GLYPH, gx, gy, advance, glyph_id=glyph.glyph_id))
            cursor.advance(advance)
        return placements

    def _emit_emoji(
        self,
        parent: Element,
        cluster: str,
        art: Artwork | None,
        cursor: LayoutCursor,
        font_size: float,
    ) -> Placement:
        x, y = cursor.x, cursor.y
        if art:
            group = SubElement(
                parent,
                svg_tag("g"),
                {
                    "transform": (
                        f"translate({self._fmt(x)} {self._fmt(y - EMOJI_ASCENT * font_size)}) "
                        f"scale({fmt_number(font_size / EMOJI_UNITS, max(self.precision, 6))})"
                    )
                },
            )
            for child in art:
                group.append(copy.deepcopy(child))
            kind = PlacementKind.EMOJI
        else:
            if self.emoji_placeholder:
                radius = font_size / 2
                SubElement(
                    parent,
                    svg_tag("circle"),
                    {
                        "cx": self._fmt(x + radius),
                        "cy": self._fmt(y - radius),
                        "r": self._fmt(radius),
                        "fill": PLACEHOLDER_FILL,
                        "stroke": PLACEHOLDER_STROKE,
                        "stroke-width": "2",
                    },
                )
            kind = PlacementKind.PLACEHOLDER
        cursor.advance(font_size)
        return Placement(kind, x, y, font_size, cluster=cluster)

    def _emit_fallback(
        self,
        parent: Element,
        cluster: str,
        script: str | None,
        cursor: LayoutCursor,
        font_size: float,
    ) -> Placement:
        x, y = cursor.x, cursor.y
        node = SubElement(
            parent,
            svg_tag("text"),
            {
                "x": self._fmt(x),
                "y": self._fmt(y),
                "font-family": self.table.css_family(script),
                "font-size": self._fmt(font_size),
            },
        )
        node.text = cluster
        ratio = CJK_FALLBACK_ADVANCE if self.table.is_cjk(script) else FALLBACK_ADVANCE
        advance = ratio * font_size
        cursor.advance(advance)
        return Placement(PlacementKind.FALLBACK, x, y, advance, cluster=cluster)
