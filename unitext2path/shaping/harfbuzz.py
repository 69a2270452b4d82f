"""HarfBuzz shaping adapter.

Builds the HarfBuzz buffer with the direction of the owning bidi run
(never re-guessed per character), shapes with the requested OpenType
features, and normalizes the result into ShapedGlyph records in font
units. Scaling to the output size is left to the caller.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import uharfbuzz as hb

from unitext2path.exceptions import ShapingError
from unitext2path.fonts.handle import FontHandle
from unitext2path.shaping.bidi import Direction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShapedGlyph:
    glyph_id: int
    x_advance: int
    y_advance: int
    x_offset: int
    y_offset: int
    cluster: int = 0


def hb_features(tags: Iterable[str]) -> dict[str, bool]:
    """Feature dict for ``hb.shape``; a leading ``-`` turns a feature off."""
    features: dict[str, bool] = {}
    for tag in tags:
        tag = tag.strip()
        if tag.startswith("-"):
            features[tag[1:]] = False
        elif tag:
            features[tag] = True
    return features


def shape(
    font: FontHandle,
    text: str,
    features: Iterable[str] = (),
    direction: Direction = Direction.LTR,
) -> list[ShapedGlyph]:
    """Shape ``text`` with ``font``; glyphs come back in visual order.

    Raises:
        ShapingError: HarfBuzz rejected the input.
    """
    if not text:
        return []

    buf = hb.Buffer()
    buf.add_str(text)
    buf.direction = direction.value
    buf.guess_segment_properties()
    try:
        hb.shape(font.hb_font, buf, hb_features(features))
    except Exception as e:
        raise ShapingError(font.family, text, str(e)) from e

    infos = buf.glyph_infos
    positions = buf.glyph_positions
    if infos is None or positions is None or len(infos) != len(positions):
        raise ShapingError(font.family, text, "shaper returned inconsistent buffers")

    return [
        ShapedGlyph(
            glyph_id=info.codepoint,
            x_advance=pos.x_advance,
            y_advance=pos.y_advance,
            x_offset=pos.x_offset,
            y_offset=pos.y_offset,
            cluster=info.cluster,
        )
        for info, pos in zip(infos, positions)
    ]


def apply_substitutions(
    font: FontHandle,
    glyphs: Iterable[ShapedGlyph],
    table: Mapping[int, int],
) -> list[ShapedGlyph]:
    """Swap default glyphs for their alternates, taking the alternate's advance."""
    result = []
    for glyph in glyphs:
        alternate = table.get(glyph.glyph_id)
        if alternate is None:
            result.append(glyph)
            continue
        result.append(
            dataclasses.replace(
                glyph,
                glyph_id=alternate,
                x_advance=font.advance_width(alternate, glyph.x_advance),
            )
        )
    return result


class ShapingEngine:
    """Shapes font runs with one set of features.

    The substitution table belongs to the primary font and is applied only
    to runs shaped with it; script and fallback fonts are left alone.
    """

    def __init__(
        self,
        features: Iterable[str] = (),
        substitutions: Mapping[int, int] | None = None,
    ) -> None:
        self.features = tuple(features)
        self.substitutions = dict(substitutions or {})

    def shape(
        self,
        font: FontHandle,
        text: str,
        direction: Direction = Direction.LTR,
        is_primary: bool = False,
    ) -> list[ShapedGlyph]:
        glyphs = shape(font, text, self.features, direction)
        if is_primary and self.substitutions:
            glyphs = apply_substitutions(font, glyphs, self.substitutions)
        return glyphs
