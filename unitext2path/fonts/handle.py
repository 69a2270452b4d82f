"""Loaded font wrapper shared between renders."""

from __future__ import annotations

import io
import logging
import threading

import uharfbuzz as hb
from fontTools.pens.recordingPen import DecomposingRecordingPen
from fontTools.ttLib import TTFont

from unitext2path.exceptions import FontLoadError
from unitext2path.text.scripts import is_ignorable

logger = logging.getLogger(__name__)

Recording = list[tuple[str, tuple]]


class FontHandle:
    """An immutable, parsed font: fontTools tables plus a HarfBuzz font.

    Tables needed during layout are decompiled up front so concurrent
    renders only read from the handle. Glyph outlines are memoized under a
    lock because fontTools expands glyphs lazily.
    """

    def __init__(self, data: bytes, family: str, weight: int = 400, face_index: int = 0) -> None:
        self.family = family
        self.weight = weight
        self.data = data
        self.face_index = face_index

        self.ttfont = TTFont(io.BytesIO(data), fontNumber=face_index, lazy=False)
        self.units_per_em: int = self.ttfont["head"].unitsPerEm
        self.cmap: dict[int, str] = dict(self.ttfont.getBestCmap() or {})
        self.glyph_order: list[str] = self.ttfont.getGlyphOrder()
        self._glyph_set = self.ttfont.getGlyphSet()
        self._hmtx = self.ttfont["hmtx"]
        self.gsub = self.ttfont["GSUB"].table if "GSUB" in self.ttfont else None

        face = hb.Face(hb.Blob(data), face_index)
        self.hb_font = hb.Font(face)
        self.hb_font.scale = (self.units_per_em, self.units_per_em)

        self._outlines: dict[int, Recording] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_bytes(cls, data: bytes, family: str, weight: int = 400, face_index: int = 0) -> FontHandle:
        """Parse font bytes, wrapping any parser failure in FontLoadError."""
        if not data:
            raise FontLoadError(family, weight, "empty font data")
        try:
            return cls(data, family, weight, face_index)
        except FontLoadError:
            raise
        except Exception as e:
            raise FontLoadError(family, weight, str(e)) from e

    def __repr__(self) -> str:
        return f"FontHandle({self.family!r}, weight={self.weight}, upem={self.units_per_em})"

    @property
    def glyph_count(self) -> int:
        return len(self.glyph_order)

    def has_char(self, ch: str) -> bool:
        name = self.cmap.get(ord(ch))
        return name is not None and name != ".notdef"

    def covers(self, cluster: str) -> bool:
        """True if every non-ignorable code point of ``cluster`` maps to a glyph."""
        needed = [ch for ch in cluster if not is_ignorable(ord(ch))]
        return bool(needed) and all(self.has_char(ch) for ch in needed)

    def feature_tags(self) -> list[str]:
        """GSUB feature tags declared by the font."""
        if self.gsub is None or self.gsub.FeatureList is None:
            return []
        return sorted({fr.FeatureTag for fr in self.gsub.FeatureList.FeatureRecord})

    def glyph_id(self, name: str) -> int:
        return self.ttfont.getGlyphID(name)

    def advance_width(self, glyph_id: int, default: int = 0) -> int:
        """Horizontal advance from hmtx, in font units."""
        if not 0 <= glyph_id < len(self.glyph_order):
            return default
        metrics = self._hmtx.metrics.get(self.glyph_order[glyph_id])
        return metrics[0] if metrics else default

    def glyph_outline(self, glyph_id: int) -> Recording:
        """Pen recording of a glyph in font units (Y up); empty for blank glyphs."""
        with self._lock:
            cached = self._outlines.get(glyph_id)
            if cached is not None:
                return cached
            if not 0 <= glyph_id < len(self.glyph_order):
                return []
            pen = DecomposingRecordingPen(self._glyph_set)
            try:
                self._glyph_set[self.glyph_order[glyph_id]].draw(pen)
            except Exception as e:
                logger.warning("Cannot draw glyph %d of %s: %s", glyph_id, self.family, e)
                return []
            self._outlines[glyph_id] = pen.value
            return pen.value
