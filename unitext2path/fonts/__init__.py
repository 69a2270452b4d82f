"""Font handling for unitext2path.

This subpackage provides:
- FontHandle: parsed font (fontTools + HarfBuzz) shared between renders
- FontCache: append-only cache with coalesced concurrent loads
- FontResolver: script tag -> candidate family chain
- Loaders: local directories, Google Fonts, chaining
"""

from unitext2path.fonts.cache import FontBytesLoader, FontCache
from unitext2path.fonts.handle import FontHandle
from unitext2path.fonts.loaders import (
    ChainedFontLoader,
    DirectoryFontLoader,
    GoogleFontsLoader,
)
from unitext2path.fonts.resolver import FontResolver, ResolvedFonts

__all__ = [
    "FontBytesLoader",
    "FontCache",
    "FontHandle",
    "FontResolver",
    "ResolvedFonts",
    "ChainedFontLoader",
    "DirectoryFontLoader",
    "GoogleFontsLoader",
]
