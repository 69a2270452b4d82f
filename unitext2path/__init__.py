"""unitext2path: Lay out multi-script text as SVG glyph paths.

This library renders styled text into positioned glyph outlines with:
- Grapheme-aware script and emoji classification
- BiDi support for RTL languages (Arabic, Hebrew, etc.)
- Per-script font fallback chains with a shared, coalescing font cache
- HarfBuzz text shaping with optional stylistic alternates
- Twemoji artwork for emoji sequences

Example:
    >>> from unitext2path import TextNode, TextRenderer
    >>> renderer = TextRenderer()
    >>> renderer.convert_file("input.svg", "output.svg")  # doctest: +SKIP
"""

from unitext2path.api import ConversionResult, TextRenderer
from unitext2path.config import Config
from unitext2path.exceptions import (
    ConfigError,
    EmojiFetchError,
    FontLoadError,
    InvalidInputError,
    RenderTimeoutError,
    ShapingError,
    SVGParseError,
    Text2PathError,
)
from unitext2path.fonts.cache import FontCache
from unitext2path.svg.assembler import RenderedText
from unitext2path.text.node import TextNode

__version__ = "0.1.0"

__all__ = [
    # Main API
    "TextRenderer",
    "TextNode",
    "RenderedText",
    "ConversionResult",
    "Config",
    # Font handling
    "FontCache",
    # Exceptions
    "Text2PathError",
    "FontLoadError",
    "ShapingError",
    "EmojiFetchError",
    "InvalidInputError",
    "SVGParseError",
    "RenderTimeoutError",
    "ConfigError",
    # Metadata
    "__version__",
]
