"""Text shaping for unitext2path.

This subpackage provides:
- BiDi (bidirectional) run resolution and visual ordering
- HarfBuzz text shaping adapter
- Single-substitution tables for stylistic alternates
"""

from unitext2path.shaping.bidi import (
    BidiRun,
    Direction,
    embedding_levels,
    resolve,
    visual_clusters,
    visual_order,
)
from unitext2path.shaping.harfbuzz import (
    ShapedGlyph,
    ShapingEngine,
    apply_substitutions,
    shape,
)
from unitext2path.shaping.substitution import build_substitution_table

__all__ = [
    "BidiRun",
    "Direction",
    "embedding_levels",
    "resolve",
    "visual_clusters",
    "visual_order",
    "ShapedGlyph",
    "ShapingEngine",
    "apply_substitutions",
    "shape",
    "build_substitution_table",
]
