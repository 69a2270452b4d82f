"""Text analysis for unitext2path.

This subpackage provides:
- Grapheme cluster segmentation
- Script and emoji classification with the configurable script table
- The TextNode input record
- Run segmentation (``unitext2path.text.runs``), which depends on the
  fonts subpackage and is therefore not re-exported here
"""

from unitext2path.text.graphemes import segment
from unitext2path.text.node import TextNode
from unitext2path.text.scripts import (
    DEFAULT_SCRIPT_TABLE,
    Classification,
    ClusterKind,
    ScriptEntry,
    ScriptTable,
    classify,
)

__all__ = [
    "segment",
    "TextNode",
    "classify",
    "Classification",
    "ClusterKind",
    "ScriptEntry",
    "ScriptTable",
    "DEFAULT_SCRIPT_TABLE",
]
