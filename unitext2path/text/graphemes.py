"""Extended grapheme cluster segmentation (UAX #29)."""

from __future__ import annotations

import regex

_GRAPHEME_RE = regex.compile(r"\X", regex.UNICODE)


def segment(text: str) -> list[str]:
    """Split ``text`` into user-perceived characters.

    Combining marks, ZWJ emoji sequences, regional-indicator flags and
    keycap sequences each stay a single cluster. ``"\\r\\n"`` is one cluster.
    """
    if not text:
        return []
    return _GRAPHEME_RE.findall(text)
