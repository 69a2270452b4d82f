"""Script and emoji classification of grapheme clusters.

Classification looks at a cluster as a whole:

1. Emoji wins over everything else. A cluster is emoji when its leading
   code point falls in one of ``EMOJI_RANGES``, when it contains the
   combining keycap (U+20E3), or when a base from ``EMOJI_VS16_BASES`` is
   followed by the emoji variation selector (U+FE0F).
2. Otherwise the leading code point is looked up in the ordered script
   table; the first entry whose ranges contain it decides the script tag.
3. Otherwise whitespace, punctuation and decimal digits are *neutral*, and
   everything else is *unclassified* (primary-font territory).
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

KEYCAP = "\u20e3"
VS16 = "\ufe0f"
ZWJ = "\u200d"

EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F000, 0x1FAFF),
)

# Text-default symbols that become emoji when followed by U+FE0F.
EMOJI_VS16_BASES: tuple[tuple[int, int], ...] = (
    (0x00A9, 0x00A9),
    (0x00AE, 0x00AE),
    (0x203C, 0x203C),
    (0x2049, 0x2049),
    (0x2122, 0x2122),
    (0x2139, 0x2139),
    (0x2194, 0x21AA),
    (0x231A, 0x23FF),
    (0x24C2, 0x24C2),
    (0x25AA, 0x25FE),
    (0x2600, 0x27BF),
    (0x2934, 0x2935),
    (0x2B05, 0x2B55),
    (0x3030, 0x3030),
    (0x303D, 0x303D),
    (0x3297, 0x3297),
    (0x3299, 0x3299),
)

# Code points that never need a glyph of their own in a covering font.
IGNORABLE_RANGES: tuple[tuple[int, int], ...] = (
    (0x00AD, 0x00AD),
    (0x200B, 0x200F),
    (0x202A, 0x202E),
    (0x2060, 0x2064),
    (0x2066, 0x206F),
    (0xFE00, 0xFE0F),
    (0xFEFF, 0xFEFF),
    (0xE0000, 0xE0FFF),
)

GENERIC_CSS_FAMILY = "Arial, sans-serif"


def _in_ranges(cp: int, ranges: Iterable[tuple[int, int]]) -> bool:
    return any(start <= cp <= end for start, end in ranges)


def is_ignorable(cp: int) -> bool:
    """Return True for default-ignorable code points (joiners, selectors...)."""
    return _in_ranges(cp, IGNORABLE_RANGES)


@dataclass(frozen=True)
class ScriptEntry:
    """One row of the script table: code-point ranges mapped to font families.

    Family identifiers use the ``Noto+Sans+Arabic`` form accepted by the
    Google Fonts CSS API; ``+`` stands for a space.
    """

    tag: str
    ranges: tuple[tuple[int, int], ...]
    families: tuple[str, ...]
    cjk: bool = False

    def contains(self, cp: int) -> bool:
        return _in_ranges(cp, self.ranges)


DEFAULT_SCRIPT_ENTRIES: tuple[ScriptEntry, ...] = (
    ScriptEntry(
        "Arab",
        ((0x0600, 0x06FF), (0x0750, 0x077F), (0x08A0, 0x08FF), (0xFB50, 0xFDFF), (0xFE70, 0xFEFC)),
        ("Noto+Naskh+Arabic", "Noto+Sans+Arabic", "Amiri", "Cairo"),
    ),
    ScriptEntry("Hebr", ((0x0590, 0x05FF), (0xFB1D, 0xFB4F)), ("Noto+Sans+Hebrew",)),
    ScriptEntry(
        "Hani",
        ((0x3400, 0x4DBF), (0x4E00, 0x9FFF), (0xF900, 0xFAFF), (0x3000, 0x303F)),
        ("Noto+Sans+SC",),
        cjk=True,
    ),
    ScriptEntry("Hira", ((0x3040, 0x309F),), ("Noto+Sans+JP", "Noto+Sans+SC"), cjk=True),
    ScriptEntry("Kana", ((0x30A0, 0x30FF), (0x31F0, 0x31FF)), ("Noto+Sans+JP", "Noto+Sans+SC"), cjk=True),
    ScriptEntry(
        "Hang",
        ((0xAC00, 0xD7AF), (0x1100, 0x11FF), (0x3130, 0x318F)),
        ("Noto+Sans+KR", "Noto+Sans+SC"),
        cjk=True,
    ),
    ScriptEntry("Deva", ((0x0900, 0x097F), (0xA8E0, 0xA8FF)), ("Noto+Sans+Devanagari",)),
    ScriptEntry("Beng", ((0x0980, 0x09FF),), ("Noto+Sans+Bengali",)),
    ScriptEntry("Guru", ((0x0A00, 0x0A7F),), ("Noto+Sans+Gurmukhi",)),
    ScriptEntry("Gujr", ((0x0A80, 0x0AFF),), ("Noto+Sans+Gujarati",)),
    ScriptEntry("Taml", ((0x0B80, 0x0BFF),), ("Noto+Sans+Tamil",)),
    ScriptEntry("Telu", ((0x0C00, 0x0C7F),), ("Noto+Sans+Telugu",)),
    ScriptEntry("Knda", ((0x0C80, 0x0CFF),), ("Noto+Sans+Kannada",)),
    ScriptEntry("Mlym", ((0x0D00, 0x0D7F),), ("Noto+Sans+Malayalam",)),
    ScriptEntry("Thai", ((0x0E00, 0x0E7F),), ("Noto+Sans+Thai",)),
    ScriptEntry("Laoo", ((0x0E80, 0x0EFF),), ("Noto+Sans+Lao",)),
    ScriptEntry("Mymr", ((0x1000, 0x109F),), ("Noto+Sans+Myanmar",)),
    ScriptEntry("Armn", ((0x0530, 0x058F),), ("Noto+Sans+Armenian",)),
    ScriptEntry("Geor", ((0x10A0, 0x10FF),), ("Noto+Sans+Georgian",)),
    ScriptEntry("Cyrl", ((0x0400, 0x04FF),), ("Noto+Sans",)),
    ScriptEntry("Grek", ((0x0370, 0x03FF),), ("Noto+Sans",)),
)


class ScriptTable:
    """Ordered, immutable mapping of code-point ranges to script tags and families.

    The table is the configuration surface for script fonts. Instances never
    change; ``extended()`` returns a new table with additional entries placed
    ahead of the existing ones (an entry reusing a tag replaces the old row).
    """

    def __init__(self, entries: Iterable[ScriptEntry]) -> None:
        self._entries: tuple[ScriptEntry, ...] = tuple(entries)
        self._by_tag: dict[str, ScriptEntry] = {}
        for entry in self._entries:
            self._by_tag.setdefault(entry.tag, entry)

    @property
    def entries(self) -> tuple[ScriptEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def extended(self, entries: Iterable[ScriptEntry]) -> ScriptTable:
        new = tuple(entries)
        replaced = {e.tag for e in new}
        return ScriptTable(new + tuple(e for e in self._entries if e.tag not in replaced))

    def script_for(self, cp: int) -> str | None:
        """Return the tag of the first entry covering ``cp``."""
        for entry in self._entries:
            if entry.contains(cp):
                return entry.tag
        return None

    def families(self, tag: str | None) -> tuple[str, ...] | None:
        entry = self._by_tag.get(tag) if tag else None
        return entry.families if entry else None

    def is_cjk(self, tag: str | None) -> bool:
        entry = self._by_tag.get(tag) if tag else None
        return bool(entry and entry.cjk)

    def css_family(self, tag: str | None) -> str:
        """CSS ``font-family`` value used for native-text fallback nodes."""
        families = self.families(tag)
        if not families:
            return GENERIC_CSS_FAMILY
        name = families[0].replace("+", " ")
        return f"'{name}', sans-serif"


DEFAULT_SCRIPT_TABLE = ScriptTable(DEFAULT_SCRIPT_ENTRIES)


class ClusterKind(Enum):
    EMOJI = "emoji"
    SCRIPT = "script"
    NEUTRAL = "neutral"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class Classification:
    kind: ClusterKind
    script: str | None = None

    @property
    def is_emoji(self) -> bool:
        return self.kind is ClusterKind.EMOJI

    @property
    def is_neutral(self) -> bool:
        return self.kind is ClusterKind.NEUTRAL


EMOJI = Classification(ClusterKind.EMOJI)
NEUTRAL = Classification(ClusterKind.NEUTRAL)
UNCLASSIFIED = Classification(ClusterKind.UNCLASSIFIED)


def is_emoji(cluster: str) -> bool:
    if not cluster:
        return False
    if _in_ranges(ord(cluster[0]), EMOJI_RANGES):
        return True
    if KEYCAP in cluster:
        return True
    return VS16 in cluster and _in_ranges(ord(cluster[0]), EMOJI_VS16_BASES)


def is_neutral(cluster: str) -> bool:
    """Whitespace, punctuation or a decimal digit (judged by the leading code point)."""
    if not cluster:
        return False
    ch = cluster[0]
    if ch.isspace():
        return True
    category = unicodedata.category(ch)
    return category[0] in ("Z", "P") or category == "Nd"


def classify(cluster: str, table: ScriptTable = DEFAULT_SCRIPT_TABLE) -> Classification:
    """Classify a grapheme cluster as emoji, a script, neutral or unclassified."""
    if is_emoji(cluster):
        return EMOJI
    if cluster:
        tag = table.script_for(ord(cluster[0]))
        if tag is not None:
            return Classification(ClusterKind.SCRIPT, tag)
    if is_neutral(cluster):
        return NEUTRAL
    return UNCLASSIFIED
