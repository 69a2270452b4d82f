"""Unicode bidirectional (BiDi) analysis.

Embedding levels come from python-bidi's implementation of the Unicode
Bidirectional Algorithm. The paragraph direction is always left-to-right;
it is never guessed from the text. Levels are then folded into maximal
runs of equal parity, each tagged ``ltr`` or ``rtl``.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from bidi.algorithm import (
    explicit_embed_and_overrides,
    get_embedding_levels,
    get_empty_storage,
    resolve_implicit_levels,
    resolve_neutral_types,
    resolve_weak_types,
)

BASE_LEVEL = 0

# Characters dropped from the level stream by rule X9.
_X9_REMOVED = frozenset(("RLE", "LRE", "RLO", "LRO", "PDF", "BN"))

T = TypeVar("T")


class Direction(str, Enum):
    LTR = "ltr"
    RTL = "rtl"

    @classmethod
    def from_level(cls, level: int) -> Direction:
        return cls.RTL if level % 2 else cls.LTR


@dataclass(frozen=True)
class BidiRun:
    """A maximal substring with one resolved direction.

    ``start`` is the offset into the original text, ``level`` the lowest
    embedding level inside the run (used to order runs visually).
    """

    text: str
    direction: Direction
    start: int
    level: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def is_rtl(self) -> bool:
        return self.direction is Direction.RTL


def embedding_levels(text: str) -> list[int]:
    """Return one resolved embedding level per code point of ``text``."""
    if not text:
        return []

    storage = get_empty_storage()
    storage["base_level"] = BASE_LEVEL
    storage["base_dir"] = "L"
    get_embedding_levels(text, storage)
    explicit_embed_and_overrides(storage)
    resolve_weak_types(storage)
    resolve_neutral_types(storage, False)
    resolve_implicit_levels(storage, False)

    resolved = iter([ch["level"] for ch in storage["chars"]])
    levels: list[int] = []
    previous = BASE_LEVEL
    for ch in text:
        # Explicit formatting characters were removed; they take the level
        # of whatever precedes them.
        if unicodedata.bidirectional(ch) not in _X9_REMOVED:
            previous = next(resolved, previous)
        levels.append(previous)
    return levels


def runs_from_levels(text: str, levels: Sequence[int]) -> list[BidiRun]:
    """Fold a level sequence into maximal same-parity runs."""
    if len(text) != len(levels):
        raise ValueError("levels must have one entry per code point")

    runs: list[BidiRun] = []
    start = 0
    for i in range(1, len(text) + 1):
        if i < len(text) and levels[i] % 2 == levels[start] % 2:
            continue
        runs.append(
            BidiRun(
                text=text[start:i],
                direction=Direction.from_level(levels[start]),
                start=start,
                level=min(levels[start:i]),
            )
        )
        start = i
    return runs


def resolve(text: str) -> list[BidiRun]:
    """Split ``text`` into direction runs in logical order.

    The runs partition the text: concatenating ``run.text`` in order gives
    back ``text`` exactly.
    """
    if not text:
        return []
    return runs_from_levels(text, embedding_levels(text))


def visual_order(runs: Sequence[BidiRun]) -> list[BidiRun]:
    """Order runs for display (rule L2 applied at run granularity)."""
    order = list(runs)
    odd_levels = [r.level for r in order if r.level % 2]
    if not odd_levels:
        return order

    lowest_odd = min(odd_levels)
    for level in range(max(r.level for r in order), lowest_odd - 1, -1):
        i = 0
        while i < len(order):
            if order[i].level < level:
                i += 1
                continue
            j = i
            while j < len(order) and order[j].level >= level:
                j += 1
            order[i:j] = order[i:j][::-1]
            i = j
    return order


def visual_clusters(clusters: Sequence[T], direction: Direction) -> list[T]:
    """Display order of the clusters of one run.

    Reversal happens per grapheme cluster, so combining marks stay attached
    to their base.
    """
    if direction is Direction.RTL:
        return list(reversed(clusters))
    return list(clusters)
