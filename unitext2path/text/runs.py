"""Run segmentation: assign a font source per cluster and merge neighbours.

Font sources are chosen per grapheme cluster, in priority order:

    emoji > script font > primary font > generic fallback font > no font

A font is only chosen if it covers the cluster. Inside an rtl bidi run, a
neutral cluster (space, punctuation, digit) without a script match reuses
the font of the closest preceding non-neutral cluster of the same run, so
punctuation inside an Arabic or Hebrew phrase is shaped with that phrase.
A neutral cluster that opens an rtl run has nothing to inherit and goes
down the normal chain.

Clusters made only of default-ignorable code points (ZWSP, LRM/RLM, bidi
embedding controls, BOM) never start a run of their own: they join the
pending font run, where HarfBuzz gives them zero width, or are dropped.

Adjacent clusters that end up with the same source are merged into one
run, so the number of shaping calls follows font switches rather than the
number of characters.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from unitext2path.fonts.handle import FontHandle
from unitext2path.fonts.resolver import ResolvedFonts
from unitext2path.shaping.bidi import BidiRun, Direction
from unitext2path.text.graphemes import segment
from unitext2path.text.scripts import DEFAULT_SCRIPT_TABLE, ScriptTable, classify, is_ignorable


@dataclass(frozen=True)
class EmojiRun:
    clusters: tuple[str, ...]
    direction: Direction = Direction.LTR


@dataclass(frozen=True)
class FontRun:
    clusters: tuple[str, ...]
    font: FontHandle
    direction: Direction = Direction.LTR
    is_primary: bool = False

    @property
    def text(self) -> str:
        return "".join(self.clusters)


@dataclass(frozen=True)
class FallbackRun:
    """Clusters no loaded font covers; rendered as native text one by one."""

    clusters: tuple[str, ...]
    scripts: tuple[str | None, ...]
    direction: Direction = Direction.LTR


@dataclass(frozen=True)
class LineBreak:
    pass


LINE_BREAK = LineBreak()

TextRun = Union[EmojiRun, FontRun, FallbackRun, LineBreak]


def _pick_font(cluster: str, *candidates: FontHandle | None) -> FontHandle | None:
    for font in candidates:
        if font is not None and font.covers(cluster):
            return font
    return None


def segment_runs(
    run: BidiRun,
    fonts: ResolvedFonts,
    table: ScriptTable = DEFAULT_SCRIPT_TABLE,
    enable_emoji: bool = True,
) -> list[TextRun]:
    """Split one bidi run into text runs, in logical (storage) order."""
    runs: list[TextRun] = []
    pending: list[str] = []
    pending_scripts: list[str | None] = []
    pending_key: tuple | None = None
    pending_font: FontHandle | None = None

    def flush() -> None:
        nonlocal pending, pending_scripts, pending_key, pending_font
        if pending:
            kind = pending_key[0]
            if kind == "emoji":
                runs.append(EmojiRun(tuple(pending), run.direction))
            elif kind == "font":
                runs.append(
                    FontRun(
                        tuple(pending),
                        pending_font,
                        run.direction,
                        is_primary=pending_font is fonts.primary,
                    )
                )
            else:
                runs.append(FallbackRun(tuple(pending), tuple(pending_scripts), run.direction))
        pending, pending_scripts, pending_key, pending_font = [], [], None, None

    inherited: FontHandle | None = None
    for cluster in segment(run.text):
        if "\n" in cluster:
            flush()
            runs.append(LINE_BREAK)
            inherited = None
            continue
        if cluster == "\r":
            continue
        if all(is_ignorable(ord(ch)) for ch in cluster):
            # zero-width format characters are shaped with the current font run
            if pending_key is not None and pending_key[0] == "font":
                pending.append(cluster)
                pending_scripts.append(None)
            continue

        info = classify(cluster, table)
        font: FontHandle | None = None
        if info.is_emoji and enable_emoji:
            key: tuple = ("emoji",)
        else:
            if info.is_neutral and run.is_rtl:
                font = _pick_font(cluster, fonts.script_font(info.script), inherited)
            font = font or _pick_font(
                cluster, fonts.script_font(info.script), fonts.primary, fonts.fallback
            )
            key = ("font", id(font)) if font is not None else ("none",)

        if not info.is_neutral:
            inherited = font

        if key != pending_key:
            flush()
            pending_key, pending_font = key, font
        pending.append(cluster)
        pending_scripts.append(info.script)

    flush()
    return runs


def visual_runs(runs: Sequence[TextRun], direction: Direction) -> list[TextRun]:
    """Display order of the text runs of one bidi run.

    Within an rtl run the runs between line breaks are reversed; clusters
    inside emoji and fallback runs are reversed later by the assembler, and
    shaped runs come back from the shaper already in visual order.
    """
    if direction is Direction.LTR:
        return list(runs)
    ordered: list[TextRun] = []
    line: list[TextRun] = []
    for item in runs:
        if isinstance(item, LineBreak):
            ordered.extend(reversed(line))
            ordered.append(item)
            line = []
        else:
            line.append(item)
    ordered.extend(reversed(line))
    return ordered
