"""Pytest configuration and shared fixtures for unitext2path tests.

Fonts are synthesized with fontTools.fontBuilder: every mapped character
gets a box glyph (the space gets an empty one), so tests need neither
system fonts nor network access.
"""

from __future__ import annotations

import io
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from unitext2path.config import Config
from unitext2path.exceptions import EmojiFetchError, FontLoadError
from unitext2path.fonts.handle import FontHandle

LATIN = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789 !?.,"
ARABIC = "مرحباعلم !"
HEBREW = "שלוםאבג "

EMOJI_ARTWORK = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 36 36">'
    '<circle fill="#FFCC4D" cx="18" cy="18" r="18"/>'
    "</svg>"
)


def glyph_name(ch: str) -> str:
    if ch == " ":
        return "space"
    cp = ord(ch)
    return f"uni{cp:04X}" if cp <= 0xFFFF else f"u{cp:05X}"


def _box(advance: int):
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((advance - 50, 700))
    pen.lineTo((advance - 50, 0))
    pen.closePath()
    return pen.glyph()


def _empty():
    return TTGlyphPen(None).glyph()


def build_font(
    chars: Iterable[str],
    upem: int = 1000,
    advance: int = 500,
    family: str = "Test Sans",
    alternates: Mapping[str, int] | None = None,
    fea: str | None = None,
) -> bytes:
    """TrueType font bytes covering ``chars``.

    ``alternates`` maps characters to the advance of a ``.ss01`` alternate
    glyph; an ``ss01`` feature substituting them is added automatically.
    """
    glyph_order = [".notdef"]
    cmap: dict[int, str] = {}
    advances: dict[str, int] = {".notdef": advance}
    for ch in dict.fromkeys(chars):
        name = glyph_name(ch)
        glyph_order.append(name)
        cmap[ord(ch)] = name
        advances[name] = advance

    alternates = dict(alternates or {})
    for ch, alt_advance in alternates.items():
        alt_name = f"{glyph_name(ch)}.ss01"
        glyph_order.append(alt_name)
        advances[alt_name] = alt_advance

    glyphs = {name: _empty() if name == "space" else _box(advances[name]) for name in glyph_order}

    fb = FontBuilder(upem, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics({name: (advances[name], 0 if name == "space" else 50) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    fb.setupPost()

    if alternates and fea is None:
        subs = " ".join(f"sub {glyph_name(ch)} by {glyph_name(ch)}.ss01;" for ch in alternates)
        fea = f"languagesystem DFLT dflt;\nfeature ss01 {{ {subs} }} ss01;\n"
    if fea:
        fb.addOpenTypeFeatures(fea)

    buf = io.BytesIO()
    fb.save(buf)
    return buf.getvalue()


class FakeFontLoader:
    """In-memory font loader recording every call."""

    def __init__(self, fonts: Mapping[str, bytes] | None = None, weights: Iterable[int] | None = None) -> None:
        self.fonts = dict(fonts or {})
        self.weights = set(weights) if weights is not None else None
        self.calls: list[tuple[str, int]] = []
        self._lock = threading.Lock()

    def __call__(self, family: str, weight: int) -> bytes:
        with self._lock:
            self.calls.append((family, weight))
        if family not in self.fonts or (self.weights is not None and weight not in self.weights):
            raise FontLoadError(family, weight, "not in test fixture")
        return self.fonts[family]


class FakeEmojiSource:
    """Returns the same artwork for every cluster, or fails for listed ones."""

    def __init__(self, missing: Iterable[str] = ()) -> None:
        self.missing = set(missing)
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, cluster: str) -> str:
        with self._lock:
            self.calls.append(cluster)
        if cluster in self.missing:
            raise EmojiFetchError(cluster, "HTTP 404")
        return EMOJI_ARTWORK


@pytest.fixture(scope="session")
def latin_font_bytes() -> bytes:
    return build_font(LATIN, family="Noto Sans")


@pytest.fixture(scope="session")
def arabic_font_bytes() -> bytes:
    return build_font(ARABIC, family="Noto Naskh Arabic")


@pytest.fixture(scope="session")
def hebrew_font_bytes() -> bytes:
    return build_font(HEBREW, family="Noto Sans Hebrew")


@pytest.fixture
def latin_font(latin_font_bytes: bytes) -> FontHandle:
    return FontHandle(latin_font_bytes, "Noto+Sans")


@pytest.fixture
def arabic_font(arabic_font_bytes: bytes) -> FontHandle:
    return FontHandle(arabic_font_bytes, "Noto+Naskh+Arabic")


@pytest.fixture
def hebrew_font(hebrew_font_bytes: bytes) -> FontHandle:
    return FontHandle(hebrew_font_bytes, "Noto+Sans+Hebrew")


@pytest.fixture
def font_loader(latin_font_bytes: bytes, arabic_font_bytes: bytes, hebrew_font_bytes: bytes) -> FakeFontLoader:
    return FakeFontLoader(
        {
            "Noto+Sans": latin_font_bytes,
            "Noto+Naskh+Arabic": arabic_font_bytes,
            "Noto+Sans+Hebrew": hebrew_font_bytes,
        }
    )


@pytest.fixture
def emoji_source() -> FakeEmojiSource:
    return FakeEmojiSource()


@pytest.fixture
def offline_config() -> Config:
    """Config that never touches the network."""
    return Config(remote_fonts=False, timeout=10.0)


@pytest.fixture
def font_dir(tmp_path: Path, latin_font_bytes: bytes) -> Path:
    """Directory holding the Latin test font under its Noto Sans file name."""
    directory = tmp_path / "fonts"
    directory.mkdir()
    (directory / "NotoSans-Regular.ttf").write_bytes(latin_font_bytes)
    return directory


@pytest.fixture
def config_file(tmp_path: Path, font_dir: Path) -> Path:
    """Offline YAML config pointing at ``font_dir``."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "remote_fonts: false\n"
        "enable_emoji: false\n"
        f"font_dirs:\n  - {font_dir}\n"
        "timeout: 10\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def simple_svg_content() -> str:
    """Return a simple SVG string with one text element."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100" viewBox="0 0 200 100">
  <text id="title" x="10" y="50" font-size="20">Hello</text>
</svg>"""


@pytest.fixture
def tspan_svg_content() -> str:
    """Return SVG with tspan elements."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="300" height="100" viewBox="0 0 300 100">
  <text x="10" y="50" font-size="24"><tspan>Hello</tspan> <tspan>World</tspan></text>
</svg>"""


@pytest.fixture
def no_text_svg_content() -> str:
    """Return SVG without any text elements."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">
  <rect x="10" y="10" width="80" height="80" fill="blue"/>
</svg>"""


@pytest.fixture
def malformed_svg_content() -> str:
    """Return malformed SVG for error testing."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg">
  <text x="10" y="50">Unclosed text
</svg>"""
