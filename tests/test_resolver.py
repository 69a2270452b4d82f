"""Unit tests for unitext2path.fonts.resolver.

Tests cover candidate chains, the weight-400 retry, exhausted chains and
the document-embedded primary font.
"""

from conftest import FakeFontLoader

from unitext2path.fonts import FontCache, FontResolver
from unitext2path.fonts.resolver import PRIMARY_FAMILY, ResolvedFonts
from unitext2path.text.scripts import DEFAULT_SCRIPT_TABLE


class TestFontResolver:
    """Tests for FontResolver chains."""

    def test_resolve_family_uses_script_table(self) -> None:
        resolver = FontResolver(FontCache(FakeFontLoader()))
        assert resolver.resolve_family("Arab") == DEFAULT_SCRIPT_TABLE.families("Arab")
        assert resolver.resolve_family(None) is None

    def test_chain_advances_to_next_candidate(self, arabic_font_bytes: bytes) -> None:
        """The first Arabic family is missing; the second one loads."""
        loader = FakeFontLoader({"Noto+Sans+Arabic": arabic_font_bytes})
        resolver = FontResolver(FontCache(loader))
        handle = resolver.load_script("Arab", 400)
        assert handle is not None
        assert handle.family == "Noto+Sans+Arabic"
        assert loader.calls == [("Noto+Naskh+Arabic", 400), ("Noto+Sans+Arabic", 400)]

    def test_chain_retries_at_regular_weight(self, latin_font_bytes: bytes) -> None:
        loader = FakeFontLoader({"Noto+Sans": latin_font_bytes}, weights={400})
        resolver = FontResolver(FontCache(loader))
        handle = resolver.load_fallback(700)
        assert handle is not None
        assert handle.weight == 400
        assert loader.calls == [("Noto+Sans", 700), ("Noto+Sans", 400)]

    def test_exhausted_chain_returns_none(self) -> None:
        loader = FakeFontLoader()
        resolver = FontResolver(FontCache(loader))
        assert resolver.load_script("Hebr", 400) is None
        assert loader.calls == [("Noto+Sans+Hebrew", 400)]

    def test_regular_weight_is_not_tried_twice(self) -> None:
        loader = FakeFontLoader()
        FontResolver(FontCache(loader)).load_fallback(400)
        assert loader.calls == [("Noto+Sans", 400)]

    def test_script_without_families(self) -> None:
        loader = FakeFontLoader()
        assert FontResolver(FontCache(loader)).load_script("Zzzz", 400) is None
        assert loader.calls == []

    def test_fallback_can_be_disabled(self) -> None:
        loader = FakeFontLoader()
        resolver = FontResolver(FontCache(loader), fallback_family=None)
        assert resolver.load_fallback(400) is None
        assert loader.calls == []


class TestPrimaryFont:
    """Tests for FontResolver.load_primary()."""

    def test_embedded_bytes_are_parsed(self, latin_font_bytes: bytes) -> None:
        handle = FontResolver.load_primary(latin_font_bytes)
        assert handle is not None
        assert handle.family == PRIMARY_FAMILY

    def test_missing_or_broken_primary(self) -> None:
        assert FontResolver.load_primary(None) is None
        assert FontResolver.load_primary(b"") is None
        assert FontResolver.load_primary(b"garbage bytes") is None


class TestResolvedFonts:
    def test_script_font_lookup(self, arabic_font) -> None:
        fonts = ResolvedFonts(scripts={"Arab": arabic_font})
        assert fonts.script_font("Arab") is arabic_font
        assert fonts.script_font("Hebr") is None
        assert fonts.script_font(None) is None
