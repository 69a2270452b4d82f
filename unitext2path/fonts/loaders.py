"""Font-acquisition adapters.

A loader is any callable ``(family, weight) -> bytes`` that raises
FontLoadError on failure. The renderer never performs I/O itself; it is
handed one of these (or a custom callable) at construction.
"""

from __future__ import annotations

import hashlib
import logging
import re
import urllib.error
import urllib.request
from collections.abc import Iterable, Sequence
from pathlib import Path
from urllib.parse import quote

from unitext2path.exceptions import FontLoadError, RemoteResourceError
from unitext2path.fonts.cache import FontBytesLoader

logger = logging.getLogger(__name__)

WEIGHT_STYLE_NAMES = {
    100: "Thin",
    200: "ExtraLight",
    300: "Light",
    400: "Regular",
    500: "Medium",
    600: "SemiBold",
    700: "Bold",
    800: "ExtraBold",
    900: "Black",
}

FONT_SUFFIXES = (".ttf", ".otf")


def family_display_name(family: str) -> str:
    """``Noto+Sans+Arabic`` -> ``Noto Sans Arabic``."""
    return family.replace("+", " ").strip()


class DirectoryFontLoader:
    """Loads fonts from local directories (bundled or user-supplied).

    For family ``Noto+Sans`` at weight 700 the loader looks for
    ``NotoSans-Bold``, ``Noto Sans-Bold``, ``Noto-Sans-Bold`` and then the
    same stems without a style suffix, each with ``.ttf`` or ``.otf``.
    """

    def __init__(self, dirs: Iterable[Path | str]) -> None:
        self.dirs = [Path(d) for d in dirs]

    def candidates(self, family: str, weight: int) -> list[str]:
        name = family_display_name(family)
        stems = list(dict.fromkeys([name.replace(" ", ""), name, name.replace(" ", "-")]))
        style = WEIGHT_STYLE_NAMES.get(weight)
        names = [f"{stem}-{style}" for stem in stems] if style else []
        names.extend(stems)
        return [f"{n}{suffix}" for n in names for suffix in FONT_SUFFIXES]

    def __call__(self, family: str, weight: int) -> bytes:
        for directory in self.dirs:
            if not directory.is_dir():
                continue
            for filename in self.candidates(family, weight):
                path = directory / filename
                if path.is_file():
                    try:
                        return path.read_bytes()
                    except OSError as e:
                        raise FontLoadError(family, weight, f"{path}: {e}") from e
        raise FontLoadError(family, weight, "not found in font directories")


class GoogleFontsLoader:
    """Fetches TrueType fonts through the Google Fonts CSS2 API.

    The CSS is requested with a Safari user agent so the stylesheet points
    at TrueType files (which fontTools and HarfBuzz read without extra
    decompressors).
    """

    CSS_URL = "https://fonts.googleapis.com/css2?family={family}:wght@{weight}&display=swap"
    USER_AGENT = "Safari/604.1"

    # Default timeout for requests (seconds)
    DEFAULT_TIMEOUT = 10

    # CJK fonts are large
    MAX_SIZE = 40 * 1024 * 1024

    _FONT_URL_RE = re.compile(r"url\(([^)]+)\)")

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        cache_dir: Path | None = None,
        max_size: int = MAX_SIZE,
    ) -> None:
        self.timeout = timeout
        self.cache_dir = cache_dir
        self.max_size = max_size

    def css_url(self, family: str, weight: int) -> str:
        return self.CSS_URL.format(family=quote(family_display_name(family)), weight=weight)

    def __call__(self, family: str, weight: int) -> bytes:
        cached = self._get_cached(family, weight)
        if cached:
            return cached

        try:
            css = self.fetch(self.css_url(family, weight)).decode("utf-8", errors="replace")
            match = self._FONT_URL_RE.search(css)
            if not match:
                raise FontLoadError(family, weight, "stylesheet has no font url")
            data = self.fetch(match.group(1).strip("'\""))
        except RemoteResourceError as e:
            raise FontLoadError(family, weight, str(e)) from e

        self._cache_content(family, weight, data)
        return data

    def fetch(self, url: str) -> bytes:
        """Fetch raw bytes from ``url``.

        Raises:
            RemoteResourceError: If the request fails or the body is too large.
        """
        req = urllib.request.Request(url, headers={"User-Agent": self.USER_AGENT})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                content = response.read(self.max_size + 1)
        except urllib.error.HTTPError as e:
            raise RemoteResourceError(url, status_code=e.code) from e
        except urllib.error.URLError as e:
            raise RemoteResourceError(url, details={"error": str(e.reason)}) from e
        except OSError as e:
            raise RemoteResourceError(url, details={"error": str(e)}) from e

        if len(content) > self.max_size:
            raise RemoteResourceError(url, details={"error": f"File too large: >{self.max_size} bytes"})
        return content

    def _cache_path(self, family: str, weight: int) -> Path:
        digest = hashlib.sha256(f"{family}:{weight}".encode()).hexdigest()[:16]
        stem = family_display_name(family).replace(" ", "")
        return self.cache_dir / f"{digest}_{stem}-{weight}.ttf"

    def _get_cached(self, family: str, weight: int) -> bytes | None:
        if not self.cache_dir:
            return None
        cache_file = self._cache_path(family, weight)
        if cache_file.exists():
            try:
                return cache_file.read_bytes()
            except OSError:
                return None
        return None

    def _cache_content(self, family: str, weight: int, data: bytes) -> None:
        if not self.cache_dir:
            return
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._cache_path(family, weight).write_bytes(data)
        except OSError as e:
            logger.debug("Font byte cache write failed: %s", e)


class ChainedFontLoader:
    """Tries each loader in turn; the first one to return bytes wins."""

    def __init__(self, loaders: Sequence[FontBytesLoader]) -> None:
        self.loaders = list(loaders)

    def __call__(self, family: str, weight: int) -> bytes:
        reasons = []
        for loader in self.loaders:
            try:
                return loader(family, weight)
            except FontLoadError as e:
                reasons.append(e.reason or str(e))
        raise FontLoadError(family, weight, "; ".join(reasons) or "no loaders configured")
